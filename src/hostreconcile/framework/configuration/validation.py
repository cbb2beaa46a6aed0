"""
Configuration validation utilities.
"""

from typing import Dict, Any, List
from pydantic import ValidationError

from ...infrastructure.exceptions import ConfigurationError
from .models import ReconcilerConfiguration


class ConfigurationValidationError(ConfigurationError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, validation_errors: List[Dict[str, Any]]):
        super().__init__(
            message,
            validation_errors=validation_errors,
            error_code="CONFIGURATION_VALIDATION_ERROR",
        )
        self.validation_errors = validation_errors

    def get_detailed_message(self) -> str:
        """Get a detailed error message with all validation errors."""
        lines = [self.message]
        lines.append("Validation errors:")

        for error in self.validation_errors:
            location = " -> ".join(str(loc) for loc in error.get('loc', []))
            msg = error.get('msg', 'Unknown error')
            lines.append(f"- {location}: {msg}")

        return "\n".join(lines)


class ConfigurationValidator:
    """Validates configuration data and provides detailed error messages."""

    @staticmethod
    def validate_configuration(config_data: Dict[str, Any]) -> ReconcilerConfiguration:
        """
        Validate raw configuration data.

        Args:
            config_data: Merged configuration data

        Returns:
            The parsed configuration

        Raises:
            ConfigurationValidationError: If validation fails
        """
        try:
            return ReconcilerConfiguration(**config_data)
        except ValidationError as e:
            errors = [
                {
                    'loc': list(error['loc']),
                    'msg': error['msg'],
                    'type': error['type'],
                }
                for error in e.errors()
            ]
            raise ConfigurationValidationError(
                f"Configuration validation failed with {len(errors)} error(s)",
                errors,
            ) from e
