"""
Configuration data models with validation.

Only operational settings are configurable. Desired values of the reconciled
resources are compiled into ``adapters.commands``.
"""

from typing import Optional
from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_MONITOR_INTERVAL_SECONDS = 30.0


class ExecutorConfiguration(BaseModel):
    """Command transport configuration."""
    shell: str = Field(default="cmd", min_length=1)
    powershell_path: str = Field(default="powershell.exe", min_length=1)
    command_timeout: Optional[float] = Field(default=120.0, gt=0)


class MonitorConfiguration(BaseModel):
    """Monitor loop configuration."""
    enabled: bool = True
    # Non-positive or missing values fall back to the default interval.
    interval_seconds: Optional[float] = None


class ReconciliationConfiguration(BaseModel):
    """Reconciliation behaviour switches."""
    verify_after_apply: bool = False


class SdnRemoteArpConfiguration(BaseModel):
    """One-shot HNS ARP MAC setting."""
    enabled: bool = False


class LoggingConfiguration(BaseModel):
    """Logging system configuration with validation."""
    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    format: str = Field(default="text", pattern="^(json|text)$")
    output: str = Field(default="console", pattern="^(console|file|both)$")
    file_path: Optional[str] = None

    @field_validator('level', mode='before')
    @classmethod
    def normalize_level(cls, v):
        """Accept lower-case level names."""
        return v.upper() if isinstance(v, str) else v

    @model_validator(mode='after')
    def validate_file_path(self):
        """Validate file path when file output is used."""
        if self.output in ('file', 'both') and not self.file_path:
            raise ValueError("file_path is required when output is 'file' or 'both'")
        return self


class ReconcilerConfiguration(BaseModel):
    """Root configuration with nested validation."""
    executor: ExecutorConfiguration = Field(default_factory=ExecutorConfiguration)
    monitor: MonitorConfiguration = Field(default_factory=MonitorConfiguration)
    reconciliation: ReconciliationConfiguration = Field(default_factory=ReconciliationConfiguration)
    sdn_remote_arp: SdnRemoteArpConfiguration = Field(default_factory=SdnRemoteArpConfiguration)
    logging: LoggingConfiguration = Field(default_factory=LoggingConfiguration)
