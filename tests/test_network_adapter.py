"""
Tests for generation classification and the two convergence actions.
"""

import pytest

from hostreconcile.adapters import MellanoxNetworkAdapter, commands
from hostreconcile.domain.models import AdapterGeneration, ReconciliationStatus
from hostreconcile.infrastructure.exceptions import (
    ApplyError,
    ConvergenceError,
    NotFoundError,
    ParseError,
    ResolutionError,
    RestartError,
    VerificationError,
)

from tests.fixtures.mock_objects import (
    LEGACY_DEVICE_ID,
    LEGACY_REGISTRY_PATH,
    command_failure,
    script_direct_adapter,
    script_legacy_adapter,
)

DESIRED = commands.DESIRED_PRIORITY_VLAN_TAG
DIRECT = "Ethernet 3"
LEGACY = "Ethernet 2"


def direct_write(name=DIRECT):
    return commands.set_direct_property_command(name, DESIRED)


def legacy_write():
    return commands.new_registry_value_command(LEGACY_REGISTRY_PATH, DESIRED)


def legacy_restart(name=LEGACY):
    return commands.restart_adapter_command(name)


class TestGenerationClassifier:
    """Test detection of the adapter generation."""

    @pytest.mark.asyncio
    async def test_property_present_means_direct_generation(self, executor, adapter):
        executor.respond(commands.find_direct_property_command(DIRECT), DIRECT)

        assert await adapter.get_generation(DIRECT) is AdapterGeneration.DIRECT_PROPERTY

    @pytest.mark.asyncio
    async def test_property_absent_means_legacy_generation(self, executor, adapter):
        executor.respond(commands.find_direct_property_command(LEGACY), "")

        assert await adapter.get_generation(LEGACY) is AdapterGeneration.LEGACY

    @pytest.mark.asyncio
    async def test_classification_is_not_cached(self, executor, adapter):
        executor.respond(commands.find_direct_property_command(DIRECT), DIRECT, "")

        assert await adapter.get_generation(DIRECT) is AdapterGeneration.DIRECT_PROPERTY
        assert await adapter.get_generation(DIRECT) is AdapterGeneration.LEGACY
        assert executor.count(commands.find_direct_property_command(DIRECT)) == 2

    @pytest.mark.asyncio
    async def test_classifier_failure_identifies_adapter(self, executor, adapter):
        command = commands.find_direct_property_command(DIRECT)
        executor.respond(command, command_failure(command))

        with pytest.raises(ConvergenceError) as exc_info:
            await adapter.get_generation(DIRECT)

        assert exc_info.value.context["adapter_name"] == DIRECT
        assert exc_info.value.step == "classify_generation"


class TestDirectPropertyConvergence:
    """Test the direct-property convergence action."""

    @pytest.mark.asyncio
    async def test_mismatch_writes_desired_value_once(self, executor, adapter):
        script_direct_adapter(executor, DIRECT, "1")

        result = await adapter.converge_direct_property(DIRECT, DESIRED)

        assert result.status is ReconciliationStatus.APPLIED
        assert result.previous_value == 1
        assert executor.count(direct_write()) == 1
        assert "-RegistryValue 3" in direct_write()
        assert not any(call.startswith("Restart-") for call in executor.calls)

    @pytest.mark.asyncio
    async def test_match_is_a_no_op(self, executor, adapter):
        script_direct_adapter(executor, DIRECT, "3")

        result = await adapter.converge_direct_property(DIRECT, DESIRED)

        assert result.status is ReconciliationStatus.NO_OP
        assert executor.count(direct_write()) == 0

    @pytest.mark.asyncio
    async def test_repeated_convergence_writes_at_most_once(self, executor, adapter):
        script_direct_adapter(executor, DIRECT, "1", "3")

        first = await adapter.converge_direct_property(DIRECT, DESIRED)
        second = await adapter.converge_direct_property(DIRECT, DESIRED)

        assert first.status is ReconciliationStatus.APPLIED
        assert second.status is ReconciliationStatus.NO_OP
        assert executor.count(direct_write()) == 1

    @pytest.mark.asyncio
    async def test_apply_is_final_without_verification(self, executor, adapter):
        script_direct_adapter(executor, DIRECT, "1")

        await adapter.converge_direct_property(DIRECT, DESIRED)

        assert executor.count(commands.get_direct_property_value_command(DIRECT)) == 1

    @pytest.mark.asyncio
    async def test_read_failure_wraps_query_error(self, executor, adapter):
        script_direct_adapter(executor, DIRECT, "Enabled")

        with pytest.raises(ConvergenceError) as exc_info:
            await adapter.converge_direct_property(DIRECT, DESIRED)

        assert exc_info.value.step == "read_property"
        assert exc_info.value.adapter_name == DIRECT
        assert isinstance(exc_info.value.cause, ParseError)
        assert executor.count(direct_write()) == 0

    @pytest.mark.asyncio
    async def test_write_failure_raises_apply_error(self, executor, adapter):
        script_direct_adapter(executor, DIRECT, "1")
        executor.respond(direct_write(), command_failure(direct_write()))

        with pytest.raises(ApplyError) as exc_info:
            await adapter.converge_direct_property(DIRECT, DESIRED)

        assert exc_info.value.step == "write_property"
        assert exc_info.value.error_code == "APPLY_ERROR"

    @pytest.mark.asyncio
    async def test_verification_when_enabled(self, executor, query):
        adapter = MellanoxNetworkAdapter(query, verify_after_apply=True)
        script_direct_adapter(executor, DIRECT, "1", "3")

        result = await adapter.converge_direct_property(DIRECT, DESIRED)

        assert result.status is ReconciliationStatus.APPLIED_AND_VERIFIED

    @pytest.mark.asyncio
    async def test_verification_mismatch_is_reported(self, executor, query):
        adapter = MellanoxNetworkAdapter(query, verify_after_apply=True)
        script_direct_adapter(executor, DIRECT, "1", "1")

        result = await adapter.converge_direct_property(DIRECT, DESIRED)

        assert result.status is ReconciliationStatus.VERIFICATION_FAILED
        assert isinstance(result.error, VerificationError)
        assert result.error.observed_value == 1
        assert not result.succeeded


class TestLegacyConvergence:
    """Test the legacy registry convergence action."""

    @pytest.mark.asyncio
    async def test_mismatch_writes_registry_and_restarts_adapter(self, executor, adapter):
        script_legacy_adapter(executor, LEGACY, "0")

        result = await adapter.converge_legacy(LEGACY, DESIRED)

        assert result.status is ReconciliationStatus.APPLIED
        assert result.generation is AdapterGeneration.LEGACY
        assert executor.count(legacy_write()) == 1
        assert executor.count(legacy_restart()) == 1
        assert executor.calls.index(legacy_write()) < executor.calls.index(legacy_restart())
        assert "-PropertyType String -Force" in legacy_write()

    @pytest.mark.asyncio
    async def test_match_never_restarts(self, executor, adapter):
        script_legacy_adapter(executor, LEGACY, "3")

        result = await adapter.converge_legacy(LEGACY, DESIRED)

        assert result.status is ReconciliationStatus.NO_OP
        assert executor.count(legacy_write()) == 0
        assert executor.count(legacy_restart()) == 0

    @pytest.mark.asyncio
    async def test_missing_device_stops_the_chain(self, executor, adapter):
        script_legacy_adapter(executor, LEGACY, "0")
        executor.respond(commands.find_device_id_command(), "")

        with pytest.raises(NotFoundError) as exc_info:
            await adapter.converge_legacy(LEGACY, DESIRED)

        assert exc_info.value.resource_type == "network device"
        assert executor.calls == [commands.find_device_id_command()]

    @pytest.mark.asyncio
    async def test_empty_driver_suffix_raises_resolution_error(self, executor, adapter):
        script_legacy_adapter(executor, LEGACY, "0")
        executor.respond(commands.get_driver_key_command(LEGACY_DEVICE_ID), "")

        with pytest.raises(ResolutionError) as exc_info:
            await adapter.converge_legacy(LEGACY, DESIRED)

        assert exc_info.value.step == "driver_lookup"
        assert executor.count(commands.get_registry_value_command(LEGACY_REGISTRY_PATH)) == 0

    @pytest.mark.asyncio
    async def test_device_lookup_failure_names_the_step(self, executor, adapter):
        command = commands.find_device_id_command()
        executor.respond(command, command_failure(command))

        with pytest.raises(ConvergenceError) as exc_info:
            await adapter.converge_legacy(LEGACY, DESIRED)

        assert exc_info.value.step == "device_lookup"

    @pytest.mark.asyncio
    async def test_write_failure_skips_restart(self, executor, adapter):
        script_legacy_adapter(executor, LEGACY, "0")
        executor.respond(legacy_write(), command_failure(legacy_write()))

        with pytest.raises(ApplyError) as exc_info:
            await adapter.converge_legacy(LEGACY, DESIRED)

        assert exc_info.value.step == "write_registry_value"
        assert exc_info.value.context["registry_path"] == LEGACY_REGISTRY_PATH
        assert executor.count(legacy_restart()) == 0

    @pytest.mark.asyncio
    async def test_restart_failure_raises_restart_error(self, executor, adapter):
        script_legacy_adapter(executor, LEGACY, "0")
        executor.respond(legacy_restart(), command_failure(legacy_restart()))

        with pytest.raises(RestartError) as exc_info:
            await adapter.converge_legacy(LEGACY, DESIRED)

        assert exc_info.value.step == "restart_adapter"
        assert exc_info.value.adapter_name == LEGACY

    @pytest.mark.asyncio
    async def test_verification_after_restart(self, executor, query):
        adapter = MellanoxNetworkAdapter(query, verify_after_apply=True)
        script_legacy_adapter(executor, LEGACY, "0", "3")

        result = await adapter.converge_legacy(LEGACY, DESIRED)

        assert result.status is ReconciliationStatus.APPLIED_AND_VERIFIED
        read = commands.get_registry_value_command(LEGACY_REGISTRY_PATH)
        assert executor.calls.index(legacy_restart()) < len(executor.calls) - 1
        assert executor.calls[-1] == read
