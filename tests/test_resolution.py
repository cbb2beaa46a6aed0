"""
Tests for the legacy registry location pipeline.
"""

import pytest

from hostreconcile.adapters import (
    DeviceIdStage,
    DriverKeyStage,
    RegistryLocationPipeline,
    RegistryPathStage,
    commands,
)
from hostreconcile.domain.models import RegistryLocation
from hostreconcile.infrastructure.exceptions import NotFoundError, ResolutionError

from tests.fixtures.mock_objects import (
    LEGACY_DEVICE_ID,
    LEGACY_DRIVER_SUFFIX,
    LEGACY_REGISTRY_PATH,
)

OTHER_DEVICE_ID = "PCI\\VEN_15B3&DEV_1015&SUBSYS_001715B3&REV_00\\6&1F2E3D4C&0&0"


class TestRegistryLocation:
    """Test the RegistryLocation value object."""

    def test_full_path_is_prefix_plus_suffix(self):
        location = RegistryLocation(LEGACY_DEVICE_ID, LEGACY_DRIVER_SUFFIX, commands.REGISTRY_KEY_PREFIX)

        assert location.full_path == LEGACY_REGISTRY_PATH

    def test_empty_parts_are_rejected(self):
        with pytest.raises(ValueError):
            RegistryLocation("", LEGACY_DRIVER_SUFFIX, commands.REGISTRY_KEY_PREFIX)
        with pytest.raises(ValueError):
            RegistryLocation(LEGACY_DEVICE_ID, "", commands.REGISTRY_KEY_PREFIX)


class TestRegistryLocationPipeline:
    """Test sequential resolution and short-circuiting."""

    @pytest.mark.asyncio
    async def test_resolves_location_in_order(self, executor, query):
        executor.respond(commands.find_device_id_command(), LEGACY_DEVICE_ID + "\r\n")
        executor.respond(commands.get_driver_key_command(LEGACY_DEVICE_ID), LEGACY_DRIVER_SUFFIX)

        location = await RegistryLocationPipeline().resolve(query, "Ethernet 2")

        assert location.device_id == LEGACY_DEVICE_ID
        assert location.full_path == LEGACY_REGISTRY_PATH
        assert executor.calls == [
            commands.find_device_id_command(),
            commands.get_driver_key_command(LEGACY_DEVICE_ID),
        ]

    @pytest.mark.asyncio
    async def test_several_devices_resolve_to_the_adapters_own(self, executor, query):
        executor.respond(commands.find_device_id_command(), f"{OTHER_DEVICE_ID}\r\n{LEGACY_DEVICE_ID}\r\n")
        executor.respond(commands.get_adapter_device_id_command("Ethernet 2"), LEGACY_DEVICE_ID.lower())
        executor.respond(commands.get_driver_key_command(LEGACY_DEVICE_ID), LEGACY_DRIVER_SUFFIX)

        location = await RegistryLocationPipeline().resolve(query, "Ethernet 2")

        assert location.device_id == LEGACY_DEVICE_ID
        assert executor.count(commands.get_driver_key_command(OTHER_DEVICE_ID)) == 0
        assert not any("\n" in call for call in executor.calls)

    @pytest.mark.asyncio
    async def test_several_devices_without_a_bound_one_are_ambiguous(self, executor, query):
        executor.respond(commands.find_device_id_command(), f"{OTHER_DEVICE_ID}\r\n{LEGACY_DEVICE_ID}")
        executor.respond(commands.get_adapter_device_id_command("Ethernet 9"), "")

        with pytest.raises(ResolutionError) as exc_info:
            await RegistryLocationPipeline().resolve(query, "Ethernet 9")

        assert exc_info.value.step == "device_lookup"
        assert exc_info.value.context["candidates"] == [OTHER_DEVICE_ID, LEGACY_DEVICE_ID]
        assert executor.count(commands.get_driver_key_command(LEGACY_DEVICE_ID)) == 0

    @pytest.mark.asyncio
    async def test_several_devices_without_adapter_name_are_ambiguous(self, executor, query):
        executor.respond(commands.find_device_id_command(), f"{OTHER_DEVICE_ID}\n{LEGACY_DEVICE_ID}")

        with pytest.raises(ResolutionError):
            await RegistryLocationPipeline().resolve(query)

        assert executor.calls == [commands.find_device_id_command()]

    @pytest.mark.asyncio
    async def test_custom_search_pattern(self, executor, query):
        pipeline = RegistryLocationPipeline([DeviceIdStage("*ConnectX*"), DriverKeyStage(), RegistryPathStage()])
        executor.respond(commands.find_device_id_command("*ConnectX*"), "")

        with pytest.raises(NotFoundError) as exc_info:
            await pipeline.resolve(query)

        assert exc_info.value.context["search_pattern"] == "*ConnectX*"

    @pytest.mark.asyncio
    async def test_stage_records_outcome(self, executor, query):
        executor.respond(commands.find_device_id_command(), LEGACY_DEVICE_ID)
        context = {"query": query, "adapter_name": "Ethernet 2"}

        context = await DeviceIdStage().execute(context)

        assert context["device_id"] == LEGACY_DEVICE_ID
        assert context["stage_results"] == {"device_lookup": "success"}

    @pytest.mark.asyncio
    async def test_driver_stage_requires_device_id(self, query):
        with pytest.raises(ResolutionError):
            await DriverKeyStage().execute({"query": query})

    @pytest.mark.asyncio
    async def test_path_stage_rejects_missing_suffix(self):
        with pytest.raises(ResolutionError) as exc_info:
            await RegistryPathStage().execute({"device_id": LEGACY_DEVICE_ID})

        assert exc_info.value.step == "registry_path"
