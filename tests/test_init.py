"""Tests for LilLearner entry setup, unload and removal."""

from unittest.mock import AsyncMock, patch

from homeassistant.config_entries import ConfigEntryState
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.lillearner.const import (
    COORDINATOR,
    DOMAIN,
    SERVICE_GET_PROGRESS,
    SERVICE_LOG_ENTRY,
    STORE,
)
from custom_components.lillearner.store import LilLearnerStore


async def test_setup_registers_services(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Setting up the entry stores the coordinator and registers services."""
    assert init_integration.state is ConfigEntryState.LOADED
    assert COORDINATOR in hass.data[DOMAIN][init_integration.entry_id]
    assert STORE in hass.data[DOMAIN][init_integration.entry_id]
    assert hass.services.has_service(DOMAIN, SERVICE_LOG_ENTRY)
    assert hass.services.has_service(DOMAIN, SERVICE_GET_PROGRESS)


async def test_unload_removes_services(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Unloading the last entry unregisters the services."""
    assert await hass.config_entries.async_unload(init_integration.entry_id)
    await hass.async_block_till_done()

    assert init_integration.state is ConfigEntryState.NOT_LOADED
    assert init_integration.entry_id not in hass.data[DOMAIN]
    assert not hass.services.has_service(DOMAIN, SERVICE_LOG_ENTRY)


async def test_remove_entry_deletes_storage(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Removing the entry deletes the storage file."""
    with patch("homeassistant.helpers.storage.Store.async_remove") as mock_remove:
        await hass.config_entries.async_remove(init_integration.entry_id)
        await hass.async_block_till_done()

    assert mock_remove.called


async def test_stored_levels_are_recomputed_on_setup(
    hass: HomeAssistant, mock_config_entry: MockConfigEntry, mock_storage_data: dict
) -> None:
    """A stored level that disagrees with total XP is corrected and saved at startup."""
    mock_storage_data["children"]["child-1"] = {
        "internal_id": "child-1",
        "name": "Emma",
    }
    mock_storage_data["child_levels"]["child-1"] = {
        "total_xp": 925,
        "current_level": 9,
        "updated_at": "2024-01-01T00:00:00+00:00",
    }
    mock_config_entry.add_to_hass(hass)

    with (
        patch(
            "homeassistant.helpers.storage.Store.async_load",
            return_value=mock_storage_data,
        ),
        patch.object(LilLearnerStore, "async_save", new_callable=AsyncMock) as mock_save,
    ):
        assert await hass.config_entries.async_setup(mock_config_entry.entry_id)
        await hass.async_block_till_done()

    coordinator = hass.data[DOMAIN][mock_config_entry.entry_id][COORDINATOR]
    assert coordinator.child_levels_data["child-1"]["current_level"] == 3
    assert mock_save.called
    assert hass.states.get("sensor.ll_emma_level").state == "3"
