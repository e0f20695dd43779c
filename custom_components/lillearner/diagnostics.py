"""Diagnostics support for LilLearner integration.

The config entry diagnostics return the raw storage document, identical to
the lillearner_data file, so it can be pasted back during data recovery.
The LLM API key is redacted from the options.
"""

from typing import Any

from homeassistant.components.diagnostics import async_redact_data
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.device_registry import DeviceEntry

from . import const
from .coordinator import LilLearnerDataCoordinator

TO_REDACT = {const.CONF_LLM_API_KEY}


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry."""
    coordinator: LilLearnerDataCoordinator = hass.data[const.DOMAIN][entry.entry_id][
        const.COORDINATOR
    ]
    return {
        "options": async_redact_data(dict(entry.options), TO_REDACT),
        "storage": coordinator.store.data,
    }


async def async_get_device_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry, device: DeviceEntry
) -> dict[str, Any]:
    """Return diagnostics for one child's device."""
    coordinator: LilLearnerDataCoordinator = hass.data[const.DOMAIN][entry.entry_id][
        const.COORDINATOR
    ]

    child_id = None
    for identifier in device.identifiers:
        if identifier[0] == const.DOMAIN:
            child_id = identifier[1]
            break

    if not child_id:
        return {"error": "Could not determine child_id from device identifiers"}

    child_data = coordinator.children_data.get(child_id)
    if not child_data:
        return {"error": f"Child data not found for child_id: {child_id}"}

    return {
        "child_id": child_id,
        "child_data": child_data,
        "level": coordinator.child_levels_data.get(child_id),
        "achievements": coordinator.achievements_data.get(child_id, {}),
        "entry_count": len(coordinator.entries_for_child(child_id)),
    }
