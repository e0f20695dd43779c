# File: helpers/device_helpers.py
"""Device registry helper functions for LilLearner."""

from __future__ import annotations

from typing import TYPE_CHECKING

from homeassistant.helpers.device_registry import DeviceEntryType, DeviceInfo

from .. import const

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry


def create_child_device_info(
    child_id: str,
    child_name: str,
    config_entry: ConfigEntry,
) -> DeviceInfo:
    """Create device info grouping a child's sensors."""
    return DeviceInfo(
        identifiers={(const.DOMAIN, child_id)},
        name=f"{child_name} ({config_entry.title})",
        manufacturer=const.LILLEARNER_TITLE,
        model="Learner Profile",
        entry_type=DeviceEntryType.SERVICE,
    )
