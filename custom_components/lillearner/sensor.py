# File: sensor.py
"""Sensors for the LilLearner integration.

Sensors Defined in This File (3), one of each per child:
01. ChildLevelSensor
02. ChildStreakSensor
03. ChildAchievementsSensor

Sensors for children added after setup are created when the child_added
signal fires.
"""

from __future__ import annotations

from typing import Any

from homeassistant.components.sensor import SensorEntity, SensorStateClass
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.dispatcher import async_dispatcher_connect
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from . import catalogs, const
from .coordinator import LilLearnerDataCoordinator
from .engines.statistics_engine import StatisticsEngine
from .engines.xp_engine import XpEngine
from .entity import LilLearnerCoordinatorEntity
from .helpers.device_helpers import create_child_device_info
from .helpers.entity_helpers import get_event_signal
from .utils import math_utils


def _child_sensors(
    coordinator: LilLearnerDataCoordinator,
    entry: ConfigEntry,
    child_id: str,
    child_name: str,
) -> list[SensorEntity]:
    """Build every per-child sensor."""
    return [
        ChildLevelSensor(coordinator, entry, child_id, child_name),
        ChildStreakSensor(coordinator, entry, child_id, child_name),
        ChildAchievementsSensor(coordinator, entry, child_id, child_name),
    ]


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback
) -> None:
    """Set up sensors for LilLearner integration."""
    coordinator: LilLearnerDataCoordinator = hass.data[const.DOMAIN][entry.entry_id][
        const.COORDINATOR
    ]

    entities: list[SensorEntity] = []
    for child_id, child_info in coordinator.children_data.items():
        child_name = child_info.get(const.DATA_CHILD_NAME, child_id)
        entities.extend(_child_sensors(coordinator, entry, child_id, child_name))
    async_add_entities(entities)

    @callback
    def _handle_child_added(payload: dict[str, Any]) -> None:
        """Add sensors for a newly created child."""
        const.LOGGER.debug(
            "DEBUG: Adding sensors for new child '%s'", payload["child_name"]
        )
        async_add_entities(
            _child_sensors(
                coordinator, entry, payload["child_id"], payload["child_name"]
            )
        )

    entry.async_on_unload(
        async_dispatcher_connect(
            hass,
            get_event_signal(entry.entry_id, const.SIGNAL_SUFFIX_CHILD_ADDED),
            _handle_child_added,
        )
    )


# ------------------------------------------------------------------------------------------
class ChildLevelSensor(LilLearnerCoordinatorEntity, SensorEntity):
    """Sensor for a child's current level.

    Level is derived from total XP on every grant; attributes expose the
    title and progress toward the next level.
    """

    _attr_has_entity_name = True
    _attr_translation_key = const.TRANS_KEY_SENSOR_CHILD_LEVEL
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_icon = "mdi:star-circle"

    def __init__(
        self,
        coordinator: LilLearnerDataCoordinator,
        entry: ConfigEntry,
        child_id: str,
        child_name: str,
    ) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator)
        self._child_id = child_id
        self._child_name = child_name
        self._attr_unique_id = (
            f"{entry.entry_id}_{child_id}{const.SENSOR_LL_UID_SUFFIX_LEVEL}"
        )
        self._attr_translation_placeholders = {
            const.TRANS_KEY_SENSOR_ATTR_CHILD_NAME: child_name,
        }
        self.entity_id = (
            f"{const.SENSOR_LL_PREFIX}{child_name}{const.SENSOR_LL_EID_SUFFIX_LEVEL}"
        )
        self._attr_device_info = create_child_device_info(child_id, child_name, entry)

    @property
    def available(self) -> bool:
        """Return False once the child has been deleted."""
        return super().available and self._child_id in self.coordinator.children_data

    @property
    def native_value(self) -> int:
        """Return the child's level."""
        return XpEngine.level(
            self.coordinator.progress_manager.get_total_xp(self._child_id)
        )

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return title, XP and progress toward the next level."""
        progress = XpEngine.progress(
            self.coordinator.progress_manager.get_total_xp(self._child_id)
        )
        return {
            const.ATTR_CHILD_NAME: self._child_name,
            const.ATTR_LEVEL_TITLE: progress["title"],
            const.ATTR_TOTAL_XP: progress["total_xp"],
            const.ATTR_XP_IN_LEVEL: progress["xp_in_level"],
            const.ATTR_XP_FOR_NEXT: progress["xp_for_next"],
            const.ATTR_LEVEL_PROGRESS: math_utils.round_value(
                XpEngine.display_ratio(progress["ratio"]) * 100
            ),
        }


# ------------------------------------------------------------------------------------------
class ChildStreakSensor(LilLearnerCoordinatorEntity, SensorEntity):
    """Sensor for a child's current consecutive-day logging streak."""

    _attr_has_entity_name = True
    _attr_translation_key = const.TRANS_KEY_SENSOR_CHILD_STREAK
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_native_unit_of_measurement = const.UNIT_DAYS

    def __init__(
        self,
        coordinator: LilLearnerDataCoordinator,
        entry: ConfigEntry,
        child_id: str,
        child_name: str,
    ) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator)
        self._child_id = child_id
        self._child_name = child_name
        self._attr_unique_id = (
            f"{entry.entry_id}_{child_id}{const.SENSOR_LL_UID_SUFFIX_STREAK}"
        )
        self._attr_translation_placeholders = {
            const.TRANS_KEY_SENSOR_ATTR_CHILD_NAME: child_name,
        }
        self.entity_id = (
            f"{const.SENSOR_LL_PREFIX}{child_name}{const.SENSOR_LL_EID_SUFFIX_STREAK}"
        )
        self._attr_device_info = create_child_device_info(child_id, child_name, entry)

    @property
    def available(self) -> bool:
        """Return False once the child has been deleted."""
        return super().available and self._child_id in self.coordinator.children_data

    @property
    def native_value(self) -> int:
        """Return the streak in days."""
        return self.coordinator.achievement_manager.streak_days(self._child_id)

    @property
    def icon(self) -> str:
        """Return a flame once a streak is going."""
        return "mdi:fire" if self.native_value > 0 else "mdi:fire-off"

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return today's entry count."""
        return {
            const.ATTR_CHILD_NAME: self._child_name,
            const.ATTR_TODAY_ENTRIES: StatisticsEngine.today_count(
                self.coordinator.entries_for_child(self._child_id)
            ),
        }


# ------------------------------------------------------------------------------------------
class ChildAchievementsSensor(LilLearnerCoordinatorEntity, SensorEntity):
    """Sensor counting a child's unlocked achievements."""

    _attr_has_entity_name = True
    _attr_translation_key = const.TRANS_KEY_SENSOR_CHILD_ACHIEVEMENTS
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_icon = "mdi:trophy"

    def __init__(
        self,
        coordinator: LilLearnerDataCoordinator,
        entry: ConfigEntry,
        child_id: str,
        child_name: str,
    ) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator)
        self._child_id = child_id
        self._child_name = child_name
        self._attr_unique_id = (
            f"{entry.entry_id}_{child_id}{const.SENSOR_LL_UID_SUFFIX_ACHIEVEMENTS}"
        )
        self._attr_translation_placeholders = {
            const.TRANS_KEY_SENSOR_ATTR_CHILD_NAME: child_name,
        }
        self.entity_id = (
            f"{const.SENSOR_LL_PREFIX}{child_name}"
            f"{const.SENSOR_LL_EID_SUFFIX_ACHIEVEMENTS}"
        )
        self._attr_device_info = create_child_device_info(child_id, child_name, entry)

    @property
    def available(self) -> bool:
        """Return False once the child has been deleted."""
        return super().available and self._child_id in self.coordinator.children_data

    @property
    def native_value(self) -> int:
        """Return how many achievements are unlocked."""
        return len(self.coordinator.achievement_manager.unlocked(self._child_id))

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return unlocked and locked achievement names."""
        unlocked = self.coordinator.achievement_manager.unlocked(self._child_id)
        return {
            const.ATTR_CHILD_NAME: self._child_name,
            const.ATTR_UNLOCKED: [
                achievement.name
                for achievement in catalogs.ACHIEVEMENTS
                if achievement.key in unlocked
            ],
            const.ATTR_LOCKED: [
                achievement.name
                for achievement in catalogs.ACHIEVEMENTS
                if achievement.key not in unlocked
            ],
        }
