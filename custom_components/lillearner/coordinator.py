# File: coordinator.py
"""Coordinator for the LilLearner integration.

Owns the in-memory storage document and the managers that mutate it.
Entities read from the coordinator; managers persist through it.

Periodic refresh only notifies listeners so streak and today-count
sensors roll over at local midnight without any writes.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator

from . import const
from .managers import (
    AchievementManager,
    ChildManager,
    EntryManager,
    ProgressManager,
    ReportManager,
    VoiceManager,
)
from .store import LilLearnerStore


class LilLearnerDataCoordinator(DataUpdateCoordinator):
    """Coordinator for LilLearner integration.

    Manages data primarily using internal_id for entities.
    """

    config_entry: ConfigEntry

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry,
        store: LilLearnerStore,
    ) -> None:
        """Initialize the LilLearnerDataCoordinator."""
        update_interval_minutes = config_entry.options.get(
            const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL
        )

        super().__init__(
            hass,
            const.LOGGER,
            name=f"{const.DOMAIN}{const.COORDINATOR_SUFFIX}",
            update_interval=timedelta(minutes=update_interval_minutes),
        )
        self.config_entry = config_entry
        self.store = store
        self._data: dict[str, Any] = {}

        self.child_manager = ChildManager(hass, self)
        self.progress_manager = ProgressManager(hass, self)
        self.achievement_manager = AchievementManager(hass, self)
        self.entry_manager = EntryManager(hass, self)
        self.report_manager = ReportManager(hass, self)
        self.voice_manager = VoiceManager(hass, self)

    @property
    def managers(self) -> tuple[Any, ...]:
        """Return all managers in setup order."""
        return (
            self.child_manager,
            self.progress_manager,
            self.achievement_manager,
            self.entry_manager,
            self.report_manager,
            self.voice_manager,
        )

    # -------------------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------------------

    async def _async_update_data(self) -> dict[str, Any]:
        """Periodic update: nothing to fetch, hand back the current document."""
        return self._data

    async def async_config_entry_first_refresh(self) -> None:
        """Load from storage, set up managers, then do the first refresh."""
        self._data = LilLearnerStore.ensure_structure(self.store.data)

        for manager in self.managers:
            await manager.async_setup()

        const.LOGGER.debug(
            "DEBUG: Coordinator loaded %s children, %s entries, %s XP events",
            len(self.children_data),
            len(self.entries_data),
            len(self.xp_events),
        )
        await super().async_config_entry_first_refresh()

    # -------------------------------------------------------------------------------------
    # Options
    # -------------------------------------------------------------------------------------

    @property
    def gamification_enabled(self) -> bool:
        """Return whether XP and achievements are awarded."""
        return bool(
            self.config_entry.options.get(
                const.CONF_GAMIFICATION_ENABLED, const.DEFAULT_GAMIFICATION_ENABLED
            )
        )

    # -------------------------------------------------------------------------------------
    # Data Accessors
    # -------------------------------------------------------------------------------------

    @property
    def children_data(self) -> dict[str, Any]:
        """Return the children data."""
        return self._data.setdefault(const.DATA_CHILDREN, {})

    @property
    def entries_data(self) -> dict[str, Any]:
        """Return the entries data."""
        return self._data.setdefault(const.DATA_ENTRIES, {})

    @property
    def milestones_data(self) -> dict[str, Any]:
        """Return milestone completion records keyed by child|skill|milestone."""
        return self._data.setdefault(const.DATA_MILESTONES, {})

    @property
    def xp_events(self) -> list[dict[str, Any]]:
        """Return the append-only XP ledger."""
        return self._data.setdefault(const.DATA_XP_EVENTS, [])

    @property
    def child_levels_data(self) -> dict[str, Any]:
        """Return per-child XP aggregates."""
        return self._data.setdefault(const.DATA_CHILD_LEVELS, {})

    @property
    def achievements_data(self) -> dict[str, Any]:
        """Return per-child achievement unlock maps."""
        return self._data.setdefault(const.DATA_ACHIEVEMENTS, {})

    @property
    def reports_data(self) -> dict[str, Any]:
        """Return the stored reports."""
        return self._data.setdefault(const.DATA_REPORTS, {})

    @property
    def user_categories_data(self) -> dict[str, Any]:
        """Return the user-defined categories."""
        return self._data.setdefault(const.DATA_USER_CATEGORIES, {})

    @property
    def active_books_data(self) -> dict[str, Any]:
        """Return the active/finished books."""
        return self._data.setdefault(const.DATA_ACTIVE_BOOKS, {})

    def entries_for_child(self, child_id: str) -> list[dict[str, Any]]:
        """Return all entries belonging to a child."""
        return [
            entry
            for entry in self.entries_data.values()
            if entry.get(const.DATA_CHILD_ID) == child_id
        ]

    def milestones_for_child(self, child_id: str) -> list[dict[str, Any]]:
        """Return all milestone records belonging to a child."""
        return [
            record
            for record in self.milestones_data.values()
            if record.get(const.DATA_CHILD_ID) == child_id
        ]

    def xp_events_for_child(self, child_id: str) -> list[dict[str, Any]]:
        """Return a child's XP ledger rows in append order."""
        return [
            event
            for event in self.xp_events
            if event.get(const.DATA_CHILD_ID) == child_id
        ]

    # -------------------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------------------

    def _persist(self) -> None:
        """Save to persistent storage."""
        self.store.set_data(self._data)
        self.hass.add_job(self.store.async_save)

    def _persist_and_update(self) -> None:
        """Save and push the new state to entities."""
        self._persist()
        self.async_set_updated_data(self._data)
