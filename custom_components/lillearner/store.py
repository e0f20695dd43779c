# File: store.py
"""Handles persistent data storage for the LilLearner integration.

Uses Home Assistant's Storage helper to save and load children, entries,
milestones, the XP ledger, levels, achievements, reports, user categories
and books so progress is preserved across restarts.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.helpers.storage import Store

from . import const

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

# Buckets stored as dicts keyed by id; the XP ledger is an append-only list
_DICT_BUCKETS = (
    const.DATA_CHILDREN,
    const.DATA_ENTRIES,
    const.DATA_MILESTONES,
    const.DATA_CHILD_LEVELS,
    const.DATA_ACHIEVEMENTS,
    const.DATA_REPORTS,
    const.DATA_USER_CATEGORIES,
    const.DATA_ACTIVE_BOOKS,
)


class LilLearnerStore:
    """Handles persistent storage operations for LilLearner data.

    Thin wrapper around Home Assistant's Store API with an in-memory cache.
    """

    def __init__(
        self, hass: HomeAssistant, storage_key: str = const.STORAGE_KEY
    ) -> None:
        """Initialize the store."""
        self.hass = hass
        self._storage_key = storage_key
        self._store: Store = Store(hass, const.STORAGE_VERSION, storage_key)
        self._data: dict[str, Any] = {}

    @staticmethod
    def get_default_structure() -> dict[str, Any]:
        """Return canonical empty data structure for fresh installations."""
        data: dict[str, Any] = {
            const.DATA_META: {const.DATA_META_SCHEMA_VERSION: const.SCHEMA_VERSION},
            const.DATA_XP_EVENTS: [],
        }
        for bucket in _DICT_BUCKETS:
            data[bucket] = {}
        return data

    @staticmethod
    def ensure_structure(data: dict[str, Any]) -> dict[str, Any]:
        """Add any bucket missing from loaded data (in place)."""
        for key, default in LilLearnerStore.get_default_structure().items():
            data.setdefault(key, default)
        return data

    def _bucket_sizes(self, data: dict[str, Any]) -> dict[str, int]:
        return {key: len(value) for key, value in data.items() if key != const.DATA_META}

    async def async_initialize(self) -> None:
        """Load data from storage during startup.

        If no data exists, initializes with an empty structure.
        """
        const.LOGGER.debug("DEBUG: LilLearnerStore: Loading data from storage")
        existing_data = await self._store.async_load()

        if existing_data is None:
            const.LOGGER.info("INFO: No existing storage found. Initializing new data")
            self._data = LilLearnerStore.get_default_structure()
        else:
            self._data = LilLearnerStore.ensure_structure(existing_data)
            const.LOGGER.debug(
                "DEBUG: Loaded existing data from storage: %s",
                self._bucket_sizes(self._data),
            )

    @property
    def data(self) -> dict[str, Any]:
        """Retrieve the in-memory data cache."""
        return self._data

    def set_data(self, new_data: dict[str, Any]) -> None:
        """Replace the entire in-memory data structure."""
        self._data = new_data

    async def async_save(self) -> None:
        """Save the current data structure to storage asynchronously.

        Errors are logged but do not stop execution.
        """
        try:
            await self._store.async_save(self._data)
            const.LOGGER.debug("DEBUG: Data saved successfully to storage")
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to file system error: %s. "
                "Check disk space and file permissions for %s",
                err,
                self._store.path,
            )
        except TypeError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to non-serializable data: %s",
                err,
            )
        except ValueError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to invalid data format: %s",
                err,
            )

    async def async_delete_storage(self) -> None:
        """Clear in-memory data and remove the storage file."""
        const.LOGGER.warning("WARNING: Clearing all LilLearner data and removing storage")
        self._data = LilLearnerStore.get_default_structure()
        try:
            await self._store.async_remove()
            const.LOGGER.info(
                "INFO: Storage file removed successfully: %s", self._store.path
            )
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to remove storage file %s: %s. Check file permissions",
                self._store.path,
                err,
            )
