"""Progress Manager - XP grants and level tracking.

This manager is the single writer of a child's XP ledger and level aggregate:
- Per-child asyncio.Lock serializes grants (and achievement checks) per child
- Ledger append and level recompute happen in one synchronous step, so no
  other coroutine can observe or interleave with a half-applied grant
- Level-ups are announced on the HA bus and as instance-scoped signals

ARCHITECTURE:
- ProgressManager = stateful XP operations (locking, persistence, events)
- XpEngine = pure level math and ledger row creation
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from homeassistant.core import callback

from .. import const
from ..engines.xp_engine import XpEngine
from .base_manager import BaseManager

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..coordinator import LilLearnerDataCoordinator
    from ..type_defs import LevelProgress, XpApplyResult


class ProgressManager(BaseManager):
    """Manager for XP grants and per-child levels."""

    def __init__(
        self, hass: HomeAssistant, coordinator: LilLearnerDataCoordinator
    ) -> None:
        """Initialize the ProgressManager."""
        super().__init__(hass, coordinator)
        self._locks: dict[str, asyncio.Lock] = {}

    async def async_setup(self) -> None:
        """Recompute drifted levels and drop locks of deleted children."""
        self.listen(const.SIGNAL_SUFFIX_CHILD_REMOVED, self._on_child_removed)
        corrected = False
        for child_id, level_row in self.coordinator.child_levels_data.items():
            total_xp = level_row.get(const.DATA_LEVEL_TOTAL_XP, 0)
            expected = XpEngine.level(max(0, total_xp))
            if level_row.get(const.DATA_LEVEL_CURRENT_LEVEL) != expected:
                const.LOGGER.warning(
                    "WARNING: Level for child %s was %s, recomputed to %s",
                    child_id,
                    level_row.get(const.DATA_LEVEL_CURRENT_LEVEL),
                    expected,
                )
                level_row[const.DATA_LEVEL_CURRENT_LEVEL] = expected
                corrected = True
        if corrected:
            self.coordinator._persist()

    # =========================================================================
    # Locking
    # =========================================================================

    def lock_for(self, child_id: str) -> asyncio.Lock:
        """Return the lock serializing writes for one child."""
        lock = self._locks.get(child_id)
        if lock is None:
            lock = self._locks[child_id] = asyncio.Lock()
        return lock

    def discard_lock(self, child_id: str) -> None:
        """Forget a deleted child's lock."""
        self._locks.pop(child_id, None)

    @callback
    def _on_child_removed(self, payload: dict[str, Any]) -> None:
        self.discard_lock(payload["child_id"])

    # =========================================================================
    # Queries
    # =========================================================================

    def get_total_xp(self, child_id: str) -> int:
        """Return a child's running XP total (0 when none recorded)."""
        level_row = self.coordinator.child_levels_data.get(child_id)
        return level_row.get(const.DATA_LEVEL_TOTAL_XP, 0) if level_row else 0

    def get_progress(self, child_id: str) -> LevelProgress:
        """Return the level breakdown for a child."""
        self._get_child(child_id)
        return XpEngine.progress(self.get_total_xp(child_id))

    def has_xp_event(self, child_id: str, source_type: str, source_id: str) -> bool:
        """Return True if the ledger already holds a grant for this source."""
        return any(
            event.get(const.DATA_CHILD_ID) == child_id
            and event.get(const.DATA_XP_EVENT_SOURCE_TYPE) == source_type
            and event.get(const.DATA_XP_EVENT_SOURCE_ID) == source_id
            for event in self.coordinator.xp_events
        )

    # =========================================================================
    # Grants
    # =========================================================================

    def _apply_grant(
        self,
        child_id: str,
        amount: int,
        source_type: str,
        source_id: str | None,
    ) -> XpApplyResult:
        """Append the ledger row and recompute the aggregate. Caller holds the lock."""
        event = XpEngine.create_xp_event(child_id, amount, source_type, source_id)
        result = XpEngine.apply_xp(
            self.coordinator.child_levels_data.get(child_id),
            amount,
            updated_at=event[const.DATA_CREATED_AT],
        )
        self.coordinator.xp_events.append(event)
        self.coordinator.child_levels_data[child_id] = result["level_row"]
        return result

    async def async_award_xp(
        self,
        child_id: str,
        amount: int,
        *,
        source_type: str,
        source_id: str | None = None,
    ) -> XpApplyResult:
        """Grant XP to a child and recompute the level.

        Raises:
            ChildNotFoundError: Unknown child
            ValueError: amount is negative
        """
        child = self._get_child(child_id)
        if amount < 0:
            raise ValueError(f"XP amount must not be negative, got {amount}")

        async with self.lock_for(child_id):
            result = self._apply_grant(child_id, amount, source_type, source_id)

        self.coordinator._persist_and_update()

        level_row = result["level_row"]
        total_xp = level_row[const.DATA_LEVEL_TOTAL_XP]
        self.emit(
            const.SIGNAL_SUFFIX_XP_AWARDED,
            child_id=child_id,
            xp_amount=amount,
            total_xp=total_xp,
            source_type=source_type,
            source_id=source_id,
        )
        const.LOGGER.debug(
            "DEBUG: Awarded %s XP to child %s (%s:%s), total=%s, level=%s",
            amount,
            child_id,
            source_type,
            source_id,
            total_xp,
            result["new_level"],
        )

        if result["leveled_up"]:
            payload = {
                "child_id": child_id,
                "child_name": child.get(const.DATA_CHILD_NAME),
                "previous_level": result["previous_level"],
                "new_level": result["new_level"],
                "title": XpEngine.level_title(result["new_level"]),
                "total_xp": total_xp,
            }
            const.LOGGER.info(
                "INFO: Child '%s' reached level %s (%s)",
                payload["child_name"],
                payload["new_level"],
                payload["title"],
            )
            self.hass.bus.async_fire(const.EVENT_LEVEL_UP, payload)
            self.emit(const.SIGNAL_SUFFIX_LEVEL_UP, **payload)

        return result
