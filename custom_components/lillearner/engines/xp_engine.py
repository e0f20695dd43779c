"""XP Engine - Pure logic for level math and the XP ledger.

This engine provides stateless, pure Python functions for:
- Level derivation from total XP (square-root curve)
- Level thresholds, in-level progress, and level titles
- XP values per entry type
- XP ledger row creation and atomic apply-delta on a child's aggregate

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data.
State management (locking, persistence, events) belongs in ProgressManager.

Level curve:
    level(xp) = max(1, floor(sqrt(xp / 100)))
    threshold(level) = level^2 * 100
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING
import uuid

from .. import const
from ..utils import dt_utils
from ..utils.math_utils import clamp

if TYPE_CHECKING:
    from ..type_defs import ChildLevelData, LevelProgress, XpApplyResult, XpEventData


class XpEngine:
    """Pure logic engine for XP and level calculations.

    All methods are static - no instance state.
    """

    _ENTRY_TYPE_XP: dict[str, int] = {
        const.ENTRY_TYPE_ACTIVITY: const.XP_LOG_ACTIVITY,
        const.ENTRY_TYPE_COUNTER: const.XP_LOG_ACTIVITY,
        const.ENTRY_TYPE_PHOTO: const.XP_ADD_PHOTO,
        const.ENTRY_TYPE_NOTE: const.XP_WRITE_NOTE,
        const.ENTRY_TYPE_MILESTONE: const.XP_COMPLETE_MILESTONE,
    }

    # =========================================================================
    # Level Math
    # =========================================================================

    @staticmethod
    def _validate_total(total_xp: float) -> None:
        """Reject XP totals the level curve is undefined for."""
        if isinstance(total_xp, bool) or not isinstance(total_xp, (int, float)):
            raise ValueError(f"total_xp must be a number, got {total_xp!r}")
        if not math.isfinite(total_xp) or total_xp < 0:
            raise ValueError(f"total_xp must be a finite non-negative number, got {total_xp}")

    @staticmethod
    def level(total_xp: float) -> int:
        """Return the level for a total XP value.

        Integer square root keeps boundaries exact: 400 XP is level 2,
        399 XP is level 1.

        Raises:
            ValueError: total_xp is negative or not finite
        """
        XpEngine._validate_total(total_xp)
        return max(const.MIN_LEVEL, math.isqrt(int(total_xp // const.XP_PER_LEVEL_UNIT)))

    @staticmethod
    def xp_threshold(level: int) -> int:
        """Return the total XP at which `level` begins."""
        return level * level * const.XP_PER_LEVEL_UNIT

    @staticmethod
    def progress(total_xp: float) -> LevelProgress:
        """Return level, in-level XP, XP span to the next level, and ratio.

        The ratio is deliberately unclamped: below 100 XP the child sits at
        level 1 with a negative in-level value. Use display_ratio() for UI.

        Example:
            progress(925) → level 3, xp_in_level 25, xp_for_next 700
        """
        current = XpEngine.level(total_xp)
        floor_xp = XpEngine.xp_threshold(current)
        xp_for_next = XpEngine.xp_threshold(current + 1) - floor_xp
        xp_in_level = total_xp - floor_xp
        return {
            "level": current,
            "title": XpEngine.level_title(current),
            "total_xp": total_xp,
            "xp_in_level": xp_in_level,
            "xp_for_next": xp_for_next,
            "ratio": xp_in_level / xp_for_next,
        }

    @staticmethod
    def display_ratio(ratio: float) -> float:
        """Clamp a progress ratio to [0, 1] for display."""
        return clamp(ratio, 0.0, 1.0)

    @staticmethod
    def level_title(level: int) -> str:
        """Return the title for a level. First matching bucket wins."""
        for upper, title in const.LEVEL_TITLES:
            if upper is None or level <= upper:
                return title
        return const.LEVEL_TITLES[-1][1]

    @staticmethod
    def levels_gained(before_xp: float, after_xp: float) -> int:
        """Return how many levels were crossed between two totals (never negative)."""
        return max(0, XpEngine.level(after_xp) - XpEngine.level(before_xp))

    # =========================================================================
    # XP Values
    # =========================================================================

    @staticmethod
    def xp_for_entry_type(entry_type: str) -> int:
        """Return the XP a newly logged entry of this type is worth."""
        return XpEngine._ENTRY_TYPE_XP.get(entry_type, const.XP_LOG_ACTIVITY)

    # =========================================================================
    # Ledger
    # =========================================================================

    @staticmethod
    def create_xp_event(
        child_id: str,
        xp_amount: int,
        source_type: str,
        source_id: str | None = None,
        created_at: str | None = None,
    ) -> XpEventData:
        """Create an immutable XP ledger row."""
        return {
            const.DATA_INTERNAL_ID: str(uuid.uuid4()),
            const.DATA_CHILD_ID: child_id,
            const.DATA_XP_EVENT_AMOUNT: xp_amount,
            const.DATA_XP_EVENT_SOURCE_TYPE: source_type,
            const.DATA_XP_EVENT_SOURCE_ID: source_id,
            const.DATA_CREATED_AT: created_at or dt_utils.dt_now_iso(),
        }  # type: ignore[return-value]

    @staticmethod
    def apply_xp(
        level_row: ChildLevelData | None,
        delta: int,
        updated_at: str | None = None,
    ) -> XpApplyResult:
        """Apply an XP delta to a child's aggregate and recompute the level.

        The level is always re-derived from the new total, never
        incremented, so the stored level cannot drift from total_xp.

        Raises:
            ValueError: The resulting total would be negative
        """
        previous_total = level_row[const.DATA_LEVEL_TOTAL_XP] if level_row else 0
        previous_level = XpEngine.level(previous_total)
        new_total = previous_total + delta
        new_level = XpEngine.level(new_total)

        new_row: ChildLevelData = {
            const.DATA_LEVEL_TOTAL_XP: new_total,
            const.DATA_LEVEL_CURRENT_LEVEL: new_level,
            const.DATA_UPDATED_AT: updated_at or dt_utils.dt_now_iso(),
        }  # type: ignore[assignment]
        return {
            "level_row": new_row,
            "previous_level": previous_level,
            "new_level": new_level,
            "leveled_up": new_level > previous_level,
        }

    @staticmethod
    def sum_xp(
        xp_events: list[XpEventData],
        child_id: str,
        start_iso: str | None = None,
        end_iso: str | None = None,
    ) -> int:
        """Sum a child's ledger XP, optionally restricted to [start, end].

        Bounds are compared as aware datetimes, both inclusive.
        """
        start = dt_utils.dt_parse(start_iso) if start_iso else None
        end = dt_utils.dt_parse(end_iso) if end_iso else None
        total = 0
        for event in xp_events:
            if event.get(const.DATA_CHILD_ID) != child_id:
                continue
            if start or end:
                created = dt_utils.dt_parse(event.get(const.DATA_CREATED_AT))
                if created is None:
                    continue
                if start and created < start:
                    continue
                if end and created > end:
                    continue
            total += event.get(const.DATA_XP_EVENT_AMOUNT, 0)
        return total
