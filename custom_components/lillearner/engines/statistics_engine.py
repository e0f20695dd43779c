"""Statistics Engine - Streaks and entry aggregates.

This engine centralizes the entry-derived numbers the rest of LilLearner
shows or evaluates:
- Consecutive-day logging streaks (with the "today not logged yet" grace)
- Distinct active days
- Per-category counts and ranked top skills
- Window counts for seasonal criteria and today's summary

Design Principles:
    - Stateless: No coordinator reference, operates on passed data structures
    - Consistent: Every timestamp collapses to a local calendar-day key via
      dt_utils.local_day_key, so two entries on the same local day always
      land on the same key regardless of time-of-day
    - Deterministic: `today` is injectable everywhere it matters
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils import dt_utils

if TYPE_CHECKING:
    from zoneinfo import ZoneInfo

    from ..type_defs import EntryData


class StatisticsEngine:
    """Stateless helpers for streaks and entry aggregation."""

    @staticmethod
    def distinct_active_days(
        timestamps: Iterable[Any], tz: ZoneInfo | None = None
    ) -> set[date]:
        """Return the set of local calendar days that have at least one timestamp.

        Unparseable timestamps are ignored.
        """
        days: set[date] = set()
        for timestamp in timestamps:
            key = dt_utils.local_day_key(timestamp, tz)
            if key is not None:
                days.add(key)
        return days

    @staticmethod
    def calculate_streak(
        timestamps: Iterable[Any],
        today: date | None = None,
        tz: ZoneInfo | None = None,
    ) -> int:
        """Return the current consecutive-day logging streak.

        Walks backward from `today` one day at a time for at most
        STREAK_MAX_DAYS offsets:
        - day present: streak += 1
        - day absent at offset 0: skipped, since today may not be logged yet
        - day absent at any later offset: stop

        Example:
            Entries on 2024-01-01, 01-02, 01-03 with today=2024-01-03 → 3
            Same entries with today=2024-01-04 → 3 (today's grace)
            Same entries with today=2024-01-05 → 0
        """
        days = StatisticsEngine.distinct_active_days(timestamps, tz)
        if not days:
            return 0

        current = today or dt_utils.dt_today_local(tz)
        streak = 0
        for offset in range(const.STREAK_MAX_DAYS):
            if current - timedelta(days=offset) in days:
                streak += 1
            elif offset == 0:
                continue
            else:
                break
        return streak

    @staticmethod
    def entry_timestamps(entries: Iterable[EntryData]) -> list[str]:
        """Extract logged_at values from entries."""
        return [
            entry[const.DATA_ENTRY_LOGGED_AT]
            for entry in entries
            if entry.get(const.DATA_ENTRY_LOGGED_AT)
        ]

    @staticmethod
    def sort_chronologically(entries: Iterable[EntryData]) -> list[EntryData]:
        """Return entries ordered by logged_at ascending (stable for ties)."""

        def _sort_key(entry: EntryData) -> tuple[int, Any]:
            parsed = dt_utils.dt_parse(entry.get(const.DATA_ENTRY_LOGGED_AT))
            if parsed is None:
                return (1, 0)
            return (0, parsed.timestamp())

        return sorted(entries, key=_sort_key)

    @staticmethod
    def count_by_category(
        entries: Iterable[EntryData], category_ids: Iterable[str]
    ) -> dict[str, int]:
        """Count entries per category, seeding every given category at zero.

        Categories outside the seed list (user categories, "_unknown") are
        appended after the seeded ones in first-seen order.
        """
        counts: dict[str, int] = dict.fromkeys(category_ids, const.DEFAULT_ZERO)
        for entry in entries:
            category_id = entry.get(const.DATA_ENTRY_CATEGORY_ID)
            counts[category_id] = counts.get(category_id, 0) + 1
        return counts

    @staticmethod
    def rank_top_skills(
        entries: Iterable[EntryData], limit: int = const.REPORT_TOP_SKILLS_LIMIT
    ) -> list[str]:
        """Return the most-logged skill ids, highest count first.

        Ties keep first-seen order: counts are accumulated in iteration
        order and sorted with a stable sort. Pass chronologically ordered
        entries for a deterministic result.
        """
        counts: dict[str, int] = {}
        for entry in entries:
            skill_id = entry.get(const.DATA_ENTRY_SKILL_ID)
            if not skill_id or skill_id == const.SKILL_ID_NONE:
                continue
            counts[skill_id] = counts.get(skill_id, 0) + 1
        ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
        return [skill_id for skill_id, _count in ranked[:limit]]

    @staticmethod
    def count_in_window(
        entries: Iterable[EntryData],
        start: date,
        end: date,
        tz: ZoneInfo | None = None,
    ) -> int:
        """Count entries whose local logged day falls within [start, end]."""
        total = 0
        for entry in entries:
            key = dt_utils.local_day_key(entry.get(const.DATA_ENTRY_LOGGED_AT), tz)
            if key is not None and start <= key <= end:
                total += 1
        return total

    @staticmethod
    def today_count(
        entries: Iterable[EntryData],
        today: date | None = None,
        tz: ZoneInfo | None = None,
    ) -> int:
        """Count entries logged on the local `today`."""
        current = today or dt_utils.dt_today_local(tz)
        return StatisticsEngine.count_in_window(entries, current, current, tz)

    @staticmethod
    def top_category(entries_by_category: dict[str, int]) -> tuple[str, int] | None:
        """Return the category with the highest count.

        Ties resolve to the earliest key in the mapping (catalog order when
        seeded by count_by_category). Returns None for an empty mapping.
        """
        if not entries_by_category:
            return None
        ranked = sorted(
            entries_by_category.items(), key=lambda item: item[1], reverse=True
        )
        return ranked[0]
