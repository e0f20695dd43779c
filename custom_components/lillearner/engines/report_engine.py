"""Report Engine - Pure logic for periodic progress reports.

This engine aggregates a child's entries, completed milestones, and XP
ledger rows over an inclusive calendar-day window into a frozen ReportData
payload, and renders the short narrative shown with it.

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All inputs are passed in already scoped to one child; ReportManager fetches
rows, stores the result, and never recomputes a stored report.

Determinism: identical inputs always produce identical output. Entries are
sorted chronologically before ranking, so skill ties resolve by first-seen
order and photo URLs come out in logged order.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date
from typing import TYPE_CHECKING

from .. import const
from ..utils import dt_utils
from .statistics_engine import StatisticsEngine
from .xp_engine import XpEngine

if TYPE_CHECKING:
    from zoneinfo import ZoneInfo

    from ..catalogs import CategoryConfig
    from ..type_defs import EntryData, MilestoneRecord, ReportData, XpEventData


class ReportEngine:
    """Stateless report aggregation and narrative rendering."""

    # =========================================================================
    # Periods
    # =========================================================================

    @staticmethod
    def resolve_period(
        report_type: str,
        reference: date,
        season: str | None = None,
        period_start: date | None = None,
        period_end: date | None = None,
    ) -> tuple[date, date]:
        """Return the inclusive window for a report.

        Explicit start/end always win. Otherwise weekly is the Monday..Sunday
        week containing `reference`, monthly is its calendar month, and
        seasonal is the named season starting in `reference.year`.

        Raises:
            ValueError: seasonal without a season, or start after end
        """
        if period_start is not None and period_end is not None:
            start, end = period_start, period_end
        elif report_type == const.REPORT_TYPE_WEEKLY:
            start, end = dt_utils.week_range(reference)
        elif report_type == const.REPORT_TYPE_MONTHLY:
            start, end = dt_utils.month_range(reference)
        elif report_type == const.REPORT_TYPE_SEASONAL:
            if not season:
                raise ValueError(const.ERROR_SEASON_REQUIRED)
            start, end = dt_utils.season_range(season, reference.year)
        else:
            raise ValueError(f"Unknown report type: {report_type}")

        if start > end:
            raise ValueError(const.ERROR_INVALID_PERIOD_FMT.format(start, end))
        return start, end

    # =========================================================================
    # Aggregation
    # =========================================================================

    @staticmethod
    def _in_window(
        timestamp: str | None, start: date, end: date, tz: ZoneInfo | None
    ) -> bool:
        key = dt_utils.local_day_key(timestamp, tz)
        return key is not None and start <= key <= end

    @staticmethod
    def build_report_data(
        period_start: date,
        period_end: date,
        entries: Iterable[EntryData],
        milestones: Iterable[MilestoneRecord],
        xp_events: Iterable[XpEventData],
        categories: Iterable[CategoryConfig],
        tz: ZoneInfo | None = None,
    ) -> ReportData:
        """Aggregate one child's rows over [period_start, period_end].

        - entries_by_category: every catalog category present, zero-seeded
        - milestones_reached: "skill:milestone" for completions in the window
        - xp_earned: ledger XP created in the window
        - levels_gained: levels crossed between XP before the window and after it
        - top_skills: up to 5 skill ids by entry count
        - photo_urls: up to 6 URLs from photo entries, chronological
        - streak_days: distinct active days in the window
        """
        window_entries = StatisticsEngine.sort_chronologically(
            entry
            for entry in entries
            if ReportEngine._in_window(
                entry.get(const.DATA_ENTRY_LOGGED_AT), period_start, period_end, tz
            )
        )

        entries_by_category = StatisticsEngine.count_by_category(
            window_entries, (category.category_id for category in categories)
        )

        completed = [
            record
            for record in milestones
            if record.get(const.DATA_MILESTONE_COMPLETED)
            and ReportEngine._in_window(
                record.get(const.DATA_MILESTONE_COMPLETED_AT),
                period_start,
                period_end,
                tz,
            )
        ]
        completed.sort(
            key=lambda record: record.get(const.DATA_MILESTONE_COMPLETED_AT) or ""
        )
        milestones_reached = [
            f"{record[const.DATA_MILESTONE_SKILL_ID]}:{record[const.DATA_MILESTONE_KEY]}"
            for record in completed
        ]

        xp_before = 0
        xp_earned = 0
        for event in xp_events:
            key = dt_utils.local_day_key(event.get(const.DATA_CREATED_AT), tz)
            if key is None:
                continue
            amount = event.get(const.DATA_XP_EVENT_AMOUNT, 0)
            if key < period_start:
                xp_before += amount
            elif key <= period_end:
                xp_earned += amount

        photo_urls: list[str] = []
        for entry in window_entries:
            if entry.get(const.DATA_ENTRY_TYPE) != const.ENTRY_TYPE_PHOTO:
                continue
            for url in entry.get(const.DATA_ENTRY_MEDIA_URLS) or []:
                if len(photo_urls) >= const.REPORT_PHOTO_URLS_LIMIT:
                    break
                photo_urls.append(url)

        return {
            "entries_by_category": entries_by_category,
            "milestones_reached": milestones_reached,
            "xp_earned": xp_earned,
            "levels_gained": XpEngine.levels_gained(
                max(0, xp_before), max(0, xp_before + xp_earned)
            ),
            "top_skills": StatisticsEngine.rank_top_skills(window_entries),
            "photo_urls": photo_urls,
            "total_entries": len(window_entries),
            "streak_days": len(
                StatisticsEngine.distinct_active_days(
                    StatisticsEngine.entry_timestamps(window_entries), tz
                )
            ),
        }

    # =========================================================================
    # Narrative
    # =========================================================================

    @staticmethod
    def generate_narrative(
        child_name: str,
        data: ReportData,
        category_names: Mapping[str, str],
    ) -> str:
        """Render the report narrative.

        Sentences, in fixed order, each omitted when its count is zero:
        top category, milestones reached, XP earned. A closing line is
        always appended. Sentences are joined with single spaces.
        """
        parts: list[str] = []

        top = StatisticsEngine.top_category(data["entries_by_category"])
        if top and top[1] > 0:
            category_id, count = top
            parts.append(
                const.NARRATIVE_TOP_CATEGORY_FMT.format(
                    child=child_name,
                    category=category_names.get(category_id, category_id),
                    count=count,
                )
            )

        milestone_count = len(data["milestones_reached"])
        if milestone_count > 0:
            parts.append(
                const.NARRATIVE_MILESTONES_FMT.format(
                    child=child_name,
                    count=milestone_count,
                    plural="" if milestone_count == 1 else "s",
                )
            )

        if data["xp_earned"] > 0:
            parts.append(const.NARRATIVE_XP_FMT.format(xp=data["xp_earned"]))

        if data["total_entries"] > 0:
            parts.append(const.NARRATIVE_KEEP_GOING)
        else:
            parts.append(const.NARRATIVE_START_LOGGING)

        return " ".join(parts)
