"""Tests for ReportEngine.

Tests cover:
- Period resolution (weekly, monthly, seasonal, explicit, invalid)
- Report aggregation (category completeness, window bounds, XP, levels)
- Photo and top-skill caps
- Determinism
- Narrative ordering and zero suppression
"""

from __future__ import annotations

from datetime import date
from typing import Any
from zoneinfo import ZoneInfo

import pytest

from custom_components.lillearner import catalogs, const
from custom_components.lillearner.engines.report_engine import ReportEngine

UTC_TZ = ZoneInfo("UTC")
CATEGORY_NAMES = {category.category_id: category.name for category in catalogs.CATEGORIES}


def _entry(
    logged_at: str,
    category_id: str = "literacy",
    skill_id: str = "letter_names",
    entry_type: str = const.ENTRY_TYPE_ACTIVITY,
    media_urls: list[str] | None = None,
) -> dict[str, Any]:
    return {
        const.DATA_ENTRY_LOGGED_AT: logged_at,
        const.DATA_ENTRY_CATEGORY_ID: category_id,
        const.DATA_ENTRY_SKILL_ID: skill_id,
        const.DATA_ENTRY_TYPE: entry_type,
        const.DATA_ENTRY_MEDIA_URLS: media_urls or [],
    }


def _milestone(skill_id: str, key: str, completed_at: str | None) -> dict[str, Any]:
    return {
        const.DATA_CHILD_ID: "child-1",
        const.DATA_MILESTONE_SKILL_ID: skill_id,
        const.DATA_MILESTONE_KEY: key,
        const.DATA_MILESTONE_COMPLETED: completed_at is not None,
        const.DATA_MILESTONE_COMPLETED_AT: completed_at,
    }


def _xp(amount: int, created_at: str) -> dict[str, Any]:
    return {
        const.DATA_CHILD_ID: "child-1",
        const.DATA_XP_EVENT_AMOUNT: amount,
        const.DATA_XP_EVENT_SOURCE_TYPE: const.XP_SOURCE_ENTRY,
        const.DATA_CREATED_AT: created_at,
    }


def _build(
    entries: list[dict[str, Any]],
    milestones: list[dict[str, Any]] | None = None,
    xp_events: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    return ReportEngine.build_report_data(
        date(2024, 1, 1),
        date(2024, 1, 7),
        entries,
        milestones or [],
        xp_events or [],
        catalogs.CATEGORIES,
        tz=UTC_TZ,
    )


class TestResolvePeriod:
    """Tests for resolve_period."""

    def test_weekly_is_monday_to_sunday(self) -> None:
        """A Thursday reference resolves to its Monday..Sunday week."""
        assert ReportEngine.resolve_period(
            const.REPORT_TYPE_WEEKLY, date(2024, 1, 4)
        ) == (date(2024, 1, 1), date(2024, 1, 7))

    def test_monthly_handles_leap_february(self) -> None:
        """Monthly reports cover the full calendar month."""
        assert ReportEngine.resolve_period(
            const.REPORT_TYPE_MONTHLY, date(2024, 2, 10)
        ) == (date(2024, 2, 1), date(2024, 2, 29))

    def test_seasonal_winter_crosses_year(self) -> None:
        """Winter starts in December and ends in February of the next year."""
        assert ReportEngine.resolve_period(
            const.REPORT_TYPE_SEASONAL, date(2024, 12, 5), season=const.SEASON_WINTER
        ) == (date(2024, 12, 1), date(2025, 2, 28))

    def test_seasonal_requires_season(self) -> None:
        """A seasonal report without a season is rejected."""
        with pytest.raises(ValueError):
            ReportEngine.resolve_period(const.REPORT_TYPE_SEASONAL, date(2024, 7, 1))

    def test_explicit_period_wins(self) -> None:
        """Explicit bounds override the report type's window."""
        assert ReportEngine.resolve_period(
            const.REPORT_TYPE_WEEKLY,
            date(2024, 1, 4),
            period_start=date(2024, 3, 1),
            period_end=date(2024, 3, 3),
        ) == (date(2024, 3, 1), date(2024, 3, 3))

    def test_start_after_end_rejected(self) -> None:
        """An inverted explicit window is rejected."""
        with pytest.raises(ValueError):
            ReportEngine.resolve_period(
                const.REPORT_TYPE_MONTHLY,
                date(2024, 1, 4),
                period_start=date(2024, 3, 5),
                period_end=date(2024, 3, 1),
            )

    def test_unknown_report_type_rejected(self) -> None:
        """Only weekly, monthly and seasonal reports exist."""
        with pytest.raises(ValueError):
            ReportEngine.resolve_period("yearly", date(2024, 1, 4))


class TestBuildReportData:
    """Tests for build_report_data."""

    def test_every_category_present(self) -> None:
        """All catalog categories appear, zero when unused."""
        data = _build([_entry("2024-01-02T10:00:00+00:00")])

        assert set(data["entries_by_category"]) == {
            category.category_id for category in catalogs.CATEGORIES
        }
        assert data["entries_by_category"]["literacy"] == 1
        assert data["entries_by_category"]["numeracy"] == 0

    def test_window_bounds_are_inclusive(self) -> None:
        """Entries on the first and last day count; others do not."""
        data = _build(
            [
                _entry("2023-12-31T23:59:00+00:00"),
                _entry("2024-01-01T00:00:00+00:00"),
                _entry("2024-01-07T23:59:00+00:00"),
                _entry("2024-01-08T00:00:00+00:00"),
            ]
        )

        assert data["total_entries"] == 2
        assert data["streak_days"] == 2

    def test_milestones_reached_in_window(self) -> None:
        """Only completions inside the window are listed, oldest first."""
        data = _build(
            [],
            milestones=[
                _milestone("letter_names", "lowercase", "2024-01-05T10:00:00+00:00"),
                _milestone("letter_names", "uppercase", "2024-01-02T10:00:00+00:00"),
                _milestone("counting", "10", "2023-12-20T10:00:00+00:00"),
                _milestone("counting", "20", None),
            ],
        )

        assert data["milestones_reached"] == [
            "letter_names:uppercase",
            "letter_names:lowercase",
        ]

    def test_xp_earned_and_levels_gained(self) -> None:
        """XP in the window is summed; levels compare before and after."""
        data = _build(
            [],
            xp_events=[
                _xp(350, "2023-12-15T10:00:00+00:00"),
                _xp(30, "2024-01-02T10:00:00+00:00"),
                _xp(50, "2024-01-06T10:00:00+00:00"),
                _xp(500, "2024-01-09T10:00:00+00:00"),
            ],
        )

        assert data["xp_earned"] == 80
        assert data["levels_gained"] == 1

    def test_photo_urls_capped_and_ordered(self) -> None:
        """At most six photo URLs are kept, in logged order."""
        entries = [
            _entry(
                f"2024-01-0{day}T10:00:00+00:00",
                entry_type=const.ENTRY_TYPE_PHOTO,
                media_urls=[f"/local/photo_{day}_a.jpg", f"/local/photo_{day}_b.jpg"],
            )
            for day in (5, 2, 3, 4)
        ]
        entries.append(
            _entry(
                "2024-01-01T10:00:00+00:00",
                entry_type=const.ENTRY_TYPE_ACTIVITY,
                media_urls=["/local/not_a_photo.jpg"],
            )
        )

        data = _build(entries)

        assert data["photo_urls"] == [
            "/local/photo_2_a.jpg",
            "/local/photo_2_b.jpg",
            "/local/photo_3_a.jpg",
            "/local/photo_3_b.jpg",
            "/local/photo_4_a.jpg",
            "/local/photo_4_b.jpg",
        ]

    def test_top_skills_capped(self) -> None:
        """No more than five skills are ranked."""
        entries = [
            _entry(f"2024-01-0{(index % 7) + 1}T10:00:00+00:00", skill_id=f"skill_{index}")
            for index in range(7)
        ]

        assert len(_build(entries)["top_skills"]) == 5

    def test_deterministic(self) -> None:
        """The same inputs produce the same report."""
        entries = [
            _entry("2024-01-03T10:00:00+00:00", skill_id="counting", category_id="numeracy"),
            _entry("2024-01-02T10:00:00+00:00", skill_id="letter_names"),
        ]

        assert _build(entries) == _build(list(reversed(entries)))


class TestNarrative:
    """Tests for generate_narrative."""

    def test_full_narrative_order(self) -> None:
        """Top category, milestones and XP appear in that order."""
        data = _build(
            [
                _entry("2024-01-02T10:00:00+00:00"),
                _entry("2024-01-03T10:00:00+00:00"),
                _entry("2024-01-03T11:00:00+00:00", category_id="numeracy"),
            ],
            milestones=[
                _milestone("letter_names", "uppercase", "2024-01-02T10:00:00+00:00")
            ],
            xp_events=[_xp(80, "2024-01-02T10:00:00+00:00")],
        )

        narrative = ReportEngine.generate_narrative("Emma", data, CATEGORY_NAMES)

        assert narrative == (
            "Emma was most active in Literacy with 2 entries. "
            "Emma reached 1 new milestone! "
            "Earned 80 XP this period. "
            "Keep up the great work!"
        )

    def test_zero_counts_are_suppressed(self) -> None:
        """An empty period only gets the encouragement line."""
        data = _build([])

        narrative = ReportEngine.generate_narrative("Emma", data, CATEGORY_NAMES)

        assert narrative == "Let's start logging some activities!"

    def test_plural_milestones(self) -> None:
        """More than one milestone uses the plural form."""
        data = _build(
            [],
            milestones=[
                _milestone("letter_names", "uppercase", "2024-01-02T10:00:00+00:00"),
                _milestone("letter_names", "lowercase", "2024-01-03T10:00:00+00:00"),
            ],
        )

        narrative = ReportEngine.generate_narrative("Emma", data, CATEGORY_NAMES)

        assert "Emma reached 2 new milestones!" in narrative
        assert "most active" not in narrative
        assert "XP" not in narrative
