"""Tests for AchievementEngine.

Tests cover:
- Evaluation of each criteria type against the catalog
- Idempotence (unlocked keys are never returned again)
- Seasonal windows (including winter crossing the year end)
- Non-numeric counter values and the checklist threshold
- Progress reporting for display
"""

from __future__ import annotations

from datetime import date
from typing import Any

import pytest

from custom_components.lillearner import catalogs, const
from custom_components.lillearner.engines.achievement_engine import AchievementEngine


def _entry(
    logged_at: str = "2024-01-10T12:00:00+00:00",
    category_id: str = "literacy",
    skill_id: str = "letter_names",
    entry_type: str = const.ENTRY_TYPE_ACTIVITY,
    value: Any = None,
) -> dict[str, Any]:
    return {
        const.DATA_ENTRY_LOGGED_AT: logged_at,
        const.DATA_ENTRY_CATEGORY_ID: category_id,
        const.DATA_ENTRY_SKILL_ID: skill_id,
        const.DATA_ENTRY_TYPE: entry_type,
        const.DATA_ENTRY_VALUE: value,
    }


def _context(
    entries: list[dict[str, Any]] | None = None,
    completed_milestone_count: int = 0,
    streak_days: int = 0,
    today: date = date(2024, 1, 10),
) -> dict[str, Any]:
    return {
        "child_id": "child-1",
        "entries": entries or [],
        "completed_milestone_count": completed_milestone_count,
        "streak_days": streak_days,
        "today": today,
    }


def _single(key: str) -> tuple[catalogs.AchievementConfig, ...]:
    achievement = catalogs.get_achievement(key)
    assert achievement is not None
    return (achievement,)


class TestEvaluate:
    """Tests for evaluate()."""

    def test_first_entry_unlocks_first_steps(self) -> None:
        """A single entry satisfies the first-entry achievement."""
        newly = AchievementEngine.evaluate(
            catalogs.ACHIEVEMENTS, [], _context([_entry()])
        )

        assert newly == ["first_steps"]

    def test_nothing_logged_unlocks_nothing(self) -> None:
        """An empty history satisfies no achievement."""
        assert AchievementEngine.evaluate(catalogs.ACHIEVEMENTS, [], _context()) == []

    def test_unlocked_keys_are_not_returned_again(self) -> None:
        """Re-evaluating with the stored result yields nothing new."""
        context = _context([_entry()], streak_days=7)

        first = AchievementEngine.evaluate(catalogs.ACHIEVEMENTS, [], context)
        second = AchievementEngine.evaluate(catalogs.ACHIEVEMENTS, first, context)

        assert set(first) == {"first_steps", "on_fire"}
        assert second == []

    def test_results_follow_catalog_order(self) -> None:
        """Newly unlocked keys are returned in catalog order."""
        context = _context([_entry()], streak_days=30)

        newly = AchievementEngine.evaluate(catalogs.ACHIEVEMENTS, [], context)

        assert newly == ["on_fire", "unstoppable", "first_steps"]

    def test_entry_count_with_skill_filter(self) -> None:
        """Only entries of the filtered skill count."""
        books = [_entry(skill_id="books_read") for _ in range(50)]
        others = [_entry(skill_id="letter_names") for _ in range(60)]

        assert AchievementEngine.evaluate(_single("bookworm"), [], _context(others)) == []
        assert AchievementEngine.evaluate(_single("bookworm"), [], _context(books)) == [
            "bookworm"
        ]

    def test_entry_count_with_category_filter(self) -> None:
        """Only entries of the filtered category count."""
        art = [_entry(category_id="creative_expression") for _ in range(29)]

        assert AchievementEngine.evaluate(_single("creative_spark"), [], _context(art)) == []
        art.append(_entry(category_id="creative_expression"))
        assert AchievementEngine.evaluate(
            _single("creative_spark"), [], _context(art)
        ) == ["creative_spark"]

    def test_milestone_count(self) -> None:
        """Completed milestones are compared to the target."""
        assert (
            AchievementEngine.evaluate(
                _single("milestone_master"), [], _context(completed_milestone_count=49)
            )
            == []
        )
        assert AchievementEngine.evaluate(
            _single("milestone_master"), [], _context(completed_milestone_count=50)
        ) == ["milestone_master"]


class TestCumulativeValue:
    """Tests for summed counter values."""

    def test_counter_values_are_summed(self) -> None:
        """Counter entries for the skill add up to the target."""
        entries = [
            _entry(
                category_id="numeracy",
                skill_id="counting",
                entry_type=const.ENTRY_TYPE_COUNTER,
                value=value,
            )
            for value in (40, "35", 25.0)
        ]

        assert AchievementEngine.evaluate(
            _single("math_whiz"), [], _context(entries)
        ) == ["math_whiz"]

    def test_non_numeric_values_count_as_zero(self) -> None:
        """Unparseable values contribute nothing."""
        entries = [
            _entry(
                category_id="numeracy",
                skill_id="counting",
                entry_type=const.ENTRY_TYPE_COUNTER,
                value=value,
            )
            for value in ("lots", None, 60)
        ]

        current, target = AchievementEngine.measure(
            _single("math_whiz")[0], _context(entries)
        )

        assert current == 60
        assert target == 100

    def test_non_counter_entries_are_ignored(self) -> None:
        """Activity entries of the same skill do not add their value."""
        entries = [
            _entry(
                category_id="numeracy",
                skill_id="counting",
                entry_type=const.ENTRY_TYPE_ACTIVITY,
                value=500,
            )
        ]

        current, _target = AchievementEngine.measure(
            _single("math_whiz")[0], _context(entries)
        )

        assert current == 0


class TestChecklistAndSeasonal:
    """Tests for checklist and seasonal criteria."""

    def test_checklist_uses_global_threshold(self) -> None:
        """Ten completed milestones of any skill satisfy the checklist achievement."""
        assert (
            AchievementEngine.evaluate(
                _single("helping_hand"), [], _context(completed_milestone_count=9)
            )
            == []
        )
        assert AchievementEngine.evaluate(
            _single("helping_hand"),
            [],
            _context(completed_milestone_count=const.CHECKLIST_COMPLETE_MILESTONE_THRESHOLD),
        ) == ["helping_hand"]

    def test_summer_entries_unlock_summer_explorer(self) -> None:
        """Ten entries between June 1 and August 31 of this year qualify."""
        entries = [
            _entry(logged_at=f"2024-07-{day:02d}T12:00:00+00:00") for day in range(1, 11)
        ]

        newly = AchievementEngine.evaluate(
            _single("summer_explorer"), [], _context(entries, today=date(2024, 8, 15))
        )

        assert newly == ["summer_explorer"]

    def test_summer_entries_from_last_year_do_not_count(self) -> None:
        """The window is anchored to the current year."""
        entries = [
            _entry(logged_at=f"2023-07-{day:02d}T12:00:00+00:00") for day in range(1, 11)
        ]

        newly = AchievementEngine.evaluate(
            _single("summer_explorer"), [], _context(entries, today=date(2024, 8, 15))
        )

        assert newly == []

    def test_winter_window_crosses_year_end(self) -> None:
        """Winter runs from December into the following year."""
        entries = [
            _entry(logged_at=f"2024-12-{day:02d}T12:00:00+00:00") for day in range(20, 26)
        ]
        entries += [
            _entry(logged_at=f"2025-01-{day:02d}T12:00:00+00:00") for day in range(5, 9)
        ]

        current, target = AchievementEngine.measure(
            _single("winter_scholar")[0], _context(entries, today=date(2024, 12, 31))
        )

        assert current == 10
        assert target == 10


class TestProgress:
    """Tests for progress()."""

    def test_progress_covers_whole_catalog(self) -> None:
        """Every catalog achievement is reported with its unlock state."""
        unlocks = {"first_steps": "2024-01-10T12:00:00+00:00"}

        progress = AchievementEngine.progress(
            catalogs.ACHIEVEMENTS, unlocks, _context([_entry()], streak_days=3)
        )

        assert [item["key"] for item in progress] == [
            achievement.key for achievement in catalogs.ACHIEVEMENTS
        ]
        by_key = {item["key"]: item for item in progress}
        assert by_key["first_steps"]["unlocked"] is True
        assert by_key["first_steps"]["unlocked_at"] == "2024-01-10T12:00:00+00:00"
        assert by_key["on_fire"]["unlocked"] is False
        assert by_key["on_fire"]["percentage"] == pytest.approx(42.86)

    def test_progress_percentage_is_capped(self) -> None:
        """Exceeding the target reports 100 percent."""
        progress = AchievementEngine.progress(
            _single("on_fire"), {}, _context(streak_days=20)
        )

        assert progress[0]["percentage"] == 100.0
