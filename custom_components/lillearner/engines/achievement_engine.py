"""Achievement Engine - Pure logic for achievement criteria evaluation.

This engine provides stateless, pure Python functions for:
- Evaluating every achievement in a catalog against a child's facts
- Reporting which not-yet-unlocked achievements are newly satisfied
- Per-achievement progress (current value vs. target) for display

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data.

PURITY REQUIREMENT: This engine receives ALL data via the context parameter.
The AchievementManager builds the context (entries, completed milestone
count, streak, today) and handles side effects (storing unlocks, events).

Criteria types (closed set, dispatched on dataclass type):
- EntryCountCriteria: entry count, optionally filtered by category/skill
- MilestoneCountCriteria: completed milestone count
- StreakDaysCriteria: current logging streak
- CumulativeValueCriteria: summed numeric values of counter entries for a skill
- ChecklistCompleteCriteria: global completed milestone threshold
- SeasonalEntriesCriteria: entries inside the current year's season window
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any

from .. import const
from ..catalogs import (
    ChecklistCompleteCriteria,
    CumulativeValueCriteria,
    EntryCountCriteria,
    MilestoneCountCriteria,
    SeasonalEntriesCriteria,
    StreakDaysCriteria,
)
from ..utils import dt_utils
from ..utils.math_utils import calculate_percentage, parse_numeric_value
from .statistics_engine import StatisticsEngine

if TYPE_CHECKING:
    from ..catalogs import AchievementConfig
    from ..type_defs import AchievementContext, AchievementProgress


# Handler signature: (context, criteria) -> (current_value, target)
CriterionHandler = Callable[["AchievementContext", Any], tuple[float, float]]


class AchievementEngine:
    """Pure logic engine for achievement evaluation.

    All methods are static - no instance state.

    PURITY CONTRACT:
    - All data comes via `context` and `catalog` parameters
    - No side effects, no storage access, no state mutation
    - Every criterion is evaluated; nothing short-circuits
    """

    # =========================================================================
    # CRITERION HANDLER REGISTRY
    # =========================================================================

    _CRITERION_HANDLERS: dict[type, CriterionHandler] = {}

    @classmethod
    def _register_handlers(cls) -> None:
        """Register all criterion handlers.

        Called once at module load to populate _CRITERION_HANDLERS.
        """
        if cls._CRITERION_HANDLERS:
            return

        cls._CRITERION_HANDLERS = {
            EntryCountCriteria: cls._evaluate_entry_count,
            MilestoneCountCriteria: cls._evaluate_milestone_count,
            StreakDaysCriteria: cls._evaluate_streak_days,
            CumulativeValueCriteria: cls._evaluate_cumulative_value,
            ChecklistCompleteCriteria: cls._evaluate_checklist_complete,
            SeasonalEntriesCriteria: cls._evaluate_seasonal_entries,
        }

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    @staticmethod
    def evaluate(
        catalog: Iterable[AchievementConfig],
        unlocked_keys: Iterable[str],
        context: AchievementContext,
    ) -> list[str]:
        """Return keys of achievements newly satisfied, in catalog order.

        Achievements already in `unlocked_keys` are never returned, so
        re-running with the same facts after storing the result yields [].
        """
        already = set(unlocked_keys)
        newly_unlocked: list[str] = []
        for achievement in catalog:
            if achievement.key in already:
                continue
            current, target = AchievementEngine.measure(achievement, context)
            if current >= target:
                newly_unlocked.append(achievement.key)
        return newly_unlocked

    @staticmethod
    def measure(
        achievement: AchievementConfig, context: AchievementContext
    ) -> tuple[float, float]:
        """Return (current_value, target) for one achievement.

        Raises:
            TypeError: Unknown criteria type
        """
        handler = AchievementEngine._CRITERION_HANDLERS.get(type(achievement.criteria))
        if handler is None:
            raise TypeError(
                f"Unsupported achievement criteria: {type(achievement.criteria).__name__}"
            )
        return handler(context, achievement.criteria)

    @staticmethod
    def progress(
        catalog: Iterable[AchievementConfig],
        unlocks: Mapping[str, str],
        context: AchievementContext,
    ) -> list[AchievementProgress]:
        """Return display progress for every catalog achievement."""
        results: list[AchievementProgress] = []
        for achievement in catalog:
            current, target = AchievementEngine.measure(achievement, context)
            unlocked_at = unlocks.get(achievement.key)
            results.append(
                {
                    "key": achievement.key,
                    "name": achievement.name,
                    "icon": achievement.icon,
                    "unlocked": unlocked_at is not None,
                    "unlocked_at": unlocked_at,
                    "current_value": current,
                    "target": target,
                    "percentage": min(100.0, calculate_percentage(current, target)),
                }
            )
        return results

    # =========================================================================
    # CRITERION HANDLERS
    # =========================================================================

    @staticmethod
    def _evaluate_entry_count(
        context: AchievementContext, criteria: EntryCountCriteria
    ) -> tuple[float, float]:
        """Count entries, filtered by category and/or skill when given."""
        count = 0
        for entry in context["entries"]:
            if criteria.category_id and (
                entry.get(const.DATA_ENTRY_CATEGORY_ID) != criteria.category_id
            ):
                continue
            if criteria.skill_id and (
                entry.get(const.DATA_ENTRY_SKILL_ID) != criteria.skill_id
            ):
                continue
            count += 1
        return count, criteria.target

    @staticmethod
    def _evaluate_milestone_count(
        context: AchievementContext, criteria: MilestoneCountCriteria
    ) -> tuple[float, float]:
        return context["completed_milestone_count"], criteria.target

    @staticmethod
    def _evaluate_streak_days(
        context: AchievementContext, criteria: StreakDaysCriteria
    ) -> tuple[float, float]:
        return context["streak_days"], criteria.target

    @staticmethod
    def _evaluate_cumulative_value(
        context: AchievementContext, criteria: CumulativeValueCriteria
    ) -> tuple[float, float]:
        """Sum counter values for the skill; non-numeric values count as zero."""
        total = 0.0
        for entry in context["entries"]:
            if entry.get(const.DATA_ENTRY_TYPE) != const.ENTRY_TYPE_COUNTER:
                continue
            if entry.get(const.DATA_ENTRY_SKILL_ID) != criteria.skill_id:
                continue
            total += parse_numeric_value(entry.get(const.DATA_ENTRY_VALUE))
        return total, criteria.target

    @staticmethod
    def _evaluate_checklist_complete(
        context: AchievementContext, criteria: ChecklistCompleteCriteria
    ) -> tuple[float, float]:
        """Compare ALL completed milestones to a fixed threshold.

        The category id on the criteria is not used as a filter.
        """
        return (
            context["completed_milestone_count"],
            const.CHECKLIST_COMPLETE_MILESTONE_THRESHOLD,
        )

    @staticmethod
    def _evaluate_seasonal_entries(
        context: AchievementContext, criteria: SeasonalEntriesCriteria
    ) -> tuple[float, float]:
        """Count entries in the season window anchored to today's year.

        Winter runs Dec 1 of the current year through Feb 28 of the next.
        """
        today = context["today"]
        start, end = dt_utils.season_range(criteria.season, today.year)
        count = StatisticsEngine.count_in_window(context["entries"], start, end)
        return count, criteria.target


AchievementEngine._register_handlers()
