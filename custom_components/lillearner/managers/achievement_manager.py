"""Achievement Manager - Unlocking achievements.

Builds the facts context for AchievementEngine from storage, records new
unlocks, and announces them. Runs under the same per-child lock as XP
grants, so two concurrent checks for one child cannot both unlock the
same achievement. Unlocks are keyed by achievement key, which makes a
repeated insert a no-op.

Achievements do not grant XP.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from .. import catalogs, const
from ..engines.achievement_engine import AchievementEngine
from ..engines.statistics_engine import StatisticsEngine
from ..utils import dt_utils
from .base_manager import BaseManager

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..catalogs import AchievementConfig
    from ..coordinator import LilLearnerDataCoordinator
    from ..type_defs import AchievementContext, AchievementProgress


class AchievementManager(BaseManager):
    """Manager for per-child achievement unlocks."""

    def __init__(
        self, hass: HomeAssistant, coordinator: LilLearnerDataCoordinator
    ) -> None:
        """Initialize the AchievementManager."""
        super().__init__(hass, coordinator)
        self.catalog: tuple[AchievementConfig, ...] = catalogs.ACHIEVEMENTS

    async def async_setup(self) -> None:
        """Nothing to subscribe to; checks are requested explicitly."""

    # =========================================================================
    # Facts
    # =========================================================================

    def completed_milestone_count(self, child_id: str) -> int:
        """Return how many milestones the child has completed."""
        return sum(
            1
            for record in self.coordinator.milestones_for_child(child_id)
            if record.get(const.DATA_MILESTONE_COMPLETED)
        )

    def streak_days(self, child_id: str, today: date | None = None) -> int:
        """Return the child's current logging streak."""
        return StatisticsEngine.calculate_streak(
            StatisticsEngine.entry_timestamps(
                self.coordinator.entries_for_child(child_id)
            ),
            today=today,
        )

    def build_context(
        self, child_id: str, today: date | None = None
    ) -> AchievementContext:
        """Collect everything the evaluator needs for one child."""
        current = today or dt_utils.dt_today_local()
        return {
            "child_id": child_id,
            "entries": self.coordinator.entries_for_child(child_id),
            "completed_milestone_count": self.completed_milestone_count(child_id),
            "streak_days": self.streak_days(child_id, current),
            "today": current,
        }

    def unlocked(self, child_id: str) -> dict[str, str]:
        """Return {achievement_key: unlocked_at} for a child."""
        return dict(self.coordinator.achievements_data.get(child_id, {}))

    # =========================================================================
    # Evaluation
    # =========================================================================

    async def async_check_achievements(
        self, child_id: str, today: date | None = None
    ) -> list[str]:
        """Evaluate and record newly unlocked achievements.

        Returns:
            Keys unlocked by this call, in catalog order. Empty when
            gamification is disabled.
        """
        child = self._get_child(child_id)
        if not self.coordinator.gamification_enabled:
            return []

        async with self.coordinator.progress_manager.lock_for(child_id):
            unlocks = self.coordinator.achievements_data.setdefault(child_id, {})
            newly_unlocked = AchievementEngine.evaluate(
                self.catalog, unlocks.keys(), self.build_context(child_id, today)
            )
            unlocked_at = dt_utils.dt_now_iso()
            for key in newly_unlocked:
                unlocks.setdefault(key, unlocked_at)

        if not newly_unlocked:
            return []

        self.coordinator._persist_and_update()

        for key in newly_unlocked:
            achievement = catalogs.get_achievement(key)
            payload = {
                "child_id": child_id,
                "child_name": child.get(const.DATA_CHILD_NAME),
                "achievement_key": key,
                "achievement_name": achievement.name if achievement else key,
                "unlocked_at": unlocked_at,
            }
            const.LOGGER.info(
                "INFO: Child '%s' unlocked achievement '%s'",
                payload["child_name"],
                payload["achievement_name"],
            )
            self.hass.bus.async_fire(const.EVENT_ACHIEVEMENT_UNLOCKED, payload)
            self.emit(const.SIGNAL_SUFFIX_ACHIEVEMENT_UNLOCKED, **payload)

        return newly_unlocked

    def get_achievement_progress(
        self, child_id: str, today: date | None = None
    ) -> list[AchievementProgress]:
        """Return display progress for every catalog achievement."""
        self._get_child(child_id)
        return AchievementEngine.progress(
            self.catalog,
            self.coordinator.achievements_data.get(child_id, {}),
            self.build_context(child_id, today),
        )
