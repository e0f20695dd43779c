"""Entry Manager - Logging activities, milestones and user categories.

Entries are append-only: once logged they are never edited. Milestone
completion is an idempotent upsert keyed by child, skill and milestone, so
toggling the same milestone twice leaves one record and grants XP once.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any
import uuid

from .. import catalogs, const
from ..engines.xp_engine import XpEngine
from ..exceptions import LilLearnerError
from ..utils import dt_utils
from .base_manager import BaseManager

if TYPE_CHECKING:
    from ..type_defs import EntryData, MilestoneRecord, UserCategoryData


def milestone_record_key(child_id: str, skill_id: str, milestone_key: str) -> str:
    """Return the storage key for one child's milestone record."""
    return f"{child_id}|{skill_id}|{milestone_key}"


class EntryManager(BaseManager):
    """Manager for learning entries, milestones and user categories."""

    async def async_setup(self) -> None:
        """Nothing to subscribe to; entries arrive through services."""

    # =========================================================================
    # Entries
    # =========================================================================

    def _build_entry(
        self,
        child_id: str,
        category_id: str,
        skill_id: str | None = None,
        entry_type: str = const.ENTRY_TYPE_ACTIVITY,
        value: Any = None,
        notes: str | None = None,
        media_urls: Iterable[str] | None = None,
        lesson_number: int | None = None,
        user_category_id: str | None = None,
        logged_at: str | None = None,
    ) -> EntryData:
        if entry_type not in const.ENTRY_TYPES:
            raise LilLearnerError(f"Unknown entry type: {entry_type}")

        now_iso = dt_utils.dt_now_iso()
        logged = dt_utils.dt_parse(logged_at) if logged_at else None
        return {
            const.DATA_INTERNAL_ID: str(uuid.uuid4()),
            const.DATA_CHILD_ID: child_id,
            const.DATA_ENTRY_CATEGORY_ID: category_id,
            const.DATA_ENTRY_SKILL_ID: skill_id or const.SKILL_ID_NONE,
            const.DATA_ENTRY_TYPE: entry_type,
            const.DATA_ENTRY_VALUE: value,
            const.DATA_ENTRY_NOTES: notes,
            const.DATA_ENTRY_MEDIA_URLS: list(media_urls or []),
            const.DATA_ENTRY_LESSON_NUMBER: lesson_number,
            const.DATA_ENTRY_USER_CATEGORY_ID: user_category_id,
            const.DATA_ENTRY_LOGGED_AT: logged.isoformat() if logged else now_iso,
            const.DATA_CREATED_AT: now_iso,
        }  # type: ignore[return-value]

    async def async_log_entry(
        self,
        child_id: str,
        category_id: str,
        skill_id: str | None = None,
        entry_type: str = const.ENTRY_TYPE_ACTIVITY,
        value: Any = None,
        notes: str | None = None,
        media_urls: Iterable[str] | None = None,
        lesson_number: int | None = None,
        user_category_id: str | None = None,
        logged_at: str | None = None,
    ) -> dict[str, Any]:
        """Log one entry, grant its XP and check achievements.

        Returns:
            entry_id, xp_awarded, total_xp, level, leveled_up, new_achievements
        """
        self._get_child(child_id)
        entry = self._build_entry(
            child_id,
            category_id,
            skill_id,
            entry_type,
            value,
            notes,
            media_urls,
            lesson_number,
            user_category_id,
            logged_at,
        )
        entry_id = entry[const.DATA_INTERNAL_ID]
        self.coordinator.entries_data[entry_id] = entry
        self.coordinator._persist_and_update()

        const.LOGGER.debug(
            "DEBUG: Logged %s entry %s for child %s (%s/%s)",
            entry_type,
            entry_id,
            child_id,
            category_id,
            entry[const.DATA_ENTRY_SKILL_ID],
        )
        self.emit(
            const.SIGNAL_SUFFIX_ENTRY_LOGGED,
            child_id=child_id,
            entry_id=entry_id,
            category_id=category_id,
            skill_id=entry[const.DATA_ENTRY_SKILL_ID],
            entry_type=entry_type,
        )

        result: dict[str, Any] = {
            "entry_id": entry_id,
            "xp_awarded": 0,
            "leveled_up": False,
            "new_achievements": [],
        }
        if self.coordinator.gamification_enabled:
            amount = XpEngine.xp_for_entry_type(entry_type)
            applied = await self.coordinator.progress_manager.async_award_xp(
                child_id,
                amount,
                source_type=const.XP_SOURCE_ENTRY,
                source_id=entry_id,
            )
            result["xp_awarded"] = amount
            result["leveled_up"] = applied["leveled_up"]
            result["new_achievements"] = (
                await self.coordinator.achievement_manager.async_check_achievements(
                    child_id
                )
            )

        total_xp = self.coordinator.progress_manager.get_total_xp(child_id)
        result["total_xp"] = total_xp
        result["level"] = XpEngine.level(total_xp)
        return result

    async def async_log_entries(
        self, entries: Iterable[Mapping[str, Any]]
    ) -> dict[str, Any]:
        """Log several entries at once (voice notes, bulk add).

        Each entry earns the activity XP. Achievements are checked once per
        child after all entries are stored.
        """
        built: list[EntryData] = []
        for item in entries:
            child_id = item[const.DATA_CHILD_ID]
            self._get_child(child_id)
            built.append(
                self._build_entry(
                    child_id,
                    item[const.DATA_ENTRY_CATEGORY_ID],
                    item.get(const.DATA_ENTRY_SKILL_ID),
                    item.get(const.DATA_ENTRY_TYPE, const.ENTRY_TYPE_ACTIVITY),
                    item.get(const.DATA_ENTRY_VALUE),
                    item.get(const.DATA_ENTRY_NOTES),
                    item.get(const.DATA_ENTRY_MEDIA_URLS),
                    item.get(const.DATA_ENTRY_LESSON_NUMBER),
                    item.get(const.DATA_ENTRY_USER_CATEGORY_ID),
                    item.get(const.DATA_ENTRY_LOGGED_AT),
                )
            )

        if not built:
            return {"entry_ids": [], "xp_awarded": 0, "new_achievements": {}}

        for entry in built:
            self.coordinator.entries_data[entry[const.DATA_INTERNAL_ID]] = entry
        self.coordinator._persist_and_update()
        const.LOGGER.info("INFO: Logged %s entries in bulk", len(built))

        for entry in built:
            self.emit(
                const.SIGNAL_SUFFIX_ENTRY_LOGGED,
                child_id=entry[const.DATA_CHILD_ID],
                entry_id=entry[const.DATA_INTERNAL_ID],
                category_id=entry[const.DATA_ENTRY_CATEGORY_ID],
                skill_id=entry[const.DATA_ENTRY_SKILL_ID],
                entry_type=entry[const.DATA_ENTRY_TYPE],
            )

        xp_awarded = 0
        new_achievements: dict[str, list[str]] = {}
        if self.coordinator.gamification_enabled:
            for entry in built:
                await self.coordinator.progress_manager.async_award_xp(
                    entry[const.DATA_CHILD_ID],
                    const.XP_LOG_ACTIVITY,
                    source_type=const.XP_SOURCE_ENTRY,
                    source_id=entry[const.DATA_INTERNAL_ID],
                )
                xp_awarded += const.XP_LOG_ACTIVITY

            for child_id in dict.fromkeys(entry[const.DATA_CHILD_ID] for entry in built):
                unlocked = (
                    await self.coordinator.achievement_manager.async_check_achievements(
                        child_id
                    )
                )
                if unlocked:
                    new_achievements[child_id] = unlocked

        return {
            "entry_ids": [entry[const.DATA_INTERNAL_ID] for entry in built],
            "xp_awarded": xp_awarded,
            "new_achievements": new_achievements,
        }

    # =========================================================================
    # Milestones
    # =========================================================================

    def completed_milestones(self, child_id: str, skill_id: str) -> set[str]:
        """Return the milestone keys a child has completed for one skill."""
        return {
            record[const.DATA_MILESTONE_KEY]
            for record in self.coordinator.milestones_for_child(child_id)
            if record.get(const.DATA_MILESTONE_SKILL_ID) == skill_id
            and record.get(const.DATA_MILESTONE_COMPLETED)
        }

    async def async_toggle_milestone(
        self,
        child_id: str,
        skill_id: str,
        milestone_key: str,
        completed: bool = True,
    ) -> dict[str, Any]:
        """Mark a milestone complete or incomplete.

        The first completion of a milestone grants milestone XP; completing
        every milestone of a catalog skill grants the skill bonus once.
        Un-completing never removes XP.
        """
        self._get_child(child_id)
        key = milestone_record_key(child_id, skill_id, milestone_key)
        record: MilestoneRecord = {
            const.DATA_CHILD_ID: child_id,
            const.DATA_MILESTONE_SKILL_ID: skill_id,
            const.DATA_MILESTONE_KEY: milestone_key,
            const.DATA_MILESTONE_COMPLETED: completed,
            const.DATA_MILESTONE_COMPLETED_AT: (
                dt_utils.dt_now_iso() if completed else None
            ),
        }  # type: ignore[assignment]

        previous = self.coordinator.milestones_data.get(key)
        if (
            completed
            and previous
            and previous.get(const.DATA_MILESTONE_COMPLETED)
        ):
            # Re-completing keeps the original completion time
            record[const.DATA_MILESTONE_COMPLETED_AT] = previous.get(
                const.DATA_MILESTONE_COMPLETED_AT
            )
        self.coordinator.milestones_data[key] = record
        self.coordinator._persist_and_update()

        self.emit(
            const.SIGNAL_SUFFIX_MILESTONE_TOGGLED,
            child_id=child_id,
            skill_id=skill_id,
            milestone_key=milestone_key,
            completed=completed,
        )

        result: dict[str, Any] = {
            "completed": completed,
            "xp_awarded": 0,
            "skill_complete": False,
            "new_achievements": [],
        }
        if not completed or not self.coordinator.gamification_enabled:
            return result

        progress_manager = self.coordinator.progress_manager
        if not progress_manager.has_xp_event(
            child_id, const.XP_SOURCE_MILESTONE, key
        ):
            await progress_manager.async_award_xp(
                child_id,
                const.XP_COMPLETE_MILESTONE,
                source_type=const.XP_SOURCE_MILESTONE,
                source_id=key,
            )
            result["xp_awarded"] += const.XP_COMPLETE_MILESTONE

        found = catalogs.find_skill(skill_id)
        if found is not None:
            skill = found[1]
            if skill.milestones and set(skill.milestones) <= self.completed_milestones(
                child_id, skill_id
            ):
                result["skill_complete"] = True
                bonus_source = milestone_record_key(child_id, skill_id, "*")
                if not progress_manager.has_xp_event(
                    child_id, const.XP_SOURCE_MILESTONE, bonus_source
                ):
                    await progress_manager.async_award_xp(
                        child_id,
                        const.XP_COMPLETE_ALL_SKILL_MILESTONES,
                        source_type=const.XP_SOURCE_MILESTONE,
                        source_id=bonus_source,
                    )
                    result["xp_awarded"] += const.XP_COMPLETE_ALL_SKILL_MILESTONES

        result["new_achievements"] = (
            await self.coordinator.achievement_manager.async_check_achievements(
                child_id
            )
        )
        return result

    # =========================================================================
    # Progress views
    # =========================================================================

    def skill_progress(self, child_id: str) -> list[dict[str, Any]]:
        """Return per-skill milestone completion for catalog skills with milestones."""
        progress: list[dict[str, Any]] = []
        for category in catalogs.CATEGORIES:
            for skill in category.skills:
                if not skill.milestones:
                    continue
                done = self.completed_milestones(child_id, skill.skill_id)
                completed = sum(1 for key in skill.milestones if key in done)
                progress.append(
                    {
                        "category_id": category.category_id,
                        "skill_id": skill.skill_id,
                        "name": skill.name,
                        "completed": completed,
                        "total": len(skill.milestones),
                    }
                )
        return progress

    # =========================================================================
    # User categories
    # =========================================================================

    def add_user_category(
        self,
        name: str,
        category_type: str = const.USER_CATEGORY_TYPE_LESSON,
        icon: str | None = None,
        color: str | None = None,
        total_lessons: int | None = None,
    ) -> str:
        """Create a user-defined category and return its id."""
        if category_type not in const.USER_CATEGORY_TYPES:
            raise LilLearnerError(f"Unknown category type: {category_type}")

        now_iso = dt_utils.dt_now_iso()
        category_id = str(uuid.uuid4())
        category: UserCategoryData = {
            const.DATA_INTERNAL_ID: category_id,
            const.DATA_USER_CATEGORY_NAME: name.strip(),
            const.DATA_USER_CATEGORY_ICON: icon or const.DEFAULT_USER_CATEGORY_ICON,
            const.DATA_USER_CATEGORY_COLOR: color or const.DEFAULT_USER_CATEGORY_COLOR,
            const.DATA_USER_CATEGORY_TYPE: category_type,
            const.DATA_USER_CATEGORY_TOTAL_LESSONS: total_lessons,
            const.DATA_USER_CATEGORY_SORT_ORDER: len(self.coordinator.user_categories_data),
            const.DATA_USER_CATEGORY_IS_ACTIVE: True,
            const.DATA_CREATED_AT: now_iso,
            const.DATA_UPDATED_AT: now_iso,
        }  # type: ignore[assignment]
        self.coordinator.user_categories_data[category_id] = category
        self.coordinator._persist_and_update()
        const.LOGGER.info("INFO: Added category '%s' (ID: %s)", name, category_id)
        return category_id

    def remove_user_category(self, category_id: str) -> None:
        """Deactivate a user category. Logged entries keep their category id."""
        category = self.coordinator.user_categories_data.get(category_id)
        if category is None:
            raise LilLearnerError(
                const.ERROR_USER_CATEGORY_NOT_FOUND_FMT.format(category_id)
            )
        category[const.DATA_USER_CATEGORY_IS_ACTIVE] = False
        category[const.DATA_UPDATED_AT] = dt_utils.dt_now_iso()
        self.coordinator._persist_and_update()
        const.LOGGER.info("INFO: Deactivated category '%s'", category_id)

    def active_user_categories(self) -> list[UserCategoryData]:
        """Return active user categories in sort order."""
        return sorted(
            (
                category
                for category in self.coordinator.user_categories_data.values()
                if category.get(const.DATA_USER_CATEGORY_IS_ACTIVE, True)
            ),
            key=lambda category: category.get(const.DATA_USER_CATEGORY_SORT_ORDER, 0),
        )

    def lessons_completed(self, child_id: str, category_id: str) -> int:
        """Return the highest lesson number logged for a user category."""
        numbers = [
            entry.get(const.DATA_ENTRY_LESSON_NUMBER) or 0
            for entry in self.coordinator.entries_for_child(child_id)
            if entry.get(const.DATA_ENTRY_USER_CATEGORY_ID) == category_id
            or entry.get(const.DATA_ENTRY_CATEGORY_ID) == category_id
        ]
        return max(numbers, default=0)
