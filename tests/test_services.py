"""Tests for LilLearner services."""

import asyncio
from datetime import date
from typing import Any
from unittest.mock import PropertyMock, patch

import pytest
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from pytest_homeassistant_custom_component.common import (
    MockConfigEntry,
    async_capture_events,
)

from custom_components.lillearner.const import (
    DOMAIN,
    EVENT_ACHIEVEMENT_UNLOCKED,
    EVENT_LEVEL_UP,
    SERVICE_ADD_BOOK,
    SERVICE_ADD_CHILD,
    SERVICE_ADD_USER_CATEGORY,
    SERVICE_CHECK_ACHIEVEMENTS,
    SERVICE_DELETE_REPORT,
    SERVICE_FINISH_BOOK,
    SERVICE_GENERATE_REPORT,
    SERVICE_GET_PROGRESS,
    SERVICE_GET_REPORT,
    SERVICE_LOG_ENTRY,
    SERVICE_REMOVE_CHILD,
    SERVICE_REMOVE_USER_CATEGORY,
    SERVICE_TOGGLE_MILESTONE,
    XP_SOURCE_ENTRY,
)
from custom_components.lillearner.coordinator import LilLearnerDataCoordinator


async def _call(
    hass: HomeAssistant, service: str, data: dict[str, Any], response: bool = True
) -> Any:
    return await hass.services.async_call(
        DOMAIN, service, data, blocking=True, return_response=response
    )


async def _add_child(hass: HomeAssistant, name: str = "Emma") -> str:
    result = await _call(hass, SERVICE_ADD_CHILD, {"child_name": name})
    await hass.async_block_till_done()
    return result["child_id"]


# ------------------------------------------------------------------------------------------
# Children
# ------------------------------------------------------------------------------------------


async def test_add_child_creates_profile_and_sensors(
    hass: HomeAssistant, coordinator: LilLearnerDataCoordinator
) -> None:
    """Adding a child stores the profile and creates its sensors."""
    child_id = await _add_child(hass, "Emma")

    assert coordinator.children_data[child_id]["name"] == "Emma"
    level_state = hass.states.get("sensor.ll_emma_level")
    assert level_state is not None
    assert level_state.state == "1"
    assert level_state.attributes["level_title"] == "Little Sprout"
    assert hass.states.get("sensor.ll_emma_streak").state == "0"
    assert hass.states.get("sensor.ll_emma_achievements").state == "0"


async def test_add_duplicate_child_rejected(
    hass: HomeAssistant, coordinator: LilLearnerDataCoordinator
) -> None:
    """Child names are unique, ignoring case."""
    await _add_child(hass, "Emma")

    with pytest.raises(HomeAssistantError, match="already exists"):
        await _call(hass, SERVICE_ADD_CHILD, {"child_name": "emma"})


async def test_unknown_child_raises(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Services naming an unknown child fail with a clear error."""
    with pytest.raises(HomeAssistantError, match="not found"):
        await _call(
            hass,
            SERVICE_LOG_ENTRY,
            {"child_name": "Nobody", "category_id": "literacy"},
        )


async def test_remove_child_cascades(
    hass: HomeAssistant, coordinator: LilLearnerDataCoordinator
) -> None:
    """Removing a child deletes every row it owns and leaves others intact."""
    emma_id = await _add_child(hass, "Emma")
    noah_id = await _add_child(hass, "Noah")
    for name in ("Emma", "Noah"):
        await _call(
            hass,
            SERVICE_LOG_ENTRY,
            {"child_name": name, "category_id": "literacy", "skill_id": "letter_names"},
        )
    await _call(
        hass,
        SERVICE_TOGGLE_MILESTONE,
        {"child_name": "Emma", "skill_id": "letter_names", "milestone_key": "uppercase"},
    )
    await _call(
        hass, SERVICE_GENERATE_REPORT, {"child_name": "Emma", "report_type": "weekly"}
    )
    await _call(
        hass,
        SERVICE_ADD_BOOK,
        {"child_name": "Emma", "title": "Frog and Toad", "category_id": "literacy"},
    )

    await _call(hass, SERVICE_REMOVE_CHILD, {"child_name": "Emma"}, response=False)
    await hass.async_block_till_done()

    assert emma_id not in coordinator.children_data
    assert emma_id not in coordinator.child_levels_data
    assert emma_id not in coordinator.achievements_data
    assert coordinator.entries_for_child(emma_id) == []
    assert coordinator.milestones_for_child(emma_id) == []
    assert coordinator.xp_events_for_child(emma_id) == []
    assert not coordinator.reports_data
    assert not coordinator.active_books_data
    assert len(coordinator.entries_for_child(noah_id)) == 1
    assert coordinator.progress_manager.get_total_xp(noah_id) == 10


# ------------------------------------------------------------------------------------------
# Logging and XP
# ------------------------------------------------------------------------------------------


async def test_log_entry_awards_xp_and_first_achievement(
    hass: HomeAssistant, coordinator: LilLearnerDataCoordinator
) -> None:
    """A first activity grants its XP and unlocks First Steps."""
    child_id = await _add_child(hass)
    unlocked_events = async_capture_events(hass, EVENT_ACHIEVEMENT_UNLOCKED)

    result = await _call(
        hass,
        SERVICE_LOG_ENTRY,
        {"child_name": "Emma", "category_id": "literacy", "skill_id": "letter_names"},
    )
    await hass.async_block_till_done()

    assert result["xp_awarded"] == 10
    assert result["total_xp"] == 10
    assert result["level"] == 1
    assert result["leveled_up"] is False
    assert result["new_achievements"] == ["first_steps"]
    assert len(unlocked_events) == 1
    assert unlocked_events[0].data["achievement_key"] == "first_steps"
    assert unlocked_events[0].data["child_name"] == "Emma"

    entry = coordinator.entries_data[result["entry_id"]]
    assert entry["child_id"] == child_id
    assert entry["entry_type"] == "activity"
    assert coordinator.xp_events_for_child(child_id)[0]["source_type"] == XP_SOURCE_ENTRY
    assert hass.states.get("sensor.ll_emma_achievements").state == "1"
    assert hass.states.get("sensor.ll_emma_streak").state == "1"


async def test_log_photo_entry_xp(
    hass: HomeAssistant, coordinator: LilLearnerDataCoordinator
) -> None:
    """Photo entries are worth more and keep their media URLs."""
    await _add_child(hass)

    result = await _call(
        hass,
        SERVICE_LOG_ENTRY,
        {
            "child_name": "Emma",
            "category_id": "creative_expression",
            "entry_type": "photo",
            "media_urls": ["/local/painting.jpg"],
        },
    )

    assert result["xp_awarded"] == 15
    entry = coordinator.entries_data[result["entry_id"]]
    assert entry["media_urls"] == ["/local/painting.jpg"]
    assert entry["skill_id"] == "_none"


async def test_level_up_fires_event(
    hass: HomeAssistant, coordinator: LilLearnerDataCoordinator
) -> None:
    """Crossing 400 XP announces level 2 on the bus."""
    child_id = await _add_child(hass)
    await coordinator.progress_manager.async_award_xp(
        child_id, 395, source_type=XP_SOURCE_ENTRY
    )
    level_events = async_capture_events(hass, EVENT_LEVEL_UP)

    result = await _call(
        hass, SERVICE_LOG_ENTRY, {"child_name": "Emma", "category_id": "numeracy"}
    )
    await hass.async_block_till_done()

    assert result["leveled_up"] is True
    assert result["level"] == 2
    assert len(level_events) == 1
    assert level_events[0].data == {
        "child_id": child_id,
        "child_name": "Emma",
        "previous_level": 1,
        "new_level": 2,
        "title": "Little Sprout",
        "total_xp": 405,
    }
    assert hass.states.get("sensor.ll_emma_level").state == "2"


async def test_concurrent_awards_are_serialized(
    hass: HomeAssistant, coordinator: LilLearnerDataCoordinator
) -> None:
    """Concurrent grants for one child never lose an update."""
    child_id = await _add_child(hass)

    await asyncio.gather(
        *(
            coordinator.progress_manager.async_award_xp(
                child_id, 25, source_type=XP_SOURCE_ENTRY
            )
            for _ in range(40)
        )
    )

    assert coordinator.progress_manager.get_total_xp(child_id) == 1000
    assert len(coordinator.xp_events_for_child(child_id)) == 40
    level_row = coordinator.child_levels_data[child_id]
    assert level_row["current_level"] == 3


async def test_negative_award_rejected(
    hass: HomeAssistant, coordinator: LilLearnerDataCoordinator
) -> None:
    """XP grants cannot be negative."""
    child_id = await _add_child(hass)

    with pytest.raises(ValueError):
        await coordinator.progress_manager.async_award_xp(
            child_id, -5, source_type=XP_SOURCE_ENTRY
        )
    assert coordinator.xp_events_for_child(child_id) == []


async def test_gamification_disabled_logs_without_xp(
    hass: HomeAssistant, coordinator: LilLearnerDataCoordinator
) -> None:
    """With gamification off, entries are stored but earn nothing."""
    child_id = await _add_child(hass)

    with patch.object(
        LilLearnerDataCoordinator,
        "gamification_enabled",
        new_callable=PropertyMock,
        return_value=False,
    ):
        result = await _call(
            hass, SERVICE_LOG_ENTRY, {"child_name": "Emma", "category_id": "literacy"}
        )

    assert result["xp_awarded"] == 0
    assert result["new_achievements"] == []
    assert result["entry_id"] in coordinator.entries_data
    assert coordinator.xp_events_for_child(child_id) == []
    assert coordinator.achievement_manager.unlocked(child_id) == {}


# ------------------------------------------------------------------------------------------
# Milestones
# ------------------------------------------------------------------------------------------


async def test_toggle_milestone_awards_once(
    hass: HomeAssistant, coordinator: LilLearnerDataCoordinator
) -> None:
    """Milestone XP is granted on first completion only."""
    child_id = await _add_child(hass)
    data = {"child_name": "Emma", "skill_id": "letter_names", "milestone_key": "uppercase"}

    first = await _call(hass, SERVICE_TOGGLE_MILESTONE, data)
    record = next(iter(coordinator.milestones_for_child(child_id)))
    first_completed_at = record["completed_at"]
    second = await _call(hass, SERVICE_TOGGLE_MILESTONE, data)

    assert first["xp_awarded"] == 50
    assert first["skill_complete"] is False
    assert second["xp_awarded"] == 0
    assert len(coordinator.milestones_for_child(child_id)) == 1
    assert coordinator.milestones_for_child(child_id)[0]["completed_at"] == (
        first_completed_at
    )
    assert coordinator.progress_manager.get_total_xp(child_id) == 50


async def test_completing_skill_grants_bonus_once(
    hass: HomeAssistant, coordinator: LilLearnerDataCoordinator
) -> None:
    """Completing every milestone of a skill adds the one-time bonus."""
    child_id = await _add_child(hass)
    base = {"child_name": "Emma", "skill_id": "letter_names"}

    await _call(hass, SERVICE_TOGGLE_MILESTONE, {**base, "milestone_key": "uppercase"})
    completed = await _call(
        hass, SERVICE_TOGGLE_MILESTONE, {**base, "milestone_key": "lowercase"}
    )

    assert completed["skill_complete"] is True
    assert completed["xp_awarded"] == 150

    undone = await _call(
        hass,
        SERVICE_TOGGLE_MILESTONE,
        {**base, "milestone_key": "lowercase", "completed": False},
    )
    redone = await _call(
        hass, SERVICE_TOGGLE_MILESTONE, {**base, "milestone_key": "lowercase"}
    )

    assert undone["completed"] is False
    assert undone["xp_awarded"] == 0
    assert redone["skill_complete"] is True
    assert redone["xp_awarded"] == 0
    assert coordinator.progress_manager.get_total_xp(child_id) == 200
    assert coordinator.achievement_manager.completed_milestone_count(child_id) == 2


# ------------------------------------------------------------------------------------------
# Progress and achievements
# ------------------------------------------------------------------------------------------


async def test_get_progress(
    hass: HomeAssistant, coordinator: LilLearnerDataCoordinator
) -> None:
    """The progress summary combines level, streak, milestones and achievements."""
    child_id = await _add_child(hass)
    await _call(
        hass,
        SERVICE_LOG_ENTRY,
        {"child_name": "Emma", "category_id": "literacy", "skill_id": "letter_names"},
    )
    await _call(
        hass,
        SERVICE_TOGGLE_MILESTONE,
        {"child_name": "Emma", "skill_id": "letter_names", "milestone_key": "uppercase"},
    )

    progress = await _call(hass, SERVICE_GET_PROGRESS, {"child_name": "Emma"})

    assert progress["child_id"] == child_id
    assert progress["level"]["total_xp"] == 60
    assert progress["level"]["level"] == 1
    assert progress["streak_days"] == 1
    assert progress["today_entries"] == 1
    assert progress["total_entries"] == 1
    assert progress["completed_milestones"] == 1
    assert list(progress["achievements"]) == ["first_steps"]
    letter_names = next(
        skill for skill in progress["skills"] if skill["skill_id"] == "letter_names"
    )
    assert letter_names["completed"] == 1
    assert letter_names["total"] == 2


async def test_check_achievements_is_idempotent(
    hass: HomeAssistant, coordinator: LilLearnerDataCoordinator
) -> None:
    """An explicit check after logging finds nothing new."""
    await _add_child(hass)
    await _call(hass, SERVICE_LOG_ENTRY, {"child_name": "Emma", "category_id": "literacy"})
    unlocked_events = async_capture_events(hass, EVENT_ACHIEVEMENT_UNLOCKED)

    result = await _call(hass, SERVICE_CHECK_ACHIEVEMENTS, {"child_name": "Emma"})
    await hass.async_block_till_done()

    assert result["new_achievements"] == []
    assert unlocked_events == []
    first_steps = next(
        item for item in result["achievements"] if item["key"] == "first_steps"
    )
    assert first_steps["unlocked"] is True


async def test_concurrent_checks_unlock_once(
    hass: HomeAssistant, coordinator: LilLearnerDataCoordinator
) -> None:
    """Two simultaneous checks cannot both unlock the same achievement."""
    child_id = await _add_child(hass)
    with patch.object(
        LilLearnerDataCoordinator,
        "gamification_enabled",
        new_callable=PropertyMock,
        return_value=False,
    ):
        await _call(
            hass, SERVICE_LOG_ENTRY, {"child_name": "Emma", "category_id": "literacy"}
        )

    results = await asyncio.gather(
        coordinator.achievement_manager.async_check_achievements(child_id),
        coordinator.achievement_manager.async_check_achievements(child_id),
    )

    assert sorted(results, key=len) == [[], ["first_steps"]]
    assert list(coordinator.achievement_manager.unlocked(child_id)) == ["first_steps"]


# ------------------------------------------------------------------------------------------
# Reports
# ------------------------------------------------------------------------------------------


async def test_report_lifecycle(
    hass: HomeAssistant, coordinator: LilLearnerDataCoordinator
) -> None:
    """Reports can be generated, fetched and deleted."""
    child_id = await _add_child(hass)
    await _call(
        hass,
        SERVICE_LOG_ENTRY,
        {"child_name": "Emma", "category_id": "literacy", "skill_id": "letter_names"},
    )

    report = await _call(
        hass, SERVICE_GENERATE_REPORT, {"child_name": "Emma", "report_type": "weekly"}
    )
    report_id = report["internal_id"]

    assert report["child_id"] == child_id
    assert report["data"]["total_entries"] == 1
    assert report["data"]["xp_earned"] == 10
    assert report["data"]["top_skills"] == ["letter_names"]
    assert report["narrative"].startswith("Emma was most active in Literacy")

    fetched = await _call(hass, SERVICE_GET_REPORT, {"report_id": report_id})
    assert fetched == report

    await _call(hass, SERVICE_DELETE_REPORT, {"report_id": report_id}, response=False)
    with pytest.raises(HomeAssistantError):
        await _call(hass, SERVICE_GET_REPORT, {"report_id": report_id})


async def test_report_with_explicit_period(
    hass: HomeAssistant, coordinator: LilLearnerDataCoordinator
) -> None:
    """Explicit periods are stored as ISO dates and old entries are excluded."""
    await _add_child(hass)
    await _call(hass, SERVICE_LOG_ENTRY, {"child_name": "Emma", "category_id": "literacy"})

    report = await _call(
        hass,
        SERVICE_GENERATE_REPORT,
        {
            "child_name": "Emma",
            "report_type": "monthly",
            "period_start": "2020-01-01",
            "period_end": "2020-01-31",
        },
    )

    assert report["period_start"] == "2020-01-01"
    assert report["period_end"] == "2020-01-31"
    assert report["data"]["total_entries"] == 0
    assert report["narrative"] == "Let's start logging some activities!"


async def test_seasonal_report_requires_season(
    hass: HomeAssistant, coordinator: LilLearnerDataCoordinator
) -> None:
    """A seasonal report without a season fails."""
    await _add_child(hass)

    with pytest.raises(HomeAssistantError, match="season"):
        await _call(
            hass,
            SERVICE_GENERATE_REPORT,
            {"child_name": "Emma", "report_type": "seasonal"},
        )


async def test_seasonal_report_window(
    hass: HomeAssistant, coordinator: LilLearnerDataCoordinator
) -> None:
    """Seasonal reports cover the named season of the reference year."""
    child_id = await _add_child(hass)

    report = await coordinator.report_manager.async_generate_report(
        child_id, "seasonal", season="summer", reference=date(2024, 10, 1)
    )

    assert report["period_start"] == "2024-06-01"
    assert report["period_end"] == "2024-08-31"
    assert report["season"] == "summer"


# ------------------------------------------------------------------------------------------
# User categories and books
# ------------------------------------------------------------------------------------------


async def test_user_category_lifecycle(
    hass: HomeAssistant, coordinator: LilLearnerDataCoordinator
) -> None:
    """User categories can be created and deactivated."""
    result = await _call(
        hass,
        SERVICE_ADD_USER_CATEGORY,
        {"name": "Reading Lessons", "category_type": "lesson", "total_lessons": 100},
    )
    category_id = result["category_id"]

    assert [
        category["name"] for category in coordinator.entry_manager.active_user_categories()
    ] == ["Reading Lessons"]

    await _call(
        hass,
        SERVICE_REMOVE_USER_CATEGORY,
        {"category_id": category_id},
        response=False,
    )

    assert coordinator.entry_manager.active_user_categories() == []
    assert coordinator.user_categories_data[category_id]["is_active"] is False


async def test_lessons_completed_tracks_highest_lesson(
    hass: HomeAssistant, coordinator: LilLearnerDataCoordinator
) -> None:
    """The highest logged lesson number is the lesson reached."""
    child_id = await _add_child(hass)
    result = await _call(hass, SERVICE_ADD_USER_CATEGORY, {"name": "Piano"})
    category_id = result["category_id"]

    for lesson in (58, 57):
        await _call(
            hass,
            SERVICE_LOG_ENTRY,
            {
                "child_name": "Emma",
                "category_id": category_id,
                "user_category_id": category_id,
                "lesson_number": lesson,
            },
        )

    assert coordinator.entry_manager.lessons_completed(child_id, category_id) == 58


async def test_book_lifecycle(
    hass: HomeAssistant, coordinator: LilLearnerDataCoordinator
) -> None:
    """Books start as reading and can be finished."""
    child_id = await _add_child(hass)

    result = await _call(
        hass,
        SERVICE_ADD_BOOK,
        {"child_name": "Emma", "title": "Frog and Toad", "category_id": "literacy"},
    )
    book_id = result["book_id"]
    assert coordinator.child_manager.books_for_child(child_id, status="reading")

    await _call(hass, SERVICE_FINISH_BOOK, {"book_id": book_id}, response=False)

    book = coordinator.active_books_data[book_id]
    assert book["status"] == "finished"
    assert book["finished_at"] is not None
    assert coordinator.child_manager.books_for_child(child_id, status="reading") == []
