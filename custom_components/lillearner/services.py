# File: services.py
"""Defines custom services for the LilLearner integration.

These services allow logging and querying learning progress from scripts,
automations and dashboards. Query services return their results as
service response data.
"""

from __future__ import annotations

import voluptuous as vol
from homeassistant.core import (
    HomeAssistant,
    ServiceCall,
    ServiceResponse,
    SupportsResponse,
)
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers import config_validation as cv

from . import const
from .coordinator import LilLearnerDataCoordinator
from .engines.statistics_engine import StatisticsEngine
from .helpers.entity_helpers import get_first_lillearner_entry

# --- Service Schemas ---
ADD_CHILD_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_CHILD_NAME): cv.string,
        vol.Optional(const.FIELD_BIRTHDATE): vol.Any(cv.date, None),
        vol.Optional(const.FIELD_AVATAR_URL): vol.Any(cv.string, None),
    }
)

CHILD_ONLY_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_CHILD_NAME): cv.string,
    }
)

LOG_ENTRY_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_CHILD_NAME): cv.string,
        vol.Required(const.FIELD_CATEGORY_ID): cv.string,
        vol.Optional(const.FIELD_SKILL_ID): cv.string,
        vol.Optional(
            const.FIELD_ENTRY_TYPE, default=const.ENTRY_TYPE_ACTIVITY
        ): vol.In(const.ENTRY_TYPES),
        vol.Optional(const.FIELD_VALUE): vol.Any(vol.Coerce(float), cv.string),
        vol.Optional(const.FIELD_NOTES): cv.string,
        vol.Optional(const.FIELD_MEDIA_URLS, default=[]): vol.All(
            cv.ensure_list, [cv.string]
        ),
        vol.Optional(const.FIELD_LESSON_NUMBER): vol.Coerce(int),
        vol.Optional(const.FIELD_USER_CATEGORY_ID): cv.string,
    }
)

TOGGLE_MILESTONE_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_CHILD_NAME): cv.string,
        vol.Required(const.FIELD_SKILL_ID): cv.string,
        vol.Required(const.FIELD_MILESTONE_KEY): cv.string,
        vol.Optional(const.FIELD_COMPLETED, default=True): cv.boolean,
    }
)

GENERATE_REPORT_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_CHILD_NAME): cv.string,
        vol.Required(const.FIELD_REPORT_TYPE): vol.In(const.REPORT_TYPES),
        vol.Optional(const.FIELD_SEASON): vol.In(const.SEASONS),
        vol.Inclusive(const.FIELD_PERIOD_START, "period"): cv.date,
        vol.Inclusive(const.FIELD_PERIOD_END, "period"): cv.date,
    }
)

REPORT_ID_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_REPORT_ID): cv.string,
    }
)

VOICE_NOTE_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_TEXT): cv.string,
    }
)

ADD_USER_CATEGORY_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_NAME): cv.string,
        vol.Optional(
            const.FIELD_CATEGORY_TYPE, default=const.USER_CATEGORY_TYPE_LESSON
        ): vol.In(const.USER_CATEGORY_TYPES),
        vol.Optional(const.FIELD_ICON): cv.icon,
        vol.Optional(const.FIELD_COLOR): cv.string,
        vol.Optional(const.FIELD_TOTAL_LESSONS): vol.All(
            vol.Coerce(int), vol.Range(min=1)
        ),
    }
)

REMOVE_USER_CATEGORY_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_CATEGORY_ID): cv.string,
    }
)

ADD_BOOK_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_CHILD_NAME): cv.string,
        vol.Required(const.FIELD_TITLE): cv.string,
        vol.Required(const.FIELD_CATEGORY_ID): cv.string,
    }
)

FINISH_BOOK_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_BOOK_ID): cv.string,
    }
)


def _get_coordinator(hass: HomeAssistant, action: str) -> LilLearnerDataCoordinator:
    """Return the coordinator of the first loaded entry."""
    entry_id = get_first_lillearner_entry(hass)
    if not entry_id:
        const.LOGGER.warning("WARNING: %s: %s", action, const.MSG_NO_ENTRY_FOUND)
        raise HomeAssistantError(const.MSG_NO_ENTRY_FOUND)
    return hass.data[const.DOMAIN][entry_id][const.COORDINATOR]


def async_setup_services(hass: HomeAssistant) -> None:
    """Register LilLearner services."""

    # --- Children ---

    async def handle_add_child(call: ServiceCall) -> ServiceResponse:
        """Handle adding a child profile."""
        coordinator = _get_coordinator(hass, "Add Child")
        birthdate = call.data.get(const.FIELD_BIRTHDATE)
        child_id = coordinator.child_manager.add_child(
            call.data[const.FIELD_CHILD_NAME],
            birthdate=birthdate.isoformat() if birthdate else None,
            avatar_url=call.data.get(const.FIELD_AVATAR_URL),
        )
        return {"child_id": child_id}

    async def handle_remove_child(call: ServiceCall) -> None:
        """Handle deleting a child and all of its data."""
        coordinator = _get_coordinator(hass, "Remove Child")
        child_id = coordinator.child_manager.resolve_child_id(
            call.data[const.FIELD_CHILD_NAME]
        )
        coordinator.child_manager.remove_child(child_id)

    # --- Logging ---

    async def handle_log_entry(call: ServiceCall) -> ServiceResponse:
        """Handle logging a learning entry."""
        coordinator = _get_coordinator(hass, "Log Entry")
        child_id = coordinator.child_manager.resolve_child_id(
            call.data[const.FIELD_CHILD_NAME]
        )
        return await coordinator.entry_manager.async_log_entry(
            child_id,
            call.data[const.FIELD_CATEGORY_ID],
            skill_id=call.data.get(const.FIELD_SKILL_ID),
            entry_type=call.data[const.FIELD_ENTRY_TYPE],
            value=call.data.get(const.FIELD_VALUE),
            notes=call.data.get(const.FIELD_NOTES),
            media_urls=call.data[const.FIELD_MEDIA_URLS],
            lesson_number=call.data.get(const.FIELD_LESSON_NUMBER),
            user_category_id=call.data.get(const.FIELD_USER_CATEGORY_ID),
        )

    async def handle_toggle_milestone(call: ServiceCall) -> ServiceResponse:
        """Handle completing or un-completing a milestone."""
        coordinator = _get_coordinator(hass, "Toggle Milestone")
        child_id = coordinator.child_manager.resolve_child_id(
            call.data[const.FIELD_CHILD_NAME]
        )
        return await coordinator.entry_manager.async_toggle_milestone(
            child_id,
            call.data[const.FIELD_SKILL_ID],
            call.data[const.FIELD_MILESTONE_KEY],
            completed=call.data[const.FIELD_COMPLETED],
        )

    # --- Progress ---

    async def handle_check_achievements(call: ServiceCall) -> ServiceResponse:
        """Handle an explicit achievement check."""
        coordinator = _get_coordinator(hass, "Check Achievements")
        child_id = coordinator.child_manager.resolve_child_id(
            call.data[const.FIELD_CHILD_NAME]
        )
        newly_unlocked = (
            await coordinator.achievement_manager.async_check_achievements(child_id)
        )
        return {
            "new_achievements": newly_unlocked,
            "achievements": coordinator.achievement_manager.get_achievement_progress(
                child_id
            ),
        }

    async def handle_get_progress(call: ServiceCall) -> ServiceResponse:
        """Handle a progress summary request."""
        coordinator = _get_coordinator(hass, "Get Progress")
        child_id = coordinator.child_manager.resolve_child_id(
            call.data[const.FIELD_CHILD_NAME]
        )
        entries = coordinator.entries_for_child(child_id)
        return {
            "child_id": child_id,
            "level": coordinator.progress_manager.get_progress(child_id),
            "streak_days": coordinator.achievement_manager.streak_days(child_id),
            "today_entries": StatisticsEngine.today_count(entries),
            "total_entries": len(entries),
            "completed_milestones": (
                coordinator.achievement_manager.completed_milestone_count(child_id)
            ),
            "achievements": coordinator.achievement_manager.unlocked(child_id),
            "skills": coordinator.entry_manager.skill_progress(child_id),
            "books": coordinator.child_manager.books_for_child(child_id),
        }

    # --- Reports ---

    async def handle_generate_report(call: ServiceCall) -> ServiceResponse:
        """Handle generating a report."""
        coordinator = _get_coordinator(hass, "Generate Report")
        child_id = coordinator.child_manager.resolve_child_id(
            call.data[const.FIELD_CHILD_NAME]
        )
        report = await coordinator.report_manager.async_generate_report(
            child_id,
            call.data[const.FIELD_REPORT_TYPE],
            season=call.data.get(const.FIELD_SEASON),
            period_start=call.data.get(const.FIELD_PERIOD_START),
            period_end=call.data.get(const.FIELD_PERIOD_END),
        )
        return dict(report)

    async def handle_get_report(call: ServiceCall) -> ServiceResponse:
        """Handle fetching a stored report."""
        coordinator = _get_coordinator(hass, "Get Report")
        report = coordinator.report_manager.get_report(call.data[const.FIELD_REPORT_ID])
        return dict(report)

    async def handle_delete_report(call: ServiceCall) -> None:
        """Handle deleting a stored report."""
        coordinator = _get_coordinator(hass, "Delete Report")
        coordinator.report_manager.delete_report(call.data[const.FIELD_REPORT_ID])

    # --- Voice notes ---

    async def handle_parse_voice_note(call: ServiceCall) -> ServiceResponse:
        """Handle parsing a voice note without logging it."""
        coordinator = _get_coordinator(hass, "Parse Voice Note")
        return dict(
            await coordinator.voice_manager.async_parse_voice_note(
                call.data[const.FIELD_TEXT]
            )
        )

    async def handle_log_voice_note(call: ServiceCall) -> ServiceResponse:
        """Handle parsing a voice note and logging its entries."""
        coordinator = _get_coordinator(hass, "Log Voice Note")
        return await coordinator.voice_manager.async_log_voice_note(
            call.data[const.FIELD_TEXT]
        )

    # --- Categories and books ---

    async def handle_add_user_category(call: ServiceCall) -> ServiceResponse:
        """Handle creating a user category."""
        coordinator = _get_coordinator(hass, "Add User Category")
        category_id = coordinator.entry_manager.add_user_category(
            call.data[const.FIELD_NAME],
            category_type=call.data[const.FIELD_CATEGORY_TYPE],
            icon=call.data.get(const.FIELD_ICON),
            color=call.data.get(const.FIELD_COLOR),
            total_lessons=call.data.get(const.FIELD_TOTAL_LESSONS),
        )
        return {"category_id": category_id}

    async def handle_remove_user_category(call: ServiceCall) -> None:
        """Handle deactivating a user category."""
        coordinator = _get_coordinator(hass, "Remove User Category")
        coordinator.entry_manager.remove_user_category(
            call.data[const.FIELD_CATEGORY_ID]
        )

    async def handle_add_book(call: ServiceCall) -> ServiceResponse:
        """Handle starting a book."""
        coordinator = _get_coordinator(hass, "Add Book")
        child_id = coordinator.child_manager.resolve_child_id(
            call.data[const.FIELD_CHILD_NAME]
        )
        book_id = coordinator.child_manager.add_book(
            child_id, call.data[const.FIELD_TITLE], call.data[const.FIELD_CATEGORY_ID]
        )
        return {"book_id": book_id}

    async def handle_finish_book(call: ServiceCall) -> None:
        """Handle finishing a book."""
        coordinator = _get_coordinator(hass, "Finish Book")
        coordinator.child_manager.finish_book(call.data[const.FIELD_BOOK_ID])

    # Query services only return data; mutating services may return ids
    registrations = (
        (
            const.SERVICE_ADD_CHILD,
            handle_add_child,
            ADD_CHILD_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            const.SERVICE_REMOVE_CHILD,
            handle_remove_child,
            CHILD_ONLY_SCHEMA,
            SupportsResponse.NONE,
        ),
        (
            const.SERVICE_LOG_ENTRY,
            handle_log_entry,
            LOG_ENTRY_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            const.SERVICE_TOGGLE_MILESTONE,
            handle_toggle_milestone,
            TOGGLE_MILESTONE_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            const.SERVICE_CHECK_ACHIEVEMENTS,
            handle_check_achievements,
            CHILD_ONLY_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            const.SERVICE_GET_PROGRESS,
            handle_get_progress,
            CHILD_ONLY_SCHEMA,
            SupportsResponse.ONLY,
        ),
        (
            const.SERVICE_GENERATE_REPORT,
            handle_generate_report,
            GENERATE_REPORT_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            const.SERVICE_GET_REPORT,
            handle_get_report,
            REPORT_ID_SCHEMA,
            SupportsResponse.ONLY,
        ),
        (
            const.SERVICE_DELETE_REPORT,
            handle_delete_report,
            REPORT_ID_SCHEMA,
            SupportsResponse.NONE,
        ),
        (
            const.SERVICE_PARSE_VOICE_NOTE,
            handle_parse_voice_note,
            VOICE_NOTE_SCHEMA,
            SupportsResponse.ONLY,
        ),
        (
            const.SERVICE_LOG_VOICE_NOTE,
            handle_log_voice_note,
            VOICE_NOTE_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            const.SERVICE_ADD_USER_CATEGORY,
            handle_add_user_category,
            ADD_USER_CATEGORY_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            const.SERVICE_REMOVE_USER_CATEGORY,
            handle_remove_user_category,
            REMOVE_USER_CATEGORY_SCHEMA,
            SupportsResponse.NONE,
        ),
        (
            const.SERVICE_ADD_BOOK,
            handle_add_book,
            ADD_BOOK_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            const.SERVICE_FINISH_BOOK,
            handle_finish_book,
            FINISH_BOOK_SCHEMA,
            SupportsResponse.NONE,
        ),
    )

    for service, handler, schema, supports_response in registrations:
        hass.services.async_register(
            const.DOMAIN,
            service,
            handler,
            schema=schema,
            supports_response=supports_response,
        )

    const.LOGGER.info("INFO: LilLearner services have been registered successfully")


async def async_unload_services(hass: HomeAssistant) -> None:
    """Unregister LilLearner services when unloading the integration."""
    services = [
        const.SERVICE_ADD_CHILD,
        const.SERVICE_REMOVE_CHILD,
        const.SERVICE_LOG_ENTRY,
        const.SERVICE_TOGGLE_MILESTONE,
        const.SERVICE_CHECK_ACHIEVEMENTS,
        const.SERVICE_GET_PROGRESS,
        const.SERVICE_GENERATE_REPORT,
        const.SERVICE_GET_REPORT,
        const.SERVICE_DELETE_REPORT,
        const.SERVICE_PARSE_VOICE_NOTE,
        const.SERVICE_LOG_VOICE_NOTE,
        const.SERVICE_ADD_USER_CATEGORY,
        const.SERVICE_REMOVE_USER_CATEGORY,
        const.SERVICE_ADD_BOOK,
        const.SERVICE_FINISH_BOOK,
    ]

    for service in services:
        if hass.services.has_service(const.DOMAIN, service):
            hass.services.async_remove(const.DOMAIN, service)

    const.LOGGER.info("INFO: LilLearner services have been unregistered")
