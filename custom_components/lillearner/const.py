# File: const.py
"""Constants for the LilLearner integration.

This file centralizes configuration keys, defaults, storage keys, service
names, event names, and platform identifiers for consistency across the
integration.
"""

import logging

import homeassistant.util.dt as dt_util
from homeassistant.const import Platform

from .utils import dt_utils


def set_default_timezone(hass):
    """Set the default timezone based on the Home Assistant configuration."""
    global DEFAULT_TIME_ZONE
    DEFAULT_TIME_ZONE = dt_util.get_time_zone(hass.config.time_zone)
    if DEFAULT_TIME_ZONE is not None:
        dt_utils.set_default_timezone(DEFAULT_TIME_ZONE)


# ------------------------------------------------------------------------------------------------
# General / Integration Information
# ------------------------------------------------------------------------------------------------
LILLEARNER_TITLE = "LilLearner"

DOMAIN = "lillearner"

LOGGER = logging.getLogger(__package__)

PLATFORMS = [
    Platform.SENSOR,
]

# Coordinator
COORDINATOR = "coordinator"
COORDINATOR_SUFFIX = "_coordinator"

# Storage and Versioning
STORE = "store"
STORAGE_KEY = "lillearner_data"
STORAGE_VERSION = 1
SCHEMA_VERSION = 1

# Default timezone: initially None, to be set once hass is available.
DEFAULT_TIME_ZONE = None

# Update Interval (minutes) - streaks roll over at midnight
DEFAULT_UPDATE_INTERVAL = 15

DEFAULT_ZERO = 0

# ------------------------------------------------------------------------------------------------
# Configuration Keys (config entry options)
# ------------------------------------------------------------------------------------------------
CONF_GAMIFICATION_ENABLED = "gamification_enabled"
CONF_VOICE_INPUT_ENABLED = "voice_input_enabled"
CONF_LLM_API_KEY = "llm_api_key"
CONF_LLM_BASE_URL = "llm_base_url"
CONF_LLM_MODEL = "llm_model"
CONF_UPDATE_INTERVAL = "update_interval"

DEFAULT_GAMIFICATION_ENABLED = True
DEFAULT_VOICE_INPUT_ENABLED = False
DEFAULT_LLM_BASE_URL = "https://api.deepseek.com"
DEFAULT_LLM_MODEL = "deepseek-chat"
DEFAULT_LLM_TEMPERATURE = 0.1
LLM_CHAT_COMPLETIONS_PATH = "/chat/completions"
LLM_REQUEST_TIMEOUT = 30

CONFIG_FLOW_STEP_USER = "user"
OPTIONS_FLOW_STEP_INIT = "init"

# ------------------------------------------------------------------------------------------------
# Storage Buckets
# ------------------------------------------------------------------------------------------------
DATA_META = "meta"
DATA_META_SCHEMA_VERSION = "schema_version"

DATA_CHILDREN = "children"
DATA_ENTRIES = "entries"
DATA_MILESTONES = "milestones"
DATA_XP_EVENTS = "xp_events"
DATA_CHILD_LEVELS = "child_levels"
DATA_ACHIEVEMENTS = "achievements"
DATA_REPORTS = "reports"
DATA_USER_CATEGORIES = "user_categories"
DATA_ACTIVE_BOOKS = "active_books"

# Shared row fields
DATA_INTERNAL_ID = "internal_id"
DATA_CHILD_ID = "child_id"
DATA_CREATED_AT = "created_at"
DATA_UPDATED_AT = "updated_at"

# Child
DATA_CHILD_NAME = "name"
DATA_CHILD_BIRTHDATE = "birthdate"
DATA_CHILD_AVATAR_URL = "avatar_url"

# Entry
DATA_ENTRY_CATEGORY_ID = "category_id"
DATA_ENTRY_SKILL_ID = "skill_id"
DATA_ENTRY_TYPE = "entry_type"
DATA_ENTRY_VALUE = "value"
DATA_ENTRY_NOTES = "notes"
DATA_ENTRY_MEDIA_URLS = "media_urls"
DATA_ENTRY_LESSON_NUMBER = "lesson_number"
DATA_ENTRY_USER_CATEGORY_ID = "user_category_id"
DATA_ENTRY_LOGGED_AT = "logged_at"

ENTRY_TYPE_ACTIVITY = "activity"
ENTRY_TYPE_PHOTO = "photo"
ENTRY_TYPE_NOTE = "note"
ENTRY_TYPE_MILESTONE = "milestone"
ENTRY_TYPE_COUNTER = "counter"
ENTRY_TYPES = [
    ENTRY_TYPE_ACTIVITY,
    ENTRY_TYPE_PHOTO,
    ENTRY_TYPE_NOTE,
    ENTRY_TYPE_MILESTONE,
    ENTRY_TYPE_COUNTER,
]

# Sentinels used when a parsed voice entry cannot be matched
CATEGORY_ID_UNKNOWN = "_unknown"
SKILL_ID_NONE = "_none"

# Milestone completion record
DATA_MILESTONE_SKILL_ID = "skill_id"
DATA_MILESTONE_KEY = "milestone_key"
DATA_MILESTONE_COMPLETED = "completed"
DATA_MILESTONE_COMPLETED_AT = "completed_at"

# XP ledger
DATA_XP_EVENT_AMOUNT = "xp_amount"
DATA_XP_EVENT_SOURCE_TYPE = "source_type"
DATA_XP_EVENT_SOURCE_ID = "source_id"

XP_SOURCE_ENTRY = "entry"
XP_SOURCE_MILESTONE = "milestone"
XP_SOURCE_STREAK = "streak"
XP_SOURCE_ACHIEVEMENT = "achievement"

# Child level aggregate
DATA_LEVEL_TOTAL_XP = "total_xp"
DATA_LEVEL_CURRENT_LEVEL = "current_level"

# Report
DATA_REPORT_TYPE = "report_type"
DATA_REPORT_PERIOD_START = "period_start"
DATA_REPORT_PERIOD_END = "period_end"
DATA_REPORT_SEASON = "season"
DATA_REPORT_DATA = "data"
DATA_REPORT_NARRATIVE = "narrative"
DATA_REPORT_GENERATED_AT = "generated_at"

REPORT_TYPE_WEEKLY = "weekly"
REPORT_TYPE_MONTHLY = "monthly"
REPORT_TYPE_SEASONAL = "seasonal"
REPORT_TYPES = [REPORT_TYPE_WEEKLY, REPORT_TYPE_MONTHLY, REPORT_TYPE_SEASONAL]

REPORT_TOP_SKILLS_LIMIT = 5
REPORT_PHOTO_URLS_LIMIT = 6

# User category
DATA_USER_CATEGORY_NAME = "name"
DATA_USER_CATEGORY_ICON = "icon"
DATA_USER_CATEGORY_COLOR = "color"
DATA_USER_CATEGORY_TYPE = "category_type"
DATA_USER_CATEGORY_TOTAL_LESSONS = "total_lessons"
DATA_USER_CATEGORY_SORT_ORDER = "sort_order"
DATA_USER_CATEGORY_IS_ACTIVE = "is_active"

USER_CATEGORY_TYPE_LESSON = "lesson"
USER_CATEGORY_TYPE_JOURNAL = "journal"
USER_CATEGORY_TYPE_BOOK = "book"
USER_CATEGORY_TYPES = [
    USER_CATEGORY_TYPE_LESSON,
    USER_CATEGORY_TYPE_JOURNAL,
    USER_CATEGORY_TYPE_BOOK,
]
DEFAULT_USER_CATEGORY_ICON = "mdi:book-open-variant"
DEFAULT_USER_CATEGORY_COLOR = "#fcefc2"

# Active book
DATA_BOOK_CATEGORY_ID = "category_id"
DATA_BOOK_TITLE = "title"
DATA_BOOK_STATUS = "status"
DATA_BOOK_STARTED_AT = "started_at"
DATA_BOOK_FINISHED_AT = "finished_at"

BOOK_STATUS_READING = "reading"
BOOK_STATUS_FINISHED = "finished"

# ------------------------------------------------------------------------------------------------
# XP / Levels
# ------------------------------------------------------------------------------------------------
XP_LOG_ACTIVITY = 10
XP_ADD_PHOTO = 15
XP_WRITE_NOTE = 10
XP_COMPLETE_MILESTONE = 50
XP_COMPLETE_ALL_SKILL_MILESTONES = 100

XP_PER_LEVEL_UNIT = 100
MIN_LEVEL = 1

# (upper bound inclusive, title); None marks the open-ended final bucket
LEVEL_TITLES: list[tuple[int | None, str]] = [
    (3, "Little Sprout"),
    (6, "Curious Explorer"),
    (9, "Star Learner"),
    (12, "Knowledge Knight"),
    (None, "Master Adventurer"),
]

# ------------------------------------------------------------------------------------------------
# Streaks / Seasons
# ------------------------------------------------------------------------------------------------
STREAK_MAX_DAYS = 365

SEASON_SPRING = "spring"
SEASON_SUMMER = "summer"
SEASON_FALL = "fall"
SEASON_WINTER = "winter"
SEASONS = [SEASON_SPRING, SEASON_SUMMER, SEASON_FALL, SEASON_WINTER]

# (start month, start day, end month, end day); winter wraps into next year
SEASON_WINDOWS: dict[str, tuple[int, int, int, int]] = {
    SEASON_SPRING: (3, 1, 5, 31),
    SEASON_SUMMER: (6, 1, 8, 31),
    SEASON_FALL: (9, 1, 11, 30),
    SEASON_WINTER: (12, 1, 2, 28),
}

SEASON_NAMES: dict[str, str] = {
    SEASON_SPRING: "Spring",
    SEASON_SUMMER: "Summer",
    SEASON_FALL: "Fall",
    SEASON_WINTER: "Winter",
}

# ------------------------------------------------------------------------------------------------
# Achievements
# ------------------------------------------------------------------------------------------------
CRITERIA_ENTRY_COUNT = "entry_count"
CRITERIA_MILESTONE_COUNT = "milestone_count"
CRITERIA_STREAK_DAYS = "streak_days"
CRITERIA_CUMULATIVE_VALUE = "cumulative_value"
CRITERIA_CHECKLIST_COMPLETE = "checklist_complete"
CRITERIA_SEASONAL_ENTRIES = "seasonal_entries"

# checklist_complete compares against a global completed-milestone count
CHECKLIST_COMPLETE_MILESTONE_THRESHOLD = 10

ACHIEVEMENT_GROUP_CATEGORY = "category"
ACHIEVEMENT_GROUP_STREAK = "streak"
ACHIEVEMENT_GROUP_MILESTONE = "milestone"
ACHIEVEMENT_GROUP_SEASONAL = "seasonal"

# ------------------------------------------------------------------------------------------------
# Narrative
# ------------------------------------------------------------------------------------------------
NARRATIVE_TOP_CATEGORY_FMT = "{child} was most active in {category} with {count} entries."
NARRATIVE_MILESTONES_FMT = "{child} reached {count} new milestone{plural}!"
NARRATIVE_XP_FMT = "Earned {xp} XP this period."
NARRATIVE_KEEP_GOING = "Keep up the great work!"
NARRATIVE_START_LOGGING = "Let's start logging some activities!"

# ------------------------------------------------------------------------------------------------
# Signals (dispatcher) and Bus Events
# ------------------------------------------------------------------------------------------------
SIGNAL_SUFFIX_CHILD_ADDED = "child_added"
SIGNAL_SUFFIX_CHILD_REMOVED = "child_removed"
SIGNAL_SUFFIX_ENTRY_LOGGED = "entry_logged"
SIGNAL_SUFFIX_MILESTONE_TOGGLED = "milestone_toggled"
SIGNAL_SUFFIX_XP_AWARDED = "xp_awarded"
SIGNAL_SUFFIX_LEVEL_UP = "level_up"
SIGNAL_SUFFIX_ACHIEVEMENT_UNLOCKED = "achievement_unlocked"
SIGNAL_SUFFIX_REPORT_GENERATED = "report_generated"

EVENT_LEVEL_UP = f"{DOMAIN}_level_up"
EVENT_ACHIEVEMENT_UNLOCKED = f"{DOMAIN}_achievement_unlocked"

# ------------------------------------------------------------------------------------------------
# Services
# ------------------------------------------------------------------------------------------------
SERVICE_ADD_CHILD = "add_child"
SERVICE_REMOVE_CHILD = "remove_child"
SERVICE_LOG_ENTRY = "log_entry"
SERVICE_TOGGLE_MILESTONE = "toggle_milestone"
SERVICE_CHECK_ACHIEVEMENTS = "check_achievements"
SERVICE_GET_PROGRESS = "get_progress"
SERVICE_GENERATE_REPORT = "generate_report"
SERVICE_GET_REPORT = "get_report"
SERVICE_DELETE_REPORT = "delete_report"
SERVICE_PARSE_VOICE_NOTE = "parse_voice_note"
SERVICE_LOG_VOICE_NOTE = "log_voice_note"
SERVICE_ADD_USER_CATEGORY = "add_user_category"
SERVICE_REMOVE_USER_CATEGORY = "remove_user_category"
SERVICE_ADD_BOOK = "add_book"
SERVICE_FINISH_BOOK = "finish_book"

# Service fields
FIELD_CHILD_NAME = "child_name"
FIELD_BIRTHDATE = "birthdate"
FIELD_AVATAR_URL = "avatar_url"
FIELD_CATEGORY_ID = "category_id"
FIELD_SKILL_ID = "skill_id"
FIELD_ENTRY_TYPE = "entry_type"
FIELD_VALUE = "value"
FIELD_NOTES = "notes"
FIELD_MEDIA_URLS = "media_urls"
FIELD_LESSON_NUMBER = "lesson_number"
FIELD_USER_CATEGORY_ID = "user_category_id"
FIELD_MILESTONE_KEY = "milestone_key"
FIELD_COMPLETED = "completed"
FIELD_REPORT_TYPE = "report_type"
FIELD_PERIOD_START = "period_start"
FIELD_PERIOD_END = "period_end"
FIELD_SEASON = "season"
FIELD_REPORT_ID = "report_id"
FIELD_TEXT = "text"
FIELD_NAME = "name"
FIELD_ICON = "icon"
FIELD_COLOR = "color"
FIELD_CATEGORY_TYPE = "category_type"
FIELD_TOTAL_LESSONS = "total_lessons"
FIELD_BOOK_ID = "book_id"
FIELD_TITLE = "title"

# ------------------------------------------------------------------------------------------------
# Sensors
# ------------------------------------------------------------------------------------------------
SENSOR_LL_PREFIX = "sensor.ll_"
SENSOR_LL_UID_SUFFIX_LEVEL = "_level"
SENSOR_LL_UID_SUFFIX_STREAK = "_streak"
SENSOR_LL_UID_SUFFIX_ACHIEVEMENTS = "_achievements"
SENSOR_LL_EID_SUFFIX_LEVEL = "_level"
SENSOR_LL_EID_SUFFIX_STREAK = "_streak"
SENSOR_LL_EID_SUFFIX_ACHIEVEMENTS = "_achievements"

TRANS_KEY_SENSOR_CHILD_LEVEL = "child_level_sensor"
TRANS_KEY_SENSOR_CHILD_STREAK = "child_streak_sensor"
TRANS_KEY_SENSOR_CHILD_ACHIEVEMENTS = "child_achievements_sensor"
TRANS_KEY_SENSOR_ATTR_CHILD_NAME = "child_name"

ATTR_CHILD_NAME = "child_name"
ATTR_LEVEL_TITLE = "level_title"
ATTR_TOTAL_XP = "total_xp"
ATTR_XP_IN_LEVEL = "xp_in_level"
ATTR_XP_FOR_NEXT = "xp_for_next"
ATTR_LEVEL_PROGRESS = "level_progress"
ATTR_TODAY_ENTRIES = "today_entries"
ATTR_UNLOCKED = "unlocked"
ATTR_LOCKED = "locked"

UNIT_DAYS = "days"

# ------------------------------------------------------------------------------------------------
# Error Messages
# ------------------------------------------------------------------------------------------------
MSG_NO_ENTRY_FOUND = "No LilLearner entry found"
ERROR_CHILD_NOT_FOUND_FMT = "Child '{}' not found"
ERROR_CHILD_EXISTS_FMT = "A child named '{}' already exists"
ERROR_REPORT_NOT_FOUND_FMT = "Report '{}' not found"
ERROR_BOOK_NOT_FOUND_FMT = "Book '{}' not found"
ERROR_USER_CATEGORY_NOT_FOUND_FMT = "Category '{}' not found"
ERROR_SEASON_REQUIRED = "A season is required for seasonal reports"
ERROR_INVALID_PERIOD_FMT = "Report period start {} is after end {}"
ERROR_LLM_NOT_CONFIGURED = "Voice note parsing requires an LLM API key"
ERROR_VOICE_INPUT_DISABLED = "Voice input is disabled in the LilLearner options"
ERROR_LLM_REQUEST_FMT = "LLM request failed: {}"
ERROR_NO_CHILDREN = "Add a child before logging voice notes"

TRANS_KEY_ERROR_SINGLE_INSTANCE = "single_instance_allowed"
TRANS_KEY_ERROR_API_KEY_REQUIRED = "api_key_required"
