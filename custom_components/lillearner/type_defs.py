"""Type definitions for LilLearner data structures.

Uses the same hybrid approach throughout the integration:

1. **TypedDict for STATIC structures** (fixed keys known at design time):
   stored rows (children, entries, XP events, reports) and the payloads
   passed between engines, managers and services.

2. **dict[str, Any] for DYNAMIC structures** (keys determined at runtime):
   per-category counters, achievement unlock maps, storage buckets.

TypedDict is STATIC ANALYSIS ONLY. Runtime null checks and `.get()`
defaults stay in the managers.

IMPORTANT: This file must NOT import from coordinator.py or managers to
avoid circular dependencies.
"""

from typing import Any, NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

ChildId = str  # UUID string
EntryId = str  # UUID string
ReportId = str  # UUID string
AchievementKey = str  # Catalog key, e.g. "bookworm"
ISODatetime = str  # ISO 8601 datetime string "2026-01-18T12:30:00+00:00"
ISODate = str  # ISO 8601 date string (no time) "2026-01-18"


# =============================================================================
# Stored Rows
# =============================================================================


class ChildData(TypedDict):
    """A child being tracked."""

    internal_id: ChildId
    name: str
    birthdate: ISODate | None
    avatar_url: str | None
    created_at: ISODatetime


class EntryData(TypedDict):
    """A single logged activity. Immutable once written."""

    internal_id: EntryId
    child_id: ChildId
    category_id: str
    skill_id: str
    entry_type: str  # activity | photo | note | milestone | counter
    value: NotRequired[Any]  # Counter value, may be non-numeric text
    notes: NotRequired[str | None]
    media_urls: list[str]
    lesson_number: NotRequired[int | None]
    user_category_id: NotRequired[str | None]
    logged_at: ISODatetime
    created_at: ISODatetime


class MilestoneRecord(TypedDict):
    """Completion state for one (child, skill, milestone_key)."""

    child_id: ChildId
    skill_id: str
    milestone_key: str
    completed: bool
    completed_at: ISODatetime | None


class XpEventData(TypedDict):
    """Append-only XP ledger row.

    Created by: XpEngine.create_xp_event()
    Stored in: storage bucket "xp_events"
    """

    internal_id: str
    child_id: ChildId
    xp_amount: int
    source_type: str  # entry | milestone | streak | achievement
    source_id: str | None
    created_at: ISODatetime


class ChildLevelData(TypedDict):
    """Running XP aggregate for one child."""

    total_xp: int
    current_level: int
    updated_at: ISODatetime


class UserCategoryData(TypedDict):
    """A parent-defined category (lessons, journals, book lists)."""

    internal_id: str
    name: str
    icon: str
    color: str
    category_type: str  # lesson | journal | book
    total_lessons: int | None
    sort_order: int
    is_active: bool
    created_at: ISODatetime
    updated_at: ISODatetime


class ActiveBookData(TypedDict):
    """A book a child is reading or has finished."""

    internal_id: str
    child_id: ChildId
    category_id: str
    title: str
    status: str  # reading | finished
    started_at: ISODatetime
    finished_at: ISODatetime | None


# =============================================================================
# XP / Level Engine Types
# =============================================================================


class LevelProgress(TypedDict):
    """Level breakdown for a total XP value.

    Created by: XpEngine.progress()
    """

    level: int
    title: str
    total_xp: int
    xp_in_level: int
    xp_for_next: int
    ratio: float


class XpApplyResult(TypedDict):
    """Outcome of applying an XP delta to a child's aggregate."""

    level_row: ChildLevelData
    previous_level: int
    new_level: int
    leveled_up: bool


# =============================================================================
# Achievement Engine Types
# =============================================================================


class AchievementContext(TypedDict):
    """Pre-fetched facts the achievement evaluator reads.

    Built by: AchievementManager from storage
    Consumed by: AchievementEngine.evaluate()
    """

    child_id: ChildId
    entries: list[EntryData]
    completed_milestone_count: int
    streak_days: int
    today: Any  # datetime.date, injectable for deterministic tests


class AchievementProgress(TypedDict):
    """Per-achievement progress for display."""

    key: AchievementKey
    name: str
    icon: str
    unlocked: bool
    unlocked_at: ISODatetime | None
    current_value: float
    target: float
    percentage: float


# =============================================================================
# Report Types
# =============================================================================


class ReportData(TypedDict):
    """Frozen report payload. Never recomputed once stored."""

    entries_by_category: dict[str, int]
    milestones_reached: list[str]  # "skill:milestone"
    xp_earned: int
    levels_gained: int
    top_skills: list[str]
    photo_urls: list[str]
    total_entries: int
    streak_days: int  # Distinct active days within the period


class ReportRecord(TypedDict):
    """A stored report."""

    internal_id: ReportId
    child_id: ChildId
    report_type: str  # weekly | monthly | seasonal
    period_start: ISODate
    period_end: ISODate
    season: str | None
    data: ReportData
    narrative: str
    generated_at: ISODatetime


# =============================================================================
# Voice Note Types
# =============================================================================


class ParsedVoiceEntry(TypedDict):
    """One entry extracted from a transcribed voice note, after reconciliation."""

    child_id: ChildId
    child_name: str
    category_id: str
    category_name: str
    user_category_id: str | None
    skill_id: str
    entry_type: str
    lesson_number: int | None
    notes: str | None
    confidence: float


class VoiceParseResult(TypedDict):
    """Result of parsing a voice note."""

    entries: list[ParsedVoiceEntry]
    raw_text: NotRequired[str]


# =============================================================================
# Event Payload Types (Manager-to-Manager Communication)
# =============================================================================


class XpAwardedEvent(TypedDict, total=False):
    """Payload for SIGNAL_SUFFIX_XP_AWARDED."""

    child_id: ChildId
    xp_amount: int
    total_xp: int
    source_type: str
    source_id: str | None


class LevelUpEvent(TypedDict, total=False):
    """Payload for SIGNAL_SUFFIX_LEVEL_UP and the lillearner_level_up bus event."""

    child_id: ChildId
    child_name: str
    previous_level: int
    new_level: int
    title: str
    total_xp: int


class AchievementUnlockedEvent(TypedDict, total=False):
    """Payload for SIGNAL_SUFFIX_ACHIEVEMENT_UNLOCKED and its bus event."""

    child_id: ChildId
    child_name: str
    achievement_key: AchievementKey
    achievement_name: str
    unlocked_at: ISODatetime


class EntryLoggedEvent(TypedDict, total=False):
    """Payload for SIGNAL_SUFFIX_ENTRY_LOGGED."""

    child_id: ChildId
    entry_id: EntryId
    entry_type: str
    category_id: str
    skill_id: str
