# File: catalogs.py
"""Static learning catalogs for LilLearner.

Categories, skills, and the achievement catalog are immutable data built
once at import. Engines never read these module globals directly; managers
pass `CATEGORIES` / `ACHIEVEMENTS` (or a test catalog) in explicitly.

Achievement criteria are a closed set of frozen dataclasses. The
AchievementEngine dispatches on the criteria class.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from . import const

# =============================================================================
# Category / Skill Catalog
# =============================================================================

TRACKING_MASTERY = "mastery"
TRACKING_NUMERIC = "numeric"
TRACKING_PROGRESS = "progress"
TRACKING_COUNT = "count"
TRACKING_CHECKLIST = "checklist"
TRACKING_ACTIVITY_LOG = "activity_log"
TRACKING_OBSERVATION_LOG = "observation_log"
TRACKING_CUMULATIVE = "cumulative"
TRACKING_TOPIC_LOG = "topic_log"


@dataclass(frozen=True)
class SkillConfig:
    """One trackable skill inside a category.

    `milestones` holds either ordered milestones or checklist items; both
    are toggled the same way and count toward completion.
    """

    skill_id: str
    name: str
    description: str
    tracking_type: str
    milestones: tuple[str, ...] = ()
    unit: str | None = None
    target: int | None = None


@dataclass(frozen=True)
class CategoryConfig:
    """A developmental category and its skills."""

    category_id: str
    name: str
    icon: str
    color: str
    skills: tuple[SkillConfig, ...] = field(default_factory=tuple)

    def get_skill(self, skill_id: str) -> SkillConfig | None:
        """Return the skill with the given id, if any."""
        for skill in self.skills:
            if skill.skill_id == skill_id:
                return skill
        return None


CATEGORIES: tuple[CategoryConfig, ...] = (
    CategoryConfig(
        "literacy",
        "Literacy",
        "mdi:book-alphabet",
        "#fcefc2",
        (
            SkillConfig("letter_names", "Letter Names", "Recognizes and names all uppercase and lowercase letters", TRACKING_MASTERY, ("uppercase", "lowercase")),
            SkillConfig("letter_sounds", "Letter Sounds", "Associates letters with their phonetic sounds", TRACKING_MASTERY, ("consonants", "vowels", "blends")),
            SkillConfig("reading_lessons", "Reading Program Progress", "Progress through structured reading curriculum", TRACKING_NUMERIC, unit="lessons", target=100),
            SkillConfig("cvc_words", "CVC Word Recognition", "Reads consonant-vowel-consonant words", TRACKING_MASTERY, ("simple_cvc", "complex_cvc", "beyond_cvc")),
            SkillConfig("printing", "Printing & Writing", "Writes letters and simple words", TRACKING_PROGRESS, ("tracing", "uppercase_independent", "lowercase_independent", "name_writing", "simple_words")),
            SkillConfig("books_read", "Books Read", "Chapter books or read-alouds completed", TRACKING_COUNT, unit="books"),
            SkillConfig("narration", "Narration & Comprehension", "Retells stories, answers questions, discusses vocabulary", TRACKING_PROGRESS, ("answers_questions", "retells_events", "discusses_vocabulary", "makes_predictions")),
        ),
    ),
    CategoryConfig(
        "numeracy",
        "Numeracy",
        "mdi:numeric",
        "#d4e8f7",
        (
            SkillConfig("counting", "Counting", "Counts objects and recites numbers in sequence", TRACKING_NUMERIC, ("10", "20", "30", "40", "50", "100"), unit="highest_number"),
            SkillConfig("numeral_recognition", "Numeral Recognition", "Identifies written numerals", TRACKING_PROGRESS, ("1-10", "11-20", "21-30", "31-50")),
            SkillConfig("math_lessons", "Math Program Progress", "Progress through math curriculum", TRACKING_NUMERIC, unit="lessons"),
            SkillConfig("addition", "Early Addition", "Understands combining quantities", TRACKING_PROGRESS, ("concept_understanding", "fingers_manipulatives", "mental_to_5", "mental_to_10")),
            SkillConfig("practical_math", "Practical Math Skills", "Real-world number applications", TRACKING_CHECKLIST, ("phone_number", "address", "birthday", "age")),
        ),
    ),
    CategoryConfig(
        "fine_motor",
        "Fine Motor",
        "mdi:hand-back-right",
        "#f7dce8",
        (
            SkillConfig("pencil_grip", "Pencil Grip", "Proper tripod grip development", TRACKING_PROGRESS, ("fist_grip", "four_finger", "tripod_developing", "tripod_mature")),
            SkillConfig("tracing", "Tracing", "Traces lines, shapes, and letters", TRACKING_MASTERY, ("straight_lines", "curves", "shapes", "letters")),
            SkillConfig("cutting", "Scissor Skills", "Cuts with scissors along lines", TRACKING_PROGRESS, ("snipping", "straight_lines", "curves", "shapes")),
            SkillConfig("coloring", "Coloring", "Colors within boundaries with control", TRACKING_PROGRESS, ("scribbling", "general_area", "mostly_in_lines", "precise")),
            SkillConfig("manipulatives", "Manipulatives & Crafts", "Works with small objects, beads, playdough, puzzles", TRACKING_ACTIVITY_LOG),
        ),
    ),
    CategoryConfig(
        "gross_motor",
        "Gross Motor",
        "mdi:run",
        "#d8f0d4",
        (
            SkillConfig("outdoor_time", "Outdoor Time", "Hours spent in outdoor play and nature", TRACKING_CUMULATIVE, unit="hours"),
            SkillConfig("balance", "Balance & Coordination", "Balance beam, one-foot standing, etc.", TRACKING_CHECKLIST, ("one_foot_5sec", "balance_beam", "hopping", "skipping")),
            SkillConfig("gymnastics", "Gymnastics Skills", "Tumbling and gymnastics movements", TRACKING_CHECKLIST, ("forward_roll", "back_bridge", "cartwheel", "handstand")),
            SkillConfig("swimming", "Swimming", "Water comfort and swimming skills", TRACKING_PROGRESS, ("water_comfort", "floating", "kicking", "basic_strokes", "independent_swimming")),
            SkillConfig("ball_skills", "Ball Skills", "Throwing, catching, kicking", TRACKING_CHECKLIST, ("underhand_throw", "overhand_throw", "catch_large_ball", "catch_small_ball", "kick")),
            SkillConfig("structured_activities", "Structured Activities", "Dance, gymnastics, sports classes", TRACKING_ACTIVITY_LOG),
        ),
    ),
    CategoryConfig(
        "social_emotional",
        "Social & Emotional",
        "mdi:heart",
        "#e8daf7",
        (
            SkillConfig("empathy", "Empathy & Awareness", "Recognizes and responds to others' feelings", TRACKING_OBSERVATION_LOG),
            SkillConfig("self_regulation", "Self-Regulation", "Manages emotions and impulses", TRACKING_PROGRESS, ("recognizes_emotions", "uses_words", "self_calming", "problem_solving")),
            SkillConfig("self_compassion", "Self-Compassion", "Kind self-talk, handles mistakes gracefully", TRACKING_OBSERVATION_LOG),
            SkillConfig("social_play", "Social Play", "Plays cooperatively with peers and siblings", TRACKING_PROGRESS, ("parallel_play", "interactive_play", "turn_taking", "cooperative_games", "conflict_resolution")),
            SkillConfig("sibling_interaction", "Sibling Interaction", "Gentle and appropriate play with siblings", TRACKING_OBSERVATION_LOG),
        ),
    ),
    CategoryConfig(
        "practical_life",
        "Practical Life",
        "mdi:home",
        "#fcefc2",
        (
            SkillConfig("dressing", "Dressing", "Independently puts on and removes clothing", TRACKING_CHECKLIST, ("shirt", "pants", "socks", "shoes", "coat", "buttons", "zippers")),
            SkillConfig("hygiene", "Personal Hygiene", "Handwashing, teeth brushing, toileting", TRACKING_CHECKLIST, ("handwashing", "teeth_brushing", "toileting_independent", "bathing_assistance")),
            SkillConfig("chores", "Household Chores", "Contributes to household tasks", TRACKING_CHECKLIST, ("bed_making", "table_setting", "cutlery_sorting", "toy_cleanup", "laundry_help", "pet_care")),
            SkillConfig("meal_skills", "Meal Skills", "Eating independently and helping with food prep", TRACKING_CHECKLIST, ("utensil_use", "pouring", "spreading", "simple_prep", "cleanup")),
        ),
    ),
    CategoryConfig(
        "creative_expression",
        "Creative Expression",
        "mdi:palette",
        "#f7dce8",
        (
            SkillConfig("music", "Music & Singing", "Singing, rhythm, musical activities", TRACKING_ACTIVITY_LOG),
            SkillConfig("art", "Visual Art", "Drawing, painting, crafts", TRACKING_ACTIVITY_LOG),
            SkillConfig("imaginative_play", "Imaginative Play", "Pretend play, role-playing, storytelling", TRACKING_OBSERVATION_LOG),
            SkillConfig("dance_movement", "Dance & Movement", "Creative movement and dance", TRACKING_ACTIVITY_LOG),
        ),
    ),
    CategoryConfig(
        "nature_science",
        "Nature & Science",
        "mdi:leaf",
        "#d8f0d4",
        (
            SkillConfig("outdoor_exploration", "Outdoor Exploration", "Time in nature - forests, parks, beaches", TRACKING_CUMULATIVE, unit="hours"),
            SkillConfig("nature_knowledge", "Nature Knowledge", "Plants, animals, seasons, weather", TRACKING_OBSERVATION_LOG),
            SkillConfig("science_topics", "Science Topics", "Structured science learning", TRACKING_TOPIC_LOG),
            SkillConfig("curiosity", "Curiosity & Questions", "Asks why/how questions, explores", TRACKING_OBSERVATION_LOG),
            SkillConfig("history_culture", "History & Culture", "Historical figures, geography, cultural learning", TRACKING_TOPIC_LOG),
            SkillConfig("memory_recall", "Memory & Recall", "Retains and connects learned information", TRACKING_OBSERVATION_LOG),
        ),
    ),
)


def get_category(category_id: str) -> CategoryConfig | None:
    """Return the catalog category with the given id, if any."""
    for category in CATEGORIES:
        if category.category_id == category_id:
            return category
    return None


def get_skill(category_id: str, skill_id: str) -> SkillConfig | None:
    """Return a skill by category and skill id, if any."""
    category = get_category(category_id)
    return category.get_skill(skill_id) if category else None


def find_skill(skill_id: str) -> tuple[CategoryConfig, SkillConfig] | None:
    """Locate a skill anywhere in the catalog."""
    for category in CATEGORIES:
        skill = category.get_skill(skill_id)
        if skill:
            return category, skill
    return None


# =============================================================================
# Achievement Criteria (closed set)
# =============================================================================


@dataclass(frozen=True)
class EntryCountCriteria:
    """Satisfied when the (optionally filtered) entry count reaches target."""

    target: int
    category_id: str | None = None
    skill_id: str | None = None


@dataclass(frozen=True)
class MilestoneCountCriteria:
    """Satisfied when completed milestones reach target."""

    target: int


@dataclass(frozen=True)
class StreakDaysCriteria:
    """Satisfied when the current logging streak reaches target."""

    target: int


@dataclass(frozen=True)
class CumulativeValueCriteria:
    """Satisfied when summed counter values for a skill reach target."""

    target: float
    skill_id: str


@dataclass(frozen=True)
class ChecklistCompleteCriteria:
    """Satisfied by the global completed-milestone threshold.

    `category_id` is carried for display only; evaluation compares the
    child's total completed milestones against a fixed threshold.
    """

    target: int
    category_id: str


@dataclass(frozen=True)
class SeasonalEntriesCriteria:
    """Satisfied when entries inside this year's season window reach target."""

    target: int
    season: str


AchievementCriteria = (
    EntryCountCriteria
    | MilestoneCountCriteria
    | StreakDaysCriteria
    | CumulativeValueCriteria
    | ChecklistCompleteCriteria
    | SeasonalEntriesCriteria
)


@dataclass(frozen=True)
class AchievementConfig:
    """A catalog achievement definition."""

    key: str
    name: str
    description: str
    icon: str
    group: str
    criteria: AchievementCriteria


ACHIEVEMENTS: tuple[AchievementConfig, ...] = (
    AchievementConfig("bookworm", "Bookworm", "50 books read", "mdi:book-open-page-variant", const.ACHIEVEMENT_GROUP_CATEGORY, EntryCountCriteria(50, skill_id="books_read")),
    AchievementConfig("math_whiz", "Math Whiz", "Counting to 100", "mdi:abacus", const.ACHIEVEMENT_GROUP_CATEGORY, CumulativeValueCriteria(100, "counting")),
    AchievementConfig("nature_scout", "Nature Scout", "20 hours outdoors", "mdi:tent", const.ACHIEVEMENT_GROUP_CATEGORY, CumulativeValueCriteria(20, "outdoor_exploration")),
    AchievementConfig("creative_spark", "Creative Spark", "30 art activities", "mdi:palette", const.ACHIEVEMENT_GROUP_CATEGORY, EntryCountCriteria(30, category_id="creative_expression")),
    AchievementConfig("helping_hand", "Helping Hand", "All practical life checklists complete", "mdi:handshake", const.ACHIEVEMENT_GROUP_CATEGORY, ChecklistCompleteCriteria(1, "practical_life")),
    AchievementConfig("on_fire", "On Fire", "7-day logging streak", "mdi:fire", const.ACHIEVEMENT_GROUP_STREAK, StreakDaysCriteria(7)),
    AchievementConfig("unstoppable", "Unstoppable", "30-day logging streak", "mdi:lightning-bolt", const.ACHIEVEMENT_GROUP_STREAK, StreakDaysCriteria(30)),
    AchievementConfig("legendary", "Legendary", "100-day logging streak", "mdi:crown", const.ACHIEVEMENT_GROUP_STREAK, StreakDaysCriteria(100)),
    AchievementConfig("first_steps", "First Steps", "First entry ever", "mdi:shoe-print", const.ACHIEVEMENT_GROUP_MILESTONE, EntryCountCriteria(1)),
    AchievementConfig("century_club", "Century Club", "100 entries logged", "mdi:numeric-10-box-multiple", const.ACHIEVEMENT_GROUP_MILESTONE, EntryCountCriteria(100)),
    AchievementConfig("milestone_master", "Milestone Master", "50 milestones completed", "mdi:trophy", const.ACHIEVEMENT_GROUP_MILESTONE, MilestoneCountCriteria(50)),
    AchievementConfig("summer_explorer", "Summer Explorer", "10+ entries during summer", "mdi:white-balance-sunny", const.ACHIEVEMENT_GROUP_SEASONAL, SeasonalEntriesCriteria(10, const.SEASON_SUMMER)),
    AchievementConfig("winter_scholar", "Winter Scholar", "10+ entries during winter", "mdi:snowflake", const.ACHIEVEMENT_GROUP_SEASONAL, SeasonalEntriesCriteria(10, const.SEASON_WINTER)),
    AchievementConfig("spring_bloom", "Spring Bloom", "10+ entries during spring", "mdi:flower", const.ACHIEVEMENT_GROUP_SEASONAL, SeasonalEntriesCriteria(10, const.SEASON_SPRING)),
    AchievementConfig("fall_harvest", "Fall Harvest", "10+ entries during fall", "mdi:leaf-maple", const.ACHIEVEMENT_GROUP_SEASONAL, SeasonalEntriesCriteria(10, const.SEASON_FALL)),
)


def get_achievement(key: str) -> AchievementConfig | None:
    """Return the catalog achievement with the given key, if any."""
    for achievement in ACHIEVEMENTS:
        if achievement.key == key:
            return achievement
    return None
