# File: helpers/voice_note_parser.py
"""Voice note prompt building, response parsing, and reconciliation.

A transcribed note such as "Emma did reading lesson 58 and Noah practiced
counting" is sent to the LLM together with the known children and
categories. The model answers with loosely matched names; reconciliation
resolves those names to stored ids on a best-effort basis:

- child: case-insensitive name match, else the fallback child
- category: user category name, then catalog category name, else "_unknown"
- skill: always "_none"; entry type: always "activity"

Nothing here talks to Home Assistant; VoiceManager owns the I/O.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import json
import math
from typing import TYPE_CHECKING, Any

from .. import const

if TYPE_CHECKING:
    from ..catalogs import CategoryConfig
    from ..type_defs import ChildData, ParsedVoiceEntry, UserCategoryData


def build_system_prompt(
    child_names: Iterable[str],
    user_categories: Iterable[UserCategoryData],
    categories: Iterable[CategoryConfig],
) -> str:
    """Build the parser system prompt.

    Lists user categories when any exist; otherwise the catalog categories.
    """
    user_categories = list(user_categories)
    if user_categories:
        category_lines = [
            f'- "{category[const.DATA_USER_CATEGORY_NAME]}" '
            f"(type: {category[const.DATA_USER_CATEGORY_TYPE]}, "
            f"total: {category.get(const.DATA_USER_CATEGORY_TOTAL_LESSONS) or 'unlimited'})"
            for category in user_categories
        ]
    else:
        category_lines = [f'- "{category.name}"' for category in categories]

    return (
        "You are a homeschool lesson log parser. The user will speak or type a "
        "quick update about their children's learning activities.\n\n"
        f"CHILDREN: {', '.join(child_names)}\n"
        "CATEGORIES:\n"
        + "\n".join(category_lines)
        + "\n\n"
        "RULES:\n"
        "1. Extract individual log entries from the text\n"
        "2. Match child names to the CHILDREN list (case-insensitive, handle nicknames)\n"
        "3. Match subjects/categories to the CATEGORIES list (fuzzy match OK)\n"
        '4. Extract lesson numbers when mentioned (e.g., "lesson 58", "page 42", "#58")\n'
        "5. Extract any additional notes\n"
        "6. If a child name is ambiguous or missing, use the first child\n"
        "7. If a category is ambiguous, pick the closest match\n"
        "8. Set confidence 0.0-1.0 based on how certain you are about each field\n\n"
        "RESPONSE FORMAT (JSON only):\n"
        "{\n"
        '  "entries": [\n'
        "    {\n"
        '      "childName": "exact name from CHILDREN list",\n'
        '      "categoryName": "exact name from CATEGORIES list",\n'
        '      "lessonNumber": 58,\n'
        '      "notes": "any additional context",\n'
        '      "confidence": 0.95\n'
        "    }\n"
        "  ]\n"
        "}\n\n"
        "If the input doesn't contain any loggable activities, return: "
        '{ "entries": [] }'
    )


def parse_completion(content: str) -> list[dict[str, Any]] | None:
    """Extract the raw entry list from a model response.

    Returns:
        The list of entry objects, [] when the model reported none, or
        None when the content is not the expected JSON shape.
    """
    try:
        parsed = json.loads(content)
    except (TypeError, ValueError):
        return None

    if not isinstance(parsed, dict):
        return None
    entries = parsed.get("entries")
    if entries is None:
        return []
    if not isinstance(entries, list):
        return None
    return [entry for entry in entries if isinstance(entry, dict)]


def _coerce_lesson_number(raw: Any) -> int | None:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        return int(raw)
    except (TypeError, ValueError, OverflowError):
        return None


def _coerce_confidence(raw: Any) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return max(0.0, min(1.0, value))


def reconcile_entries(
    raw_entries: Iterable[Mapping[str, Any]],
    children: Mapping[str, ChildData],
    user_categories: Mapping[str, UserCategoryData],
    categories: Iterable[CategoryConfig],
    fallback_child_id: str,
) -> list[ParsedVoiceEntry]:
    """Resolve model-reported names to stored ids."""
    child_by_name = {
        str(child[const.DATA_CHILD_NAME]).casefold(): child_id
        for child_id, child in children.items()
    }
    user_category_by_name = {
        str(category[const.DATA_USER_CATEGORY_NAME]).casefold(): category_id
        for category_id, category in user_categories.items()
        if category.get(const.DATA_USER_CATEGORY_IS_ACTIVE, True)
    }
    catalog_by_name = {
        category.name.casefold(): category.category_id for category in categories
    }

    resolved: list[ParsedVoiceEntry] = []
    for raw in raw_entries:
        child_name = str(raw.get("childName") or "")
        category_name = str(raw.get("categoryName") or "")

        child_id = child_by_name.get(child_name.casefold(), fallback_child_id)
        user_category_id = user_category_by_name.get(category_name.casefold())
        category_id = (
            user_category_id
            or catalog_by_name.get(category_name.casefold())
            or const.CATEGORY_ID_UNKNOWN
        )
        notes = raw.get("notes")

        resolved.append(
            {
                "child_id": child_id,
                "child_name": str(
                    children.get(child_id, {}).get(const.DATA_CHILD_NAME, child_name)
                ),
                "category_id": category_id,
                "category_name": category_name,
                "user_category_id": user_category_id,
                "skill_id": const.SKILL_ID_NONE,
                "entry_type": const.ENTRY_TYPE_ACTIVITY,
                "lesson_number": _coerce_lesson_number(raw.get("lessonNumber")),
                "notes": str(notes) if notes else None,
                "confidence": _coerce_confidence(raw.get("confidence")),
            }
        )
    return resolved
