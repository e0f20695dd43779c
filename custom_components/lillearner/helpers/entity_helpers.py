# File: helpers/entity_helpers.py
"""Entity registry and lookup helper functions for LilLearner.

Functions that interact with Home Assistant's entity registry, build
instance-scoped dispatcher signal names, and resolve names to internal ids.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from homeassistant.helpers.entity_registry import (
    async_entries_for_config_entry,
    async_get as async_get_entity_registry,
)

from .. import const

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..coordinator import LilLearnerDataCoordinator


# ==============================================================================
# Event Signal Helpers (Manager Communication)
# ==============================================================================


def get_event_signal(entry_id: str, suffix: str) -> str:
    """Build instance-scoped event signal name for dispatcher.

    Format: 'lillearner_{entry_id}_{suffix}'

    Example:
        >>> get_event_signal("abc123", const.SIGNAL_SUFFIX_LEVEL_UP)
        'lillearner_abc123_level_up'
    """
    return f"{const.DOMAIN}_{entry_id}_{suffix}"


# ==============================================================================
# Entity Registry Cleanup
# ==============================================================================


def remove_entities_by_item_id(
    hass: HomeAssistant,
    entry_id: str,
    item_id: str,
) -> int:
    """Remove all entities whose unique_id references the given item_id.

    Called when deleting a child. Uses delimiter matching so that child_1
    never matches child_10.

    Returns:
        Count of removed entities.
    """
    perf_start = time.perf_counter()
    ent_reg = async_get_entity_registry(hass)
    prefix = f"{entry_id}_"
    item_id_str = str(item_id)
    removed_count = 0

    for entity_entry in async_entries_for_config_entry(ent_reg, entry_id):
        unique_id = str(entity_entry.unique_id)
        if not unique_id.startswith(prefix):
            continue

        if f"_{item_id_str}_" in unique_id or unique_id.endswith(f"_{item_id_str}"):
            ent_reg.async_remove(entity_entry.entity_id)
            removed_count += 1
            const.LOGGER.debug(
                "Removed entity %s (uid: %s) for deleted item %s",
                entity_entry.entity_id,
                unique_id,
                item_id_str,
            )

    if removed_count > 0:
        const.LOGGER.info(
            "Removed %d entities for deleted item in %.3fs",
            removed_count,
            time.perf_counter() - perf_start,
        )
    return removed_count


# ==============================================================================
# Lookups
# ==============================================================================


def get_first_lillearner_entry(hass: HomeAssistant) -> str | None:
    """Retrieve the first LilLearner config entry ID."""
    domain_entries = hass.data.get(const.DOMAIN)
    if not domain_entries:
        return None
    return next(iter(domain_entries.keys()), None)


def get_child_id_by_name(
    coordinator: LilLearnerDataCoordinator, child_name: str
) -> str | None:
    """Retrieve the child_id for a given name (case-insensitive)."""
    wanted = child_name.strip().casefold()
    for child_id, child_info in coordinator.children_data.items():
        if str(child_info.get(const.DATA_CHILD_NAME, "")).casefold() == wanted:
            return child_id
    return None
