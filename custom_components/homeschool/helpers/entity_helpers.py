# File: helpers/entity_helpers.py
"""Entity registry and item lookup helpers for Homeschool Assignments.

Functions that build dispatcher signal names, remove entities for deleted
items, and resolve stored items (students, parents, assignments) by name.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.exceptions import HomeAssistantError, ServiceValidationError
from homeassistant.helpers.entity_registry import (
    async_entries_for_config_entry,
    async_get as async_get_entity_registry,
)

from .. import const

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..coordinator import HomeschoolDataCoordinator


# ==============================================================================
# Event Signal Helpers (Manager Communication)
# ==============================================================================


def get_event_signal(entry_id: str, suffix: str) -> str:
    """Build instance-scoped event signal name for dispatcher.

    Format: 'homeschool_{entry_id}_{suffix}'

    Args:
        entry_id: ConfigEntry.entry_id from coordinator
        suffix: Signal suffix constant from const.py

    Returns:
        Signal name unique to this config entry.
    """
    return f"{const.DOMAIN}_{entry_id}_{suffix}"


# ==============================================================================
# Entity Registry
# ==============================================================================


def remove_entities_by_item_id(
    hass: HomeAssistant,
    entry_id: str,
    item_id: str,
) -> int:
    """Remove all entities whose unique_id references the given item_id.

    Called when deleting students. Uses delimiter matching so that one id can
    never match inside another.

    Returns:
        Count of removed entities.
    """
    ent_reg = async_get_entity_registry(hass)
    prefix = f"{entry_id}_"
    removed_count = 0

    for entity_entry in async_entries_for_config_entry(ent_reg, entry_id):
        unique_id = str(entity_entry.unique_id)
        if not unique_id.startswith(prefix):
            continue
        if f"_{item_id}_" in unique_id or unique_id.endswith(f"_{item_id}"):
            ent_reg.async_remove(entity_entry.entity_id)
            removed_count += 1
            const.LOGGER.debug(
                "DEBUG: Removed entity %s (uid: %s) for deleted item %s",
                entity_entry.entity_id,
                unique_id,
                item_id,
            )

    if removed_count:
        const.LOGGER.info(
            "INFO: Removed %d entities for deleted item %s", removed_count, item_id
        )
    return removed_count


# ==============================================================================
# Item Lookups
# ==============================================================================


def get_item_id_by_name(
    coordinator: HomeschoolDataCoordinator, item_type: str, item_name: str
) -> str | None:
    """Look up a student's or parent's internal ID by name (case-insensitive).

    Raises:
        ValueError: If item_type is not recognized.
    """
    item_map = {
        const.LABEL_STUDENT: (coordinator.students_data, const.DATA_STUDENT_NAME),
        const.LABEL_PARENT: (coordinator.parents_data, const.DATA_PARENT_NAME),
    }
    if item_type not in item_map:
        raise ValueError(
            f"Unknown item_type: {item_type}. Valid options: {', '.join(item_map)}"
        )

    data_dict, name_key = item_map[item_type]
    wanted = str(item_name).strip().lower()
    for item_id, item_info in data_dict.items():
        if str(item_info.get(name_key, "")).strip().lower() == wanted:
            return item_id
    return None


def get_item_id_or_raise(
    coordinator: HomeschoolDataCoordinator, item_type: str, item_name: str
) -> str:
    """Look up a student's or parent's internal ID by name, or raise.

    Raises:
        HomeAssistantError: If the item is not found in storage.
    """
    item_id = get_item_id_by_name(coordinator, item_type, item_name)
    if not item_id:
        raise HomeAssistantError(
            translation_domain=const.DOMAIN,
            translation_key=const.TRANS_KEY_ERROR_NOT_FOUND,
            translation_placeholders={"entity_type": item_type, "name": item_name},
        )
    return item_id


def get_assignment_id_or_raise(
    coordinator: HomeschoolDataCoordinator,
    assignment_id: str | None = None,
    assignment_title: str | None = None,
) -> str:
    """Resolve an assignment by internal ID, or by title when no ID is given.

    Titles are not unique; a title matching several assignments is rejected.

    Raises:
        ServiceValidationError: Neither field given, or an ambiguous title.
        HomeAssistantError: No matching assignment.
    """
    assignments: dict[str, Any] = coordinator.assignments_data
    if assignment_id:
        if assignment_id in assignments:
            return assignment_id
        raise HomeAssistantError(
            translation_domain=const.DOMAIN,
            translation_key=const.TRANS_KEY_ERROR_NOT_FOUND,
            translation_placeholders={
                "entity_type": const.LABEL_ASSIGNMENT,
                "name": assignment_id,
            },
        )

    if not assignment_title:
        raise ServiceValidationError(
            translation_domain=const.DOMAIN,
            translation_key=const.TRANS_KEY_ERROR_ASSIGNMENT_REQUIRED,
        )

    wanted = assignment_title.strip().lower()
    matches = [
        item_id
        for item_id, item in assignments.items()
        if str(item.get(const.DATA_ASSIGNMENT_TITLE, "")).strip().lower() == wanted
    ]
    if not matches:
        raise HomeAssistantError(
            translation_domain=const.DOMAIN,
            translation_key=const.TRANS_KEY_ERROR_NOT_FOUND,
            translation_placeholders={
                "entity_type": const.LABEL_ASSIGNMENT,
                "name": assignment_title,
            },
        )
    if len(matches) > 1:
        raise ServiceValidationError(
            translation_domain=const.DOMAIN,
            translation_key=const.TRANS_KEY_ERROR_AMBIGUOUS_TITLE,
            translation_placeholders={"title": assignment_title},
        )
    return matches[0]
