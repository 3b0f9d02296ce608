# File: helpers/auth_helpers.py
"""Authorization helper functions for Homeschool Assignments.

Functions that check user permissions against Home Assistant users and the
stored parent/student profiles. All functions here require a `hass` object.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import const

if TYPE_CHECKING:
    from homeassistant.auth.models import User
    from homeassistant.core import HomeAssistant

    from ..coordinator import HomeschoolDataCoordinator


# ==============================================================================
# Coordinator Access
# ==============================================================================


def get_homeschool_coordinator(
    hass: HomeAssistant,
) -> HomeschoolDataCoordinator | None:
    """Retrieve the coordinator of the first loaded config entry, or None."""
    for entry in hass.config_entries.async_entries(const.DOMAIN):
        if entry.state.name == "LOADED":
            return entry.runtime_data
    return None


# ==============================================================================
# Profile Lookups
# ==============================================================================


def get_parent_id_for_user(
    coordinator: HomeschoolDataCoordinator, user_id: str | None
) -> str | None:
    """Return the parent profile linked to an HA user, or None."""
    if not user_id:
        return None
    for parent_id, parent in coordinator.parents_data.items():
        if parent.get(const.DATA_PARENT_HA_USER_ID) == user_id:
            return parent_id
    return None


def get_student_id_for_user(
    coordinator: HomeschoolDataCoordinator, user_id: str | None
) -> str | None:
    """Return the student profile linked to an HA user, or None."""
    if not user_id:
        return None
    for student_id, student in coordinator.students_data.items():
        if student.get(const.DATA_STUDENT_HA_USER_ID) == user_id:
            return student_id
    return None


# ==============================================================================
# Authorization Checks
# ==============================================================================


async def is_user_authorized_for_global_action(
    hass: HomeAssistant,
    user_id: str,
    action: str,
) -> bool:
    """Check if user may manage assignments and profiles.

    Authorization rules:
      - Admin users => authorized
      - Registered parents => authorized
      - Everyone else => not authorized
    """
    if not user_id:
        return False

    user: User | None = await hass.auth.async_get_user(user_id)
    if not user:
        const.LOGGER.warning("WARNING: %s: Invalid user ID '%s'", action, user_id)
        return False

    if user.is_admin:
        return True

    coordinator = get_homeschool_coordinator(hass)
    if coordinator and get_parent_id_for_user(coordinator, user.id):
        return True

    const.LOGGER.warning(
        "WARNING: %s: Non-admin user '%s' is not a registered parent",
        action,
        user.name,
    )
    return False


async def is_user_authorized_for_student(
    hass: HomeAssistant,
    user_id: str,
    student_id: str,
) -> bool:
    """Check if user may act for a specific student.

    Authorization rules:
      - HA admin => authorized
      - Admin parent => authorized
      - Parent associated with the student (or owning it) => authorized
      - The student's own linked HA user => authorized
      - Otherwise => not authorized
    """
    if not user_id:
        return False

    user: User | None = await hass.auth.async_get_user(user_id)
    if not user:
        const.LOGGER.warning("WARNING: Authorization: Invalid user ID '%s'", user_id)
        return False

    if user.is_admin:
        return True

    coordinator = get_homeschool_coordinator(hass)
    if not coordinator:
        const.LOGGER.warning("WARNING: Authorization: Homeschool coordinator not found")
        return False

    student_info = coordinator.students_data.get(student_id)
    if not student_info:
        const.LOGGER.warning(
            "WARNING: Authorization: Student ID '%s' not found in coordinator data",
            student_id,
        )
        return False

    parent_id = get_parent_id_for_user(coordinator, user.id)
    if parent_id:
        parent_info = coordinator.parents_data[parent_id]
        if parent_info.get(const.DATA_PARENT_IS_ADMIN, False):
            return True
        if student_id in parent_info.get(const.DATA_PARENT_ASSOCIATED_STUDENTS, []):
            return True
        if student_info.get(const.DATA_STUDENT_PARENT_ID) == parent_id:
            return True

    linked_ha_id = student_info.get(const.DATA_STUDENT_HA_USER_ID)
    if linked_ha_id and linked_ha_id == user.id:
        return True

    const.LOGGER.warning(
        "WARNING: Authorization: User '%s' attempted to act for student '%s' but is not linked",
        user.name,
        student_info.get(const.DATA_STUDENT_NAME),
    )
    return False


async def is_user_homeschool_admin(hass: HomeAssistant, user_id: str) -> bool:
    """Check if user manages every family (HA admin or admin parent)."""
    if not user_id:
        return False

    user: User | None = await hass.auth.async_get_user(user_id)
    if not user:
        return False
    if user.is_admin:
        return True

    coordinator = get_homeschool_coordinator(hass)
    if not coordinator:
        return False
    parent_id = get_parent_id_for_user(coordinator, user.id)
    return bool(
        parent_id
        and coordinator.parents_data[parent_id].get(const.DATA_PARENT_IS_ADMIN, False)
    )


async def is_user_authorized_for_assignment(
    hass: HomeAssistant,
    user_id: str,
    assignment: dict[str, Any],
) -> bool:
    """Check if user may edit or delete an assignment.

    Authorization rules:
      - HA admin or admin parent => authorized
      - The parent that owns the assignment => authorized
      - Otherwise (other families, students) => not authorized

    Admin-created assignments have no owner and stay admin-only.
    """
    if await is_user_homeschool_admin(hass, user_id):
        return True

    coordinator = get_homeschool_coordinator(hass)
    owner_id = assignment.get(const.DATA_ASSIGNMENT_PARENT_ID)
    if coordinator and owner_id and owner_id == get_parent_id_for_user(
        coordinator, user_id
    ):
        return True

    const.LOGGER.warning(
        "WARNING: Authorization: User '%s' does not own assignment '%s'",
        user_id,
        assignment.get(const.DATA_ASSIGNMENT_TITLE),
    )
    return False
