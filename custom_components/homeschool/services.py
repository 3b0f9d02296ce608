# File: services.py
"""Defines custom services for the Homeschool Assignments integration.

These services let parents manage assignments and profiles from scripts,
automations and dashboards, and let students mark their work as done and
keep notes.

Writes are family-scoped: a parent edits only their own assignments and
students; HA admins and admin parents manage every family.
"""

from __future__ import annotations

from typing import Any

import voluptuous as vol
from homeassistant.core import (
    HomeAssistant,
    ServiceCall,
    ServiceResponse,
    SupportsResponse,
)
from homeassistant.exceptions import HomeAssistantError, ServiceValidationError
from homeassistant.helpers import config_validation as cv

from . import const, data_builders as db
from .helpers import auth_helpers as ah, entity_helpers as eh

# --- Service Schemas ---
_LINK_SCHEMA = vol.Any(
    cv.string,
    vol.Schema(
        {
            vol.Required(const.LINK_URL): cv.string,
            vol.Optional(const.LINK_TITLE): cv.string,
            vol.Optional(const.LINK_TYPE, default=const.LINK_TYPE_LINK): vol.In(
                const.LINK_TYPES
            ),
        }
    ),
)

# Plain text or a rich-text document (editor JSON), stored as given
_CONTENT_SCHEMA = vol.Any(cv.string, dict)

_ASSIGNMENT_TARGET = {
    vol.Optional(const.FIELD_ASSIGNMENT_ID): cv.string,
    vol.Optional(const.FIELD_ASSIGNMENT_TITLE): cv.string,
}

CREATE_ASSIGNMENT_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_TITLE): cv.string,
        vol.Required(const.FIELD_DUE_DATE): cv.date,
        vol.Required(const.FIELD_STUDENT_NAMES): vol.All(cv.ensure_list, [cv.string]),
        vol.Optional(const.FIELD_CONTENT): _CONTENT_SCHEMA,
        vol.Optional(const.FIELD_LINKS): vol.All(cv.ensure_list, [_LINK_SCHEMA]),
        vol.Optional(const.FIELD_CATEGORY): cv.string,
        vol.Optional(const.FIELD_IS_RECURRING, default=False): cv.boolean,
        vol.Optional(const.FIELD_RECURRENCE_DAYS): vol.All(
            cv.ensure_list, [cv.string]
        ),
        vol.Optional(const.FIELD_RECURRENCE_FREQUENCY): vol.In(
            const.FREQUENCY_OPTIONS
        ),
        vol.Optional(const.FIELD_RECURRENCE_END_DATE): vol.Any(cv.date, None),
    }
)

UPDATE_ASSIGNMENT_SCHEMA = vol.Schema(
    {
        **_ASSIGNMENT_TARGET,
        vol.Optional(const.FIELD_TITLE): cv.string,
        vol.Optional(const.FIELD_DUE_DATE): cv.date,
        vol.Optional(const.FIELD_STUDENT_NAMES): vol.All(cv.ensure_list, [cv.string]),
        vol.Optional(const.FIELD_CONTENT): vol.Any(_CONTENT_SCHEMA, None),
        vol.Optional(const.FIELD_LINKS): vol.All(cv.ensure_list, [_LINK_SCHEMA]),
        vol.Optional(const.FIELD_CATEGORY): cv.string,
        vol.Optional(const.FIELD_IS_RECURRING): cv.boolean,
        vol.Optional(const.FIELD_RECURRENCE_DAYS): vol.All(
            cv.ensure_list, [cv.string]
        ),
        vol.Optional(const.FIELD_RECURRENCE_FREQUENCY): vol.In(
            const.FREQUENCY_OPTIONS
        ),
        vol.Optional(const.FIELD_RECURRENCE_END_DATE): vol.Any(cv.date, None),
    }
)

DELETE_ASSIGNMENT_SCHEMA = vol.Schema(_ASSIGNMENT_TARGET)

TOGGLE_ASSIGNMENT_SCHEMA = vol.Schema(
    {
        **_ASSIGNMENT_TARGET,
        vol.Optional(const.FIELD_STUDENT_NAME): cv.string,
        vol.Optional(const.FIELD_COMPLETED, default=True): cv.boolean,
        vol.Optional(const.FIELD_INSTANCE_DATE): cv.date,
    }
)

CREATE_STUDENT_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_NAME): cv.string,
        vol.Optional(const.FIELD_HA_USER_ID): cv.string,
        vol.Optional(const.FIELD_PARENT_NAME): cv.string,
    }
)

DELETE_STUDENT_SCHEMA = vol.Schema(
    {vol.Required(const.FIELD_STUDENT_NAME): cv.string}
)

CREATE_PARENT_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_NAME): cv.string,
        vol.Optional(const.FIELD_HA_USER_ID): cv.string,
        vol.Optional(const.FIELD_IS_ADMIN, default=False): cv.boolean,
        vol.Optional(const.FIELD_STUDENT_NAMES): vol.All(cv.ensure_list, [cv.string]),
    }
)

DELETE_PARENT_SCHEMA = vol.Schema({vol.Required(const.FIELD_PARENT_NAME): cv.string})

ADD_NOTE_SCHEMA = vol.Schema(
    {
        **_ASSIGNMENT_TARGET,
        vol.Optional(const.FIELD_STUDENT_NAME): cv.string,
        vol.Required(const.FIELD_TITLE): cv.string,
        vol.Required(const.FIELD_CATEGORY): cv.string,
        vol.Optional(const.FIELD_CONTENT): _CONTENT_SCHEMA,
    }
)

UPDATE_NOTE_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_NOTE_ID): cv.string,
        vol.Optional(const.FIELD_TITLE): cv.string,
        vol.Optional(const.FIELD_CATEGORY): cv.string,
        vol.Optional(const.FIELD_CONTENT): vol.Any(_CONTENT_SCHEMA, None),
    }
)

DELETE_NOTE_SCHEMA = vol.Schema({vol.Required(const.FIELD_NOTE_ID): cv.string})


# --- Helpers ---


def _get_coordinator(hass: HomeAssistant):
    """Return the loaded coordinator or raise."""
    coordinator = ah.get_homeschool_coordinator(hass)
    if coordinator is None:
        raise HomeAssistantError(
            translation_domain=const.DOMAIN,
            translation_key=const.TRANS_KEY_ERROR_NOT_FOUND,
            translation_placeholders={
                "entity_type": "integration",
                "name": const.DOMAIN,
            },
        )
    return coordinator


def _not_authorized(service: str) -> HomeAssistantError:
    return HomeAssistantError(
        translation_domain=const.DOMAIN,
        translation_key=const.TRANS_KEY_ERROR_NOT_AUTHORIZED,
        translation_placeholders={"action": service},
    )


async def _ensure_global_authorized(
    hass: HomeAssistant, call: ServiceCall, service: str
) -> None:
    """Reject users that are neither admins nor registered parents.

    Calls without a user (automations, scripts) are allowed, here and in
    the family-scoped checks below.
    """
    user_id = call.context.user_id
    if user_id and not await ah.is_user_authorized_for_global_action(
        hass, user_id, service
    ):
        const.LOGGER.warning("WARNING: %s: User not authorized", service)
        raise _not_authorized(service)


async def _ensure_homeschool_admin(
    hass: HomeAssistant, call: ServiceCall, service: str
) -> None:
    """Reject users that do not manage every family."""
    user_id = call.context.user_id
    if user_id and not await ah.is_user_homeschool_admin(hass, user_id):
        const.LOGGER.warning("WARNING: %s: Admin rights required", service)
        raise _not_authorized(service)


async def _ensure_students_authorized(
    hass: HomeAssistant, call: ServiceCall, service: str, student_ids: list[str]
) -> None:
    """Reject the call unless the user may act for every listed student."""
    user_id = call.context.user_id
    if not user_id:
        return
    for student_id in student_ids:
        if not await ah.is_user_authorized_for_student(hass, user_id, student_id):
            const.LOGGER.warning(
                "WARNING: %s: User not authorized for student '%s'",
                service,
                student_id,
            )
            raise _not_authorized(service)


async def _ensure_assignment_authorized(
    hass: HomeAssistant, call: ServiceCall, service: str, assignment: dict[str, Any]
) -> None:
    """Reject edits of another family's assignment."""
    user_id = call.context.user_id
    if user_id and not await ah.is_user_authorized_for_assignment(
        hass, user_id, assignment
    ):
        raise _not_authorized(service)


def _validation_error(err: db.EntityValidationError) -> ServiceValidationError:
    """Convert a builder validation error into a service error."""
    return ServiceValidationError(
        translation_domain=const.DOMAIN,
        translation_key=err.translation_key,
        translation_placeholders=err.placeholders,
    )


def _student_ids_from_names(coordinator, names: list[str]) -> list[str]:
    return [
        eh.get_item_id_or_raise(coordinator, const.LABEL_STUDENT, name)
        for name in names
    ]


def _resolve_student(coordinator, call: ServiceCall) -> str:
    """Return the named student, or the caller's own student profile."""
    if student_name := call.data.get(const.FIELD_STUDENT_NAME):
        return eh.get_item_id_or_raise(coordinator, const.LABEL_STUDENT, student_name)
    student_id = ah.get_student_id_for_user(coordinator, call.context.user_id)
    if not student_id:
        raise ServiceValidationError(
            translation_domain=const.DOMAIN,
            translation_key=const.TRANS_KEY_ERROR_STUDENT_REQUIRED,
        )
    return student_id


def _assignment_input_from_call(
    data: dict[str, Any], existing: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Map service fields onto DATA_ASSIGNMENT_* keys.

    Only fields present in the call are copied, so updates keep the rest.
    Recurrence days and frequency merge into the existing pattern.
    """
    field_map = {
        const.FIELD_TITLE: const.DATA_ASSIGNMENT_TITLE,
        const.FIELD_CONTENT: const.DATA_ASSIGNMENT_CONTENT,
        const.FIELD_LINKS: const.DATA_ASSIGNMENT_LINKS,
        const.FIELD_DUE_DATE: const.DATA_ASSIGNMENT_DUE_DATE,
        const.FIELD_CATEGORY: const.DATA_ASSIGNMENT_CATEGORY,
        const.FIELD_IS_RECURRING: const.DATA_ASSIGNMENT_IS_RECURRING,
        const.FIELD_RECURRENCE_END_DATE: const.DATA_ASSIGNMENT_RECURRENCE_END_DATE,
    }
    user_input = {
        data_key: data[field] for field, data_key in field_map.items() if field in data
    }

    if (
        const.FIELD_RECURRENCE_DAYS in data
        or const.FIELD_RECURRENCE_FREQUENCY in data
    ):
        pattern = dict(
            (existing or {}).get(const.DATA_ASSIGNMENT_RECURRENCE_PATTERN) or {}
        )
        if const.FIELD_RECURRENCE_DAYS in data:
            pattern[const.PATTERN_DAYS] = data[const.FIELD_RECURRENCE_DAYS]
        if const.FIELD_RECURRENCE_FREQUENCY in data:
            pattern[const.PATTERN_FREQUENCY] = data[const.FIELD_RECURRENCE_FREQUENCY]
        user_input[const.DATA_ASSIGNMENT_RECURRENCE_PATTERN] = pattern

    return user_input


def _note_input_from_call(data: dict[str, Any]) -> dict[str, Any]:
    field_map = {
        const.FIELD_TITLE: const.DATA_NOTE_TITLE,
        const.FIELD_CATEGORY: const.DATA_NOTE_CATEGORY,
        const.FIELD_CONTENT: const.DATA_NOTE_CONTENT,
    }
    return {
        data_key: data[field] for field, data_key in field_map.items() if field in data
    }


# --- Service Registration ---


def async_setup_services(hass: HomeAssistant) -> None:
    """Register Homeschool Assignments services."""

    async def handle_create_assignment(call: ServiceCall) -> None:
        """Handle creating an assignment for one or more students."""
        service = const.SERVICE_CREATE_ASSIGNMENT
        await _ensure_global_authorized(hass, call, service)
        coordinator = _get_coordinator(hass)

        student_ids = _student_ids_from_names(
            coordinator, call.data[const.FIELD_STUDENT_NAMES]
        )
        await _ensure_students_authorized(hass, call, service, student_ids)
        parent_id = ah.get_parent_id_for_user(coordinator, call.context.user_id)
        try:
            assignment_id = coordinator.assignment_manager.create_assignment(
                _assignment_input_from_call(dict(call.data)),
                student_ids,
                parent_id=parent_id,
            )
        except db.EntityValidationError as err:
            const.LOGGER.warning(
                "WARNING: Create Assignment: Invalid %s (%s)",
                err.field,
                err.translation_key,
            )
            raise _validation_error(err) from err

        const.LOGGER.info(
            "INFO: Assignment '%s' created (ID: %s)",
            call.data[const.FIELD_TITLE],
            assignment_id,
        )

    async def handle_update_assignment(call: ServiceCall) -> None:
        """Handle updating an assignment and optionally its assignees."""
        service = const.SERVICE_UPDATE_ASSIGNMENT
        await _ensure_global_authorized(hass, call, service)
        coordinator = _get_coordinator(hass)

        assignment_id = eh.get_assignment_id_or_raise(
            coordinator,
            call.data.get(const.FIELD_ASSIGNMENT_ID),
            call.data.get(const.FIELD_ASSIGNMENT_TITLE),
        )
        existing = coordinator.assignments_data[assignment_id]
        await _ensure_assignment_authorized(hass, call, service, existing)

        student_ids = None
        if const.FIELD_STUDENT_NAMES in call.data:
            student_ids = _student_ids_from_names(
                coordinator, call.data[const.FIELD_STUDENT_NAMES]
            )
            await _ensure_students_authorized(hass, call, service, student_ids)

        try:
            coordinator.assignment_manager.update_assignment(
                assignment_id,
                _assignment_input_from_call(dict(call.data), existing),
                student_ids,
            )
        except db.EntityValidationError as err:
            const.LOGGER.warning(
                "WARNING: Update Assignment: Invalid %s (%s)",
                err.field,
                err.translation_key,
            )
            raise _validation_error(err) from err

    async def handle_delete_assignment(call: ServiceCall) -> None:
        """Handle deleting an assignment with all its completion records."""
        service = const.SERVICE_DELETE_ASSIGNMENT
        await _ensure_global_authorized(hass, call, service)
        coordinator = _get_coordinator(hass)

        assignment_id = eh.get_assignment_id_or_raise(
            coordinator,
            call.data.get(const.FIELD_ASSIGNMENT_ID),
            call.data.get(const.FIELD_ASSIGNMENT_TITLE),
        )
        await _ensure_assignment_authorized(
            hass, call, service, coordinator.assignments_data[assignment_id]
        )
        coordinator.assignment_manager.delete_assignment(assignment_id)

    async def handle_toggle_assignment(call: ServiceCall) -> ServiceResponse:
        """Handle marking an assignment (or one recurring instance) done or not done."""
        coordinator = _get_coordinator(hass)

        # A student's own user may leave the name out
        student_id = _resolve_student(coordinator, call)
        assignment_id = eh.get_assignment_id_or_raise(
            coordinator,
            call.data.get(const.FIELD_ASSIGNMENT_ID),
            call.data.get(const.FIELD_ASSIGNMENT_TITLE),
        )
        await _ensure_students_authorized(
            hass, call, const.SERVICE_TOGGLE_ASSIGNMENT, [student_id]
        )

        return coordinator.assignment_manager.toggle_assignment(
            assignment_id,
            student_id,
            call.data[const.FIELD_COMPLETED],
            call.data.get(const.FIELD_INSTANCE_DATE),
        )

    async def handle_create_student(call: ServiceCall) -> None:
        """Handle creating a student profile.

        Parents add students to their own family; placing a student in
        another family needs admin rights.
        """
        service = const.SERVICE_CREATE_STUDENT
        await _ensure_global_authorized(hass, call, service)
        coordinator = _get_coordinator(hass)

        own_parent_id = ah.get_parent_id_for_user(coordinator, call.context.user_id)
        parent_id = own_parent_id
        if parent_name := call.data.get(const.FIELD_PARENT_NAME):
            parent_id = eh.get_item_id_or_raise(
                coordinator, const.LABEL_PARENT, parent_name
            )
            if parent_id != own_parent_id:
                await _ensure_homeschool_admin(hass, call, service)

        try:
            coordinator.user_manager.create_student(
                {
                    const.DATA_STUDENT_NAME: call.data[const.FIELD_NAME],
                    const.DATA_STUDENT_HA_USER_ID: call.data.get(
                        const.FIELD_HA_USER_ID, ""
                    ),
                    const.DATA_STUDENT_PARENT_ID: parent_id,
                }
            )
        except db.EntityValidationError as err:
            raise _validation_error(err) from err

    async def handle_delete_student(call: ServiceCall) -> None:
        """Handle deleting a student with its records, notes and entities."""
        service = const.SERVICE_DELETE_STUDENT
        await _ensure_global_authorized(hass, call, service)
        coordinator = _get_coordinator(hass)

        student_id = eh.get_item_id_or_raise(
            coordinator, const.LABEL_STUDENT, call.data[const.FIELD_STUDENT_NAME]
        )
        await _ensure_students_authorized(hass, call, service, [student_id])
        coordinator.user_manager.delete_student(student_id)

    async def handle_create_parent(call: ServiceCall) -> None:
        """Handle creating a parent profile (admins only)."""
        await _ensure_homeschool_admin(hass, call, const.SERVICE_CREATE_PARENT)
        coordinator = _get_coordinator(hass)

        student_ids = _student_ids_from_names(
            coordinator, call.data.get(const.FIELD_STUDENT_NAMES, [])
        )
        try:
            coordinator.user_manager.create_parent(
                {
                    const.DATA_PARENT_NAME: call.data[const.FIELD_NAME],
                    const.DATA_PARENT_HA_USER_ID: call.data.get(
                        const.FIELD_HA_USER_ID, ""
                    ),
                    const.DATA_PARENT_IS_ADMIN: call.data[const.FIELD_IS_ADMIN],
                    const.DATA_PARENT_ASSOCIATED_STUDENTS: student_ids,
                }
            )
        except db.EntityValidationError as err:
            raise _validation_error(err) from err

    async def handle_delete_parent(call: ServiceCall) -> None:
        """Handle deleting a parent profile (admins only)."""
        await _ensure_homeschool_admin(hass, call, const.SERVICE_DELETE_PARENT)
        coordinator = _get_coordinator(hass)

        parent_id = eh.get_item_id_or_raise(
            coordinator, const.LABEL_PARENT, call.data[const.FIELD_PARENT_NAME]
        )
        coordinator.user_manager.delete_parent(parent_id)

    async def handle_add_note(call: ServiceCall) -> ServiceResponse:
        """Handle adding a note for a student, optionally about an assignment."""
        coordinator = _get_coordinator(hass)

        student_id = _resolve_student(coordinator, call)
        await _ensure_students_authorized(
            hass, call, const.SERVICE_ADD_NOTE, [student_id]
        )

        user_input = _note_input_from_call(dict(call.data))
        user_input[const.DATA_NOTE_CREATED_BY] = call.context.user_id or ""
        if (
            const.FIELD_ASSIGNMENT_ID in call.data
            or const.FIELD_ASSIGNMENT_TITLE in call.data
        ):
            user_input[const.DATA_NOTE_ASSIGNMENT_ID] = eh.get_assignment_id_or_raise(
                coordinator,
                call.data.get(const.FIELD_ASSIGNMENT_ID),
                call.data.get(const.FIELD_ASSIGNMENT_TITLE),
            )

        try:
            note_id = coordinator.note_manager.add_note(student_id, user_input)
        except db.EntityValidationError as err:
            raise _validation_error(err) from err
        return {const.RESPONSE_NOTE_ID: note_id}

    async def _authorized_note(call: ServiceCall, service: str):
        coordinator = _get_coordinator(hass)
        note = coordinator.note_manager.get_note(call.data[const.FIELD_NOTE_ID])
        await _ensure_students_authorized(
            hass, call, service, [note[const.DATA_NOTE_STUDENT_ID]]
        )
        return coordinator

    async def handle_update_note(call: ServiceCall) -> None:
        """Handle editing a note's title, category or content."""
        coordinator = await _authorized_note(call, const.SERVICE_UPDATE_NOTE)
        try:
            coordinator.note_manager.update_note(
                call.data[const.FIELD_NOTE_ID], _note_input_from_call(dict(call.data))
            )
        except db.EntityValidationError as err:
            raise _validation_error(err) from err

    async def handle_delete_note(call: ServiceCall) -> None:
        """Handle deleting a note."""
        coordinator = await _authorized_note(call, const.SERVICE_DELETE_NOTE)
        coordinator.note_manager.delete_note(call.data[const.FIELD_NOTE_ID])

    # --- Register Services ---
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_CREATE_ASSIGNMENT,
        handle_create_assignment,
        schema=CREATE_ASSIGNMENT_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_UPDATE_ASSIGNMENT,
        handle_update_assignment,
        schema=UPDATE_ASSIGNMENT_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_DELETE_ASSIGNMENT,
        handle_delete_assignment,
        schema=DELETE_ASSIGNMENT_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_TOGGLE_ASSIGNMENT,
        handle_toggle_assignment,
        schema=TOGGLE_ASSIGNMENT_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_CREATE_STUDENT,
        handle_create_student,
        schema=CREATE_STUDENT_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_DELETE_STUDENT,
        handle_delete_student,
        schema=DELETE_STUDENT_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_CREATE_PARENT,
        handle_create_parent,
        schema=CREATE_PARENT_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_DELETE_PARENT,
        handle_delete_parent,
        schema=DELETE_PARENT_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_ADD_NOTE,
        handle_add_note,
        schema=ADD_NOTE_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_UPDATE_NOTE,
        handle_update_note,
        schema=UPDATE_NOTE_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_DELETE_NOTE,
        handle_delete_note,
        schema=DELETE_NOTE_SCHEMA,
    )

    const.LOGGER.info("INFO: Homeschool Assignments services have been registered successfully")


async def async_unload_services(hass: HomeAssistant) -> None:
    """Unregister Homeschool Assignments services when unloading the integration."""
    services = [
        const.SERVICE_CREATE_ASSIGNMENT,
        const.SERVICE_UPDATE_ASSIGNMENT,
        const.SERVICE_DELETE_ASSIGNMENT,
        const.SERVICE_TOGGLE_ASSIGNMENT,
        const.SERVICE_CREATE_STUDENT,
        const.SERVICE_DELETE_STUDENT,
        const.SERVICE_CREATE_PARENT,
        const.SERVICE_DELETE_PARENT,
        const.SERVICE_ADD_NOTE,
        const.SERVICE_UPDATE_NOTE,
        const.SERVICE_DELETE_NOTE,
    ]

    for service in services:
        if hass.services.has_service(const.DOMAIN, service):
            hass.services.async_remove(const.DOMAIN, service)

    const.LOGGER.info("INFO: Homeschool Assignments services have been unregistered")
