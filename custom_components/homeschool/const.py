# File: const.py
"""Constants for the Homeschool Assignments integration.

This file centralizes configuration keys, defaults, storage keys, service fields,
signal suffixes and translation keys so every module refers to the same names.
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
HOMESCHOOL_TITLE = "Homeschool Assignments"
HOMESCHOOL_MANUFACTURER = "Homeschool"

DOMAIN = "homeschool"

LOGGER = logging.getLogger(__package__)

PLATFORMS = [
    Platform.CALENDAR,
    Platform.SENSOR,
]

COORDINATOR_SUFFIX = "_coordinator"

# Storage and Versioning
STORAGE_KEY = "homeschool_data"
STORAGE_VERSION = 1
SCHEMA_VERSION = 1

# Default timezone: initially None, to be set once hass is available.
DEFAULT_TIME_ZONE = None

# Midnight refresh so buckets roll over with the calendar day
DEFAULT_DAILY_REFRESH_TIME = {"hour": 0, "minute": 0, "second": 5}

# ------------------------------------------------------------------------------------------------
# Configuration Keys / Defaults
# ------------------------------------------------------------------------------------------------
CONF_LOOKAHEAD_DAYS = "lookahead_days"
CONF_MAX_INSTANCES = "max_instances"
CONF_CALENDAR_SHOW_PERIOD = "calendar_show_period"
CONF_UPDATE_INTERVAL = "update_interval"
CONF_TITLE = "title"

DEFAULT_LOOKAHEAD_DAYS = 7
DEFAULT_MAX_INSTANCES = 6
DEFAULT_CALENDAR_SHOW_PERIOD = 90
DEFAULT_UPDATE_INTERVAL = 5

MIN_LOOKAHEAD_DAYS = 1
MAX_LOOKAHEAD_DAYS = 31
MIN_MAX_INSTANCES = 1
MAX_MAX_INSTANCES = 31
MIN_CALENDAR_SHOW_PERIOD = 1
MAX_CALENDAR_SHOW_PERIOD = 365
MIN_UPDATE_INTERVAL = 1
MAX_UPDATE_INTERVAL = 60

# Days of completion history shown on the chart sensor
COMPLETION_CHART_DAYS = 7

CONFIG_FLOW_STEP_USER = "user"
OPTIONS_FLOW_STEP_INIT = "init"

# ------------------------------------------------------------------------------------------------
# Storage Buckets
# ------------------------------------------------------------------------------------------------
DATA_META = "meta"
DATA_META_SCHEMA_VERSION = "schema_version"
DATA_META_LAST_REFRESH_DATE = "last_refresh_date"

DATA_STUDENTS = "students"
DATA_PARENTS = "parents"
DATA_ASSIGNMENTS = "assignments"
DATA_STUDENT_ASSIGNMENTS = "student_assignments"
DATA_NOTES = "notes"
DATA_EVENTS = "events"

# Students
DATA_STUDENT_INTERNAL_ID = "internal_id"
DATA_STUDENT_NAME = "name"
DATA_STUDENT_HA_USER_ID = "ha_user_id"
DATA_STUDENT_PARENT_ID = "parent_id"

# Parents
DATA_PARENT_INTERNAL_ID = "internal_id"
DATA_PARENT_NAME = "name"
DATA_PARENT_HA_USER_ID = "ha_user_id"
DATA_PARENT_ASSOCIATED_STUDENTS = "associated_students"
DATA_PARENT_IS_ADMIN = "is_admin"

# Assignments
DATA_ASSIGNMENT_INTERNAL_ID = "internal_id"
DATA_ASSIGNMENT_TITLE = "title"
DATA_ASSIGNMENT_CONTENT = "content"
DATA_ASSIGNMENT_LINKS = "links"
DATA_ASSIGNMENT_DUE_DATE = "due_date"
DATA_ASSIGNMENT_IS_RECURRING = "is_recurring"
DATA_ASSIGNMENT_RECURRENCE_PATTERN = "recurrence_pattern"
DATA_ASSIGNMENT_RECURRENCE_END_DATE = "recurrence_end_date"
DATA_ASSIGNMENT_NEXT_DUE_DATE = "next_due_date"
DATA_ASSIGNMENT_CATEGORY = "category"
DATA_ASSIGNMENT_PARENT_ID = "parent_id"
DATA_ASSIGNMENT_CREATED_AT = "created_at"
DATA_ASSIGNMENT_UPDATED_AT = "updated_at"

# Derived (read-side) assignment fields, never persisted
DATA_ASSIGNMENT_COMPLETED = "completed"
DATA_ASSIGNMENT_COMPLETED_AT = "completed_at"
DATA_ASSIGNMENT_INSTANCE_COMPLETIONS = "instance_completions"
DATA_ASSIGNMENT_INSTANCES = "instances"
DATA_ASSIGNMENT_EFFECTIVE_DUE_DATE = "effective_due_date"
DATA_ASSIGNMENT_ASSIGNED_STUDENTS = "assigned_students"
DATA_ASSIGNMENT_DATE_LABEL = "date_label"
DATA_ASSIGNMENT_URGENCY = "urgency"
DATA_ASSIGNMENT_EFFECTIVE_COMPLETED = "effective_completed"

# Recurrence pattern
PATTERN_DAYS = "days"
PATTERN_FREQUENCY = "frequency"

FREQUENCY_DAILY = "daily"
FREQUENCY_WEEKLY = "weekly"
FREQUENCY_OPTIONS = [FREQUENCY_WEEKLY, FREQUENCY_DAILY]

WEEKDAY_NAMES = dt_utils.WEEKDAY_NAMES

# Links
LINK_TITLE = "title"
LINK_URL = "url"
LINK_TYPE = "type"
LINK_TYPE_LINK = "link"
LINK_TYPE_VIDEO = "video"
LINK_TYPES = [LINK_TYPE_LINK, LINK_TYPE_VIDEO]

# Student assignment (completion record)
DATA_SA_ASSIGNMENT_ID = "assignment_id"
DATA_SA_STUDENT_ID = "student_id"
DATA_SA_INSTANCE_DATE = "instance_date"
DATA_SA_COMPLETED = "completed"
DATA_SA_COMPLETED_AT = "completed_at"
DATA_SA_CREATED_AT = "created_at"

RECORD_KEY_SEPARATOR = "|"

# Student notes
DATA_NOTE_INTERNAL_ID = "internal_id"
DATA_NOTE_STUDENT_ID = "student_id"
DATA_NOTE_TITLE = "title"
DATA_NOTE_CATEGORY = "category"
DATA_NOTE_CONTENT = "content"
DATA_NOTE_ASSIGNMENT_ID = "assignment_id"
DATA_NOTE_CREATED_BY = "created_by"
DATA_NOTE_CREATED_AT = "created_at"
DATA_NOTE_UPDATED_AT = "updated_at"

# Custom calendar events (start/end: ISO date for all-day, else ISO datetime)
DATA_EVENT_INTERNAL_ID = "internal_id"
DATA_EVENT_STUDENT_ID = "student_id"
DATA_EVENT_TITLE = "title"
DATA_EVENT_DESCRIPTION = "description"
DATA_EVENT_START = "start"
DATA_EVENT_END = "end"
DATA_EVENT_CREATED_AT = "created_at"
DATA_EVENT_UPDATED_AT = "updated_at"

# Recurrence instance descriptor
INSTANCE_DATE = "date"
INSTANCE_DAY_LABEL = "day_label"
INSTANCE_COMPLETED = "completed"
INSTANCE_COMPLETED_AT = "completed_at"

# ------------------------------------------------------------------------------------------------
# Classification
# ------------------------------------------------------------------------------------------------
BUCKET_OVERDUE = "overdue"
BUCKET_TODAY = "today"
BUCKET_UPCOMING = "upcoming"
BUCKET_PAST = "past"
LIVE_BUCKETS = [BUCKET_OVERDUE, BUCKET_TODAY, BUCKET_UPCOMING]

URGENCY_OVERDUE = "overdue"
URGENCY_TODAY = "today"
URGENCY_NORMAL = "normal"

LABEL_OVERDUE = "Overdue"
LABEL_DUE_TODAY = "Due Today"
LABEL_DUE_TOMORROW = "Due Tomorrow"
LABEL_DUE_DATE_FMT = "Due {}"

LABEL_STUDENT = "student"
LABEL_PARENT = "parent"
LABEL_ASSIGNMENT = "assignment"
LABEL_NOTE = "note"
LABEL_EVENT = "event"

# ------------------------------------------------------------------------------------------------
# Manager Signals
# ------------------------------------------------------------------------------------------------
SIGNAL_SUFFIX_ASSIGNMENT_CREATED = "assignment_created"
SIGNAL_SUFFIX_ASSIGNMENT_UPDATED = "assignment_updated"
SIGNAL_SUFFIX_ASSIGNMENT_DELETED = "assignment_deleted"
SIGNAL_SUFFIX_ASSIGNMENT_TOGGLED = "assignment_toggled"
SIGNAL_SUFFIX_ASSIGNEES_CHANGED = "assignees_changed"
SIGNAL_SUFFIX_STUDENT_CREATED = "student_created"
SIGNAL_SUFFIX_STUDENT_DELETED = "student_deleted"
SIGNAL_SUFFIX_PARENT_CREATED = "parent_created"
SIGNAL_SUFFIX_PARENT_DELETED = "parent_deleted"
SIGNAL_SUFFIX_NOTE_CREATED = "note_created"
SIGNAL_SUFFIX_NOTE_UPDATED = "note_updated"
SIGNAL_SUFFIX_NOTE_DELETED = "note_deleted"
SIGNAL_SUFFIX_EVENT_CREATED = "event_created"
SIGNAL_SUFFIX_EVENT_UPDATED = "event_updated"
SIGNAL_SUFFIX_EVENT_DELETED = "event_deleted"

# ------------------------------------------------------------------------------------------------
# Services
# ------------------------------------------------------------------------------------------------
SERVICE_CREATE_ASSIGNMENT = "create_assignment"
SERVICE_UPDATE_ASSIGNMENT = "update_assignment"
SERVICE_DELETE_ASSIGNMENT = "delete_assignment"
SERVICE_TOGGLE_ASSIGNMENT = "toggle_assignment"
SERVICE_CREATE_STUDENT = "create_student"
SERVICE_DELETE_STUDENT = "delete_student"
SERVICE_CREATE_PARENT = "create_parent"
SERVICE_DELETE_PARENT = "delete_parent"
SERVICE_ADD_NOTE = "add_note"
SERVICE_UPDATE_NOTE = "update_note"
SERVICE_DELETE_NOTE = "delete_note"

FIELD_ASSIGNMENT_ID = "assignment_id"
FIELD_ASSIGNMENT_TITLE = "assignment_title"
FIELD_TITLE = "title"
FIELD_CONTENT = "content"
FIELD_LINKS = "links"
FIELD_DUE_DATE = "due_date"
FIELD_CATEGORY = "category"
FIELD_IS_RECURRING = "is_recurring"
FIELD_RECURRENCE_DAYS = "recurrence_days"
FIELD_RECURRENCE_FREQUENCY = "recurrence_frequency"
FIELD_RECURRENCE_END_DATE = "recurrence_end_date"
FIELD_STUDENT_NAMES = "student_names"
FIELD_STUDENT_NAME = "student_name"
FIELD_INSTANCE_DATE = "instance_date"
FIELD_COMPLETED = "completed"
FIELD_NAME = "name"
FIELD_HA_USER_ID = "ha_user_id"
FIELD_PARENT_NAME = "parent_name"
FIELD_IS_ADMIN = "is_admin"
FIELD_NOTE_ID = "note_id"

RESPONSE_SUCCESS = "success"
RESPONSE_MESSAGE = "message"
RESPONSE_ASSIGNMENT_ID = "assignment_id"
RESPONSE_INSTANCE_DATE = "instance_date"
RESPONSE_NOTE_ID = "note_id"

MSG_MARKED_COMPLETE = "Assignment marked as complete"
MSG_MARKED_INCOMPLETE = "Assignment marked as incomplete"

# ------------------------------------------------------------------------------------------------
# Entities
# ------------------------------------------------------------------------------------------------
SENSOR_UID_SUFFIX_ASSIGNMENTS = "_assignments"
SENSOR_UID_SUFFIX_HISTORY = "_assignment_history"
SENSOR_UID_SUFFIX_COMPLETION_CHART = "_completion_chart"
CALENDAR_UID_SUFFIX_CALENDAR = "_calendar"

ATTR_STUDENT_NAME = "student_name"
ATTR_TODAY = "today"
ATTR_OVERDUE = "overdue"
ATTR_DUE_TODAY = "due_today"
ATTR_UPCOMING = "upcoming"
ATTR_PAST = "past"
ATTR_OVERDUE_COUNT = "overdue_count"
ATTR_DUE_TODAY_COUNT = "due_today_count"
ATTR_UPCOMING_COUNT = "upcoming_count"
ATTR_COMPLETED_COUNT = "completed_count"
ATTR_CHART_DAYS = "days"
ATTR_CHART_SERIES = "series"
ATTR_CHART_TOTAL = "total"
ATTR_ASSIGNMENT_ID = "assignment_id"
ATTR_IS_RECURRING = "is_recurring"
ATTR_NOTES = "notes"
ATTR_NOTE_ID = "note_id"

# ------------------------------------------------------------------------------------------------
# Translation Keys
# ------------------------------------------------------------------------------------------------
TRANS_KEY_SENSOR_ASSIGNMENTS = "student_assignments"
TRANS_KEY_SENSOR_HISTORY = "student_assignment_history"
TRANS_KEY_SENSOR_COMPLETION_CHART = "completion_chart"
TRANS_KEY_CALENDAR_NAME = "student_calendar"
TRANS_KEY_PLACEHOLDER_STUDENT_NAME = "student_name"

TRANS_KEY_ERROR_SINGLE_INSTANCE = "single_instance_allowed"
TRANS_KEY_ERROR_INVALID_TITLE = "invalid_title"
TRANS_KEY_ERROR_INVALID_DUE_DATE = "invalid_due_date"
TRANS_KEY_ERROR_INVALID_RECURRENCE_PATTERN = "invalid_recurrence_pattern"
TRANS_KEY_ERROR_INVALID_WEEKDAY = "invalid_weekday"
TRANS_KEY_ERROR_INVALID_FREQUENCY = "invalid_frequency"
TRANS_KEY_ERROR_INVALID_END_DATE = "invalid_recurrence_end_date"
TRANS_KEY_ERROR_INVALID_LINK = "invalid_link"
TRANS_KEY_ERROR_NO_STUDENTS = "no_students_selected"
TRANS_KEY_ERROR_INVALID_STUDENT_NAME = "invalid_student_name"
TRANS_KEY_ERROR_DUPLICATE_STUDENT = "duplicate_student"
TRANS_KEY_ERROR_INVALID_PARENT_NAME = "invalid_parent_name"
TRANS_KEY_ERROR_DUPLICATE_PARENT = "duplicate_parent"
TRANS_KEY_ERROR_NOT_FOUND = "not_found"
TRANS_KEY_ERROR_AMBIGUOUS_TITLE = "ambiguous_assignment_title"
TRANS_KEY_ERROR_ASSIGNMENT_REQUIRED = "assignment_required"
TRANS_KEY_ERROR_NOT_AUTHORIZED = "not_authorized"
TRANS_KEY_ERROR_STUDENT_REQUIRED = "student_required"
TRANS_KEY_ERROR_NOT_ASSIGNED = "student_not_assigned"
TRANS_KEY_ERROR_INSTANCE_NOT_RECURRING = "instance_date_not_recurring"
TRANS_KEY_ERROR_CALENDAR_READ_ONLY = "calendar_read_only"
TRANS_KEY_ERROR_EVENT_RECURRENCE = "event_recurrence_not_supported"
TRANS_KEY_ERROR_INVALID_EVENT_RANGE = "invalid_event_range"
TRANS_KEY_ERROR_INVALID_NOTE_CATEGORY = "invalid_note_category"
