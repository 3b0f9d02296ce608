"""Test helpers for Homeschool Assignments integration tests.

This module re-exports all helpers for convenient imports:

    from tests.helpers import (
        # Constants
        ALICE_ID, BEN_ID, MATH_ID, READING_ID, FROZEN_NOW,

        # Workflows
        call_service, toggle_assignment,

        # Validation
        get_entity_id, get_state_attributes,
    )
"""

from tests.helpers.constants import (
    ALICE_ID,
    BEN_ID,
    FROZEN_NOW,
    MATH_ID,
    PARENT_ID,
    READING_ID,
    TODAY,
)
from tests.helpers.validation import get_entity_id, get_state_attributes
from tests.helpers.workflows import call_service, toggle_assignment

__all__ = [
    "ALICE_ID",
    "BEN_ID",
    "FROZEN_NOW",
    "MATH_ID",
    "PARENT_ID",
    "READING_ID",
    "TODAY",
    "call_service",
    "get_entity_id",
    "get_state_attributes",
    "toggle_assignment",
]
