# File: helpers/__init__.py
"""Home Assistant-bound helper functions for Homeschool Assignments.

This module contains functions that REQUIRE Home Assistant dependencies
(entity registry, device registry, auth).

Submodules:
    - entity_helpers: Signal names, entity cleanup, item lookups
    - auth_helpers: User authorization checks
    - device_helpers: DeviceInfo construction
"""

from . import auth_helpers, device_helpers, entity_helpers

__all__ = ["auth_helpers", "device_helpers", "entity_helpers"]
