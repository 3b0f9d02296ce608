# File: helpers/device_helpers.py
"""Device registry helper functions for Homeschool Assignments.

Functions that construct DeviceInfo objects for Home Assistant's device registry.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from homeassistant.helpers.device_registry import DeviceEntryType, DeviceInfo

from .. import const

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry


def create_student_device_info(
    student_id: str,
    student_name: str,
    config_entry: ConfigEntry,
) -> DeviceInfo:
    """Create device info for a student profile."""
    return DeviceInfo(
        identifiers={(const.DOMAIN, student_id)},
        name=f"{student_name} ({config_entry.title})",
        manufacturer=const.HOMESCHOOL_MANUFACTURER,
        model="Student Profile",
        entry_type=DeviceEntryType.SERVICE,
    )


def create_system_device_info(config_entry: ConfigEntry) -> DeviceInfo:
    """Create device info for the integration-wide (family) device."""
    return DeviceInfo(
        identifiers={(const.DOMAIN, f"{config_entry.entry_id}_system")},
        name=config_entry.title,
        manufacturer=const.HOMESCHOOL_MANUFACTURER,
        model="Family Overview",
        entry_type=DeviceEntryType.SERVICE,
    )
