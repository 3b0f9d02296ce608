# File: store.py
"""Handles persistent data storage for the Homeschool Assignments integration.

Uses Home Assistant's Storage helper to save and load students, parents,
assignments, completion records, notes and calendar events, so state
survives restarts.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.helpers.storage import Store

from . import const

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant


class HomeschoolStore:
    """Thin wrapper around Home Assistant's Store API.

    Every bucket is a dict keyed by internal_id, except completion records,
    which are keyed by their composite record key.
    """

    def __init__(
        self, hass: HomeAssistant, storage_key: str = const.STORAGE_KEY
    ) -> None:
        """Initialize the store.

        Args:
            hass: Home Assistant core object.
            storage_key: Key to identify storage location (default: const.STORAGE_KEY).
        """
        self.hass = hass
        self._storage_key = storage_key
        self._store: Store = Store(hass, const.STORAGE_VERSION, storage_key)
        self._data: dict[str, Any] = {}

    @staticmethod
    def get_default_structure() -> dict[str, Any]:
        """Return the empty data structure for fresh installations."""
        return {
            const.DATA_META: {
                const.DATA_META_SCHEMA_VERSION: const.SCHEMA_VERSION,
                const.DATA_META_LAST_REFRESH_DATE: None,
            },
            const.DATA_STUDENTS: {},
            const.DATA_PARENTS: {},
            const.DATA_ASSIGNMENTS: {},
            const.DATA_STUDENT_ASSIGNMENTS: {},
            const.DATA_NOTES: {},
            const.DATA_EVENTS: {},
        }

    async def async_initialize(self) -> None:
        """Load data from storage during startup.

        If no data exists, initializes with an empty structure. Missing buckets
        in older files are added.
        """
        const.LOGGER.debug("DEBUG: HomeschoolStore: Loading data from storage")
        existing_data = await self._store.async_load()

        if existing_data is None:
            const.LOGGER.info("INFO: No existing storage found. Initializing new data")
            self._data = HomeschoolStore.get_default_structure()
            return

        self._data = existing_data
        for key, default in HomeschoolStore.get_default_structure().items():
            self._data.setdefault(key, default)
        const.LOGGER.debug(
            "DEBUG: Loaded existing data from storage: %s",
            {
                "students": len(self._data[const.DATA_STUDENTS]),
                "parents": len(self._data[const.DATA_PARENTS]),
                "assignments": len(self._data[const.DATA_ASSIGNMENTS]),
                "records": len(self._data[const.DATA_STUDENT_ASSIGNMENTS]),
                "notes": len(self._data[const.DATA_NOTES]),
                "events": len(self._data[const.DATA_EVENTS]),
            },
        )

    @property
    def data(self) -> dict[str, Any]:
        """Retrieve the in-memory data cache."""
        return self._data

    def set_data(self, new_data: dict[str, Any]) -> None:
        """Replace the entire in-memory data structure."""
        self._data = new_data

    async def async_save(self) -> None:
        """Save the current data structure to storage."""
        try:
            await self._store.async_save(self._data)
            const.LOGGER.debug("DEBUG: Data saved to storage (%s)", self._storage_key)
        except (OSError, TypeError, ValueError) as err:
            const.LOGGER.error("ERROR: Failed to save data to storage: %s", err)

    async def async_delete_storage(self) -> None:
        """Delete the storage file when the integration is removed."""
        const.LOGGER.info("INFO: Removing storage file %s", self._storage_key)
        try:
            await self._store.async_remove()
        except OSError as err:
            const.LOGGER.error("ERROR: Failed to remove storage file: %s", err)
