# File: coordinator.py
"""Coordinator for the Homeschool Assignments integration.

Owns the in-memory data loaded from storage, the managers that mutate it,
and the daily refresh that rolls recurring assignments forward.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.event import async_track_time_change
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator

from . import const
from .managers import (
    AssignmentManager,
    CalendarEventManager,
    NoteManager,
    UserManager,
)
from .store import HomeschoolStore
from .utils import dt_utils

type HomeschoolConfigEntry = ConfigEntry[HomeschoolDataCoordinator]


class HomeschoolDataCoordinator(DataUpdateCoordinator[dict[str, Any]]):
    """Coordinator for the Homeschool Assignments integration.

    Manages data keyed by internal_id. Entities read through the
    *_data properties; writes go through the managers.
    """

    config_entry: HomeschoolConfigEntry

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: HomeschoolConfigEntry,
        store: HomeschoolStore,
    ) -> None:
        """Initialize the HomeschoolDataCoordinator."""
        update_interval_minutes = config_entry.options.get(
            const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL
        )

        super().__init__(
            hass,
            const.LOGGER,
            config_entry=config_entry,
            name=f"{const.DOMAIN}{const.COORDINATOR_SUFFIX}",
            update_interval=timedelta(minutes=update_interval_minutes),
        )
        self.store = store
        self._data: dict[str, Any] = {}

        self.assignment_manager = AssignmentManager(hass, self)
        self.user_manager = UserManager(hass, self)
        self.note_manager = NoteManager(hass, self)
        self.event_manager = CalendarEventManager(hass, self)

    # -------------------------------------------------------------------------------------
    # Periodic + First Refresh
    # -------------------------------------------------------------------------------------

    async def _async_update_data(self) -> dict[str, Any]:
        """Periodic update.

        Date buckets shift with the clock, so entities re-derive on every tick.
        """
        return self._data

    async def async_config_entry_first_refresh(self) -> None:
        """Load from storage, start the managers and schedule the daily refresh."""
        self._data = self.store.data or HomeschoolStore.get_default_structure()

        stored_version = self._data.get(const.DATA_META, {}).get(
            const.DATA_META_SCHEMA_VERSION, const.SCHEMA_VERSION
        )
        if stored_version > const.SCHEMA_VERSION:
            const.LOGGER.warning(
                "WARNING: Storage schema version %s is newer than supported version %s",
                stored_version,
                const.SCHEMA_VERSION,
            )

        await self.assignment_manager.async_setup()
        await self.user_manager.async_setup()
        await self.note_manager.async_setup()
        await self.event_manager.async_setup()

        self.config_entry.async_on_unload(
            async_track_time_change(
                self.hass,
                self._async_daily_refresh,
                **const.DEFAULT_DAILY_REFRESH_TIME,
            )
        )

        self._refresh_next_due_dates()
        self._persist()
        await super().async_config_entry_first_refresh()

    @callback
    def _async_daily_refresh(self, now: datetime) -> None:
        """Roll recurring assignments forward once the local date changes."""
        const.LOGGER.debug("DEBUG: Daily refresh triggered at %s", now)
        self._refresh_next_due_dates()
        self._persist()
        self.async_update_listeners()

    def _refresh_next_due_dates(self) -> None:
        """Store each recurring assignment's next occurrence on or after today."""
        today = dt_utils.dt_today_local()
        for assignment in self.assignments_data.values():
            self.assignment_manager.refresh_next_due_date(assignment, today)

        self._data.setdefault(const.DATA_META, {})[
            const.DATA_META_LAST_REFRESH_DATE
        ] = today.isoformat()

    # -------------------------------------------------------------------------------------
    # Options
    # -------------------------------------------------------------------------------------

    @property
    def lookahead_days(self) -> int:
        """Return the number of days ahead recurring instances are listed."""
        return int(
            self.config_entry.options.get(
                const.CONF_LOOKAHEAD_DAYS, const.DEFAULT_LOOKAHEAD_DAYS
            )
        )

    @property
    def max_instances(self) -> int:
        """Return the cap on listed instances per recurring assignment."""
        return int(
            self.config_entry.options.get(
                const.CONF_MAX_INSTANCES, const.DEFAULT_MAX_INSTANCES
            )
        )

    @property
    def calendar_show_period(self) -> int:
        """Return how many days of events the calendar shows."""
        return int(
            self.config_entry.options.get(
                const.CONF_CALENDAR_SHOW_PERIOD, const.DEFAULT_CALENDAR_SHOW_PERIOD
            )
        )

    # -------------------------------------------------------------------------------------
    # Storage
    # -------------------------------------------------------------------------------------

    def _persist(self) -> None:
        """Save to persistent storage."""
        self.store.set_data(self._data)
        self.hass.async_create_task(self.store.async_save())

    # -------------------------------------------------------------------------------------
    # Properties for Easy Access
    # -------------------------------------------------------------------------------------

    @property
    def students_data(self) -> dict[str, Any]:
        """Return the students data."""
        return self._data.get(const.DATA_STUDENTS, {})

    @property
    def parents_data(self) -> dict[str, Any]:
        """Return the parents data."""
        return self._data.get(const.DATA_PARENTS, {})

    @property
    def assignments_data(self) -> dict[str, Any]:
        """Return the assignments data."""
        return self._data.get(const.DATA_ASSIGNMENTS, {})

    @property
    def student_assignments_data(self) -> dict[str, Any]:
        """Return the completion records keyed by record key."""
        return self._data.get(const.DATA_STUDENT_ASSIGNMENTS, {})

    @property
    def notes_data(self) -> dict[str, Any]:
        """Return the student notes."""
        return self._data.get(const.DATA_NOTES, {})

    @property
    def events_data(self) -> dict[str, Any]:
        """Return the user-created calendar events."""
        return self._data.get(const.DATA_EVENTS, {})
