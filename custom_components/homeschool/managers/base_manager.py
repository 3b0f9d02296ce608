"""Shared plumbing for the Homeschool Assignments managers.

Every manager owns one slice of the stored data (assignments, profiles,
notes, calendar events) and follows the same write cycle:

    mutate bucket -> _commit(signal) -> emit, save, refresh entities

Signals are scoped to the config entry so two entries never hear each other.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.dispatcher import (
    async_dispatcher_connect,
    async_dispatcher_send,
)

from .. import const
from ..helpers.entity_helpers import get_event_signal

if TYPE_CHECKING:
    from collections.abc import Callable

    from homeassistant.core import HomeAssistant

    from ..coordinator import HomeschoolDataCoordinator


class BaseManager(ABC):
    """Storage buckets, the commit cycle and entry-scoped signals.

    Subclasses implement async_setup() to subscribe to the signals of other
    managers (for example, dropping a deleted student's rows).
    """

    def __init__(
        self, hass: HomeAssistant, coordinator: HomeschoolDataCoordinator
    ) -> None:
        """Initialize manager."""
        self.hass = hass
        self.coordinator = coordinator
        self.entry_id = coordinator.config_entry.entry_id

    @property
    def _data(self) -> dict[str, Any]:
        # Read through the coordinator: its dict is replaced on first refresh
        return self.coordinator._data

    def _bucket(self, key: str) -> dict[str, Any]:
        """Return a storage bucket, creating it when an older file lacks it."""
        return self._data.setdefault(key, {})

    def _get_or_raise(self, bucket_key: str, item_id: str, label: str) -> dict[str, Any]:
        """Return a stored item by internal_id.

        Raises:
            HomeAssistantError: not_found, naming the item type by `label`.
        """
        item = self._bucket(bucket_key).get(item_id)
        if item is None:
            raise HomeAssistantError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_NOT_FOUND,
                translation_placeholders={"entity_type": label, "name": item_id},
            )
        return item

    def _student_name(self, student_id: str) -> str:
        student = self._bucket(const.DATA_STUDENTS).get(student_id, {})
        return student.get(const.DATA_STUDENT_NAME, student_id)

    # -------------------------------------------------------------------------
    # Write cycle
    # -------------------------------------------------------------------------

    def _commit(self, suffix: str, **payload: Any) -> None:
        """Finish a mutation: notify listeners, save, then refresh entities.

        Listeners run before the save so their own cleanup (cascades) is
        written in the same pass.
        """
        self.emit(suffix, **payload)
        self.coordinator._persist()
        self.coordinator.async_update_listeners()

    def emit(self, suffix: str, **payload: Any) -> None:
        """Send an entry-scoped signal; listeners get the payload as one dict."""
        signal = get_event_signal(self.entry_id, suffix)
        const.LOGGER.debug(
            "DEBUG: %s emits '%s' (%s)",
            self.__class__.__name__,
            suffix,
            ", ".join(sorted(payload)),
        )
        async_dispatcher_send(self.hass, signal, payload)

    def listen(self, suffix: str, callback: Callable[..., Any]) -> None:
        """Subscribe to an entry-scoped signal until the entry unloads."""
        signal = get_event_signal(self.entry_id, suffix)
        self.coordinator.config_entry.async_on_unload(
            async_dispatcher_connect(self.hass, signal, callback)
        )
        const.LOGGER.debug(
            "DEBUG: %s listens to '%s'", self.__class__.__name__, suffix
        )

    @abstractmethod
    async def async_setup(self) -> None:
        """Subscribe to other managers' signals. Called on first refresh."""
