"""Initialization file for the Homeschool Assignments integration.

Handles setting up the integration, including loading configuration entries,
initializing data storage, and preparing the coordinator for data handling.

Key Features:
- Config entry setup, unload and removal.
- Coordinator initialization and service registration.
- Reload when options change.
"""

from __future__ import annotations

from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ConfigEntryNotReady

from . import const
from .coordinator import HomeschoolConfigEntry, HomeschoolDataCoordinator
from .services import async_setup_services, async_unload_services
from .store import HomeschoolStore


async def async_setup_entry(hass: HomeAssistant, entry: HomeschoolConfigEntry) -> bool:
    """Set up the integration from a config entry."""
    const.LOGGER.info("INFO: Starting setup for Homeschool entry: %s", entry.entry_id)

    const.set_default_timezone(hass)

    store = HomeschoolStore(hass, const.STORAGE_KEY)
    await store.async_initialize()

    coordinator = HomeschoolDataCoordinator(hass, entry, store)

    try:
        await coordinator.async_config_entry_first_refresh()
    except ConfigEntryNotReady as e:
        const.LOGGER.error("ERROR: Failed to refresh coordinator data: %s", e)
        raise

    entry.runtime_data = coordinator

    async_setup_services(hass)

    await hass.config_entries.async_forward_entry_setups(entry, const.PLATFORMS)

    entry.async_on_unload(entry.add_update_listener(async_update_options))

    const.LOGGER.info("INFO: Homeschool setup complete for entry: %s", entry.entry_id)
    return True


async def async_update_options(hass: HomeAssistant, entry: HomeschoolConfigEntry) -> None:
    """Reload the entry so new lookahead and refresh settings apply."""
    const.LOGGER.debug("DEBUG: Options updated, reloading entry %s", entry.entry_id)
    await hass.config_entries.async_reload(entry.entry_id)


async def async_unload_entry(hass: HomeAssistant, entry: HomeschoolConfigEntry) -> bool:
    """Unload a config entry."""
    const.LOGGER.info("INFO: Unloading Homeschool entry: %s", entry.entry_id)

    unload_ok = await hass.config_entries.async_unload_platforms(entry, const.PLATFORMS)

    if unload_ok:
        # Flush pending writes before the coordinator goes away
        await entry.runtime_data.store.async_save()
        await async_unload_services(hass)

    return unload_ok


async def async_remove_entry(hass: HomeAssistant, entry: HomeschoolConfigEntry) -> None:
    """Handle removal of a config entry by deleting its storage file."""
    const.LOGGER.info("INFO: Removing Homeschool entry: %s", entry.entry_id)

    store = HomeschoolStore(hass, const.STORAGE_KEY)
    await store.async_delete_storage()

    const.LOGGER.info("INFO: Homeschool entry data cleared: %s", entry.entry_id)
