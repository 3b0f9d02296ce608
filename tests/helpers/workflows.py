"""Service call helpers for Homeschool Assignments tests."""

from typing import Any

from homeassistant.core import Context, HomeAssistant, ServiceResponse

from custom_components.homeschool import const


async def call_service(
    hass: HomeAssistant,
    service: str,
    data: dict[str, Any],
    user_id: str | None = None,
) -> None:
    """Call an integration service, optionally as a specific HA user."""
    await hass.services.async_call(
        const.DOMAIN,
        service,
        data,
        blocking=True,
        context=Context(user_id=user_id) if user_id else None,
    )
    await hass.async_block_till_done()


async def toggle_assignment(
    hass: HomeAssistant,
    data: dict[str, Any],
    user_id: str | None = None,
) -> ServiceResponse:
    """Call toggle_assignment and return its response."""
    response = await hass.services.async_call(
        const.DOMAIN,
        const.SERVICE_TOGGLE_ASSIGNMENT,
        data,
        blocking=True,
        context=Context(user_id=user_id) if user_id else None,
        return_response=True,
    )
    await hass.async_block_till_done()
    return response
