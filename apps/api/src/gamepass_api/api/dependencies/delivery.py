from __future__ import annotations

from fastapi import Request

from gamepass_api.services.gamepass.delivery import CharacterDeliveryGateway, HttpCharacterDeliveryClient


def get_delivery_gateway(request: Request) -> CharacterDeliveryGateway:
    """Gateway created at startup, or a per-request client when the app has none."""

    gateway = getattr(request.app.state, "character_delivery", None)
    if gateway is None:
        gateway = HttpCharacterDeliveryClient.from_settings()
    return gateway
