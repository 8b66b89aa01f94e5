"""Process-wide service instances and their FastAPI dependency accessors."""
from __future__ import annotations

from functools import lru_cache

from .core.config import get_settings
from .services.invitations import InvitationCoordinator
from .services.registry import registry
from .services.rooms import LiveKitRoomService
from .services.rtc import LiveKitTokenMinter
from .services.webhooks import WebhookHandler


@lru_cache
def get_token_minter() -> LiveKitTokenMinter:
    settings = get_settings()
    return LiveKitTokenMinter(
        settings.livekit_api_key,
        settings.livekit_api_secret,
        ttl_seconds=settings.token_ttl_seconds,
    )


@lru_cache
def get_room_service() -> LiveKitRoomService:
    settings = get_settings()
    return LiveKitRoomService(settings.livekit_url, settings.livekit_api_key, settings.livekit_api_secret)


@lru_cache
def get_coordinator() -> InvitationCoordinator:
    """Return the coordinator bound to the shared registry and LiveKit clients."""

    return InvitationCoordinator(registry, get_token_minter(), get_room_service())


@lru_cache
def get_webhook_handler() -> WebhookHandler:
    settings = get_settings()
    return WebhookHandler(settings.livekit_api_key, settings.livekit_api_secret)
