"""Client for the LiveKit RoomService."""
from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol

from livekit import api

logger = logging.getLogger(__name__)


class RoomService(Protocol):
    async def list_rooms(self) -> list[str]:
        """Return the names of every active room."""

    async def send_data(self, room: str, payload: bytes) -> None:
        """Deliver ``payload`` reliably to all participants of ``room``."""


class LiveKitRoomService:
    """Room listing and data packets through ``livekit.api.LiveKitAPI``.

    The API client opens an aiohttp session, so it is created on first use
    inside the running event loop and closed on application shutdown.
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        api_secret: str,
        api_factory: Callable[..., api.LiveKitAPI] = api.LiveKitAPI,
    ) -> None:
        self._url = url
        self._api_key = api_key
        self._api_secret = api_secret
        self._api_factory = api_factory
        self._api: Optional[api.LiveKitAPI] = None

    async def list_rooms(self) -> list[str]:
        response = await self._client().room.list_rooms(api.ListRoomsRequest())
        return [room.name for room in response.rooms if room.name]

    async def send_data(self, room: str, payload: bytes) -> None:
        await self._client().room.send_data(
            api.SendDataRequest(
                room=room,
                data=payload,
                kind=api.DataPacket.Kind.RELIABLE,
                destination_identities=[],
            )
        )

    async def aclose(self) -> None:
        if self._api is not None:
            await self._api.aclose()
            self._api = None

    def _client(self) -> api.LiveKitAPI:
        if self._api is None:
            logger.debug("Opening LiveKit API client for %s", self._url)
            self._api = self._api_factory(self._url, self._api_key, self._api_secret)
        return self._api
