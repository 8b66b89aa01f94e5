"""LiveKit access token issuance."""
from __future__ import annotations

from datetime import timedelta
from typing import Optional, Protocol

from livekit import api

DEFAULT_TTL_SECONDS = 6 * 60 * 60


class TokenMinter(Protocol):
    def mint(self, identity: str, name: str, room: str) -> str:
        """Return a signed token granting ``identity`` permission to join ``room``."""


class LiveKitTokenMinter:
    """Sign LiveKit join tokens with the server's API key pair."""

    def __init__(self, api_key: str, api_secret: str, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> None:
        if not api_key or not api_secret:
            raise ValueError("LiveKit API key and secret are required to sign tokens")
        self._api_key = api_key
        self._api_secret = api_secret
        self._ttl = ttl_seconds

    def mint(self, identity: str, name: str, room: str, ttl_seconds: Optional[int] = None) -> str:
        ttl = self._ttl if ttl_seconds is None else ttl_seconds
        return (
            api.AccessToken(self._api_key, self._api_secret)
            .with_identity(identity)
            .with_name(name)
            .with_grants(api.VideoGrants(room_join=True, room=room))
            .with_ttl(timedelta(seconds=ttl))
            .to_jwt()
        )

    def verifier(self) -> api.TokenVerifier:
        """Verifier for tokens signed with the same key pair."""

        return api.TokenVerifier(self._api_key, self._api_secret)
