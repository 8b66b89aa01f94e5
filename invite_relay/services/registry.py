"""In-memory registry of announced participants and their WebSocket connections."""
from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional

logger = logging.getLogger(__name__)

SendCallable = Callable[[dict], Awaitable[None]]
OpenCallable = Callable[[], bool]

TOKEN_ISSUED = "token_issued"


def _always_open() -> bool:
    return True


@dataclass(slots=True, eq=False)
class SignalingConnection:
    """Non-owning handle to a browser connection.

    The transport owns the socket; the registry only keeps this wrapper. The
    attribute bag is per connection, so a reconnect starts with a clean slate.
    """

    connection_id: str
    send: SendCallable
    is_open: OpenCallable = _always_open
    attributes: Dict[str, Any] = field(default_factory=dict)


class TokenMark(str, enum.Enum):
    ISSUED = "issued"
    ALREADY_ISSUED = "already_issued"
    NOT_FOUND = "not_found"


class SessionRegistry:
    """Map participant identity to its live connection, last writer wins.

    Identities are matched as exact, case-sensitive strings. All mutations
    happen under one lock and no outbound I/O runs while it is held.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, SignalingConnection] = {}
        self._lock = asyncio.Lock()

    async def register(self, identity: str, connection: SignalingConnection) -> Optional[SignalingConnection]:
        """Upsert ``identity`` and return the handle it displaced, if any."""

        async with self._lock:
            previous = self._sessions.get(identity)
            self._sessions[identity] = connection

        if previous is not None and previous is not connection:
            logger.info(
                "Participant %s re-registered (connection %s replaces %s)",
                identity,
                connection.connection_id,
                previous.connection_id,
            )
        else:
            logger.info("Participant %s registered on connection %s", identity, connection.connection_id)
        return previous

    async def lookup(self, identity: str) -> Optional[SignalingConnection]:
        async with self._lock:
            return self._sessions.get(identity)

    async def mark_token_issued(self, identity: str) -> TokenMark:
        """Set the token flag for ``identity`` unless it is already set.

        A handle whose socket has closed is reported as ``NOT_FOUND`` and left
        untouched.
        """

        async with self._lock:
            connection = self._sessions.get(identity)
            if connection is None or not connection.is_open():
                return TokenMark.NOT_FOUND
            if connection.attributes.get(TOKEN_ISSUED):
                return TokenMark.ALREADY_ISSUED
            connection.attributes[TOKEN_ISSUED] = True
            return TokenMark.ISSUED

    async def unregister(self, identity: str, connection: SignalingConnection) -> bool:
        """Drop ``identity`` only while it still points at ``connection``."""

        async with self._lock:
            current = self._sessions.get(identity)
            if current is not connection:
                return False
            del self._sessions[identity]

        logger.info("Participant %s unregistered (connection %s closed)", identity, connection.connection_id)
        return True

    async def identities(self) -> list[str]:
        async with self._lock:
            return list(self._sessions)


registry = SessionRegistry()
