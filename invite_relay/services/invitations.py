"""Invitation handshake: room broadcast, accept/reject and token delivery."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Optional

from ..core.errors import AlreadyIssued, DeliveryFailed, SessionNotFound, UpstreamError, ValidationError
from .registry import SessionRegistry, SignalingConnection, TokenMark
from .rooms import RoomService
from .rtc import TokenMinter

logger = logging.getLogger(__name__)

PARTICIPANT_INFO = "participantInfo"
TOKEN_MESSAGE = "token"
# connection attribute: every name announced on the socket
IDENTITIES = "identities"


@dataclass(slots=True)
class BroadcastResult:
    delivered: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class InvitationCoordinator:
    """Stateless request handlers over the shared session registry."""

    def __init__(self, registry: SessionRegistry, minter: TokenMinter, rooms: RoomService) -> None:
        self.registry = registry
        self.minter = minter
        self.rooms = rooms

    async def broadcast(self, message: Optional[str], from_participant: Optional[str]) -> BroadcastResult:
        """Send ``{message, participantName}`` to every active room.

        Only a failed room listing is an error. A room that rejects the packet
        is logged and skipped so the remaining rooms still get it.
        """

        _require("Message and participantName are required", message, from_participant)

        try:
            room_names = await self.rooms.list_rooms()
        except Exception as exc:  # noqa: BLE001 - any upstream failure aborts the fan-out
            logger.exception("Failed to fetch rooms: %s", exc)
            raise UpstreamError("Failed to fetch rooms") from exc

        payload = json.dumps({"message": message, "participantName": from_participant}).encode("utf-8")
        result = BroadcastResult()
        for room in room_names:
            try:
                await self.rooms.send_data(room, payload)
            except Exception as exc:  # noqa: BLE001 - per-room failures must not stop the loop
                logger.error("Failed to send message to room %s: %s", room, exc)
                result.failed.append(room)
            else:
                logger.info("Message sent to room %s", room)
                result.delivered.append(room)

        logger.info(
            "Broadcast from %s reached %d of %d rooms",
            from_participant,
            len(result.delivered),
            len(room_names),
        )
        return result

    async def accept(self, room_name: Optional[str], participant_name: Optional[str]) -> str:
        """Mint a join token for an invited participant, at most once per connection.

        The token goes back to the caller; pushing it to the participant's
        socket is a separate ``push_token`` call.
        """

        _require("Missing roomName or participantName", room_name, participant_name)

        mark = await self.registry.mark_token_issued(participant_name)
        if mark is TokenMark.NOT_FOUND:
            raise SessionNotFound("Session not found or closed")
        if mark is TokenMark.ALREADY_ISSUED:
            raise AlreadyIssued("Token already issued for this participant")

        # The invitation token is labelled with the room it was accepted for.
        token = self.minter.mint(identity=participant_name, name=room_name, room=room_name)
        logger.info("Invitation accepted: token issued for %s in room %s", participant_name, room_name)
        return token

    async def reject(self, room_name: Optional[str], participant_name: Optional[str]) -> str:
        _require("Missing roomName or participantName", room_name, participant_name)
        logger.info("Invitation to room %s rejected by %s", room_name, participant_name)
        return f"Invitation rejected for room: {room_name}"

    async def push_token(self, participant_name: Optional[str], token: Optional[str]) -> None:
        """Deliver ``{"type": "token", "token": ...}`` over the participant's socket."""

        _require("ParticipantName and token are required", participant_name, token)

        connection = await self.registry.lookup(participant_name)
        if connection is None or not connection.is_open():
            raise SessionNotFound("Session not found or closed")

        try:
            await connection.send({"type": TOKEN_MESSAGE, "token": token})
        except Exception as exc:  # noqa: BLE001 - surface any transport failure as a delivery error
            logger.exception("Failed to send token to %s: %s", participant_name, exc)
            raise DeliveryFailed("Failed to send token") from exc

        logger.info("Token sent to %s on connection %s", participant_name, connection.connection_id)

    async def issue_token(self, room_name: Optional[str], participant_name: Optional[str]) -> str:
        """Self-service join: always a fresh token, no session bookkeeping."""

        _require("roomName and participantName are required", room_name, participant_name)
        return self.minter.mint(identity=participant_name, name=participant_name, room=room_name)

    async def handle_message(self, connection: SignalingConnection, raw: str) -> Optional[str]:
        """Process one inbound text frame; return the identity it registered, if any."""

        try:
            message = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring non-JSON frame on connection %s", connection.connection_id)
            return None

        if not isinstance(message, dict) or message.get("type") != PARTICIPANT_INFO:
            logger.debug("Ignoring frame on connection %s: %r", connection.connection_id, message)
            return None

        identity = message.get("participantName")
        if not isinstance(identity, str) or not identity:
            logger.warning("participantInfo without participantName on connection %s", connection.connection_id)
            return None

        await self.registry.register(identity, connection)
        connection.attributes.setdefault(IDENTITIES, set()).add(identity)
        return identity

    async def release(self, connection: SignalingConnection) -> list[str]:
        """Drop every name this connection registered; return the ones it still held."""

        released = []
        for identity in sorted(connection.attributes.get(IDENTITIES, ())):
            if await self.registry.unregister(identity, connection):
                released.append(identity)
        return released


def _require(detail: str, *values: Optional[str]) -> None:
    if any(not value for value in values):
        raise ValidationError(detail)
