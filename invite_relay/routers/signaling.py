"""Browser WebSocket: participants announce themselves and receive tokens."""
from __future__ import annotations

import logging
from uuid import uuid4

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from ..dependencies import get_coordinator
from ..services.invitations import InvitationCoordinator
from ..services.registry import SignalingConnection

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws")
async def signaling_endpoint(
    websocket: WebSocket,
    coordinator: InvitationCoordinator = Depends(get_coordinator),
) -> None:
    """Register the socket under the name sent in ``participantInfo``."""

    await websocket.accept()
    connection = SignalingConnection(
        connection_id=uuid4().hex,
        send=websocket.send_json,
        is_open=lambda: websocket.application_state == WebSocketState.CONNECTED
        and websocket.client_state == WebSocketState.CONNECTED,
    )
    logger.info("New WebSocket connection: %s", connection.connection_id)

    close_code = None
    try:
        while True:
            raw = await websocket.receive_text()
            await coordinator.handle_message(connection, raw)
    except WebSocketDisconnect as exc:
        close_code = exc.code
    finally:
        await coordinator.release(connection)
        logger.info("WebSocket connection closed: %s, status: %s", connection.connection_id, close_code)
