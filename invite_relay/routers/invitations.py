"""Invitation, broadcast and token endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, PlainTextResponse

from ..core.errors import RelayError
from ..dependencies import get_coordinator
from ..schemas import invitations as schemas
from ..services.invitations import InvitationCoordinator

router = APIRouter()


@router.post("/messageAllRooms", response_class=PlainTextResponse)
async def message_all_rooms(
    payload: schemas.BroadcastRequest,
    coordinator: InvitationCoordinator = Depends(get_coordinator),
) -> PlainTextResponse:
    """Notify every active room; per-room failures only show up in the logs."""

    try:
        await coordinator.broadcast(payload.message, payload.participantName)
    except RelayError as exc:
        return PlainTextResponse(exc.detail, status_code=exc.status_code)
    return PlainTextResponse("Message sent to all rooms")


@router.post("/accept", response_model=schemas.TokenResponse)
async def accept_invitation(
    payload: schemas.AcceptRequest,
    coordinator: InvitationCoordinator = Depends(get_coordinator),
) -> schemas.TokenResponse | JSONResponse:
    """Issue the invited participant's join token once per connection."""

    try:
        token = await coordinator.accept(payload.roomName, payload.requestParticipantName)
    except RelayError as exc:
        return JSONResponse({"error": exc.detail}, status_code=exc.status_code)
    return schemas.TokenResponse(token=token)


@router.post("/reject", response_class=PlainTextResponse)
async def reject_invitation(
    payload: schemas.RejectRequest,
    coordinator: InvitationCoordinator = Depends(get_coordinator),
) -> PlainTextResponse:
    try:
        confirmation = await coordinator.reject(payload.roomName, payload.participantName)
    except RelayError as exc:
        return PlainTextResponse(exc.detail, status_code=exc.status_code)
    return PlainTextResponse(confirmation)


@router.post("/sendToken", response_class=PlainTextResponse)
async def send_token(
    payload: schemas.SendTokenRequest,
    coordinator: InvitationCoordinator = Depends(get_coordinator),
) -> PlainTextResponse:
    """Push a token to the participant's open WebSocket."""

    try:
        await coordinator.push_token(payload.participantName, payload.token)
    except RelayError as exc:
        return PlainTextResponse(exc.detail, status_code=exc.status_code)
    return PlainTextResponse("Token sent")


@router.post("/token", response_model=schemas.TokenResponse)
async def create_token(
    payload: schemas.TokenRequest,
    coordinator: InvitationCoordinator = Depends(get_coordinator),
) -> schemas.TokenResponse | JSONResponse:
    """Return a room access token for a participant joining on their own."""

    try:
        token = await coordinator.issue_token(payload.roomName, payload.participantName)
    except RelayError as exc:
        return JSONResponse({"errorMessage": exc.detail}, status_code=exc.status_code)
    return schemas.TokenResponse(token=token)
