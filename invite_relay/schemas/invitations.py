"""Data contracts for the invitation endpoints.

Fields default to ``None`` so a missing value reaches the coordinator and is
answered with the endpoint's own 400 message instead of a generic 422."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class _Request(BaseModel):
    model_config = ConfigDict(extra="ignore")


class BroadcastRequest(_Request):
    message: Optional[str] = Field(default=None, description="Notification text")
    participantName: Optional[str] = Field(default=None, description="Sender shown to recipients")


class AcceptRequest(_Request):
    roomName: Optional[str] = Field(default=None, description="Room the invitation is for")
    requestParticipantName: Optional[str] = Field(default=None, description="Identity of the invited participant")


class RejectRequest(_Request):
    roomName: Optional[str] = None
    participantName: Optional[str] = None


class SendTokenRequest(_Request):
    participantName: Optional[str] = Field(default=None, description="Registered identity to push to")
    token: Optional[str] = Field(default=None, description="Token to deliver over the WebSocket")


class TokenRequest(_Request):
    roomName: Optional[str] = Field(default=None, description="Room name to join")
    participantName: Optional[str] = Field(default=None, description="Participant identity")


class TokenResponse(BaseModel):
    token: str = Field(..., description="LiveKit JWT")
