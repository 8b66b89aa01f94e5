"""Error taxonomy shared by the coordinator and the HTTP layer."""
from __future__ import annotations

from fastapi import status


class RelayError(Exception):
    """Base error carrying the HTTP status it maps to at the handler boundary."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class ValidationError(RelayError):
    """A required request field is missing or empty."""

    status_code = status.HTTP_400_BAD_REQUEST


class SessionNotFound(RelayError):
    """No open connection is registered under the requested identity."""

    status_code = status.HTTP_404_NOT_FOUND


class AlreadyIssued(RelayError):
    """A token was already handed out for this connection."""

    status_code = status.HTTP_400_BAD_REQUEST


class UpstreamError(RelayError):
    """The LiveKit server could not be reached or rejected the call."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class DeliveryFailed(RelayError):
    """Writing to the participant's WebSocket raised."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
