"""LiveKit webhook verification.

LiveKit signs each delivery with a JWT in the ``Authorization`` header whose
``sha256`` claim is the digest of the raw body; ``WebhookReceiver`` checks both
and parses the body into a typed ``WebhookEvent``."""
from __future__ import annotations

import logging
from typing import Optional

from livekit import api

logger = logging.getLogger(__name__)


class WebhookVerificationError(ValueError):
    """The delivery's signature, checksum or body did not validate."""


class WebhookHandler:
    def __init__(self, api_key: str, api_secret: str) -> None:
        self._receiver = api.WebhookReceiver(api.TokenVerifier(api_key, api_secret))

    def verify(self, body: str, auth_header: Optional[str]) -> api.WebhookEvent:
        """Return the decoded event or raise ``WebhookVerificationError``."""

        if not auth_header:
            raise WebhookVerificationError("authorization header is missing")
        token = auth_header.removeprefix("Bearer ").strip()

        try:
            return self._receiver.receive(body, token)
        except Exception as exc:  # noqa: BLE001 - any receiver failure is a rejected delivery
            raise WebhookVerificationError(str(exc) or type(exc).__name__) from exc

    def receive(self, body: str, auth_header: Optional[str]) -> Optional[api.WebhookEvent]:
        """Verify a delivery, log it, and never raise.

        The sender retries anything that is not acknowledged, so rejected
        deliveries are logged and acknowledged like valid ones.
        """

        try:
            event = self.verify(body, auth_header)
        except WebhookVerificationError as exc:
            logger.warning("Error validating webhook event: %s", exc)
            return None

        logger.info(
            "LiveKit webhook: event=%s room=%s participant=%s",
            event.event,
            event.room.name or None,
            event.participant.identity or None,
        )
        return event
