"""LiveKit webhook receiver."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import PlainTextResponse

from ..dependencies import get_webhook_handler
from ..services.webhooks import WebhookHandler

router = APIRouter()


@router.post("/livekit/webhook", response_class=PlainTextResponse)
async def receive_webhook(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    handler: WebhookHandler = Depends(get_webhook_handler),
) -> PlainTextResponse:
    """Acknowledge every delivery; invalid ones are only logged."""

    raw = await request.body()
    handler.receive(raw.decode("utf-8", errors="replace"), authorization)
    return PlainTextResponse("ok")
