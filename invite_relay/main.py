"""FastAPI application for the LiveKit invitation relay."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from .core.config import settings
from .core.errors import RelayError
from .core.logging import configure_logging
from .dependencies import get_coordinator, get_room_service
from .routers import invitations, signaling, webhooks
from .services.invitations import InvitationCoordinator

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    logger.info("Invitation relay starting (env=%s, livekit=%s)", settings.app_env, settings.livekit_url)
    yield
    await get_room_service().aclose()


app = FastAPI(title="LiveKit Invitation Relay", version="0.1.0", lifespan=lifespan)

if settings.cors_allow_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies are client errors like missing fields: 400, not 422."""

    logger.info("Rejected malformed request to %s: %s", request.url.path, exc.errors())
    return JSONResponse({"error": "Malformed request body"}, status_code=400)


@app.exception_handler(RelayError)
async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    logger.warning("%s on %s: %s", type(exc).__name__, request.url.path, exc.detail)
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code)


@app.get("/api/health", tags=["meta"])
async def health(coordinator: InvitationCoordinator = Depends(get_coordinator)) -> dict[str, object]:
    """Liveness probe with the number of registered participants."""

    return {"status": "ok", "sessions": len(await coordinator.registry.identities())}


@app.head("/api/health", tags=["meta"])
async def health_head() -> Response:
    """Allow HEAD for uptime monitors that only need the status code."""

    return Response(status_code=200)


app.include_router(invitations.router, tags=["invitations"])
app.include_router(signaling.router, tags=["signaling"])
app.include_router(webhooks.router, tags=["webhooks"])
