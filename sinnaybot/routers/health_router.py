"""Health endpoints."""

from datetime import UTC, datetime

import httpx
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from sinnaybot import __version__
from sinnaybot.dependencies import get_chat_connection_manager, get_http_client, get_spotify_session_store
from sinnaybot.models import DetailedHealthResponse, HealthResponse
from sinnaybot.state_managers import ChatConnectionManager, SpotifySessionStore

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Basic liveness check."""
    return HealthResponse(status="ok", version=__version__)


@router.get("/health/ready", response_model=DetailedHealthResponse)
async def readiness_check(
    client: httpx.AsyncClient = Depends(get_http_client),
    session_store: SpotifySessionStore = Depends(get_spotify_session_store),
    chat_manager: ChatConnectionManager = Depends(get_chat_connection_manager),
):
    """Readiness probe - is the bot able to answer chat commands?

    **Returns:**
    - 200: HTTP client ready, Spotify authenticated and chat connected
    - 503: One of the two logins hasn't happened yet
    """
    checks = {}

    checks["http_client"] = "ok" if client else "failed"
    checks["spotify_auth"] = "ok" if await session_store.is_authenticated() else "not_authenticated"
    checks["twitch_chat"] = "ok" if await chat_manager.is_connected() else "not_connected"

    all_healthy = all(result == "ok" for result in checks.values())

    return JSONResponse(
        status_code=200 if all_healthy else 503,
        content=DetailedHealthResponse(
            status="healthy" if all_healthy else "unhealthy",
            version=__version__,
            timestamp=datetime.now(UTC),
            checks=checks,
        ).model_dump(mode="json"),
    )
