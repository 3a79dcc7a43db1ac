"""Application lifespan management."""

import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any

import httpx
from fastapi import FastAPI

from sinnaybot import __version__
from sinnaybot.logging_config import get_logger, log_with_context
from sinnaybot.middleware.logging_middleware import redact_sensitive_data
from sinnaybot.state_managers import ChatConnectionManager, OAuthStateStore, SpotifySessionStore

logger = get_logger(__name__)


async def log_request(request: httpx.Request) -> None:
    """Event hook to log outbound requests with redacted sensitive data."""
    log_with_context(
        logger,
        "info",
        "HTTP Request",
        method=request.method,
        url=redact_sensitive_data(str(request.url)),
        event_type="http_request",
    )


async def log_response(response: httpx.Response) -> None:
    """Event hook to log outbound responses with redacted sensitive data."""
    log_with_context(
        logger,
        "info",
        "HTTP Response",
        status_code=response.status_code,
        url=redact_sensitive_data(str(response.request.url)),
        event_type="http_response",
    )


def create_http_client() -> httpx.AsyncClient:
    """Create the shared pooled HTTP client used for every outbound call."""
    event_hooks: dict[str, list[Callable[..., Any]]] = {
        "request": [log_request],
        "response": [log_response],
    }
    return httpx.AsyncClient(
        timeout=httpx.Timeout(
            connect=5.0,  # Connection establishment timeout
            read=10.0,  # Read response timeout
            write=5.0,  # Write operation timeout
            pool=5.0,  # Pool checkout timeout
        ),
        limits=httpx.Limits(
            max_keepalive_connections=5,
            max_connections=10,
            keepalive_expiry=30.0,
        ),
        event_hooks=event_hooks,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan - startup and shutdown events.

    Exceptions after yield are re-raised so cleanup still runs and the
    error is not swallowed.
    """
    app.state.startup_time = time.time()

    log_with_context(
        logger,
        "info",
        "Starting SinnayBot",
        version=__version__,
        event_type="app_startup",
    )

    client = create_http_client()
    app.state.http_client = client

    # State lives on app.state, one instance per application
    app.state.spotify_session_store = SpotifySessionStore()
    app.state.oauth_state_store = OAuthStateStore()
    app.state.chat_connection_manager = ChatConnectionManager()
    await app.state.spotify_session_store.initialize()
    await app.state.oauth_state_store.initialize()
    await app.state.chat_connection_manager.initialize()
    log_with_context(
        logger,
        "info",
        "State managers initialized",
        event_type="state_managers_ready",
    )

    try:
        yield
    except Exception as e:
        log_with_context(
            logger,
            "error",
            "Application error during lifespan",
            error=str(e),
            error_type=type(e).__name__,
            event_type="app_error",
        )
        raise
    finally:
        log_with_context(
            logger,
            "info",
            "Shutting down SinnayBot",
            event_type="app_shutdown",
        )

        # Chat first so no message handler touches the session after it is cleared
        await app.state.chat_connection_manager.cleanup()
        await app.state.spotify_session_store.cleanup()
        await app.state.oauth_state_store.cleanup()

        await client.aclose()
        log_with_context(
            logger,
            "info",
            "HTTP client closed",
            event_type="http_client_cleanup",
        )
