"""FastAPI dependencies for dependency injection."""

import httpx
from fastapi import Request

from sinnaybot.state_managers import ChatConnectionManager, OAuthStateStore, SpotifySessionStore


async def get_http_client(request: Request) -> httpx.AsyncClient:
    """
    Get the shared HTTP client from app state.

    Raises:
        RuntimeError: If HTTP client is not initialized.
    """
    client: httpx.AsyncClient | None = getattr(request.app.state, "http_client", None)

    if client is None:
        raise RuntimeError("HTTP client not initialized. This should never happen.")

    return client


async def get_spotify_session_store(request: Request) -> SpotifySessionStore:
    """
    Get the Spotify session store from app state.

    Raises:
        RuntimeError: If the session store is not initialized.
    """
    store: SpotifySessionStore | None = getattr(request.app.state, "spotify_session_store", None)

    if store is None:
        raise RuntimeError("Spotify session store not initialized.")

    return store


async def get_oauth_state_store(request: Request) -> OAuthStateStore:
    """Get the OAuth state store from app state."""
    store: OAuthStateStore | None = getattr(request.app.state, "oauth_state_store", None)

    if store is None:
        raise RuntimeError("OAuth state store not initialized.")

    return store


async def get_chat_connection_manager(request: Request) -> ChatConnectionManager:
    """Get the chat connection manager from app state."""
    manager: ChatConnectionManager | None = getattr(request.app.state, "chat_connection_manager", None)

    if manager is None:
        raise RuntimeError("Chat connection manager not initialized.")

    return manager
