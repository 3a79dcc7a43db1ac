"""Pytest configuration and shared fixtures."""

from typing import Any
from unittest.mock import AsyncMock, patch

import aiohttp
import httpx
import pytest
from fastapi.testclient import TestClient
from twitchio.backoff import ExponentialBackoff
from twitchio.http import TwitchHTTP

from sinnaybot.config import Settings, get_settings
from sinnaybot.dependencies import get_http_client
from sinnaybot.main import app as fastapi_app
from sinnaybot.state_managers import OAuthStateStore, SpotifySessionStore


def make_response(
    status_code: int,
    json: Any = None,
    content: bytes | None = None,
    url: str = "https://example.test/",
    method: str = "GET",
) -> httpx.Response:
    """Build a real httpx.Response bound to a request, so raise_for_status works."""
    request = httpx.Request(method, url)
    if json is not None:
        return httpx.Response(status_code, json=json, request=request)
    return httpx.Response(status_code, content=content or b"", request=request)


class FakeMusicClient:
    """Stand-in Spotify handle with a scripted currently-playing result."""

    def __init__(self, payload: dict[str, Any] | None = None, error: Exception | None = None):
        self.payload = payload
        self.error = error
        self.calls = 0

    async def get_currently_playing(self) -> dict[str, Any] | None:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.payload


class FakeChannel:
    """Collects chat replies."""

    def __init__(self, name: str = "sinnay"):
        self.name = name
        self.sent: list[str] = []

    async def send(self, content: str) -> None:
        self.sent.append(content)


@pytest.fixture
def mock_settings():
    """Settings instance with test values."""
    return Settings(
        api_host="127.0.0.1",
        api_port=8080,
        twitch_client_id="test-twitch-client-id",
        twitch_client_secret="test-twitch-client-secret",
        twitch_redirect_uri="http://localhost:8080/twitch/callback",
        twitch_bot_username="SinnayBot",
        twitch_broadcast_channel="sinnay",
        spotify_client_id="test-spotify-client-id",
        spotify_client_secret="test-spotify-client-secret",
        spotify_redirect_uri="http://localhost:8080/spotify/callback",
        http_timeout_seconds=5.0,
    )


@pytest.fixture
def mock_http_client():
    """Mock httpx.AsyncClient for external API calls."""
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    mock_client.get = AsyncMock()
    mock_client.post = AsyncMock()
    mock_client.aclose = AsyncMock()
    return mock_client


@pytest.fixture
def session_store():
    return SpotifySessionStore()


@pytest.fixture
def state_store():
    return OAuthStateStore()


@pytest.fixture
def unreachable_chat_server():
    """Twitch IRC websocket that refuses every connection attempt.

    The token check succeeds and opens the client's aiohttp session, the
    websocket connect always fails and twitchio's reconnect backoff is
    shortened so the retry loop spins fast. Yields the sessions opened.
    """
    sessions: list[aiohttp.ClientSession] = []

    async def validate(self, *, token=None):
        self.session = aiohttp.ClientSession()
        sessions.append(self.session)
        return {"login": "sinnaybot", "user_id": "1"}

    with (
        patch.object(TwitchHTTP, "validate", validate),
        patch.object(aiohttp.ClientSession, "ws_connect", AsyncMock(side_effect=OSError("irc unreachable"))),
        patch.object(ExponentialBackoff, "delay", return_value=0.01),
    ):
        yield sessions


@pytest.fixture
def spotify_playing_payload():
    """Spotify currently-playing response for an active track."""
    return {
        "is_playing": True,
        "progress_ms": 60000,
        "item": {
            "name": "Test Song",
            "artists": [{"name": "Test Artist"}, {"name": "Featured Artist"}],
            "album": {"name": "Test Album"},
            "duration_ms": 240000,
        },
    }


@pytest.fixture
def test_client(mock_settings, mock_http_client):
    """FastAPI test client with lifespan, fake settings and a mocked outbound HTTP client."""
    fastapi_app.dependency_overrides[get_settings] = lambda: mock_settings
    fastapi_app.dependency_overrides[get_http_client] = lambda: mock_http_client
    with TestClient(fastapi_app) as client:
        yield client
    fastapi_app.dependency_overrides.clear()
