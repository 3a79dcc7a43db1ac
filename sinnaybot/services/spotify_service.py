"""Spotify Web API service: OAuth flow and now-playing query."""

from typing import Any
from urllib.parse import urlencode

import httpx

from sinnaybot.config import Settings
from sinnaybot.exceptions import SpotifyAuthException, SpotifyProviderException
from sinnaybot.logging_config import get_logger, log_with_context
from sinnaybot.models import TrackInfo
from sinnaybot.state_managers import OAuthStateStore, SpotifySessionStore

logger = get_logger(__name__)

SPOTIFY_AUTHORIZE_URL = "https://accounts.spotify.com/authorize"
SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"
SPOTIFY_CURRENTLY_PLAYING_URL = "https://api.spotify.com/v1/me/player/currently-playing"

# Only the currently playing track is ever read
SPOTIFY_SCOPES = ["user-read-currently-playing"]


class SpotifyClient:
    """Authenticated Spotify handle built from an OAuth access token.

    Shares the application's pooled HTTP client; every request carries
    its own timeout so a slow Spotify API can't pin a request handler.
    """

    def __init__(self, http_client: httpx.AsyncClient, access_token: str, timeout: float = 10.0):
        self._http_client = http_client
        self._access_token = access_token
        self._timeout = timeout

    async def get_currently_playing(self) -> dict[str, Any] | None:
        """Get the raw currently-playing payload.

        Returns:
            Spotify JSON, or None when Spotify answers 204 (nothing playing)

        Raises:
            httpx.HTTPError: On transport failure or non-2xx status
            ValueError: If the body isn't valid JSON
        """
        response = await self._http_client.get(
            SPOTIFY_CURRENTLY_PLAYING_URL,
            headers={"Authorization": f"Bearer {self._access_token}"},
            timeout=self._timeout,
        )
        response.raise_for_status()
        if response.status_code == 204:
            return None
        return response.json()


def build_authorization_url(client_id: str, redirect_uri: str, scopes: list[str], state: str) -> str:
    """Build the Spotify authorize URL the browser is redirected to.

    Pure string construction, no network call.
    """
    params = {
        "client_id": client_id,
        "response_type": "code",
        "redirect_uri": redirect_uri,
        "scope": " ".join(scopes),
        "state": state,
    }
    return f"{SPOTIFY_AUTHORIZE_URL}?{urlencode(params)}"


async def complete_authorization(
    client: httpx.AsyncClient,
    settings: Settings,
    session_store: SpotifySessionStore,
    state_store: OAuthStateStore,
    code: str | None,
    state: str | None,
    error: str | None = None,
) -> SpotifyClient:
    """
    Finish the Spotify OAuth flow and install the session.

    Args:
        client: Shared HTTP client from dependency injection.
        settings: Settings with Spotify credentials.
        session_store: Store that receives the authenticated handle.
        state_store: Store that issued the ``state`` for this flow.
        code: Authorization code from the callback query.
        state: State value echoed back by Spotify.
        error: Error reported by Spotify instead of a code.

    Returns:
        The authenticated SpotifyClient now held by the session store.

    Raises:
        SpotifyAuthException: On provider error, unknown state, missing code
            or a failed token exchange.
    """
    if error:
        raise SpotifyAuthException(f"Spotify auth failed: {error}", status_code=400, details={"error": error})

    if not await state_store.consume(state):
        log_with_context(
            logger,
            "warning",
            "Rejected Spotify callback with unknown state",
            event_type="spotify_auth_state_invalid",
        )
        raise SpotifyAuthException("Invalid state parameter", status_code=400)

    if not code:
        raise SpotifyAuthException("No authorization code received", status_code=400)

    try:
        response = await client.post(
            SPOTIFY_TOKEN_URL,
            auth=(settings.spotify_client_id, settings.spotify_client_secret),
            data={
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": settings.spotify_redirect_uri,
            },
            timeout=settings.http_timeout_seconds,
        )
        response.raise_for_status()
        data = response.json()
        access_token = data["access_token"]
    except httpx.HTTPStatusError as e:
        raise SpotifyAuthException(
            f"Spotify token exchange failed: {str(e)}",
            details={"status_code": e.response.status_code},
        ) from e
    except httpx.HTTPError as e:
        raise SpotifyAuthException(f"Spotify token exchange failed: {str(e)}", status_code=502) from e
    except (KeyError, TypeError, ValueError) as e:
        raise SpotifyAuthException(f"Invalid Spotify token response: {str(e)}", status_code=502) from e

    if not access_token:
        raise SpotifyAuthException("Spotify token response had an empty access token", status_code=502)

    spotify_client = SpotifyClient(client, access_token, timeout=settings.http_timeout_seconds)
    await session_store.set(spotify_client)

    log_with_context(logger, "info", "Spotify session installed", event_type="spotify_auth_success")
    return spotify_client


def _parse_track(data: dict[str, Any] | None) -> TrackInfo:
    if not data or not data.get("is_playing"):
        return TrackInfo(is_playing=False)

    item = data.get("item")
    if not item:
        return TrackInfo(is_playing=False)

    artists = item.get("artists") or []
    return TrackInfo(
        is_playing=True,
        track_name=item.get("name"),
        artist_name=artists[0].get("name") if artists else None,
    )


async def get_current_track(session_store: SpotifySessionStore) -> TrackInfo:
    """
    Get the track currently playing on the authenticated account.

    Args:
        session_store: Store holding the Spotify session.

    Returns:
        TrackInfo; ``is_playing`` is False when nothing is playing.

    Raises:
        SpotifyNotAuthenticatedException: If no Spotify session exists yet.
        SpotifyProviderException: If Spotify can't be reached or answers badly.
    """
    spotify_client = await session_store.get()

    try:
        data = await spotify_client.get_currently_playing()
        return _parse_track(data)
    except httpx.HTTPStatusError as e:
        log_with_context(
            logger,
            "warning",
            "Spotify currently-playing request rejected",
            status_code=e.response.status_code,
            event_type="spotify_query_error",
        )
        raise SpotifyProviderException(
            f"Failed to get currently playing track: {str(e)}",
            details={"status_code": e.response.status_code},
        ) from e
    except httpx.HTTPError as e:
        log_with_context(
            logger,
            "warning",
            "Spotify currently-playing request failed",
            error=str(e),
            error_type=type(e).__name__,
            event_type="spotify_query_error",
        )
        raise SpotifyProviderException(f"Failed to get currently playing track: {str(e)}") from e
    except (AttributeError, TypeError, ValueError) as e:
        raise SpotifyProviderException(f"Invalid Spotify playback response: {str(e)}") from e
