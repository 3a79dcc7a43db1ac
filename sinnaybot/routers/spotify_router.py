"""Spotify OAuth and now-playing routes."""

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, RedirectResponse

from sinnaybot.config import Settings, get_settings
from sinnaybot.dependencies import get_http_client, get_oauth_state_store, get_spotify_session_store
from sinnaybot.exceptions import SpotifyNotAuthenticatedException
from sinnaybot.logging_config import get_logger, log_with_context
from sinnaybot.services import spotify_service
from sinnaybot.state_managers import OAuthStateStore, SpotifySessionStore
from sinnaybot.views import TemplateRenderer

router = APIRouter()
logger = get_logger(__name__)


@router.get("/login", name="spotify_login")
async def spotify_login(
    settings: Settings = Depends(get_settings),
    state_store: OAuthStateStore = Depends(get_oauth_state_store),
):
    """Redirect the browser to the Spotify authorize page."""
    state = await state_store.issue()
    auth_url = spotify_service.build_authorization_url(
        settings.spotify_client_id,
        settings.spotify_redirect_uri,
        spotify_service.SPOTIFY_SCOPES,
        state,
    )
    return RedirectResponse(url=auth_url)


@router.get("/callback", response_class=PlainTextResponse)
async def spotify_callback(
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    client: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_settings),
    session_store: SpotifySessionStore = Depends(get_spotify_session_store),
    state_store: OAuthStateStore = Depends(get_oauth_state_store),
):
    """Handle the Spotify OAuth callback.

    Failures surface as error responses through the registered
    exception handler.
    """
    await spotify_service.complete_authorization(
        client,
        settings,
        session_store,
        state_store,
        code=code,
        state=state,
        error=error,
    )
    return "Successfully authenticated with Spotify!"


@router.get("/current")
async def spotify_current(
    request: Request,
    session_store: SpotifySessionStore = Depends(get_spotify_session_store),
):
    """Show the track currently playing on Spotify."""
    try:
        track = await spotify_service.get_current_track(session_store)
    except SpotifyNotAuthenticatedException:
        log_with_context(
            logger,
            "info",
            "Now-playing page requested before Spotify login",
            event_type="spotify_not_authenticated",
        )
        return TemplateRenderer.render_spotify_needs_auth(request)

    if not track.is_playing:
        return PlainTextResponse("No track currently playing.")

    artist = track.artist_name or "Unknown artist"
    return PlainTextResponse(f"Currently playing on Spotify: {track.track_name} by {artist}")
