"""Twitch OAuth routes that bring the chat bot online."""

import httpx
from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse, RedirectResponse

from sinnaybot.config import Settings, get_settings
from sinnaybot.dependencies import (
    get_chat_connection_manager,
    get_http_client,
    get_oauth_state_store,
    get_spotify_session_store,
)
from sinnaybot.exceptions import TwitchAuthException
from sinnaybot.logging_config import get_logger, log_with_context
from sinnaybot.services import chat_service, twitch_service
from sinnaybot.state_managers import ChatConnectionManager, OAuthStateStore, SpotifySessionStore

router = APIRouter()
logger = get_logger(__name__)


@router.get("/login")
async def twitch_login(
    settings: Settings = Depends(get_settings),
    state_store: OAuthStateStore = Depends(get_oauth_state_store),
):
    """Redirect the browser to the Twitch authorize page."""
    state = await state_store.issue()
    auth_url = twitch_service.build_authorization_url(
        settings.twitch_client_id,
        settings.twitch_redirect_uri,
        twitch_service.TWITCH_SCOPES,
        state=state,
    )
    return RedirectResponse(url=auth_url)


@router.get("/callback", response_class=PlainTextResponse)
async def twitch_callback(
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    client: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_settings),
    session_store: SpotifySessionStore = Depends(get_spotify_session_store),
    state_store: OAuthStateStore = Depends(get_oauth_state_store),
    chat_manager: ChatConnectionManager = Depends(get_chat_connection_manager),
):
    """Exchange the Twitch code for a token and connect the bot to chat."""
    if error:
        raise TwitchAuthException(f"Twitch auth failed: {error}", status_code=400, details={"error": error})

    if not await state_store.consume(state):
        raise TwitchAuthException("Invalid state parameter", status_code=400)

    if not code:
        raise TwitchAuthException("No authorization code received", status_code=400)

    access_token = await twitch_service.exchange_code_for_token(
        client,
        code,
        settings.twitch_client_id,
        settings.twitch_client_secret,
        settings.twitch_redirect_uri,
        timeout=settings.http_timeout_seconds,
    )

    handler = chat_service.ChatCommandHandler(session_store)
    chat_client = await chat_service.connect_chat(access_token, settings, handler)
    await chat_manager.replace(chat_client)

    log_with_context(
        logger,
        "info",
        "Twitch login complete",
        channel=settings.twitch_broadcast_channel,
        spotify_authenticated=await session_store.is_authenticated(),
        event_type="twitch_auth_success",
    )
    return "Successfully connected the bot to Twitch chat!"
