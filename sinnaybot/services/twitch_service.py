"""Twitch OAuth service (authorization code flow for the chat bot)."""

from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from sinnaybot.exceptions import TwitchAuthException
from sinnaybot.logging_config import get_logger, log_with_context
from sinnaybot.models import TwitchTokenResponse

logger = get_logger(__name__)

TWITCH_AUTHORIZE_URL = "https://id.twitch.tv/oauth2/authorize"
TWITCH_TOKEN_URL = "https://id.twitch.tv/oauth2/token"

# Scopes the bot needs to read and write chat
TWITCH_SCOPES = ["chat:edit", "chat:read"]


def build_authorization_url(
    client_id: str,
    redirect_uri: str,
    scopes: list[str],
    state: str | None = None,
) -> str:
    """Build the Twitch authorize URL.

    The redirect URI is query-escaped and scopes are space-joined.
    """
    params = {
        "client_id": client_id,
        "redirect_uri": redirect_uri,
        "response_type": "code",
        "scope": " ".join(scopes),
    }
    if state:
        params["state"] = state
    return f"{TWITCH_AUTHORIZE_URL}?{urlencode(params)}"


async def exchange_code_for_token(
    client: httpx.AsyncClient,
    code: str,
    client_id: str,
    client_secret: str,
    redirect_uri: str,
    timeout: float = 10.0,
) -> str:
    """
    Exchange an authorization code for a Twitch user access token.

    Args:
        client: Shared HTTP client from dependency injection.
        code: Authorization code from the callback query.
        client_id: Twitch application client ID.
        client_secret: Twitch application client secret.
        redirect_uri: Redirect URI registered for the application.
        timeout: Request timeout in seconds.

    Returns:
        The access token.

    Raises:
        TwitchAuthException: On transport failure, non-2xx response,
            malformed JSON or a body without ``access_token``.
    """
    try:
        response = await client.post(
            TWITCH_TOKEN_URL,
            data={
                "client_id": client_id,
                "client_secret": client_secret,
                "code": code,
                "grant_type": "authorization_code",
                "redirect_uri": redirect_uri,
            },
            timeout=timeout,
        )
        response.raise_for_status()
        token = TwitchTokenResponse.model_validate(response.json())
    except httpx.HTTPStatusError as e:
        log_with_context(
            logger,
            "warning",
            "Twitch token endpoint rejected the code",
            status_code=e.response.status_code,
            event_type="twitch_auth_error",
        )
        raise TwitchAuthException(
            f"Twitch token exchange failed: {str(e)}",
            details={"status_code": e.response.status_code},
        ) from e
    except httpx.HTTPError as e:
        raise TwitchAuthException(f"Twitch token exchange failed: {str(e)}", status_code=502) from e
    except (ValidationError, ValueError) as e:
        raise TwitchAuthException(f"Invalid Twitch token response: {str(e)}", status_code=502) from e

    if not token.access_token:
        raise TwitchAuthException("Twitch token response had an empty access token", status_code=502)

    return token.access_token
