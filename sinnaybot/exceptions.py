"""Custom exceptions for SinnayBot with proper HTTP status codes."""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error responses."""

    # Generic errors
    BOT_ERROR = "BOT_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # Authorization flow errors
    AUTH_ERROR = "AUTH_ERROR"
    SPOTIFY_AUTH_ERROR = "SPOTIFY_AUTH_ERROR"
    TWITCH_AUTH_ERROR = "TWITCH_AUTH_ERROR"

    # Now-playing query errors
    QUERY_ERROR = "QUERY_ERROR"
    SPOTIFY_NOT_AUTHENTICATED = "SPOTIFY_NOT_AUTHENTICATED"
    SPOTIFY_PROVIDER_FAILURE = "SPOTIFY_PROVIDER_FAILURE"

    # Chat errors
    CHAT_CONNECTION_ERROR = "CHAT_CONNECTION_ERROR"

    # Configuration errors
    CONFIG_ERROR = "CONFIG_ERROR"
    CONFIG_MISSING = "CONFIG_MISSING"


class SinnayBotException(Exception):
    """Base exception for bot errors with HTTP status code support.

    All custom exceptions inherit from this class so the registered
    exception handler can turn them into consistent error responses.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.BOT_ERROR,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        """Initialize bot exception.

        Args:
            message: Human-readable error message
            code: Error code from ErrorCode enum
            status_code: HTTP status code (default 500)
            details: Additional error context/details
        """
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class AuthException(SinnayBotException):
    """Authorization or token exchange failed."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.AUTH_ERROR,
        status_code: int = 401,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, status_code, details)


class SpotifyAuthException(AuthException):
    """Spotify authorization callback could not be completed."""

    def __init__(
        self,
        message: str = "Spotify authentication failed",
        status_code: int = 401,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message,
            code=ErrorCode.SPOTIFY_AUTH_ERROR,
            status_code=status_code,
            details=details,
        )


class TwitchAuthException(AuthException):
    """Twitch code-for-token exchange failed."""

    def __init__(
        self,
        message: str = "Twitch authentication failed",
        status_code: int = 401,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message,
            code=ErrorCode.TWITCH_AUTH_ERROR,
            status_code=status_code,
            details=details,
        )


class QueryException(SinnayBotException):
    """Now-playing query failed."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.QUERY_ERROR,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, status_code, details)


class SpotifyNotAuthenticatedException(QueryException):
    """No Spotify session has been installed yet."""

    def __init__(self, message: str = "Not authenticated with Spotify", details: dict[str, Any] | None = None):
        super().__init__(
            message,
            code=ErrorCode.SPOTIFY_NOT_AUTHENTICATED,
            status_code=401,
            details=details,
        )


class SpotifyProviderException(QueryException):
    """Spotify API request failed or returned garbage."""

    def __init__(self, message: str, status_code: int = 502, details: dict[str, Any] | None = None):
        super().__init__(
            message,
            code=ErrorCode.SPOTIFY_PROVIDER_FAILURE,
            status_code=status_code,
            details=details,
        )


class ChatConnectionException(SinnayBotException):
    """Could not connect to Twitch chat."""

    def __init__(self, message: str = "Failed to connect to Twitch chat", details: dict[str, Any] | None = None):
        super().__init__(
            message,
            code=ErrorCode.CHAT_CONNECTION_ERROR,
            status_code=502,
            details=details,
        )


class ConfigurationException(SinnayBotException):
    """Configuration errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CONFIG_ERROR,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, status_code, details)
