from pathlib import Path

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sinnaybot.exceptions import ConfigurationException, ErrorCode
from sinnaybot.logging_config import get_logger, log_with_context

logger = get_logger(__name__)

BASE_DIR = Path(__file__).resolve().parent.parent  # repository root, where .env lives

DEFAULT_SPOTIFY_REDIRECT_URI = "http://localhost:8080/callback"


class Settings(BaseSettings):
    """Application settings with validation.

    Twitch and Spotify credentials are required and raise validation
    errors if missing. Secrets come from environment variables or .env.
    """

    # API server settings
    api_host: str = Field(default="0.0.0.0", min_length=1, description="API server host")
    api_port: int = Field(ge=1, le=65535, default=8080, description="API server port")

    # Twitch chat - bot account and the single channel it serves
    twitch_client_id: str = Field(min_length=1, description="Twitch OAuth client ID")
    twitch_client_secret: str = Field(min_length=1, description="Twitch OAuth client secret")
    twitch_redirect_uri: str = Field(pattern=r"^https?://", description="Twitch OAuth redirect URI")
    twitch_bot_username: str = Field(min_length=1, description="Twitch login of the bot account")
    twitch_broadcast_channel: str = Field(min_length=1, description="Twitch channel the bot joins")

    # Spotify API
    spotify_client_id: str = Field(min_length=1, description="Spotify OAuth client ID")
    spotify_client_secret: str = Field(min_length=1, description="Spotify OAuth client secret")
    spotify_redirect_uri: str = Field(
        default=DEFAULT_SPOTIFY_REDIRECT_URI,
        description="Spotify OAuth redirect URI",
    )

    # Timeout for token exchanges and the now-playing query
    http_timeout_seconds: float = Field(gt=0, default=10.0, description="Outbound HTTP timeout in seconds")

    model_config = SettingsConfigDict(
        env_file=Path(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )

    @field_validator("twitch_broadcast_channel", "twitch_bot_username", mode="after")
    @classmethod
    def normalize_login(cls, v: str) -> str:
        """Twitch logins are lowercase and never carry a leading '#'."""
        v = v.strip().lstrip("#").lower()
        if not v:
            raise ValueError("Twitch login must not be empty")
        return v

    @field_validator("spotify_redirect_uri", mode="before")
    @classmethod
    def default_spotify_redirect_uri(cls, v: str | None) -> str:
        """Fall back to the local callback when the variable is set but empty."""
        if v is None or not str(v).strip():
            return DEFAULT_SPOTIFY_REDIRECT_URI
        return str(v).strip()

    @field_validator("spotify_redirect_uri", mode="after")
    @classmethod
    def validate_spotify_redirect_uri(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("spotify_redirect_uri must be a valid http:// or https:// URL")
        return v


# Singleton settings instance (cached for performance)
_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """Get singleton Settings instance for dependency injection.

    Returns:
        Cached Settings instance

    Raises:
        ConfigurationException: If required credentials are missing or invalid
    """
    global _settings_instance
    if _settings_instance is None:
        try:
            _settings_instance = Settings()
        except ValidationError as e:
            missing = [".".join(str(p) for p in err["loc"]).upper() for err in e.errors()]
            log_with_context(
                logger,
                "critical",
                "Invalid or missing configuration",
                fields=missing,
                event_type="config_invalid",
            )
            raise ConfigurationException(
                f"Invalid or missing configuration: {', '.join(missing)}",
                code=ErrorCode.CONFIG_MISSING,
                details={"fields": missing},
            ) from e
    return _settings_instance
