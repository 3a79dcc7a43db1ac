"""Pydantic models for Twitch auth and chat data."""

from pydantic import BaseModel, ConfigDict


class TwitchTokenResponse(BaseModel):
    """Body returned by the Twitch token endpoint."""

    access_token: str
    refresh_token: str | None = None


class CommandEvent(BaseModel):
    """Read-only view of an incoming chat message."""

    model_config = ConfigDict(frozen=True)

    channel: str
    username: str
    text: str
