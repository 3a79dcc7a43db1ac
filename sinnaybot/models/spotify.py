"""Pydantic models for Spotify playback data."""

from pydantic import BaseModel


class TrackInfo(BaseModel):
    """What the authenticated Spotify account is playing right now."""

    is_playing: bool
    track_name: str | None = None
    artist_name: str | None = None
