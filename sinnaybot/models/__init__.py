"""SinnayBot models"""

from sinnaybot.models.base_models import DetailedHealthResponse, HealthResponse
from sinnaybot.models.spotify import TrackInfo
from sinnaybot.models.twitch import CommandEvent, TwitchTokenResponse

__all__ = [
    "CommandEvent",
    "DetailedHealthResponse",
    "HealthResponse",
    "TrackInfo",
    "TwitchTokenResponse",
]
