"""SinnayBot - Twitch chat bot that reports the current Spotify track"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("sinnaybot")
except PackageNotFoundError:
    __version__ = "dev"
