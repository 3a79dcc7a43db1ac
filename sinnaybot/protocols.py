"""Protocol definitions for dependency injection."""

from typing import Any, Protocol


class MusicClientProtocol(Protocol):
    """Authenticated handle to the music service.

    The session store only ever holds objects satisfying this protocol,
    which lets tests install a fake provider.
    """

    async def get_currently_playing(self) -> dict[str, Any] | None:
        """Fetch the raw currently-playing payload.

        Returns:
            Provider JSON, or None when nothing is playing
        """
        ...


class ChatChannelProtocol(Protocol):
    """Destination for chat replies (a twitchio Channel in production)."""

    async def send(self, content: str) -> None: ...


class ChatConnectionProtocol(Protocol):
    """A running chat connection that can be shut down."""

    async def close(self) -> None: ...
