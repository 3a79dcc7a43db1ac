"""State managers for handling application-wide mutable state.

This module provides task-safe state management using asyncio.Lock.
Every lock is held only for the read or write itself, never across
a network call. All state managers inherit from StateManager ABC.
"""

import asyncio
import secrets
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass

from sinnaybot.exceptions import SpotifyNotAuthenticatedException
from sinnaybot.protocols import ChatConnectionProtocol, MusicClientProtocol

# OAuth states expire after 10 minutes to bound abandoned login flows
OAUTH_STATE_TTL_SECONDS = 600


class StateManager(ABC):
    """Base class for all state managers.

    State managers provide lock-guarded access to mutable application state.
    All subclasses must implement lifecycle methods.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the state manager (called during app startup)."""
        pass

    @abstractmethod
    async def cleanup(self) -> None:
        """Cleanup resources (called during app shutdown)."""
        pass


@dataclass(frozen=True)
class SpotifySession:
    """Snapshot of the Spotify session.

    ``authenticated`` is the only source of truth for whether ``client``
    may be used.
    """

    client: MusicClientProtocol | None = None
    authenticated: bool = False


class SpotifySessionStore(StateManager):
    """Holds the process's single authenticated Spotify client handle.

    Written once by the Spotify OAuth callback and read by every
    now-playing query (HTTP or chat). Starts empty; once populated it
    stays populated until shutdown.
    """

    def __init__(self):
        self._session = SpotifySession()
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        pass

    async def cleanup(self) -> None:
        """Drop the session on shutdown."""
        async with self._lock:
            self._session = SpotifySession()

    async def set(self, client: MusicClientProtocol) -> None:
        """Install an authenticated client handle and mark the session authenticated."""
        async with self._lock:
            self._session = SpotifySession(client=client, authenticated=True)

    async def get(self) -> MusicClientProtocol:
        """Return the installed client handle.

        Raises:
            SpotifyNotAuthenticatedException: If no handle has been installed
        """
        async with self._lock:
            session = self._session

        if not session.authenticated or session.client is None:
            raise SpotifyNotAuthenticatedException()
        return session.client

    async def is_authenticated(self) -> bool:
        async with self._lock:
            return self._session.authenticated


class OAuthStateStore(StateManager):
    """Issues and validates single-use OAuth ``state`` values.

    Each authorization URL gets a fresh random state; the callback must
    present one that was issued and has not expired. A state can be
    consumed only once.
    """

    def __init__(self, ttl_seconds: float = OAUTH_STATE_TTL_SECONDS):
        self._states: dict[str, float] = {}  # state -> issued-at timestamp
        self._ttl_seconds = ttl_seconds
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        pass

    async def cleanup(self) -> None:
        async with self._lock:
            self._states.clear()

    def _expire(self, now: float) -> None:
        expired = [state for state, issued_at in self._states.items() if now - issued_at > self._ttl_seconds]
        for state in expired:
            self._states.pop(state, None)

    async def issue(self) -> str:
        """Generate and remember a new state value."""
        state = secrets.token_urlsafe(32)
        async with self._lock:
            now = time.time()
            self._expire(now)
            self._states[state] = now
        return state

    async def consume(self, state: str | None) -> bool:
        """Check a returned state and forget it.

        Returns:
            True if the state was issued by this store and is still valid
        """
        if not state:
            return False
        async with self._lock:
            self._expire(time.time())
            return self._states.pop(state, None) is not None

    async def pending_count(self) -> int:
        async with self._lock:
            return len(self._states)


class ChatConnectionManager(StateManager):
    """Tracks the single running chat connection.

    A completed Twitch login replaces (and closes) any previous
    connection so the bot never answers twice.
    """

    def __init__(self):
        self._connection: ChatConnectionProtocol | None = None
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        pass

    async def cleanup(self) -> None:
        """Close the running connection, if any."""
        async with self._lock:
            connection, self._connection = self._connection, None
        if connection is not None:
            await connection.close()

    async def replace(self, connection: ChatConnectionProtocol) -> None:
        """Install a new connection, closing the previous one outside the lock."""
        async with self._lock:
            previous, self._connection = self._connection, connection
        if previous is not None and previous is not connection:
            await previous.close()

    async def is_connected(self) -> bool:
        async with self._lock:
            return self._connection is not None
