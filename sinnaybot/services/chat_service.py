"""Twitch chat service: trigger matching, replies and the twitchio client."""

import asyncio

import twitchio

from sinnaybot.config import Settings
from sinnaybot.exceptions import (
    ChatConnectionException,
    QueryException,
    SpotifyNotAuthenticatedException,
)
from sinnaybot.logging_config import get_logger, log_with_context
from sinnaybot.models import CommandEvent, TrackInfo
from sinnaybot.protocols import ChatChannelProtocol
from sinnaybot.services import spotify_service
from sinnaybot.state_managers import SpotifySessionStore

logger = get_logger(__name__)

TRIGGER_PHRASE = "!sinnaybot song"


def matches_trigger(text: str, trigger: str = TRIGGER_PHRASE) -> bool:
    """Case-insensitive prefix match of the trigger phrase."""
    return text.lower().startswith(trigger.lower())


def format_reply(username: str, track: TrackInfo) -> str:
    if not track.is_playing:
        return f"@{username}, no song currently playing"
    artist = track.artist_name or "an unknown artist"
    return f"@{username}, the song currently playing is {track.track_name} by {artist}"


def format_error_reply(username: str, error: QueryException) -> str:
    if isinstance(error, SpotifyNotAuthenticatedException):
        return f"@{username}, Spotify isn't connected yet, so I can't see what's playing"
    return f"@{username}, I couldn't reach Spotify right now, try again in a bit"


class ChatCommandHandler:
    """Answers the trigger phrase with the currently playing track.

    Every matching message gets exactly one reply, including when the
    Spotify session is missing or the Spotify API fails.
    """

    def __init__(self, session_store: SpotifySessionStore, trigger: str = TRIGGER_PHRASE):
        self._session_store = session_store
        self._trigger = trigger

    async def handle(self, event: CommandEvent, channel: ChatChannelProtocol) -> str | None:
        """Handle one chat message.

        Args:
            event: The incoming message
            channel: Where the reply goes

        Returns:
            The reply that was sent, or None if the message didn't match
        """
        if not matches_trigger(event.text, self._trigger):
            return None

        try:
            track = await spotify_service.get_current_track(self._session_store)
            reply = format_reply(event.username, track)
        except QueryException as e:
            log_with_context(
                logger,
                "warning",
                "Now-playing query failed for chat command",
                channel=event.channel,
                username=event.username,
                error_code=e.code.value,
                event_type="chat_command_query_failed",
            )
            reply = format_error_reply(event.username, e)

        await channel.send(reply)
        log_with_context(
            logger,
            "info",
            "Replied to chat command",
            channel=event.channel,
            username=event.username,
            event_type="chat_command_reply",
        )
        return reply


class SinnayChatClient(twitchio.Client):
    """twitchio client that joins one channel and feeds messages to the handler."""

    def __init__(self, access_token: str, bot_username: str, channel: str, handler: ChatCommandHandler):
        super().__init__(token=f"oauth:{access_token}", initial_channels=[channel])
        self._bot_username = bot_username.lower()
        self._channel_name = channel
        self._handler = handler

    async def event_ready(self):
        log_with_context(
            logger,
            "info",
            "Connected to Twitch chat",
            channel=self._channel_name,
            nick=self.nick,
            event_type="chat_ready",
        )

    async def event_message(self, message: twitchio.Message):
        # Skip our own messages
        if message.echo or message.author is None:
            return
        if message.author.name.lower() == self._bot_username:
            return

        event = CommandEvent(
            channel=message.channel.name,
            username=message.author.name,
            text=message.content or "",
        )
        try:
            await self._handler.handle(event, message.channel)
        except Exception as e:
            log_with_context(
                logger,
                "error",
                "Failed to reply in chat",
                channel=event.channel,
                error=str(e),
                error_type=type(e).__name__,
                event_type="chat_reply_error",
            )

    async def close(self):
        # Never finished connecting: no keep-alive task, only the HTTP session to release
        if self._connection._keeper is None:
            if self._closing is not None:
                self._closing.set()
            if self._http.session is not None:
                await self._http.session.close()
            return
        await super().close()

    async def event_error(self, error: Exception, data: str | None = None):
        log_with_context(
            logger,
            "error",
            "Twitch chat error",
            error=str(error),
            error_type=type(error).__name__,
            event_type="chat_error",
        )


async def connect_chat(access_token: str, settings: Settings, handler: ChatCommandHandler) -> SinnayChatClient:
    """
    Open the chat connection for the broadcast channel.

    Args:
        access_token: Twitch user access token from the OAuth flow.
        settings: Settings with bot username and channel.
        handler: Command handler for incoming messages.

    Returns:
        The connected client.

    Raises:
        ChatConnectionException: If the connection can't be established
            within the HTTP timeout.
    """
    chat_client = SinnayChatClient(
        access_token=access_token,
        bot_username=settings.twitch_bot_username,
        channel=settings.twitch_broadcast_channel,
        handler=handler,
    )
    # twitchio retries a failed websocket connect forever
    try:
        await asyncio.wait_for(chat_client.connect(), timeout=settings.http_timeout_seconds)
    except Exception as e:
        await chat_client.close()
        reason = "timed out" if isinstance(e, TimeoutError) else str(e)
        log_with_context(
            logger,
            "error",
            "Twitch chat connection failed",
            channel=settings.twitch_broadcast_channel,
            error=reason,
            error_type=type(e).__name__,
            event_type="chat_connect_error",
        )
        raise ChatConnectionException(
            f"Failed to connect to Twitch chat: {reason}",
            details={"channel": settings.twitch_broadcast_channel},
        ) from e

    log_with_context(
        logger,
        "info",
        "Chat connection started",
        channel=settings.twitch_broadcast_channel,
        event_type="chat_connect",
    )
    return chat_client
