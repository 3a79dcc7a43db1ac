"""Unit tests for the chat command handler and twitchio client."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from sinnaybot.exceptions import ChatConnectionException
from sinnaybot.models import CommandEvent, TrackInfo
from sinnaybot.services import chat_service
from tests.conftest import FakeChannel, FakeMusicClient


def _event(text: str, username: str = "viewer") -> CommandEvent:
    return CommandEvent(channel="sinnay", username=username, text=text)


# Trigger matching


@pytest.mark.parametrize(
    "text",
    ["!sinnaybot song", "!SINNAYBOT SONG", "!SinnayBot Song please"],
)
def test_matches_trigger(text):
    assert chat_service.matches_trigger(text) is True


@pytest.mark.parametrize(
    "text",
    ["sinnaybot song please", "hey !sinnaybot song", "   !sinnaybot song", "!sinnaybot", "!song", ""],
)
def test_does_not_match_trigger(text):
    assert chat_service.matches_trigger(text) is False


# Reply formatting


def test_format_reply_playing():
    track = TrackInfo(is_playing=True, track_name="X", artist_name="Y")

    assert chat_service.format_reply("user", track) == "@user, the song currently playing is X by Y"


def test_format_reply_not_playing():
    assert chat_service.format_reply("user", TrackInfo(is_playing=False)) == "@user, no song currently playing"


# ChatCommandHandler


@pytest.mark.asyncio
async def test_handler_replies_once_with_current_track(session_store):
    """Test the end-to-end reply for a playing track."""
    await session_store.set(
        FakeMusicClient(payload={"is_playing": True, "item": {"name": "X", "artists": [{"name": "Y"}]}})
    )
    handler = chat_service.ChatCommandHandler(session_store)
    channel = FakeChannel()

    reply = await handler.handle(_event("!sinnaybot song", username="user"), channel)

    assert channel.sent == ["@user, the song currently playing is X by Y"]
    assert reply == channel.sent[0]


@pytest.mark.asyncio
async def test_handler_replies_when_nothing_playing(session_store):
    await session_store.set(FakeMusicClient(payload=None))
    handler = chat_service.ChatCommandHandler(session_store)
    channel = FakeChannel()

    await handler.handle(_event("!SINNAYBOT SONG", username="user"), channel)

    assert channel.sent == ["@user, no song currently playing"]


@pytest.mark.asyncio
async def test_handler_ignores_other_messages(session_store):
    """Test non-trigger messages never query Spotify or reply."""
    music_client = FakeMusicClient(payload=None)
    await session_store.set(music_client)
    handler = chat_service.ChatCommandHandler(session_store)
    channel = FakeChannel()

    reply = await handler.handle(_event("sinnaybot song please"), channel)

    assert reply is None
    assert channel.sent == []
    assert music_client.calls == 0


@pytest.mark.asyncio
async def test_handler_replies_when_spotify_not_connected(session_store):
    """Test the bot explains a missing Spotify login instead of staying silent."""
    handler = chat_service.ChatCommandHandler(session_store)
    channel = FakeChannel()

    await handler.handle(_event("!sinnaybot song", username="user"), channel)

    assert channel.sent == ["@user, Spotify isn't connected yet, so I can't see what's playing"]


@pytest.mark.asyncio
async def test_handler_replies_when_spotify_fails(session_store):
    """Test a Spotify outage produces one error reply and no exception."""
    await session_store.set(FakeMusicClient(error=httpx.ConnectError("down")))
    handler = chat_service.ChatCommandHandler(session_store)
    channel = FakeChannel()

    await handler.handle(_event("!sinnaybot song", username="user"), channel)

    assert channel.sent == ["@user, I couldn't reach Spotify right now, try again in a bit"]


@pytest.mark.asyncio
async def test_handler_replies_to_every_trigger(session_store):
    """Test repeated triggers are not throttled."""
    await session_store.set(FakeMusicClient(payload=None))
    handler = chat_service.ChatCommandHandler(session_store)
    channel = FakeChannel()

    for _ in range(3):
        await handler.handle(_event("!sinnaybot song"), channel)

    assert len(channel.sent) == 3


# SinnayChatClient


def _message(content: str, author: str = "viewer", echo: bool = False) -> MagicMock:
    message = MagicMock()
    message.echo = echo
    message.content = content
    message.author.name = author
    message.channel.name = "sinnay"
    return message


@pytest.mark.asyncio
async def test_chat_client_forwards_messages_to_handler():
    handler = AsyncMock()
    client = chat_service.SinnayChatClient("token", "SinnayBot", "sinnay", handler)
    message = _message("!sinnaybot song")

    await client.event_message(message)

    handler.handle.assert_awaited_once_with(
        CommandEvent(channel="sinnay", username="viewer", text="!sinnaybot song"),
        message.channel,
    )


@pytest.mark.asyncio
async def test_chat_client_skips_own_messages():
    handler = AsyncMock()
    client = chat_service.SinnayChatClient("token", "SinnayBot", "sinnay", handler)

    await client.event_message(_message("!sinnaybot song", echo=True))
    await client.event_message(_message("!sinnaybot song", author="sinnaybot"))

    handler.handle.assert_not_awaited()


@pytest.mark.asyncio
async def test_chat_client_survives_reply_failure():
    """Test a failing reply is logged, not raised into twitchio."""
    handler = AsyncMock()
    handler.handle.side_effect = RuntimeError("send failed")
    client = chat_service.SinnayChatClient("token", "SinnayBot", "sinnay", handler)

    await client.event_message(_message("!sinnaybot song"))

    handler.handle.assert_awaited_once()


# connect_chat


@pytest.mark.asyncio
async def test_connect_chat_success(mock_settings):
    handler = MagicMock()

    with patch.object(chat_service.SinnayChatClient, "connect", AsyncMock()) as mock_connect:
        chat_client = await chat_service.connect_chat("access-token", mock_settings, handler)

    mock_connect.assert_awaited_once()
    assert isinstance(chat_client, chat_service.SinnayChatClient)


@pytest.mark.asyncio
async def test_connect_chat_failure_raises(mock_settings):
    """Test a connection failure is an error, never a process exit."""
    handler = MagicMock()

    with patch.object(chat_service.SinnayChatClient, "connect", AsyncMock(side_effect=OSError("refused"))):
        with pytest.raises(ChatConnectionException) as exc_info:
            await chat_service.connect_chat("access-token", mock_settings, handler)

    assert exc_info.value.status_code == 502
    assert exc_info.value.details == {"channel": "sinnay"}


@pytest.mark.asyncio
async def test_connect_chat_gives_up_when_chat_server_unreachable(mock_settings, unreachable_chat_server):
    """Test twitchio's endless reconnect loop is bounded by the HTTP timeout."""
    settings = mock_settings.model_copy(update={"http_timeout_seconds": 0.2})
    handler = MagicMock()

    with pytest.raises(ChatConnectionException) as exc_info:
        await asyncio.wait_for(chat_service.connect_chat("access-token", settings, handler), timeout=5)

    assert exc_info.value.status_code == 502
    assert "timed out" in exc_info.value.message
    assert exc_info.value.details == {"channel": "sinnay"}
    # The client's HTTP session is released
    assert len(unreachable_chat_server) == 1
    assert unreachable_chat_server[0].closed


@pytest.mark.asyncio
async def test_close_before_connect_is_safe():
    chat_client = chat_service.SinnayChatClient("access-token", "sinnaybot", "sinnay", MagicMock())

    await chat_client.close()
