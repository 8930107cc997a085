from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from e6kiro.core.channel import DiscordChannel
from e6kiro.delivery import Attachment, DeliveryCoordinator, DeliveryOutcome, NO_POST_MESSAGE
from e6kiro.dispatcher import CommandDispatcher, PONG_REPLY
from e6kiro.exceptions import AttachmentFetchError, DeliverySendError, HttpError, TransportError
from e6kiro.search.types import Post, PostFile, Rating, SearchQuery, SearchResult


def _result(*ids):
    return SearchResult(
        posts=[Post(id=i, file=PostFile(url=f"https://static1.e621.net/data/{i}.png")) for i in ids]
    )


@pytest.fixture
def provider():
    provider = MagicMock()
    provider.search = AsyncMock(return_value=_result(1))
    return provider


@pytest.fixture
def fetch():
    return AsyncMock(return_value=Attachment(filename="SPOILER_1.png", data=b"img"))


@pytest.fixture
def dispatcher(provider, fetch):
    return CommandDispatcher(provider, DeliveryCoordinator(fetch, base_url="https://e621.net"))


@pytest.mark.asyncio
async def test_ping_replies_once_without_search(dispatcher, provider, mock_channel):
    outcome = await dispatcher.handle("!ping", mock_channel)

    assert outcome is None
    mock_channel.send.assert_awaited_once_with(PONG_REPLY)
    provider.search.assert_not_awaited()
    mock_channel.typing.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize("content", ["hello", "!pingg", "e6 wolf", " !e6 wolf", ""])
async def test_unrelated_messages_are_ignored(dispatcher, provider, mock_channel, content):
    assert await dispatcher.handle(content, mock_channel) is None

    mock_channel.send.assert_not_awaited()
    provider.search.assert_not_awaited()


@pytest.mark.asyncio
async def test_pinned_fixture_reaches_search_provider(dispatcher, provider, mock_channel):
    outcome = await dispatcher.handle("!e6 male, canine 3 --safe", mock_channel)

    assert outcome is DeliveryOutcome.ATTACHMENTS_SENT
    provider.search.assert_awaited_once_with(
        SearchQuery(tags=["male", "canine"], quantity=1, rating=Rating.SAFE)
    )
    mock_channel.send_files.assert_awaited_once()


@pytest.mark.asyncio
@pytest.mark.parametrize("content, expected", [("!e6 wolf 50", 10), ("!e6 wolf 0", 1), ("!e6 wolf 3", 3)])
async def test_quantity_is_clamped_before_search(dispatcher, provider, mock_channel, content, expected):
    await dispatcher.handle(content, mock_channel)

    query = provider.search.await_args.args[0]
    assert query.quantity == expected


@pytest.mark.asyncio
async def test_typing_wraps_successful_search(dispatcher, mock_channel):
    await dispatcher.handle("!e6 wolf", mock_channel)

    assert mock_channel.typing_cm.entered == 1
    assert mock_channel.typing_cm.exited == 1


class _FailingTyping:
    def __init__(self, error):
        self.error = error

    async def __aenter__(self):
        raise self.error

    async def __aexit__(self, exc_type, exc, tb):
        raise AssertionError("exit called on an indicator that never started")


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [DeliverySendError("Missing Permissions"), RuntimeError("gateway gone")])
async def test_search_runs_when_typing_cannot_start(dispatcher, provider, mock_channel, error, caplog):
    mock_channel.typing.return_value = _FailingTyping(error)

    with caplog.at_level("WARNING"):
        outcome = await dispatcher.handle("!e6 wolf", mock_channel)

    assert outcome is DeliveryOutcome.ATTACHMENTS_SENT
    provider.search.assert_awaited_once()
    mock_channel.send_files.assert_awaited_once()
    assert "typing indicator" in caplog.text


@pytest.mark.asyncio
async def test_forbidden_typing_on_discord_channel_is_contained(dispatcher, provider):
    response = MagicMock()
    response.status = 403
    response.reason = "Forbidden"
    raw_typing = MagicMock()
    raw_typing.__aenter__ = AsyncMock(side_effect=discord.Forbidden(response, "Missing Permissions"))
    raw_channel = MagicMock()
    raw_channel.send = AsyncMock()
    raw_channel.typing.return_value = raw_typing

    outcome = await dispatcher.handle("!e6 wolf", DiscordChannel(raw_channel))

    assert outcome is DeliveryOutcome.ATTACHMENTS_SENT
    provider.search.assert_awaited_once()
    raw_channel.send.assert_awaited_once()
    assert mock_channel.typing_cm.exited == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [TransportError("down"), HttpError("HTTP 500", status_code=500)])
async def test_search_failure_is_silent_and_stops_typing(dispatcher, provider, mock_channel, error):
    provider.search.side_effect = error

    outcome = await dispatcher.handle("!e6 wolf", mock_channel)

    assert outcome is DeliveryOutcome.FAILED
    mock_channel.send.assert_not_awaited()
    mock_channel.send_files.assert_not_awaited()
    assert mock_channel.typing_cm.exited == 1


@pytest.mark.asyncio
async def test_empty_command_is_ignored(dispatcher, provider, mock_channel):
    outcome = await dispatcher.handle("!e6", mock_channel)

    assert outcome is DeliveryOutcome.FAILED
    provider.search.assert_not_awaited()
    mock_channel.send.assert_not_awaited()
    assert mock_channel.typing_cm.exited == 1


@pytest.mark.asyncio
async def test_empty_result_notifies_user(dispatcher, provider, mock_channel):
    provider.search.return_value = SearchResult(posts=[])

    outcome = await dispatcher.handle("!e6 nothing_matches", mock_channel)

    assert outcome is DeliveryOutcome.EMPTY
    mock_channel.send.assert_awaited_once_with(NO_POST_MESSAGE)


@pytest.mark.asyncio
async def test_attachment_rejection_falls_back_to_link(dispatcher, provider, mock_channel):
    provider.search.return_value = _result(42, 43)
    mock_channel.send_files.side_effect = DeliverySendError("Payload Too Large")

    outcome = await dispatcher.handle("!e6 wolf 2", mock_channel)

    assert outcome is DeliveryOutcome.LINK_SENT
    mock_channel.send.assert_awaited_once_with("||https://e621.net/posts/42||")


@pytest.mark.asyncio
async def test_total_delivery_failure_is_contained(dispatcher, mock_channel):
    mock_channel.send_files.side_effect = DeliverySendError("Payload Too Large")
    mock_channel.send.side_effect = DeliverySendError("Forbidden")

    outcome = await dispatcher.handle("!e6 wolf", mock_channel)

    assert outcome is DeliveryOutcome.FAILED
    assert mock_channel.typing_cm.exited == 1


@pytest.mark.asyncio
async def test_fetch_failure_sends_nothing(dispatcher, fetch, mock_channel):
    fetch.side_effect = AttachmentFetchError("404")

    outcome = await dispatcher.handle("!e6 wolf", mock_channel)

    assert outcome is DeliveryOutcome.FAILED
    mock_channel.send.assert_not_awaited()
    mock_channel.send_files.assert_not_awaited()


@pytest.mark.asyncio
async def test_unexpected_error_is_logged_not_raised(dispatcher, provider, mock_channel, caplog):
    provider.search.side_effect = RuntimeError("boom")

    with caplog.at_level("ERROR"):
        outcome = await dispatcher.handle("!e6 wolf", mock_channel, {"guild_id": 1, "msg_id": 2})

    assert outcome is DeliveryOutcome.FAILED
    assert "boom" in caplog.text


@pytest.mark.asyncio
async def test_failed_ping_send_is_contained(dispatcher, mock_channel):
    mock_channel.send.side_effect = DeliverySendError("Forbidden")

    assert await dispatcher.handle("!ping", mock_channel) is None


@pytest.mark.asyncio
async def test_custom_prefixes(provider, fetch, mock_channel):
    dispatcher = CommandDispatcher(
        provider,
        DeliveryCoordinator(fetch),
        ping_command="?ping",
        search_prefix="?find",
        max_quantity=3,
    )

    await dispatcher.handle("?ping", mock_channel)
    await dispatcher.handle("?find wolf 9", mock_channel)

    mock_channel.send.assert_awaited_once_with(PONG_REPLY)
    assert provider.search.await_args.args[0] == SearchQuery(tags=["wolf"], quantity=3)
