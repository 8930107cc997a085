"""
Shared fixtures: a fake chat channel and a static configuration.
"""

import os
from unittest.mock import AsyncMock, MagicMock

import pytest

os.environ.setdefault("DISCORD_TOKEN", "test-discord-token")
os.environ.setdefault("E621_TOKEN", "test-e621-token")


class _Typing:
    """Records entry/exit of the typing indicator."""

    def __init__(self):
        self.entered = 0
        self.exited = 0

    async def __aenter__(self):
        self.entered += 1
        return None

    async def __aexit__(self, exc_type, exc, tb):
        self.exited += 1
        return False


@pytest.fixture
def cfg():
    return {
        "DISCORD_TOKEN": "test-discord-token",
        "E621_TOKEN": "secret",
        "E621_BASE_URL": "https://e621.net",
        "E621_USERNAME": "kalka",
        "E621_USER_AGENT": "e6kiro / made by Kalka",
        "E621_TIMEOUT_S": 5.0,
        "HTTP_POOL_MAX_CONNECTIONS": 2,
        "PING_COMMAND": "!ping",
        "SEARCH_COMMAND": "!e6",
        "MAX_QUANTITY": 10,
    }


@pytest.fixture
def mock_channel():
    channel = MagicMock()
    channel.send = AsyncMock()
    channel.send_files = AsyncMock()
    channel.typing_cm = _Typing()
    channel.typing = MagicMock(return_value=channel.typing_cm)
    return channel
