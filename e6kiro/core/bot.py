"""Core bot implementation: discord.py client wiring for the command dispatcher."""

from __future__ import annotations

from typing import Any, Dict, Optional

import discord

from ..delivery import DeliveryCoordinator, fetch_attachment
from ..dispatcher import CommandDispatcher
from ..logger import message_context
from ..search.factory import close_http_client, get_http_client, get_search_provider
from ..search.types import PostFile
from ..utils.logging import get_logger
from .channel import DiscordChannel


class E6Bot(discord.Client):
    """Discord client that hands every message to a CommandDispatcher."""

    def __init__(self, *args, config: Dict[str, Any], **kwargs):
        if "intents" not in kwargs:
            kwargs["intents"] = discord.Intents.none()
        super().__init__(*args, **kwargs)
        self.config = config
        self.logger = get_logger(__name__)
        self.dispatcher: Optional[CommandDispatcher] = None

    async def setup_hook(self) -> None:
        """Build the search pipeline on the shared HTTP client."""
        if self.dispatcher is not None:
            self.logger.debug("🔄 Setup hook called but dispatcher already built, skipping")
            return

        client = await get_http_client()

        async def fetch(file: PostFile):
            return await fetch_attachment(client, file)

        self.dispatcher = CommandDispatcher(
            provider=get_search_provider(client, self.config),
            coordinator=DeliveryCoordinator(fetch, base_url=self.config["E621_BASE_URL"]),
            ping_command=self.config["PING_COMMAND"],
            search_prefix=self.config["SEARCH_COMMAND"],
            max_quantity=self.config["MAX_QUANTITY"],
        )
        self.logger.info("🔧 Command dispatcher ready", extra={"subsys": "core", "event": "setup.done"})

    async def on_ready(self):
        """Called when the bot is ready and connected to Discord."""
        self.logger.info(
            f"🤖 Logged in as {self.user.name} (ID: {self.user.id})",
            extra={"subsys": "core", "event": "ready"},
        )

    async def on_message(self, message: discord.Message):
        if message.author == self.user or self.dispatcher is None:
            return

        await self.dispatcher.handle(
            message.content,
            DiscordChannel(message.channel),
            message_context(message),
        )

    async def close(self) -> None:
        """Clean up resources before shutdown."""
        self.logger.info("Bot is shutting down...", extra={"subsys": "core", "event": "shutdown"})
        try:
            await close_http_client()
        finally:
            await super().close()
