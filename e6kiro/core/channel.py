"""
Adapter from a discord.py channel to the ChatChannel used by delivery.
"""
import io
from typing import Sequence

import discord

from ..delivery import Attachment
from ..exceptions import DeliverySendError


class _Typing:
    """discord.py's typing context; starting it sends a request that can fail."""

    def __init__(self, typing):
        self._typing = typing

    async def __aenter__(self):
        try:
            return await self._typing.__aenter__()
        except discord.HTTPException as e:
            raise DeliverySendError(f"Could not start typing indicator: {e}") from e

    async def __aexit__(self, exc_type, exc, tb):
        return await self._typing.__aexit__(exc_type, exc, tb)


class DiscordChannel:
    """Wraps a discord.abc.Messageable; HTTP failures become DeliverySendError."""

    def __init__(self, channel: discord.abc.Messageable):
        self.channel = channel

    async def send(self, content: str) -> None:
        try:
            await self.channel.send(content)
        except discord.HTTPException as e:
            raise DeliverySendError(f"Could not send message: {e}") from e

    async def send_files(self, attachments: Sequence[Attachment]) -> None:
        files = [discord.File(io.BytesIO(a.data), filename=a.filename) for a in attachments]
        try:
            await self.channel.send(files=files)
        except discord.HTTPException as e:
            raise DeliverySendError(f"Could not send {len(files)} file(s): {e}") from e
        finally:
            for f in files:
                f.close()

    def typing(self) -> _Typing:
        return _Typing(self.channel.typing())
