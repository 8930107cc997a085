"""
Delivery of search results into a chat channel.

Attachments are preferred: every post's file is downloaded, marked as a
spoiler and sent in one message. When the platform rejects the upload (size
or format limits), the first post is sent as a spoiler-wrapped permalink
instead. A batch is never partially sent.
"""
from __future__ import annotations

import asyncio
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Protocol, Sequence

import httpx

from .exceptions import AttachmentFetchError, DeliverySendError, EmptyResultError
from .search.e621 import permalink
from .search.types import Post, PostFile, SearchResult
from .utils.logging import get_logger

logger = get_logger(__name__)

SPOILER_PREFIX = "SPOILER_"
NO_POST_MESSAGE = "No post found!"


@dataclass(frozen=True)
class Attachment:
    filename: str
    data: bytes


class DeliveryOutcome(str, Enum):
    ATTACHMENTS_SENT = "attachments_sent"
    LINK_SENT = "link_sent"
    EMPTY = "empty"
    FAILED = "failed"


class ChatChannel(Protocol):
    """The slice of a chat channel this bot needs. Sends raise DeliverySendError."""

    async def send(self, content: str) -> None:
        ...

    async def send_files(self, attachments: Sequence[Attachment]) -> None:
        ...

    def typing(self) -> AbstractAsyncContextManager:
        ...


AttachmentFetcher = Callable[[PostFile], Awaitable[Attachment]]


def spoiler_filename(filename: str) -> str:
    return f"{SPOILER_PREFIX}{filename}"


def spoiler_text(text: str) -> str:
    return f"||{text}||"


async def fetch_attachment(client: httpx.AsyncClient, file: PostFile) -> Attachment:
    """Download a post's file into a spoiler-named attachment."""
    try:
        response = await client.get(file.url)
        response.raise_for_status()
    except httpx.HTTPError as e:
        raise AttachmentFetchError(f"Could not fetch {file.url}: {type(e).__name__}: {e}") from e

    return Attachment(filename=spoiler_filename(file.filename or "file"), data=response.content)


class DeliveryCoordinator:
    def __init__(self, fetch: AttachmentFetcher, base_url: Optional[str] = None) -> None:
        self.fetch = fetch
        self.base_url = base_url

    async def fetch_batch(self, posts: Sequence[Post]) -> List[Attachment]:
        """Fetch every post's file; the first failure cancels the rest and aborts the batch."""
        for post in posts:
            if not post.file.url:
                raise AttachmentFetchError(f"Post {post.id} has no file url")

        tasks = [asyncio.ensure_future(self.fetch(post.file)) for post in posts]
        try:
            return list(await asyncio.gather(*tasks))
        except Exception:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def deliver(self, result: SearchResult, channel: ChatChannel) -> DeliveryOutcome:
        """
        Send `result` into `channel`.

        Returns ATTACHMENTS_SENT or LINK_SENT.

        Raises:
            EmptyResultError: no posts; the user was told so.
            AttachmentFetchError: a file could not be downloaded; nothing was sent.
            DeliverySendError: both the attachment and the link send failed.
        """
        if not result.posts:
            try:
                await channel.send(NO_POST_MESSAGE)
            except DeliverySendError as e:
                logger.error(f"Error sending message: {e}", extra={"subsys": "delivery", "event": "delivery.empty_notice_failed"})
            raise EmptyResultError("Search returned no posts")

        attachments = await self.fetch_batch(result.posts)

        try:
            await channel.send_files(attachments)
            logger.info(
                f"Sent {len(attachments)} attachment(s)",
                extra={"subsys": "delivery", "event": "delivery.attachments_sent"},
            )
            return DeliveryOutcome.ATTACHMENTS_SENT
        except DeliverySendError as e:
            logger.warning(
                f"Could not send attachments, falling back to link: {e}",
                extra={"subsys": "delivery", "event": "delivery.attachments_failed"},
            )

        post = result.posts[0]
        await channel.send(spoiler_text(permalink(post.id, self.base_url)))
        logger.info(
            f"Sent link to post {post.id}",
            extra={"subsys": "delivery", "event": "delivery.link_sent"},
        )
        return DeliveryOutcome.LINK_SENT
