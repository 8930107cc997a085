"""
Top-level command handling: ``!ping`` and the ``!e6`` search pipeline.
"""
from __future__ import annotations

from contextlib import AsyncExitStack
from dataclasses import replace
from typing import Any, Dict, Optional, Tuple

from .delivery import ChatChannel, DeliveryCoordinator, DeliveryOutcome
from .exceptions import (
    AttachmentFetchError,
    DeliverySendError,
    E6BotError,
    EmptyResultError,
    InputError,
    SearchError,
)
from .logger import log_command
from .query_builder import DEFAULT_PREFIX, MAX_QUANTITY, build_query, clamp_quantity
from .search.base import SearchProvider
from .utils.logging import get_logger

logger = get_logger(__name__)

PING_COMMAND = "!ping"
PONG_REPLY = "Pong!"

# Outcome reported for each terminal error; none of them reach the gateway.
ERROR_OUTCOMES = {
    InputError: ("query.invalid", DeliveryOutcome.FAILED),
    SearchError: ("search.failed", DeliveryOutcome.FAILED),
    EmptyResultError: ("delivery.empty", DeliveryOutcome.EMPTY),
    AttachmentFetchError: ("delivery.fetch_failed", DeliveryOutcome.FAILED),
    DeliverySendError: ("delivery.send_failed", DeliveryOutcome.FAILED),
}


class CommandDispatcher:
    """Routes one chat message to the ping reply or the search pipeline."""

    def __init__(
        self,
        provider: SearchProvider,
        coordinator: DeliveryCoordinator,
        ping_command: str = PING_COMMAND,
        search_prefix: str = DEFAULT_PREFIX,
        max_quantity: int = MAX_QUANTITY,
    ) -> None:
        self.provider = provider
        self.coordinator = coordinator
        self.ping_command = ping_command
        self.search_prefix = search_prefix
        self.max_quantity = max_quantity

    async def handle(
        self,
        content: str,
        channel: ChatChannel,
        context: Optional[Dict[str, Any]] = None,
    ) -> Optional[DeliveryOutcome]:
        """Handle one message; returns the search outcome, or None when no search ran."""
        if content == self.ping_command:
            await self._pong(channel, context)

        if content.startswith(self.search_prefix):
            async with AsyncExitStack() as stack:
                await self._start_typing(stack, channel, context)
                return await self.run_search(content, channel, context)

        return None

    async def _start_typing(
        self, stack: AsyncExitStack, channel: ChatChannel, context: Optional[Dict[str, Any]]
    ) -> None:
        # a failed indicator never stops the search
        try:
            await stack.enter_async_context(channel.typing())
        except Exception as e:
            logger.warning(
                f"Could not start typing indicator, searching anyway: {e}",
                extra={"subsys": "dispatch", "event": "dispatch.typing_failed", **(context or {})},
            )

    async def _pong(self, channel: ChatChannel, context: Optional[Dict[str, Any]]) -> None:
        try:
            await channel.send(PONG_REPLY)
            log_command(context, "ping", "ping.pong")
        except DeliverySendError as e:
            log_command(context, "ping", "ping.send_failed", {"error": str(e)}, success=False)

    async def run_search(
        self,
        content: str,
        channel: ChatChannel,
        context: Optional[Dict[str, Any]] = None,
    ) -> DeliveryOutcome:
        """Build the query, search, deliver. Errors end the invocation here."""
        try:
            query = build_query(content, self.search_prefix)
            query = replace(query, quantity=clamp_quantity(query.quantity, self.max_quantity))

            result = await self.provider.search(query)
            outcome = await self.coordinator.deliver(result, channel)
        except E6BotError as e:
            event, outcome = self._classify(e)
            log_command(
                context,
                "e6",
                event,
                {"error_type": type(e).__name__, "error": str(e)},
                success=False,
            )
            return outcome
        except Exception as e:
            logger.error(
                f"Unexpected error handling search command: {e}",
                exc_info=True,
                extra={"subsys": "dispatch", "event": "dispatch.unexpected", **(context or {})},
            )
            return DeliveryOutcome.FAILED

        log_command(
            context,
            "e6",
            f"delivery.{outcome.value}",
            {"tags": "+".join(query.tag_set), "quantity": query.quantity, "posts": len(result.posts)},
        )
        return outcome

    @staticmethod
    def _classify(error: E6BotError) -> Tuple[str, DeliveryOutcome]:
        for error_type, classification in ERROR_OUTCOMES.items():
            if isinstance(error, error_type):
                return classification
        return ("command.failed", DeliveryOutcome.FAILED)
