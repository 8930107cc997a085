"""
Factory to create search providers and manage the shared HTTP client.
"""
from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

import httpx

from ..config import load_config
from ..utils.logging import get_logger
from .base import SearchProvider

logger = get_logger(__name__)

_client_lock = asyncio.Lock()
_client: Optional[httpx.AsyncClient] = None


def _build_client(max_connections: int, timeout_s: float) -> httpx.AsyncClient:
    limits = httpx.Limits(max_connections=max_connections, max_keepalive_connections=max_connections)
    return httpx.AsyncClient(limits=limits, timeout=httpx.Timeout(timeout_s), follow_redirects=True)


async def get_http_client() -> httpx.AsyncClient:
    """Shared client for the search API and attachment downloads."""
    global _client
    if _client is not None:
        return _client
    async with _client_lock:
        if _client is None:
            cfg = load_config()
            _client = _build_client(cfg["HTTP_POOL_MAX_CONNECTIONS"], cfg["E621_TIMEOUT_S"])
            logger.debug("Created shared httpx.AsyncClient", extra={"subsys": "http"})
    return _client


async def close_http_client() -> None:
    global _client
    if _client is not None:
        try:
            await _client.aclose()
        except httpx.HTTPError as e:
            logger.debug(f"Error closing shared HTTP client: {e}")
        finally:
            _client = None


def get_search_provider(
    client: Optional[httpx.AsyncClient] = None, cfg: Optional[Dict[str, Any]] = None
) -> SearchProvider:
    from .e621 import E621SearchProvider  # local import to avoid cycle

    return E621SearchProvider(client=client, cfg=cfg)
