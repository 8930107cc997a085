"""
e621 search provider.

Builds the tag query (random order, fixed exclusions, user tags, rating) and
issues one authenticated GET against ``/posts.json``.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

import httpx

from ..config import load_config
from ..exceptions import AuthError, DecodeError, HttpError, TransportError
from ..utils.logging import get_logger
from .factory import get_http_client
from .types import EXCLUDED_TAGS, ORDER_DIRECTIVE, SearchQuery, SearchResult

logger = get_logger(__name__)


def build_tag_string(tags: Iterable[str]) -> str:
    """Join the fixed directives and the query tags with '+'."""
    return "+".join([ORDER_DIRECTIVE, *EXCLUDED_TAGS, *tags])


def build_tag_param(tags: Iterable[str]) -> str:
    """The `tags` query parameter: space-separated, encoded by httpx."""
    return " ".join([ORDER_DIRECTIVE, *EXCLUDED_TAGS, *tags])


def permalink(post_id: int, base_url: Optional[str] = None) -> str:
    """Public page of a single post."""
    base_url = base_url or load_config()["E621_BASE_URL"]
    return f"{base_url}/posts/{post_id}"


class E621SearchProvider:
    def __init__(self, client: Optional[httpx.AsyncClient] = None, cfg: Optional[Dict[str, Any]] = None) -> None:
        self.cfg = cfg or load_config()
        self._client = client
        self.endpoint = f"{self.cfg['E621_BASE_URL']}/posts.json"
        self.auth = httpx.BasicAuth(self.cfg["E621_USERNAME"], self.cfg["E621_TOKEN"] or "")
        self.headers = {"User-Agent": self.cfg["E621_USER_AGENT"]}

    async def search(self, query: SearchQuery) -> SearchResult:
        client = self._client or await get_http_client()
        params = {"limit": query.quantity, "tags": build_tag_param(query.tag_set)}

        logger.info(
            f"[e621] Searching: {build_tag_string(query.tag_set)} (limit={query.quantity})",
            extra={"subsys": "search", "event": "search.request"},
        )

        try:
            response = await client.get(self.endpoint, params=params, headers=self.headers, auth=self.auth)
        except httpx.TransportError as e:
            raise TransportError(f"Search request failed: {type(e).__name__}: {e}") from e

        if response.status_code in (401, 403):
            raise AuthError(
                f"Search API rejected credentials (HTTP {response.status_code})",
                status_code=response.status_code,
            )
        if not response.is_success:
            raise HttpError(
                f"Search API returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise DecodeError(f"Search response is not JSON: {e}") from e

        result = SearchResult.from_json(payload)
        logger.debug(
            f"[e621] {len(result.posts)} post(s) returned",
            extra={"subsys": "search", "event": "search.response"},
        )
        return result
