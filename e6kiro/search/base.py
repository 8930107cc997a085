"""
Base interface for search providers.
"""

from __future__ import annotations

from typing import Protocol

from .types import SearchQuery, SearchResult


class SearchProvider(Protocol):
    async def search(self, query: SearchQuery) -> SearchResult:  # noqa: D401
        """Execute a tag search and return the decoded posts."""
        ...
