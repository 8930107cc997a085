"""
Search types and constants.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional
from urllib.parse import unquote, urlparse

from ..exceptions import DecodeError

# Always sent ahead of the user's tags; never stored on the query.
ORDER_DIRECTIVE = "order:random"
EXCLUDED_TAGS = ("-female", "-intersex")


class Rating(str, Enum):
    """Content rating filter appended to every query."""

    SAFE = "rating:safe"
    EXPLICIT = "rating:explicit"


@dataclass(frozen=True)
class SearchQuery:
    tags: List[str]
    quantity: int = 1
    rating: Rating = Rating.EXPLICIT

    @property
    def tag_set(self) -> List[str]:
        """User tags followed by the rating filter."""
        return [*self.tags, self.rating.value]


@dataclass(frozen=True)
class PostFile:
    url: Optional[str]

    @property
    def filename(self) -> Optional[str]:
        """Last path segment of the file URL."""
        if not self.url:
            return None
        name = unquote(urlparse(self.url).path.rsplit("/", 1)[-1])
        return name or None


@dataclass(frozen=True)
class Post:
    id: int
    file: PostFile

    @classmethod
    def from_json(cls, data: Any) -> "Post":
        if not isinstance(data, dict):
            raise DecodeError(f"Post entry is not an object: {type(data).__name__}")

        post_id = data.get("id")
        if not isinstance(post_id, int) or isinstance(post_id, bool):
            raise DecodeError(f"Post entry has no integer id: {post_id!r}")

        raw_file = data.get("file")
        if not isinstance(raw_file, dict):
            raise DecodeError(f"Post {post_id} has no file object")

        url = raw_file.get("url")
        if url is not None and not isinstance(url, str):
            raise DecodeError(f"Post {post_id} has a non-string file url")

        return cls(id=post_id, file=PostFile(url=url))


@dataclass(frozen=True)
class SearchResult:
    posts: List[Post] = field(default_factory=list)

    @classmethod
    def from_json(cls, payload: Any) -> "SearchResult":
        if not isinstance(payload, dict) or not isinstance(payload.get("posts"), list):
            raise DecodeError("Response body has no 'posts' list")
        return cls(posts=[Post.from_json(item) for item in payload["posts"]])
