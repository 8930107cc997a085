from .types import Post, PostFile, Rating, SearchQuery, SearchResult
from .base import SearchProvider
from .factory import close_http_client, get_http_client, get_search_provider
from .e621 import E621SearchProvider, build_tag_param, build_tag_string, permalink

__all__ = [
    "Post",
    "PostFile",
    "Rating",
    "SearchQuery",
    "SearchResult",
    "SearchProvider",
    "E621SearchProvider",
    "build_tag_param",
    "build_tag_string",
    "permalink",
    "get_http_client",
    "close_http_client",
    "get_search_provider",
]
