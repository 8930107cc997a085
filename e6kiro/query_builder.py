"""
Turns raw ``!e6`` command text into a SearchQuery.

Command grammar: ``!e6 <tag>, <tag>, <last tag> [quantity] [--safe]``.
Only the last comma-separated segment is post-processed; earlier segments are
kept verbatim. The quantity is token 1 of the remainder split on spaces, so
``!e6 wolf 4`` asks for four posts while ``!e6 male, canine 3`` asks for one.
"""
import logging

from .exceptions import EmptyInputError
from .search.types import Rating, SearchQuery

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "!e6"
SAFE_MARKER = "--safe"
DEFAULT_QUANTITY = 1
MAX_QUANTITY = 10


def strip_prefix(raw_text: str, prefix: str = DEFAULT_PREFIX) -> str:
    """Remove the leading command verb and the single space after it."""
    remainder = raw_text[len(prefix):] if raw_text.startswith(prefix) else raw_text
    if remainder.startswith(" "):
        remainder = remainder[1:]
    return remainder


def parse_tags(remainder: str) -> list[str]:
    if not remainder.strip():
        raise EmptyInputError("No tags given")

    tags = remainder.split(",")
    # Trailing arguments (quantity, flags) ride on the last segment
    last_tokens = tags[-1].split()
    tags[-1] = last_tokens[0] if last_tokens else ""
    return tags


def select_rating(raw_text: str) -> Rating:
    # Scans the whole command, tag names included
    return Rating.SAFE if SAFE_MARKER in raw_text else Rating.EXPLICIT


def parse_quantity(remainder: str, default: int = DEFAULT_QUANTITY) -> int:
    tokens = remainder.split(" ")
    if len(tokens) < 2:
        return default

    token = tokens[1]
    if token.isascii() and token.isdigit():
        return int(token)

    logger.warning(
        f"Quantity token {token!r} is not a number, using {default}",
        extra={"subsys": "query", "event": "query.quantity_invalid"},
    )
    return default


def clamp_quantity(quantity: int, maximum: int = MAX_QUANTITY) -> int:
    return max(DEFAULT_QUANTITY, min(quantity, maximum))


def build_query(raw_text: str, prefix: str = DEFAULT_PREFIX) -> SearchQuery:
    """
    Parse a raw search command.

    Raises:
        EmptyInputError: the command carries no tags.

    The returned quantity is unclamped; callers apply `clamp_quantity`.
    """
    remainder = strip_prefix(raw_text, prefix)
    tags = parse_tags(remainder)
    rating = select_rating(raw_text)
    quantity = parse_quantity(remainder)

    logger.debug(
        f"Built query tags={tags} rating={rating.value} quantity={quantity}",
        extra={"subsys": "query", "event": "query.built"},
    )
    return SearchQuery(tags=tags, quantity=quantity, rating=rating)
