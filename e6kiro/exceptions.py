"""
Custom exceptions for the e6 bot, providing a structured error hierarchy.

Every failure is terminal to the single command invocation that raised it.
"""


class E6BotError(Exception):
    """Base exception for all custom exceptions in this bot."""

    pass


class ConfigurationError(E6BotError):
    """Raised for errors in bot configuration, like missing keys or invalid values."""

    pass


class InputError(E6BotError):
    """Raised when a command cannot be turned into a search query."""

    pass


class EmptyInputError(InputError):
    """Raised when a search command carries no tags at all."""

    pass


class SearchError(E6BotError):
    """Raised for failures talking to the upstream image-search API."""

    pass


class TransportError(SearchError):
    """Raised when the search request never got a response (DNS, connect, timeout)."""

    pass


class HttpError(SearchError):
    """Raised when the search API answers with a non-success status."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class AuthError(HttpError):
    """Raised when the search API rejects our credentials (401/403)."""

    pass


class DecodeError(SearchError):
    """Raised when the search response body is not the expected JSON shape."""

    pass


class EmptyResultError(E6BotError):
    """Raised when a valid query matched zero posts."""

    pass


class AttachmentFetchError(E6BotError):
    """Raised when a post's file could not be downloaded for upload."""

    pass


class DeliverySendError(E6BotError):
    """Raised when the chat platform refused to deliver a message."""

    pass
