"""Errors raised by the blog storage and submission layers."""


class BlogError(Exception):
    """Base exception for the blog app."""


class StorageFailure(BlogError):
    """Raised when a database read or write fails."""


class NotFound(BlogError):
    """Raised when no blob exists for an identifier."""


class AvatarFetchFailure(BlogError):
    """Raised when a remote avatar cannot be fetched or is unusable."""


class BadRequest(BlogError):
    """Raised when a submission is rejected.

    ``reason`` is the short label returned to the client.
    """

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason
