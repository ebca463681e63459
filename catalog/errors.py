"""
Error taxonomy for catalog operations.
Each error carries the HTTP status code it maps to and a client-facing message.
"""


class CatalogError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(CatalogError):
    """The caller sent a missing or malformed value."""

    status_code = 400


class NotFound(CatalogError):
    """No active book matched the request."""

    status_code = 404


class StorageError(CatalogError):
    """The underlying MongoDB operation failed."""

    status_code = 500
