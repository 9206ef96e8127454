"""Exception hierarchy for the ordering service.

Repositories and services raise these; the HTTP layer maps them to status
codes at the request boundary.
"""


class OrderingServiceError(Exception):
    """Base class for all ordering service errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(OrderingServiceError):
    """A required field is missing or malformed."""


class NotFoundError(OrderingServiceError):
    """A referenced menu item or order does not exist."""


class StorageError(OrderingServiceError):
    """The underlying DynamoDB call failed."""
