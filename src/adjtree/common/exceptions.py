"""Common exceptions for adjtree."""

from typing import Any


class AdjTreeException(Exception):
    """Base exception for all adjtree errors."""

    def __init__(self, message: str, *args: Any) -> None:
        self.message = message
        super().__init__(message, *args)

    def __str__(self) -> str:
        return self.message


class InvalidOriginKeyError(AdjTreeException):
    """Exception for origin keys that are null, missing or of mixed types."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Invalid origin key: {message}")


class AliasCollisionError(AdjTreeException):
    """Exception for table aliases that are already taken in a compound query."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Alias collision: {message}")


class MissingDepthOrPathMetadataError(AdjTreeException):
    """Exception for traversal rows without usable depth/path/link columns.

    Raised while hydrating or regrouping rows. The recursive query owes every
    row these columns; grouping without them would silently attribute rows to
    the wrong origin.
    """

    def __init__(self, message: str) -> None:
        super().__init__(f"Missing traversal metadata: {message}")


class AdjTreeInternalErrorException(AdjTreeException):
    """Exception for internal errors (bugs)."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Internal error: {message}")
