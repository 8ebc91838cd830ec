"""
Custom exception classes for member search.

Store failures are surfaced to the caller unchanged apart from being
wrapped in StoreError (or NonUniqueResultError), so callers only need to
know about this module and never about SQLAlchemy's exception tree.
"""


class MemberSearchError(Exception):
    """
    Base exception class for all member search exceptions.

    Attributes:
        message: Human-readable error message.
    """

    def __init__(self, message: str):
        """
        Initialize the exception with a message.

        Args:
            message: Human-readable error description.
        """
        self.message = message
        super().__init__(message)


class StoreError(MemberSearchError):
    """
    Query execution failed.

    Raised when the underlying store cannot execute a content, count or
    CRUD statement (connectivity, malformed statement, constraint
    violation). The original SQLAlchemy error is chained as __cause__.
    Never retried internally.
    """


class NonUniqueResultError(StoreError):
    """
    A single-result fetch matched more than one row.

    Never resolved by silently picking one of the rows.
    """


class ValidationError(MemberSearchError):
    """
    Pagination request failed validation.

    Raised for unknown sort fields or out-of-range page parameters,
    before any statement is sent to the store. Search conditions are
    never validated for sensible ranges.
    """


class NotFoundError(MemberSearchError):
    """
    Resource not found.

    Raised by commands that reference a member or team that does not exist.
    """
