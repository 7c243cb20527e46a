"""Shared exceptions for pagination and query compilation."""


class PaginationError(Exception):
    """Base exception for pagination failures that must not be recovered locally."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class PaginationTagError(PaginationError):
    """
    Raised when a page-info envelope cannot be matched to a pagination mode.

    Guessing a mode risks rendering a page that is inconsistent with what the
    caller believes it requested, so these are always fatal.
    """


class MissingPaginationTagError(PaginationTagError):
    """Raised when a page-info envelope carries no discriminator at all."""

    def __init__(self) -> None:
        super().__init__(
            "Page info has no '__kind' (or '__typename') tag. "
            "Be sure to select it as part of the query.",
        )


class UnknownPaginationTagError(PaginationTagError):
    """Raised when a page-info discriminator names no known variant."""

    def __init__(self, tag: object) -> None:
        self.tag = tag
        super().__init__(f"Unknown page info tag: {tag!r}")


class PaginationTagMismatchError(PaginationTagError):
    """Raised when the response mode differs from the requested mode."""

    def __init__(self, requested: str, received: str) -> None:
        self.requested = requested
        self.received = received
        super().__init__(
            f"Requested {requested} pagination but the response carried {received} page info",
        )


class CursorCacheInvariantError(PaginationError):
    """
    Raised when the cursor cache has no predecessor for the current cursor.

    This only happens when has_previous and the cache maintenance have
    drifted apart. It is an internal invariant violation, not a user error.
    """

    def __init__(self, cursor: str) -> None:
        self.cursor = cursor
        super().__init__(f"No previous cursor found in cache for {cursor!r}")


class NoNextPageError(PaginationError):
    """Raised when next-page variables are requested past the last page."""

    def __init__(self) -> None:
        super().__init__("There is no next page to load")


class PaginationModeError(PaginationError):
    """Raised when an operation does not apply to the active pagination mode."""
