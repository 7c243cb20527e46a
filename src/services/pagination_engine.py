"""
Pagination engine: one navigation contract over offset pages and cursors.

The engine holds the last observed page info for a list view and derives
``has_next`` / ``has_previous`` and the variables of the next request from
it. Cursor mode is forward-only on the wire, so "previous" is served from a
CursorCache the engine fills while it navigates forward.

Only one request is in flight per engine. A ``load_next``/``load_previous``
issued while another is in flight is rejected (returns None) rather than
queued, so cache updates are applied strictly in request order.
"""
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from schemas.pagination import (
    CursorPagination,
    CursorPaginationInfo,
    OffsetPagination,
    OffsetPaginationInfo,
    PageInfo,
    PageResponse,
)
from services.cursor_cache import CursorCache
from services.exceptions import (
    CursorCacheInvariantError,
    NoNextPageError,
    PaginationError,
    PaginationTagMismatchError,
    UnknownPaginationTagError,
)
from services.page_info import parse_page_info, parse_page_response

logger = logging.getLogger(__name__)

RequestPagination = OffsetPagination | CursorPagination
Fetch = Callable[[RequestPagination], Awaitable[PageResponse | dict[str, Any]]]


class EngineState(StrEnum):
    """Navigation state of a pagination engine."""

    IDLE = "idle"
    LOADING_NEXT = "loading_next"
    LOADING_PREVIOUS = "loading_previous"
    # Initial fetch or a refetch of the current request
    REFETCHING = "refetching"


@dataclass(frozen=True)
class PaginationStatus:
    """What a list view renders its pager from."""

    has_next: bool
    has_previous: bool
    is_loading_next: bool
    is_loading_previous: bool


def page_availability(page_info: PageInfo, cache: CursorCache) -> tuple[bool, bool]:
    """
    Compute ``(has_next, has_previous)`` for a page.

    Offset pages use the page counters; cursor pages know "next" from the
    response and "previous" only from the cache.
    """
    if isinstance(page_info, OffsetPaginationInfo):
        current = page_info.current_page
        adjusted_current = current + 1 if page_info.zero_based else current
        has_previous = current > 0 if page_info.zero_based else current > 1
        return adjusted_current < page_info.total_pages, has_previous
    if isinstance(page_info, CursorPaginationInfo):
        has_previous = cache.previous_of(page_info.current_cursor) is not None
        return page_info.next_cursor is not None, has_previous
    raise UnknownPaginationTagError(type(page_info).__name__)


class PaginationEngine:
    """
    Page navigation for one list view.

    Args:
        fetch: Transport callable; given request pagination, returns the page
            (a PageResponse or the raw ``{nodes, pageInfo}`` envelope).
        request: Pagination of the first request; fixes the engine's mode.
        cache: Cursor history. A fresh unbounded cache when omitted.
    """

    def __init__(
        self,
        fetch: Fetch,
        request: RequestPagination,
        cache: CursorCache | None = None,
    ) -> None:
        self._fetch = fetch
        self._request = request
        self.cache = cache if cache is not None else CursorCache()
        self._page_info: PageInfo | None = None
        self._state = EngineState.IDLE

    @property
    def request(self) -> RequestPagination:
        """Pagination of the last successful (or initial) request."""
        return self._request

    @property
    def page_info(self) -> PageInfo | None:
        return self._page_info

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def is_loading_next(self) -> bool:
        return self._state is EngineState.LOADING_NEXT

    @property
    def is_loading_previous(self) -> bool:
        return self._state is EngineState.LOADING_PREVIOUS

    @property
    def in_flight(self) -> bool:
        return self._state is not EngineState.IDLE

    @property
    def has_next(self) -> bool:
        if self._page_info is None:
            return False
        return page_availability(self._page_info, self.cache)[0]

    @property
    def has_previous(self) -> bool:
        if self._page_info is None:
            return False
        return page_availability(self._page_info, self.cache)[1]

    def status(self) -> PaginationStatus:
        return PaginationStatus(
            has_next=self.has_next,
            has_previous=self.has_previous,
            is_loading_next=self.is_loading_next,
            is_loading_previous=self.is_loading_previous,
        )

    def observe(self, page_info: PageInfo | dict[str, Any]) -> PageInfo:
        """
        Record a response's page info.

        The tag must match the mode of the request; a mismatch is fatal. In
        cursor mode the forward link ``current -> next`` is recorded,
        keeping any backward link already known for the current cursor.

        Raises:
            PaginationTagError: Missing, unknown or mismatched tag.
        """
        info = parse_page_info(page_info)
        if info.mode != self._request.kind:
            raise PaginationTagMismatchError(self._request.kind, info.mode)
        if isinstance(info, CursorPaginationInfo) and info.next_cursor is not None:
            self.cache.record_next(info.current_cursor, info.next_cursor)
        self._page_info = info
        return info

    def next_variables(self) -> RequestPagination:
        """
        Derive the pagination of the next page's request.

        Raises:
            NoNextPageError: Already on the last page (offset) or no next
                cursor (cursor).
        """
        info = self._require_page_info()
        if isinstance(info, OffsetPaginationInfo):
            if not page_availability(info, self.cache)[0]:
                raise NoNextPageError()
            return OffsetPagination(
                page=info.current_page + 1,
                page_size=info.page_size,
                zero_based=info.zero_based,
            )
        if info.next_cursor is None:
            raise NoNextPageError()
        return CursorPagination(cursor=info.next_cursor, limit=self._cursor_limit())

    def previous_variables(self) -> RequestPagination:
        """
        Derive the pagination of the previous page's request.

        Offset pages are floored at the first page of the mode (0 or 1).

        Raises:
            CursorCacheInvariantError: Cursor mode and the cache has no
                predecessor recorded for the current cursor.
        """
        info = self._require_page_info()
        if isinstance(info, OffsetPaginationInfo):
            first_page = 0 if info.zero_based else 1
            return OffsetPagination(
                page=max(first_page, info.current_page - 1),
                page_size=info.page_size,
                zero_based=info.zero_based,
            )
        previous_cursor = self.cache.previous_of(info.current_cursor)
        if previous_cursor is None:
            raise CursorCacheInvariantError(info.current_cursor)
        return CursorPagination(cursor=previous_cursor, limit=self._cursor_limit())

    async def refetch(self, request: RequestPagination | None = None) -> PageResponse | None:
        """
        Fetch the current (or the given) request without navigating.

        Used for the initial load of a view. Returns None if another request
        is already in flight.
        """
        if self._reject_if_in_flight("refetch"):
            return None
        target = request if request is not None else self._request
        if target.kind != self._request.kind:
            # Switching modes starts a new history
            self.cache.clear()
            self._page_info = None
            self._request = target
        return await self._run(EngineState.REFETCHING, target)

    async def load_next(self) -> PageResponse | None:
        """
        Load the next page.

        No-op (returns None) when there is no next page or a request is
        already in flight.
        """
        if self._reject_if_in_flight("load_next") or not self.has_next:
            return None
        variables = self.next_variables()
        info = self._page_info
        forward_from = info.current_cursor if isinstance(info, CursorPaginationInfo) else None
        return await self._run(EngineState.LOADING_NEXT, variables, forward_from)

    async def load_previous(self) -> PageResponse | None:
        """
        Load the previous page.

        No-op (returns None) on the first offset page, before any page was
        observed, or when a request is already in flight.

        Raises:
            CursorCacheInvariantError: Cursor mode and no predecessor was
                recorded for the current cursor.
        """
        if self._reject_if_in_flight("load_previous") or self._page_info is None:
            return None
        if isinstance(self._page_info, OffsetPaginationInfo) and not self.has_previous:
            return None
        return await self._run(EngineState.LOADING_PREVIOUS, self.previous_variables())

    def reset(self, request: RequestPagination) -> None:
        """Forget page info and cursor history, e.g. after filters changed."""
        if self.in_flight:
            raise PaginationError("Cannot reset pagination while a request is in flight")
        self._request = request
        self._page_info = None
        self.cache.clear()

    async def _run(
        self,
        state: EngineState,
        variables: RequestPagination,
        forward_from: str | None = None,
    ) -> PageResponse:
        self._state = state
        previous_request = self._request
        try:
            self._request = variables
            response = await self._fetch(variables)
            if not isinstance(response, PageResponse):
                response = parse_page_response(response)
            info = self.observe(response.page_info)
            if (
                forward_from is not None
                and isinstance(info, CursorPaginationInfo)
                and info.current_cursor != forward_from
            ):
                self.cache.record_previous(info.current_cursor, forward_from)
            return response
        except BaseException:
            self._request = previous_request
            raise
        finally:
            self._state = EngineState.IDLE

    def _reject_if_in_flight(self, operation: str) -> bool:
        if self.in_flight:
            logger.debug("Rejecting %s: %s already in flight", operation, self._state.value)
            return True
        return False

    def _require_page_info(self) -> PageInfo:
        if self._page_info is None:
            raise PaginationError("No page info observed yet; fetch the first page before navigating")
        return self._page_info

    def _cursor_limit(self) -> int | None:
        return self._request.limit if isinstance(self._request, CursorPagination) else None
