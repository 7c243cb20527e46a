"""
View-scoped owner of a list screen's filter store, pagination engine and cursor cache.

A session is opened when a list view mounts and closed when it unmounts;
the cursor history dies with it and is never persisted.

Example:
    async with ListViewSession("series", transport, mode="body") as view:
        view.store.patch_body(filters=[FilterGroup(filters=[...])])
        first = await view.refresh()
        if view.status().has_next:
            second = await view.load_next()
"""
import logging
from collections.abc import Callable
from typing import Any, Protocol

import httpx

from core.config import get_settings
from schemas.filters import FilterEntity, FilterGroup
from schemas.ordering import QueryOrder
from schemas.pagination import CursorPagination, OffsetPagination, PageResponse
from services.compiler import SmartSearchBody
from services.cursor_cache import CursorCache
from services.filter_store import FilterStore, StoreMode
from services.pagination_engine import PaginationEngine, PaginationStatus
from shared.api_errors import ParsedApiError, parse_http_error, parse_transport_error

logger = logging.getLogger(__name__)

RequestPagination = OffsetPagination | CursorPagination


class ListTransport(Protocol):
    """What a list view needs from the network layer."""

    async def search(self, body: SmartSearchBody) -> PageResponse | dict[str, Any]: ...

    async def list_page(
        self, entity: FilterEntity, params: httpx.QueryParams,
    ) -> PageResponse | dict[str, Any]: ...


class ListViewSession:
    """
    Filter store + pagination engine for one mounted list view.

    In ``body`` mode requests are compiled smart-search bodies; in ``url``
    mode they are flat query strings built from the URL store.
    """

    def __init__(
        self,
        entity: FilterEntity,
        transport: ListTransport,
        *,
        mode: StoreMode = "url",
        pagination: RequestPagination | None = None,
        default_body: list[FilterGroup] | None = None,
        default_url: dict[str, Any] | None = None,
        cache_max_entries: int | None = None,
        on_dropped_order: Callable[[QueryOrder], None] | None = None,
    ) -> None:
        self.entity = entity
        self._transport = transport
        self._mode = mode
        self._initial_pagination = pagination
        self._default_body = default_body
        self._default_url = default_url
        self._cache_max_entries = (
            cache_max_entries
            if cache_max_entries is not None
            else get_settings().cursor_cache_max_entries
        )
        self._on_dropped_order = on_dropped_order
        self._store: FilterStore | None = None
        self._engine: PaginationEngine | None = None
        self._body: SmartSearchBody | None = None
        self.last_error: ParsedApiError | None = None

    async def __aenter__(self) -> "ListViewSession":
        self.open()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self._store is not None

    @property
    def store(self) -> FilterStore:
        if self._store is None:
            raise RuntimeError("List view session is not open")
        return self._store

    @property
    def engine(self) -> PaginationEngine:
        if self._engine is None:
            raise RuntimeError("List view session is not open")
        return self._engine

    def open(self) -> None:
        """Build a fresh store and engine for the view."""
        self._store = FilterStore(
            self.entity,
            mode=self._mode,
            default_body=self._default_body,
            default_url=self._default_url,
        )
        if self._initial_pagination is not None:
            self._store.set_pagination(self._initial_pagination)
        self._engine = PaginationEngine(
            self._fetch,
            self._store.pagination,
            cache=CursorCache(max_entries=self._cache_max_entries),
        )
        logger.debug("Opened %s list view (%s mode)", self.entity, self._mode)

    def close(self) -> None:
        """Discard all view state, cursor history included."""
        if self._engine is not None:
            self._engine.cache.clear()
        self._store = None
        self._engine = None
        self._body = None

    def status(self) -> PaginationStatus:
        return self.engine.status()

    async def refresh(self) -> PageResponse | None:
        """
        Fetch the first page for the store's current filters.

        The store's pagination is rewound to the first page (keeping page
        size or limit) and cursor history is reset, since both describe the
        previous result set.
        """
        store = self.store
        if self.engine.in_flight:
            return None
        first = store.pagination.rewind()
        store.set_pagination(first)
        if store.mode == "body":
            self._body = store.into_body(on_dropped_order=self._on_dropped_order)
        self.engine.reset(first)
        return await self._guard(self.engine.refetch())

    async def load_next(self) -> PageResponse | None:
        """
        Load the page after the current one.

        In body mode the filters and ordering compiled by the last
        ``refresh`` stay pinned while navigating; changes made through
        ``store.patch_body`` take effect on the next ``refresh``.
        """
        response = await self._guard(self.engine.load_next())
        self._commit(response)
        return response

    async def load_previous(self) -> PageResponse | None:
        """Load the page before the current one, with the same pinned body as load_next."""
        response = await self._guard(self.engine.load_previous())
        self._commit(response)
        return response

    def _commit(self, response: PageResponse | None) -> None:
        # Mirror the page actually loaded back into the store
        if response is not None:
            self.store.set_pagination(self.engine.request)

    async def _guard(self, operation: Any) -> PageResponse | None:
        try:
            response = await operation
        except httpx.HTTPStatusError as e:
            self.last_error = parse_http_error(e, entity_type=self.entity)
            logger.warning("Loading %s failed: %s", self.entity, self.last_error.message)
            raise
        except httpx.TransportError as e:
            self.last_error = parse_transport_error(e)
            logger.warning("Loading %s failed: %s", self.entity, self.last_error.message)
            raise
        if response is not None:
            self.last_error = None
        return response

    async def _fetch(self, pagination: RequestPagination) -> PageResponse | dict[str, Any]:
        store = self.store
        if store.mode == "body":
            if self._body is None:
                self._body = store.into_body(on_dropped_order=self._on_dropped_order)
            return await self._transport.search(self._body.with_query(pagination))
        return await self._transport.list_page(self.entity, store.to_query_params(pagination))
