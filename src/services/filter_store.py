"""
View-scoped filter state for list screens.

Each mounted list view builds its own FilterStore; nothing here is a process
singleton, so filters never bleed between screens. The store keeps two
independent representations:

- ``url_store``: a flat ``key -> value`` map that round-trips through the
  address bar query string (simple list screens).
- ``body_store``: typed filter groups and ordering for the compiler
  (smart-list / query-builder screens).

Writing one never touches the other. Every mutation replaces the whole
state object, so readers never observe a half-applied update.
"""
import logging
from collections.abc import Callable, Mapping
from typing import Any, Literal, TypeVar

import httpx
from pydantic import BaseModel, ConfigDict, Field

from core.config import get_settings
from schemas.filters import FilterEntity, FilterGroup
from schemas.ordering import QueryOrder
from schemas.pagination import CursorPagination, OffsetPagination, Pagination
from services.compiler import SmartSearchBody, compile_body
from services.exceptions import PaginationModeError
from services.order_by import OrderByGuard

logger = logging.getLogger(__name__)

StoreMode = Literal["url", "body"]
T = TypeVar("T")

# Query-string keys owned by pagination and ordering; everything else is a filter
PAGINATION_PARAMS = frozenset({"page", "page_size", "zero_based", "cursor", "limit"})
ORDERING_PARAMS = frozenset({"order_by", "direction"})
RESERVED_PARAMS = PAGINATION_PARAMS | ORDERING_PARAMS


class UrlFilterState(BaseModel):
    """Flat filters that live in the address bar."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    filters: dict[str, Any] = Field(default_factory=dict)
    ordering: QueryOrder | None = None
    pagination: Pagination = Field(default_factory=OffsetPagination)


class BodyFilterState(BaseModel):
    """Typed filters sent in a smart-search request body."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    for_entity: FilterEntity
    filters: list[FilterGroup] | None = None
    ordering: list[QueryOrder] | None = None
    pagination: Pagination = Field(default_factory=OffsetPagination)
    total_count: int | None = None


class FilterStoreState(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    mode: StoreMode = "url"
    url_store: UrlFilterState
    body_store: BodyFilterState


Listener = Callable[[FilterStoreState, FilterStoreState], None]


def _encode_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class FilterStore:
    """
    Filter, ordering and pagination state owned by one list view.

    Args:
        for_entity: Entity the body filters compile for.
        mode: Which sub-store drives pagination and requests.
        default_body: Initial body filter groups.
        default_url: Initial flat URL filters.
        page_size: Initial page size; defaults to ``Settings.default_page_size``.
    """

    def __init__(
        self,
        for_entity: FilterEntity,
        *,
        mode: StoreMode = "url",
        default_body: list[FilterGroup] | None = None,
        default_url: Mapping[str, Any] | None = None,
        page_size: int | None = None,
    ) -> None:
        page_size = page_size or get_settings().default_page_size
        self._state = FilterStoreState(
            mode=mode,
            url_store=UrlFilterState(
                filters=dict(default_url or {}),
                pagination=OffsetPagination(page=1, page_size=page_size),
            ),
            body_store=BodyFilterState(
                for_entity=for_entity,
                filters=default_body,
                pagination=OffsetPagination(page=1, page_size=page_size),
            ),
        )
        self._listeners: list[Listener] = []

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    @property
    def state(self) -> FilterStoreState:
        return self._state

    @property
    def mode(self) -> StoreMode:
        return self._state.mode

    @property
    def url_store(self) -> UrlFilterState:
        return self._state.url_store

    @property
    def body_store(self) -> BodyFilterState:
        return self._state.body_store

    @property
    def pagination(self) -> OffsetPagination | CursorPagination:
        """Pagination of the sub-store selected by the current mode."""
        return self._active().pagination

    def select(self, selector: Callable[[FilterStoreState], T]) -> T:
        return selector(self._state)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Call ``listener(new_state, old_state)`` after every mutation.

        Returns a function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def set_mode(self, mode: StoreMode) -> None:
        if mode != self._state.mode:
            logger.debug(
                "Filter store for %s switching to %s mode",
                self._state.body_store.for_entity, mode,
            )
        self._replace(mode=mode)

    def patch_body(self, changes: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        """Merge changes into the body store."""
        body = self._state.body_store
        updated = BodyFilterState(**{**dict(body), **(changes or {}), **kwargs})
        self._replace(body_store=updated)

    def patch_url(self, changes: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        """Merge changes into the URL store."""
        url = self._state.url_store
        updated = UrlFilterState(**{**dict(url), **(changes or {}), **kwargs})
        self._replace(url_store=updated)

    def set_url_filter(self, key: str, value: Any) -> None:
        if key in RESERVED_PARAMS:
            raise ValueError(f"'{key}' is reserved for pagination/ordering and cannot be a filter")
        self.patch_url(filters={**self._state.url_store.filters, key: value})

    def remove_url_filter(self, key: str) -> None:
        filters = self._state.url_store.filters
        if key not in filters:
            return
        self.patch_url(filters={k: v for k, v in filters.items() if k != key})

    def set_pagination(self, pagination: OffsetPagination | CursorPagination) -> None:
        """Replace the active sub-store's pagination."""
        self._patch_active(pagination=pagination)

    def set_page(self, page: int) -> None:
        current = self._require_offset()
        self._patch_active(
            pagination=OffsetPagination(
                page=page, page_size=current.page_size, zero_based=current.zero_based,
            ),
        )

    def set_page_size(self, page_size: int) -> None:
        current = self._require_offset()
        self._patch_active(
            pagination=OffsetPagination(
                page=current.page, page_size=page_size, zero_based=current.zero_based,
            ),
        )

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def into_body(
        self,
        is_legal_order_field: OrderByGuard | None = None,
        on_dropped_order: Callable[[QueryOrder], None] | None = None,
    ) -> SmartSearchBody:
        """Compile the body store into a request body."""
        body = self._state.body_store
        return compile_body(
            body.for_entity,
            pagination=body.pagination,
            filters=body.filters,
            ordering=body.ordering,
            is_legal_order_field=is_legal_order_field,
            on_dropped_order=on_dropped_order,
        )

    def into_url_params(
        self,
        pagination: OffsetPagination | CursorPagination | None = None,
    ) -> dict[str, Any]:
        """
        Flatten the URL store into filters + ordering + pagination params.

        ``pagination`` overrides the stored pagination, e.g. to request a
        page before committing to it.
        """
        url = self._state.url_store
        params: dict[str, Any] = dict(url.filters)
        if url.ordering is not None:
            params.update(url.ordering.model_dump())
        params.update((pagination or url.pagination).to_wire())
        return params

    def to_query_params(
        self,
        pagination: OffsetPagination | CursorPagination | None = None,
    ) -> httpx.QueryParams:
        """
        Encode the URL store as query parameters.

        One parameter per filter key (repeated for list values), plus
        ``order_by``/``direction`` and ``page``/``page_size`` or
        ``cursor``/``limit`` depending on the pagination mode.
        """
        items: list[tuple[str, str]] = []
        for key, value in self.into_url_params(pagination).items():
            if value is None:
                continue
            if isinstance(value, list | tuple):
                items.extend((key, _encode_value(v)) for v in value)
            else:
                items.append((key, _encode_value(value)))
        return httpx.QueryParams(items)

    def apply_query_params(self, params: httpx.QueryParams | Mapping[str, Any] | str) -> None:
        """
        Replace the URL store with what the address bar says.

        Filter values arrive as strings; a key given more than once becomes a
        list. Pagination and ordering keys that are absent keep their
        current values.
        """
        query = params if isinstance(params, httpx.QueryParams) else httpx.QueryParams(params)
        url = self._state.url_store

        filters: dict[str, Any] = {}
        for key in query:
            if key in RESERVED_PARAMS:
                continue
            values = query.get_list(key)
            filters[key] = values if len(values) > 1 else values[0]

        ordering = url.ordering
        if "order_by" in query:
            ordering = QueryOrder(
                order_by=query["order_by"],
                direction=query.get("direction") or "asc",
            )

        self.patch_url(
            filters=filters,
            ordering=ordering,
            pagination=self._pagination_from_query(query, url.pagination),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _active(self) -> UrlFilterState | BodyFilterState:
        return self._state.url_store if self._state.mode == "url" else self._state.body_store

    def _patch_active(self, **changes: Any) -> None:
        if self._state.mode == "url":
            self.patch_url(**changes)
        else:
            self.patch_body(**changes)

    def _require_offset(self) -> OffsetPagination:
        pagination = self.pagination
        if not isinstance(pagination, OffsetPagination):
            raise PaginationModeError(
                f"Page numbers do not apply to {pagination.kind} pagination",
            )
        return pagination

    def _replace(self, **changes: Any) -> None:
        old = self._state
        self._state = FilterStoreState(**{**dict(old), **changes})
        for listener in list(self._listeners):
            listener(self._state, old)

    @staticmethod
    def _pagination_from_query(
        query: httpx.QueryParams,
        current: OffsetPagination | CursorPagination,
    ) -> OffsetPagination | CursorPagination:
        if "cursor" in query or "limit" in query:
            base_limit = current.limit if isinstance(current, CursorPagination) else None
            return CursorPagination(
                cursor=query.get("cursor"),
                limit=_int_param(query, "limit", base_limit, minimum=1),
            )
        if "page" in query or "page_size" in query:
            base = current if isinstance(current, OffsetPagination) else OffsetPagination()
            return OffsetPagination(
                page=_int_param(query, "page", base.page, minimum=0),
                page_size=_int_param(query, "page_size", base.page_size, minimum=1),
                zero_based=query.get("zero_based", "false").lower() == "true",
            )
        return current


def _int_param(
    query: httpx.QueryParams, key: str, default: int | None, *, minimum: int,
) -> int | None:
    """Read an integer query param, keeping ``default`` for anything unusable."""
    raw = query.get(key)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.debug("Ignoring non-numeric %s=%r in query string", key, raw)
        return default
    if value < minimum:
        logger.debug("Ignoring out-of-range %s=%r in query string", key, raw)
        return default
    return value
