"""
Entity-scoped compilation of filters, ordering and pagination into request bodies.

Filters are always authored against media (the root of the entity graph).
Compiling for another entity narrows every expression to that entity's own
fields, e.g. for ``library`` the expression

    {"series": {"library": {"updated_at": {...}}}}

compiles to ``{"updated_at": {...}}``. Expressions that do not reach the
target entity are dropped, as are groups left with no expressions.

Absent keys mean "no constraint": the compiled body never carries
``filter: []`` or ``order_params: []``, it simply omits them.
"""
import logging
from collections.abc import Callable, Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict

from schemas.filters import (
    EntityFilter,
    FilterEntity,
    FilterGroup,
    MediaFilter,
    SmartFilter,
)
from schemas.ordering import QueryOrder
from schemas.pagination import CursorPagination, OffsetPagination, Pagination
from services.order_by import OrderByGuard, order_by_guard_for

logger = logging.getLogger(__name__)

# Attribute path from a media filter to each entity's own filter
ENTITY_PATHS: dict[str, tuple[str, ...]] = {
    "media": (),
    "media_metadata": ("metadata",),
    "series": ("series",),
    "series_metadata": ("series", "metadata"),
    "library": ("series", "library"),
}

CompiledGroup = dict[str, list[dict[str, Any]]]


class SmartSearchBody(BaseModel):
    """A compiled request body for one entity's smart search."""

    model_config = ConfigDict(frozen=True)

    entity: FilterEntity
    filter: list[CompiledGroup] | None = None
    order_params: list[QueryOrder] | None = None
    query: Pagination

    def to_wire(self) -> dict[str, Any]:
        """Serialize to JSON, omitting absent sections entirely."""
        body: dict[str, Any] = {}
        if self.filter is not None:
            body["filter"] = self.filter
        if self.order_params is not None:
            body["order_params"] = [o.model_dump() for o in self.order_params]
        body["query"] = self.query.to_wire()
        return body

    def with_query(self, query: OffsetPagination | CursorPagination) -> "SmartSearchBody":
        """Same filters and ordering, different page."""
        return SmartSearchBody(**{**dict(self), "query": query})


def narrow_filter(entity: FilterEntity, media_filter: MediaFilter) -> EntityFilter | None:
    """
    Narrow a media filter to the target entity's own filter.

    Returns None when the expression does not reach the entity, e.g. a
    ``name`` filter on media compiled for ``library``.
    """
    try:
        path = ENTITY_PATHS[entity]
    except KeyError:
        raise ValueError(f"Unknown filter entity: {entity!r}") from None

    node: EntityFilter | None = media_filter
    for key in path:
        node = getattr(node, key)
        if node is None:
            return None
    return node


def narrow_group(entity: FilterEntity, group: FilterGroup) -> CompiledGroup | None:
    """Narrow every expression in a group; None if nothing survives."""
    narrowed = [narrow_filter(entity, f) for f in group.filters]
    compiled = [n.to_wire() for n in narrowed if n is not None]
    if not compiled:
        return None
    return {group.joiner: compiled}


def compile_filters(
    entity: FilterEntity,
    groups: Iterable[FilterGroup] | None,
) -> list[CompiledGroup] | None:
    """Compile filter groups for an entity; None means unfiltered."""
    if not groups:
        return None
    compiled = [c for c in (narrow_group(entity, g) for g in groups) if c is not None]
    return compiled or None


def compile_ordering(
    ordering: Iterable[QueryOrder] | None,
    is_legal_order_field: OrderByGuard,
    on_dropped_order: Callable[[QueryOrder], None] | None = None,
) -> list[QueryOrder] | None:
    """
    Keep only sort entries the guard accepts, in their original order.

    Rejected entries are dropped silently (stale sort preferences carried
    over from another entity's view must not break the request). The
    optional ``on_dropped_order`` hook sees each dropped entry.
    """
    if not ordering:
        return None
    kept: list[QueryOrder] = []
    for order in ordering:
        if is_legal_order_field(order.order_by):
            kept.append(order)
            continue
        logger.debug("Dropping order_by field not sortable here: %s", order.order_by)
        if on_dropped_order is not None:
            on_dropped_order(order)
    return kept or None


def compile_body(
    entity: FilterEntity,
    *,
    pagination: Pagination,
    filters: Iterable[FilterGroup] | None = None,
    ordering: Iterable[QueryOrder] | None = None,
    is_legal_order_field: OrderByGuard | None = None,
    on_dropped_order: Callable[[QueryOrder], None] | None = None,
) -> SmartSearchBody:
    """
    Compile filters, ordering and pagination into a request body for an entity.

    Args:
        entity: Target entity; selects the filter shape and default guard.
        pagination: Required; always present in the compiled body.
        filters: Filter groups authored against media.
        ordering: Free-form sort entries.
        is_legal_order_field: Guard for sort fields. Defaults to the
            entity's own guard.
        on_dropped_order: Optional diagnostic hook for rejected sort entries.

    Returns:
        SmartSearchBody with ``filter``/``order_params`` set to None (absent
        on the wire) when nothing survives compilation.
    """
    guard = is_legal_order_field or order_by_guard_for(entity)
    return SmartSearchBody(
        entity=entity,
        filter=compile_filters(entity, filters),
        order_params=compile_ordering(ordering, guard, on_dropped_order),
        query=pagination,
    )


def compile_smart_filter(smart_filter: SmartFilter) -> dict[str, Any]:
    """
    Compile a smart filter into the wire form used when saving a smart list.

    Empty groups are dropped since they contribute nothing.
    """
    return {
        "groups": [g.to_wire() for g in smart_filter.groups if g.filters],
        "joiner": smart_filter.joiner,
    }
