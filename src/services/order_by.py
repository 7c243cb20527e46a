"""Per-entity order-by guards used to strip foreign sort fields before a request."""
from collections.abc import Callable
from typing import TypeGuard, get_args

from schemas.filters import FilterEntity
from schemas.ordering import (
    LibraryOrderBy,
    MediaMetadataOrderBy,
    MediaOrderBy,
    SeriesMetadataOrderBy,
    SeriesOrderBy,
)

OrderByGuard = Callable[[object], bool]

MEDIA_ORDER_BY_FIELDS: frozenset[str] = frozenset(get_args(MediaOrderBy))
MEDIA_METADATA_ORDER_BY_FIELDS: frozenset[str] = frozenset(get_args(MediaMetadataOrderBy))
SERIES_ORDER_BY_FIELDS: frozenset[str] = frozenset(get_args(SeriesOrderBy))
SERIES_METADATA_ORDER_BY_FIELDS: frozenset[str] = frozenset(get_args(SeriesMetadataOrderBy))
LIBRARY_ORDER_BY_FIELDS: frozenset[str] = frozenset(get_args(LibraryOrderBy))


def is_media_order_by(value: object) -> TypeGuard[MediaOrderBy]:
    return isinstance(value, str) and value in MEDIA_ORDER_BY_FIELDS


def is_media_metadata_order_by(value: object) -> TypeGuard[MediaMetadataOrderBy]:
    return isinstance(value, str) and value in MEDIA_METADATA_ORDER_BY_FIELDS


def is_series_order_by(value: object) -> TypeGuard[SeriesOrderBy]:
    return isinstance(value, str) and value in SERIES_ORDER_BY_FIELDS


def is_series_metadata_order_by(value: object) -> TypeGuard[SeriesMetadataOrderBy]:
    return isinstance(value, str) and value in SERIES_METADATA_ORDER_BY_FIELDS


def is_library_order_by(value: object) -> TypeGuard[LibraryOrderBy]:
    return isinstance(value, str) and value in LIBRARY_ORDER_BY_FIELDS


ORDER_BY_GUARDS: dict[str, OrderByGuard] = {
    "media": is_media_order_by,
    "media_metadata": is_media_metadata_order_by,
    "series": is_series_order_by,
    "series_metadata": is_series_metadata_order_by,
    "library": is_library_order_by,
}


def order_by_guard_for(entity: FilterEntity) -> OrderByGuard:
    """Get the order-by guard for an entity."""
    try:
        return ORDER_BY_GUARDS[entity]
    except KeyError:
        raise ValueError(f"Unknown filter entity: {entity!r}") from None
