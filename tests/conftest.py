"""Shared fixtures for query client tests."""
from collections.abc import Callable, Iterator
from typing import Any

import pytest

from core.config import get_settings

Envelope = dict[str, Any]


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Iterator[None]:
    """Each test sees settings built from its own environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def _offset_page(
    current_page: int,
    total_pages: int,
    page_size: int = 20,
    zero_based: bool = False,
    nodes: list[Any] | None = None,
) -> Envelope:
    return {
        "nodes": nodes if nodes is not None else [{"id": current_page}],
        "pageInfo": {
            "__kind": "OffsetPaginationInfo",
            "currentPage": current_page,
            "totalPages": total_pages,
            "pageSize": page_size,
            "pageOffset": 0,
            "zeroBased": zero_based,
        },
    }


def _cursor_page(
    current_cursor: str,
    next_cursor: str | None,
    nodes: list[Any] | None = None,
) -> Envelope:
    return {
        "nodes": nodes if nodes is not None else [{"id": current_cursor}],
        "pageInfo": {
            "__kind": "CursorPaginationInfo",
            "currentCursor": current_cursor,
            "nextCursor": next_cursor,
        },
    }


@pytest.fixture
def offset_page() -> Callable[..., Envelope]:
    """Factory for raw offset-paginated response envelopes."""
    return _offset_page


@pytest.fixture
def cursor_page() -> Callable[..., Envelope]:
    """Factory for raw cursor-paginated response envelopes."""
    return _cursor_page
