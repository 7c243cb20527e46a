"""Test fixtures for query client transport tests."""

from collections.abc import Iterator
from typing import Any

import pytest
import respx

BASE_URL = "http://localhost:10801"


@pytest.fixture
def mock_api() -> Iterator[respx.MockRouter]:
    """Context manager for mocking API responses."""
    with respx.mock(base_url=BASE_URL) as respx_mock:
        yield respx_mock


@pytest.fixture
def sample_series() -> dict[str, Any]:
    """Sample series node."""
    return {
        "id": "0192f0c4-5c1e-7c3a-9f2b-1d2e3f4a5b6c",
        "name": "Batman: Year One",
        "path": "/comics/Batman Year One",
        "status": "READY",
        "created_at": "2024-01-01T00:00:00Z",
        "updated_at": "2024-01-02T00:00:00Z",
    }


@pytest.fixture
def sample_offset_response(sample_series: dict[str, Any]) -> dict[str, Any]:
    """Sample offset-paginated series response."""
    return {
        "nodes": [sample_series],
        "pageInfo": {
            "__kind": "OffsetPaginationInfo",
            "currentPage": 1,
            "totalPages": 2,
            "pageSize": 1,
            "pageOffset": 0,
            "zeroBased": False,
        },
    }


@pytest.fixture
def sample_cursor_response(sample_series: dict[str, Any]) -> dict[str, Any]:
    """Sample cursor-paginated series response."""
    return {
        "nodes": [sample_series],
        "pageInfo": {
            "__kind": "CursorPaginationInfo",
            "currentCursor": "c0",
            "nextCursor": "c1",
        },
    }
