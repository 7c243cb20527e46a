"""HTTP transport for the smart-search endpoints."""

from typing import Any

import httpx

from core.config import get_settings
from schemas.filters import FilterEntity
from schemas.pagination import PageResponse
from services.compiler import SmartSearchBody
from services.page_info import parse_page_response

# List endpoint per entity; smart search POSTs a body to the same path
ENTITY_PATHS: dict[str, str] = {
    "media": "/api/v1/media",
    "media_metadata": "/api/v1/metadata/media",
    "series": "/api/v1/series",
    "series_metadata": "/api/v1/metadata/series",
    "library": "/api/v1/libraries",
}


def get_api_base_url() -> str:
    """Get the API base URL from settings."""
    return get_settings().api_url


def get_default_timeout() -> float:
    """Get the default request timeout."""
    return get_settings().api_timeout


def _get_headers(token: str) -> dict[str, str]:
    """Get common headers for API requests."""
    headers = {"X-Request-Source": "smart-query"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def entity_path(entity: FilterEntity) -> str:
    try:
        return ENTITY_PATHS[entity]
    except KeyError:
        raise ValueError(f"Unknown filter entity: {entity!r}") from None


async def api_get(
    client: httpx.AsyncClient,
    path: str,
    token: str,
    params: httpx.QueryParams | dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Make an authenticated GET request to the API."""
    response = await client.get(
        path,
        params=params,
        headers=_get_headers(token),
    )
    response.raise_for_status()
    return response.json()


async def api_post(
    client: httpx.AsyncClient,
    path: str,
    token: str,
    json: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Make an authenticated POST request to the API."""
    response = await client.post(
        path,
        json=json,
        headers=_get_headers(token),
    )
    response.raise_for_status()
    return response.json()


class SmartSearchClient:
    """
    Executes compiled queries against the remote list endpoints.

    Errors from httpx propagate unchanged; retries and backoff are left to
    the caller's httpx transport configuration.
    """

    def __init__(self, client: httpx.AsyncClient, token: str = "") -> None:
        self._client = client
        self._token = token

    async def search(self, body: SmartSearchBody) -> PageResponse:
        """POST a compiled smart-search body."""
        payload = await api_post(self._client, entity_path(body.entity), self._token, body.to_wire())
        return parse_page_response(payload)

    async def list_page(self, entity: FilterEntity, params: httpx.QueryParams) -> PageResponse:
        """GET a list with flat query-string filters."""
        payload = await api_get(self._client, entity_path(entity), self._token, params)
        return parse_page_response(payload)


def create_http_client() -> httpx.AsyncClient:
    """Create an HTTP client configured from settings."""
    return httpx.AsyncClient(base_url=get_api_base_url(), timeout=get_default_timeout())
