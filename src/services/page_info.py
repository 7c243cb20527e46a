"""Parsing of paginated response envelopes."""
from typing import Any

from schemas.pagination import PAGE_INFO_MODELS, PageInfo, PageResponse
from services.exceptions import (
    MissingPaginationTagError,
    PaginationTagError,
    UnknownPaginationTagError,
)

# GraphQL responses tag page info with __typename instead of __kind
TAG_KEYS = ("__kind", "__typename")


def parse_page_info(payload: PageInfo | dict[str, Any]) -> PageInfo:
    """
    Parse a page-info envelope by its explicit tag.

    Raises:
        MissingPaginationTagError: No tag present. Never guessed from the
            remaining keys.
        UnknownPaginationTagError: Tag names no known variant.
    """
    if isinstance(payload, PageInfo):
        return payload

    tag = next((payload[key] for key in TAG_KEYS if payload.get(key) is not None), None)
    if tag is None:
        raise MissingPaginationTagError()
    model = PAGE_INFO_MODELS.get(tag) if isinstance(tag, str) else None
    if model is None:
        raise UnknownPaginationTagError(tag)

    data = {key: value for key, value in payload.items() if key not in TAG_KEYS}
    return model.model_validate({**data, "__kind": tag})


def parse_page_response(payload: dict[str, Any]) -> PageResponse:
    """Parse a ``{nodes, pageInfo}`` response envelope."""
    page_info = payload.get("pageInfo", payload.get("page_info"))
    if page_info is None:
        raise PaginationTagError("No pagination info found in the response")
    nodes = payload.get("nodes", payload.get("data"))
    return PageResponse(nodes=nodes or [], page_info=parse_page_info(page_info))
