"""
Shared API error parsing for list views.

Transport failures are never retried by the query layer. They are surfaced
to the UI as a parsed error, which it renders as a "could not load more"
state. Only the HTTP status is interpreted; pagination correctness is
judged from the page-info tag alone.
"""

from dataclasses import dataclass
from typing import Any, Literal

import httpx

ErrorCategory = Literal[
    "auth",        # 401 - Invalid or expired token
    "forbidden",   # 403 - Access denied
    "not_found",   # 404 - Entity or endpoint not found
    "validation",  # 400/422 - Filter or pagination rejected by the server
    "unavailable", # Network error or timeout before a response arrived
    "internal",    # 5xx or unexpected errors
]


@dataclass
class ParsedApiError:
    """Parsed API error with semantic category and message."""

    category: ErrorCategory
    message: str


def parse_http_error(
    e: httpx.HTTPStatusError,
    entity_type: str = "",
) -> ParsedApiError:
    """
    Parse HTTP error into semantic categories.

    Args:
        e: The HTTP status error from httpx
        entity_type: Type of entity being listed (e.g., "media", "series") for messages

    Returns:
        ParsedApiError with category and message
    """
    status = e.response.status_code

    if status == 401:
        return ParsedApiError("auth", "Invalid or expired token")

    if status == 403:
        return ParsedApiError("forbidden", "Access denied")

    if status == 404:
        msg = f"{entity_type.replace('_', ' ').capitalize()} not found" if entity_type else "Not found"
        return ParsedApiError("not_found", msg)

    if status in (400, 422):
        return ParsedApiError("validation", _extract_validation_message(e))

    return ParsedApiError("internal", f"API error {status}")


def parse_transport_error(e: httpx.TransportError) -> ParsedApiError:
    """Parse a network-level failure (no response received)."""
    if isinstance(e, httpx.TimeoutException):
        return ParsedApiError("unavailable", "The server took too long to respond")
    return ParsedApiError("unavailable", "Could not reach the server")


def _extract_validation_message(e: httpx.HTTPStatusError) -> str:
    """Extract validation error message from 400/422 response."""
    try:
        body = e.response.json()
    except ValueError:
        return "Validation error"
    if not isinstance(body, dict):
        return "Validation error"
    detail: Any = body.get("detail", body.get("message", "Validation error"))
    if isinstance(detail, dict):
        return detail.get("message", str(detail))
    if isinstance(detail, list):
        # Field-level validation errors come back as a list of objects
        messages = []
        for err in detail:
            if isinstance(err, dict):
                loc = err.get("loc", ["unknown"])
                field = loc[-1] if loc else "unknown"
                msg = err.get("msg", "invalid")
                messages.append(f"{field}: {msg}")
        return "; ".join(messages) if messages else "Validation error"
    return str(detail)
