"""HTTP client for the smart-search list endpoints."""

from .api_client import SmartSearchClient, create_http_client

__all__ = ["SmartSearchClient", "create_http_client"]
