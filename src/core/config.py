"""Client configuration using pydantic-settings."""
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Remote query endpoint
    api_url: str = Field(default="http://localhost:10801", validation_alias="QUERY_API_URL")
    api_timeout: float = Field(default=30.0, validation_alias="QUERY_API_TIMEOUT")
    api_token: str = Field(default="", validation_alias="QUERY_API_TOKEN")

    # Page sizes used when a list view is opened without explicit pagination
    default_page_size: int = Field(default=20, validation_alias="QUERY_DEFAULT_PAGE_SIZE")
    large_page_size: int = Field(default=40, validation_alias="QUERY_LARGE_PAGE_SIZE")

    # None keeps every observed cursor for the lifetime of the view
    cursor_cache_max_entries: int | None = Field(
        default=None, validation_alias="QUERY_CURSOR_CACHE_MAX_ENTRIES",
    )

    log_level: str = Field(default="INFO", validation_alias="QUERY_LOG_LEVEL")

    @model_validator(mode="after")
    def validate_sizes(self) -> "Settings":
        """Reject page sizes and cache caps that could never hold a page."""
        if self.default_page_size < 1 or self.large_page_size < 1:
            raise ValueError("Page sizes must be at least 1")
        if self.cursor_cache_max_entries is not None and self.cursor_cache_max_entries < 1:
            raise ValueError(
                "QUERY_CURSOR_CACHE_MAX_ENTRIES must be at least 1 when set "
                "(leave it unset for an unbounded cache)",
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
