"""Pydantic schemas and sortable field sets for query ordering."""
from typing import Literal

from pydantic import BaseModel, ConfigDict

Direction = Literal["asc", "desc"]

# Sortable fields per entity. The order-by guards are derived from these, so
# a field added here is immediately accepted by the matching guard.
MediaOrderBy = Literal[
    "name",
    "size",
    "extension",
    "created_at",
    "updated_at",
    "status",
    "path",
    "pages",
    "modified_at",
]

MediaMetadataOrderBy = Literal[
    "title",
    "series",
    "number",
    "volume",
    "summary",
    "notes",
    "age_rating",
    "genre",
    "year",
    "month",
    "day",
    "writers",
    "pencillers",
    "inkers",
    "colorists",
    "letterers",
    "cover_artists",
    "editors",
    "publisher",
    "links",
    "characters",
    "teams",
]

SeriesOrderBy = Literal["name", "description", "updated_at", "created_at", "path", "status"]

SeriesMetadataOrderBy = Literal[
    "meta_type",
    "title",
    "summary",
    "publisher",
    "status",
    "age_rating",
    "volume",
]

LibraryOrderBy = Literal["name", "path", "status", "updated_at", "created_at"]


class QueryOrder(BaseModel):
    """A single sort instruction; order_by is free-form until compiled."""

    model_config = ConfigDict(frozen=True)

    order_by: str
    direction: Direction = "asc"
