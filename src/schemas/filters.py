"""
Pydantic schemas for smart filter expressions.

Every entity filter is a closed union expressed as a model whose fields are
all optional but exactly one of which must be set. Nested entity filters
always narrow toward a leaf field along the fixed graph:

    media -> metadata
    media -> series -> metadata
    media -> series -> library

Example (media whose series lives in a library updated during 2021):
    {"series": {"library": {"updated_at": {"from": "2021-01-01T00:00:00Z",
                                            "to": "2021-12-31T23:59:59Z"}}}}
"""
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from schemas.predicates import DateTimePredicate, NumberPredicate, StringPredicate

FilterEntity = Literal["media", "media_metadata", "series", "series_metadata", "library"]
GroupJoiner = Literal["and", "or", "not"]
FilterJoin = Literal["AND", "OR"]

GROUP_JOINERS: tuple[GroupJoiner, ...] = ("and", "or", "not")


class EntityFilter(BaseModel):
    """Base for single-field entity filters."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def exactly_one_field(self) -> "EntityFilter":
        """Enforce the union: exactly one field per filter expression."""
        set_fields = [name for name in type(self).model_fields if getattr(self, name) is not None]
        if len(set_fields) != 1:
            raise ValueError(
                f"{type(self).__name__} requires exactly one field, got "
                f"{len(set_fields)} ({', '.join(set_fields) or 'none'})",
            )
        return self

    @property
    def field_name(self) -> str:
        """Name of the single field this expression filters on."""
        return next(name for name in type(self).model_fields if getattr(self, name) is not None)

    @property
    def predicate(self) -> Any:
        """The value stored under :attr:`field_name`."""
        return getattr(self, self.field_name)

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the JSON shape the query endpoint expects."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class LibraryFilter(EntityFilter):
    name: StringPredicate | None = None
    path: StringPredicate | None = None
    updated_at: DateTimePredicate | None = None


class SeriesMetadataFilter(EntityFilter):
    meta_type: StringPredicate | None = None
    title: StringPredicate | None = None
    publisher: StringPredicate | None = None
    status: StringPredicate | None = None
    age_rating: NumberPredicate | None = None
    volume: NumberPredicate | None = None


class SeriesFilter(EntityFilter):
    name: StringPredicate | None = None
    path: StringPredicate | None = None
    metadata: SeriesMetadataFilter | None = None
    library: LibraryFilter | None = None


class MediaMetadataFilter(EntityFilter):
    title: StringPredicate | None = None
    summary: StringPredicate | None = None
    publisher: StringPredicate | None = None
    genre: StringPredicate | None = None
    character: StringPredicate | None = None
    colorist: StringPredicate | None = None
    writer: StringPredicate | None = None
    penciller: StringPredicate | None = None
    letterer: StringPredicate | None = None
    inker: StringPredicate | None = None
    editor: StringPredicate | None = None
    age_rating: NumberPredicate | None = None
    year: NumberPredicate | None = None
    month: NumberPredicate | None = None
    day: NumberPredicate | None = None


class MediaFilter(EntityFilter):
    name: StringPredicate | None = None
    path: StringPredicate | None = None
    extension: StringPredicate | None = None
    metadata: MediaMetadataFilter | None = None
    series: SeriesFilter | None = None


class FilterGroup(BaseModel):
    """
    A boolean combinator over media filter expressions.

    Wire form: {"and": [...]} | {"or": [...]} | {"not": [...]}.
    A group with no filters is legal and contributes nothing to a query.
    """

    model_config = ConfigDict(frozen=True)

    joiner: GroupJoiner = "and"
    filters: list[MediaFilter] = Field(default_factory=list)

    def to_wire(self) -> dict[str, list[dict[str, Any]]]:
        """Serialize to the single-key wire form."""
        return {self.joiner: [f.to_wire() for f in self.filters]}

    @classmethod
    def from_wire(cls, payload: dict[str, Any]) -> "FilterGroup":
        """Parse the single-key wire form."""
        keys = [key for key in GROUP_JOINERS if key in payload]
        if len(keys) != 1 or len(payload) != 1:
            raise ValueError(
                f"Filter group must have exactly one of {', '.join(GROUP_JOINERS)}, "
                f"got keys: {sorted(payload)}",
            )
        joiner = keys[0]
        return cls(joiner=joiner, filters=payload[joiner] or [])


class SmartFilter(BaseModel):
    """
    A full query filter: filter groups joined by a top-level AND/OR.

    Example: {"groups": [{"and": [...]}, {"or": [...]}], "joiner": "OR"}
    Evaluates to: (group 0) OR (group 1)
    """

    model_config = ConfigDict(frozen=True)

    groups: list[FilterGroup] = Field(default_factory=list)
    joiner: FilterJoin = "AND"

    def to_wire(self) -> dict[str, Any]:
        return {"groups": [g.to_wire() for g in self.groups], "joiner": self.joiner}

    @classmethod
    def from_wire(cls, payload: dict[str, Any]) -> "SmartFilter":
        return cls(
            groups=[FilterGroup.from_wire(g) for g in payload.get("groups") or []],
            joiner=payload.get("joiner") or "AND",
        )
