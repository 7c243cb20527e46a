"""
Flat "form" representation of smart filters and converters to/from it.

Query-builder UIs edit filters as flat rows ``{field, operation, source,
value}`` rather than nested entity filters. The converters here are
lossless for every SmartFilter that the public builders can produce:

    into_smart_filter(into_form_config(smart_filter)) == smart_filter
"""
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from schemas.filters import (
    EntityFilter,
    FilterGroup,
    GroupJoiner,
    MediaFilter,
    SmartFilter,
)
from schemas.predicates import ORDERED_OPERATIONS, build_predicate, describe_predicate

StringOperation = Literal["contains", "excludes", "not", "equals"]
ListOperation = Literal["any", "none"]
NumberOperation = Literal["gt", "gte", "lt", "lte", "not", "equals", "range"]
Operation = StringOperation | ListOperation | NumberOperation

# Where a form row lives in the media filter graph
FilterSource = Literal["book", "book_meta", "series", "series_meta", "library"]

SOURCE_PATHS: dict[str, tuple[str, ...]] = {
    "book": (),
    "book_meta": ("metadata",),
    "series": ("series",),
    "series_meta": ("series", "metadata"),
    "library": ("series", "library"),
}

STRING_FIELDS = frozenset({
    "name",
    "title",
    "path",
    "extension",
    "description",
    "summary",
    "notes",
    "genre",
    "writer",
    "penciller",
    "inker",
    "colorist",
    "letterer",
    "editor",
    "character",
    "publisher",
    "cover_artists",
    "links",
    "teams",
    "meta_type",
    "status",
})

NUMBER_FIELDS = frozenset({"age_rating", "year", "day", "month", "pages", "size", "volume"})

DATE_FIELDS = frozenset({"created_at", "updated_at", "completed_at"})


class FormFilter(BaseModel):
    """One editable filter row."""

    model_config = ConfigDict(frozen=True)

    field: str
    operation: Operation
    source: FilterSource
    value: Any

    @model_validator(mode="after")
    def validate_operation_for_field(self) -> "FormFilter":
        """String fields may not use gt, gte, lt, lte or range."""
        if self.field in STRING_FIELDS and self.operation in ORDERED_OPERATIONS:
            raise ValueError("String fields may not use gt, gte, lt, lte, range")
        if self.operation in ("any", "none") and not isinstance(self.value, list):
            raise ValueError(f"'{self.operation}' requires a list of values")
        return self


class FormGroup(BaseModel):
    """A group of form rows combined by one joiner."""

    model_config = ConfigDict(frozen=True)

    joiner: GroupJoiner = "and"
    filters: list[FormFilter] = Field(default_factory=list)


class FormFilterConfig(BaseModel):
    """The whole query-builder form: groups plus a lower-case top-level joiner."""

    model_config = ConfigDict(frozen=True)

    groups: list[FormGroup] = Field(default_factory=list)
    joiner: Literal["and", "or"] = "and"


def into_api_filter(form_filter: FormFilter) -> MediaFilter:
    """Nest a form row under its source path as a media filter."""
    node: dict[str, Any] = {
        form_filter.field: build_predicate(form_filter.operation, form_filter.value),
    }
    for key in reversed(SOURCE_PATHS[form_filter.source]):
        node = {key: node}
    return MediaFilter.model_validate(node)


def _source_of(media_filter: MediaFilter) -> tuple[FilterSource, EntityFilter]:
    """Find the form source of a media filter and the leaf entity filter it points at."""
    if media_filter.metadata is not None:
        return "book_meta", media_filter.metadata
    series = media_filter.series
    if series is not None:
        if series.library is not None:
            return "library", series.library
        if series.metadata is not None:
            return "series_meta", series.metadata
        return "series", series
    return "book", media_filter


def into_form_filter(media_filter: MediaFilter) -> FormFilter:
    """Flatten a media filter into a form row."""
    source, leaf = _source_of(media_filter)
    operation, value = describe_predicate(leaf.predicate)
    return FormFilter(field=leaf.field_name, operation=operation, source=source, value=value)


def into_api_group(form_group: FormGroup) -> FilterGroup:
    return FilterGroup(
        joiner=form_group.joiner,
        filters=[into_api_filter(f) for f in form_group.filters],
    )


def into_form_group(group: FilterGroup) -> FormGroup:
    return FormGroup(joiner=group.joiner, filters=[into_form_filter(f) for f in group.filters])


def into_smart_filter(config: FormFilterConfig) -> SmartFilter:
    return SmartFilter(
        groups=[into_api_group(g) for g in config.groups],
        joiner="OR" if config.joiner == "or" else "AND",
    )


def into_form_config(smart_filter: SmartFilter) -> FormFilterConfig:
    return FormFilterConfig(
        groups=[into_form_group(g) for g in smart_filter.groups],
        joiner="or" if smart_filter.joiner == "OR" else "and",
    )
