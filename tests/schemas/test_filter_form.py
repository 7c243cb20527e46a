"""Tests for the flat form representation of smart filters."""
import pytest
from pydantic import ValidationError

from schemas.filter_form import (
    FormFilter,
    FormFilterConfig,
    FormGroup,
    into_api_filter,
    into_form_config,
    into_form_filter,
    into_smart_filter,
)
from schemas.filters import FilterGroup, MediaFilter, SmartFilter
from schemas.predicates import any_of, between, contains, gte, none_of, not_equal


# =============================================================================
# FormFilter validation
# =============================================================================


class TestFormFilterValidation:
    """Form rows reject operations that make no sense for their field."""

    @pytest.mark.parametrize("operation", ["gt", "gte", "lt", "lte", "range"])
    def test__form_filter__string_field_rejects_ordered_operation(self, operation: str) -> None:
        with pytest.raises(ValidationError, match="String fields may not use"):
            FormFilter(field="name", operation=operation, source="book", value="a")

    def test__form_filter__number_field_accepts_ordered_operation(self) -> None:
        row = FormFilter(field="age_rating", operation="gte", source="book_meta", value=13)
        assert row.value == 13

    @pytest.mark.parametrize("operation", ["any", "none"])
    def test__form_filter__list_operation_requires_list(self, operation: str) -> None:
        with pytest.raises(ValidationError, match="requires a list"):
            FormFilter(field="name", operation=operation, source="book", value="a")

    def test__form_filter__rejects_unknown_source(self) -> None:
        with pytest.raises(ValidationError):
            FormFilter(field="name", operation="equals", source="shelf", value="a")


# =============================================================================
# Row conversion
# =============================================================================


class TestRowConversion:
    """Form rows nest under their source path."""

    @pytest.mark.parametrize(("source", "field", "expected"), [
        ("book", "name", {"name": {"contains": "Bat"}}),
        ("book_meta", "title", {"metadata": {"title": {"contains": "Bat"}}}),
        ("series", "name", {"series": {"name": {"contains": "Bat"}}}),
        ("series_meta", "title", {"series": {"metadata": {"title": {"contains": "Bat"}}}}),
        ("library", "name", {"series": {"library": {"name": {"contains": "Bat"}}}}),
    ])
    def test__into_api_filter__nests_by_source(
        self, source: str, field: str, expected: dict,
    ) -> None:
        row = FormFilter(field=field, operation="contains", source=source, value="Bat")
        assert into_api_filter(row).to_wire() == expected

    def test__into_api_filter__equals_is_exact_value(self) -> None:
        row = FormFilter(field="extension", operation="equals", source="book", value="cbz")
        assert into_api_filter(row).to_wire() == {"extension": "cbz"}

    def test__into_api_filter__range_on_date(self) -> None:
        row = FormFilter(
            field="updated_at",
            operation="range",
            source="library",
            value={"from": "2021-01-01T00:00:00Z", "to": "2021-02-01T00:00:00Z"},
        )
        assert into_api_filter(row).to_wire() == {
            "series": {
                "library": {
                    "updated_at": {
                        "from": "2021-01-01T00:00:00Z",
                        "to": "2021-02-01T00:00:00Z",
                    },
                },
            },
        }

    def test__into_api_filter__rejects_field_unknown_to_source(self) -> None:
        row = FormFilter(field="genre", operation="equals", source="library", value="x")
        with pytest.raises(ValidationError):
            into_api_filter(row)

    @pytest.mark.parametrize("media_filter", [
        MediaFilter(name="Batman"),
        MediaFilter(path=contains("/comics")),
        MediaFilter(metadata={"genre": any_of(["Horror", "Noir"])}),
        MediaFilter(metadata={"age_rating": gte(13)}),
        MediaFilter(metadata={"year": between(1990, 2000, inclusive=True)}),
        MediaFilter(series={"name": not_equal("Robin")}),
        MediaFilter(series={"metadata": {"publisher": none_of(["Marvel"])}}),
        MediaFilter(series={"library": {"path": "/mnt/comics"}}),
    ])
    def test__row_conversion__round_trips(self, media_filter: MediaFilter) -> None:
        assert into_api_filter(into_form_filter(media_filter)) == media_filter

    def test__into_form_filter__reports_source_and_operation(self) -> None:
        row = into_form_filter(MediaFilter(series={"metadata": {"volume": gte(2)}}))
        assert row == FormFilter(field="volume", operation="gte", source="series_meta", value=2)


# =============================================================================
# Whole-config conversion
# =============================================================================


def test__form_config__round_trips_smart_filter() -> None:
    smart_filter = SmartFilter(
        groups=[
            FilterGroup(joiner="and", filters=[
                MediaFilter(name=contains("Bat")),
                MediaFilter(series={"library": {"name": "Main"}}),
            ]),
            FilterGroup(joiner="not", filters=[
                MediaFilter(metadata={"writer": "Miller"}),
            ]),
        ],
        joiner="OR",
    )

    config = into_form_config(smart_filter)

    assert config.joiner == "or"
    assert [g.joiner for g in config.groups] == ["and", "not"]
    assert into_smart_filter(config) == smart_filter


def test__into_smart_filter__upper_cases_joiner() -> None:
    config = FormFilterConfig(
        groups=[FormGroup(filters=[
            FormFilter(field="name", operation="equals", source="book", value="a"),
        ])],
    )
    smart_filter = into_smart_filter(config)

    assert smart_filter.joiner == "AND"
    assert smart_filter.to_wire() == {"groups": [{"and": [{"name": "a"}]}], "joiner": "AND"}
