"""Tests for entity-scoped filter and ordering compilation."""
import logging

import pytest

from schemas.filters import FilterGroup, MediaFilter, SmartFilter
from schemas.ordering import QueryOrder
from schemas.pagination import CursorPagination, OffsetPagination
from schemas.predicates import any_of, between, contains, none_of
from services.compiler import (
    compile_body,
    compile_filters,
    compile_ordering,
    compile_smart_filter,
    narrow_filter,
)
from services.order_by import is_series_order_by


# =============================================================================
# Body shape
# =============================================================================


class TestCompileBodyShape:
    """Absent filters and ordering are omitted, never sent as empty lists."""

    def test__compile_body__pagination_only(self) -> None:
        body = compile_body("media", pagination=OffsetPagination(page=1, page_size=20))
        assert body.to_wire() == {"query": {"page": 1, "page_size": 20}}

    def test__compile_body__empty_inputs_are_omitted(self) -> None:
        body = compile_body(
            "series",
            pagination=OffsetPagination(),
            filters=[],
            ordering=[],
        )
        wire = body.to_wire()
        assert "filter" not in wire
        assert "order_params" not in wire
        assert wire["query"] == {"page": 1, "page_size": 20}

    def test__compile_body__cursor_query(self) -> None:
        body = compile_body("media", pagination=CursorPagination(cursor="c1", limit=10))
        assert body.to_wire() == {"query": {"cursor": "c1", "limit": 10}}

    def test__compile_body__name_membership_example(self) -> None:
        body = compile_body(
            "media",
            pagination=OffsetPagination(page=1, page_size=20),
            filters=[FilterGroup(filters=[
                MediaFilter(name=any_of(["Batman", "Superman"])),
                MediaFilter(name=none_of(["Robin"])),
            ])],
            ordering=[QueryOrder(order_by="name", direction="desc")],
        )
        assert body.to_wire() == {
            "filter": [{"and": [
                {"name": {"any": ["Batman", "Superman"]}},
                {"name": {"none": ["Robin"]}},
            ]}],
            "order_params": [{"order_by": "name", "direction": "desc"}],
            "query": {"page": 1, "page_size": 20},
        }

    def test__with_query__keeps_filters_and_ordering(self) -> None:
        body = compile_body(
            "media",
            pagination=OffsetPagination(page=1),
            filters=[FilterGroup(filters=[MediaFilter(name="a")])],
            ordering=[QueryOrder(order_by="name")],
        )
        moved = body.with_query(OffsetPagination(page=2))

        assert moved.filter == body.filter
        assert moved.order_params == body.order_params
        assert moved.to_wire()["query"] == {"page": 2, "page_size": 20}
        assert body.to_wire()["query"] == {"page": 1, "page_size": 20}


# =============================================================================
# Narrowing
# =============================================================================


UPDATED_2021 = between("2021-01-01T00:00:00Z", "2021-12-31T23:59:59Z", inclusive=True)


class TestNarrowing:
    """Media-rooted filters narrow to each entity's own fields."""

    @pytest.mark.parametrize(("entity", "media_filter", "expected"), [
        ("media", {"name": "Batman"}, {"name": "Batman"}),
        ("media_metadata", {"metadata": {"genre": "Noir"}}, {"genre": "Noir"}),
        ("series", {"series": {"name": contains("Bat")}}, {"name": {"contains": "Bat"}}),
        (
            "series_metadata",
            {"series": {"metadata": {"publisher": "DC"}}},
            {"publisher": "DC"},
        ),
        (
            "library",
            {"series": {"library": {"updated_at": UPDATED_2021}}},
            {"updated_at": {
                "from": "2021-01-01T00:00:00Z",
                "to": "2021-12-31T23:59:59Z",
                "inclusive": True,
            }},
        ),
    ])
    def test__narrow_filter__reaches_entity(
        self, entity: str, media_filter: dict, expected: dict,
    ) -> None:
        narrowed = narrow_filter(entity, MediaFilter.model_validate(media_filter))
        assert narrowed is not None
        assert narrowed.to_wire() == expected

    def test__narrow_filter__media_keeps_nested_paths(self) -> None:
        media_filter = MediaFilter(series={"library": {"name": "Main"}})
        assert narrow_filter("media", media_filter) is media_filter

    @pytest.mark.parametrize(("entity", "media_filter"), [
        ("library", {"name": "Batman"}),
        ("library", {"series": {"name": "Batman"}}),
        ("series", {"metadata": {"genre": "Noir"}}),
        ("media_metadata", {"series": {"name": "Batman"}}),
        ("series_metadata", {"series": {"library": {"name": "Main"}}}),
    ])
    def test__narrow_filter__does_not_reach_entity(self, entity: str, media_filter: dict) -> None:
        assert narrow_filter(entity, MediaFilter.model_validate(media_filter)) is None

    def test__narrow_filter__unknown_entity(self) -> None:
        with pytest.raises(ValueError, match="Unknown filter entity"):
            narrow_filter("shelf", MediaFilter(name="a"))

    def test__compile_filters__library_scenario(self) -> None:
        groups = [FilterGroup(filters=[
            MediaFilter(series={"library": {"updated_at": UPDATED_2021}}),
        ])]
        assert compile_filters("library", groups) == [{"and": [{"updated_at": {
            "from": "2021-01-01T00:00:00Z",
            "to": "2021-12-31T23:59:59Z",
            "inclusive": True,
        }}]}]

    def test__compile_filters__drops_expressions_and_groups_that_do_not_reach(self) -> None:
        groups = [
            FilterGroup(joiner="or", filters=[
                MediaFilter(name="Batman"),
                MediaFilter(series={"name": "Batman"}),
            ]),
            FilterGroup(joiner="not", filters=[MediaFilter(extension="pdf")]),
        ]
        assert compile_filters("series", groups) == [{"or": [{"name": "Batman"}]}]

    def test__compile_filters__nothing_reaches_is_none(self) -> None:
        groups = [FilterGroup(filters=[MediaFilter(name="Batman")])]
        assert compile_filters("library", groups) is None

    def test__compile_filters__empty_groups_are_none(self) -> None:
        assert compile_filters("media", [FilterGroup(), FilterGroup(joiner="or")]) is None
        assert compile_filters("media", None) is None


# =============================================================================
# Ordering
# =============================================================================


class TestCompileOrdering:
    """Sort entries the entity cannot sort by are dropped, order preserved."""

    def test__compile_ordering__drops_foreign_fields(self) -> None:
        ordering = [
            QueryOrder(order_by="size"),
            QueryOrder(order_by="name", direction="desc"),
            QueryOrder(order_by="title"),
            QueryOrder(order_by="status"),
        ]
        assert compile_ordering(ordering, is_series_order_by) == [
            QueryOrder(order_by="name", direction="desc"),
            QueryOrder(order_by="status"),
        ]

    def test__compile_ordering__nothing_survives_is_none(self) -> None:
        assert compile_ordering([QueryOrder(order_by="size")], is_series_order_by) is None
        assert compile_ordering([], is_series_order_by) is None

    def test__compile_ordering__reports_dropped_entries(self, caplog) -> None:
        dropped: list[QueryOrder] = []
        with caplog.at_level(logging.DEBUG, logger="services.compiler"):
            compile_ordering(
                [QueryOrder(order_by="pages"), QueryOrder(order_by="name")],
                is_series_order_by,
                on_dropped_order=dropped.append,
            )

        assert dropped == [QueryOrder(order_by="pages")]
        assert "pages" in caplog.text

    def test__compile_body__uses_entity_guard_by_default(self) -> None:
        body = compile_body(
            "library",
            pagination=OffsetPagination(),
            ordering=[QueryOrder(order_by="size"), QueryOrder(order_by="path")],
        )
        assert body.to_wire()["order_params"] == [{"order_by": "path", "direction": "asc"}]

    def test__compile_body__explicit_guard_overrides_default(self) -> None:
        body = compile_body(
            "library",
            pagination=OffsetPagination(),
            ordering=[QueryOrder(order_by="size"), QueryOrder(order_by="path")],
            is_legal_order_field=lambda field: field == "size",
        )
        assert body.to_wire()["order_params"] == [{"order_by": "size", "direction": "asc"}]


# =============================================================================
# Smart filter
# =============================================================================


def test__compile_smart_filter__drops_empty_groups() -> None:
    smart_filter = SmartFilter(
        groups=[FilterGroup(), FilterGroup(joiner="or", filters=[MediaFilter(name="a")])],
        joiner="OR",
    )
    assert compile_smart_filter(smart_filter) == {
        "groups": [{"or": [{"name": "a"}]}],
        "joiner": "OR",
    }
