"""Tests for the client-local page sort."""

import pytest

from bookstock.client.sorting import SortState, numeric_value, sort_records

from .conftest import make_record

PAGE = [
    make_record(1, title="b", author="Zed", price="9,000", stock="2"),
    make_record(2, title="a", author="Amy", price="12,000", stock="10"),
    make_record(3, title="c", author="Max", price="800", stock="0"),
]


def _ids(records):
    return [r.id for r in records]


def test_numeric_fields_compare_as_integers():
    assert _ids(sort_records(PAGE, "price")) == ["3", "1", "2"]
    assert _ids(sort_records(PAGE, "stock", "desc")) == ["2", "1", "3"]


def test_text_fields_compare_lexicographically():
    assert _ids(sort_records(PAGE, "title")) == ["2", "1", "3"]
    assert _ids(sort_records(PAGE, "author", "desc")) == ["1", "3", "2"]


def test_sort_does_not_touch_the_input():
    before = list(PAGE)
    sort_records(PAGE, "price", "desc")
    assert PAGE == before


def test_ties_keep_loaded_order():
    page = [make_record(i, stock="5") for i in range(1, 5)]
    assert _ids(sort_records(page, "stock")) == ["1", "2", "3", "4"]
    assert _ids(sort_records(page, "stock", "desc")) == ["1", "2", "3", "4"]


@pytest.mark.parametrize("raw, expected", [("12,000", 12000), ("7", 7), ("품절", 0), ("", 0)])
def test_numeric_value(raw, expected):
    assert numeric_value(raw) == expected


def test_selecting_new_field_resets_to_ascending():
    state = SortState(field="title", direction="desc")
    state.select("price")
    assert (state.field, state.direction) == ("price", "asc")


def test_reselecting_active_field_flips_direction():
    state = SortState()
    state.select("title")
    assert state.direction == "desc"
    state.select("title")
    assert state.direction == "asc"


def test_unknown_field_is_rejected():
    with pytest.raises(ValueError):
        SortState().select("isbn")
