"""
Unit tests for the sortable/filterable table engine.

Run with: pytest tests/test_table.py -v
"""
import pytest

from compliance_tracker.core.status import ComplianceState
from compliance_tracker.core.table import (
    PROCEDURE_SEARCH_FIELDS,
    SortState,
    filter_by_status,
    filter_records,
    sort_records,
)


@pytest.fixture
def rows():
    return [
        {"id": 1, "name": "beta", "expiry_date": "2024-09-01", "cost": 300, "status": "active"},
        {"id": 2, "name": "Alpha", "expiry_date": None, "cost": 100, "status": "expired"},
        {"id": 3, "name": "gamma", "expiry_date": "2024-07-01", "cost": None, "status": "soon_to_expire"},
        {"id": 4, "name": "delta", "expiry_date": "2024-07-01", "cost": 100, "status": "active"},
        {"id": 5, "name": "", "expiry_date": "bad date", "cost": 50, "status": "active"},
    ]


def ids(records):
    return [record["id"] for record in records]


class TestSortRecords:
    """Test sorting semantics."""

    def test_dates_ascending_with_missing_last(self, rows):
        assert ids(sort_records(rows, "expiry_date", "asc")) == [3, 4, 1, 2, 5]

    def test_dates_descending_keeps_missing_last(self, rows):
        assert ids(sort_records(rows, "expiry_date", "desc")) == [1, 3, 4, 2, 5]

    def test_text_is_case_insensitive(self, rows):
        assert ids(sort_records(rows, "name", "asc")) == [2, 1, 4, 3, 5]

    def test_numbers_compare_numerically(self, rows):
        assert ids(sort_records(rows, "cost", "asc")) == [5, 2, 4, 1, 3]

    def test_stable_for_equal_keys(self, rows):
        sorted_rows = sort_records(rows, "cost", "asc")
        assert ids(sorted_rows).index(2) < ids(sorted_rows).index(4)

    @pytest.mark.parametrize("key", ["name", "expiry_date", "cost", "status", "remaining"])
    @pytest.mark.parametrize("direction", ["asc", "desc"])
    def test_sorting_is_idempotent(self, rows, key, direction, today):
        once = sort_records(rows, key, direction, today)
        assert ids(sort_records(once, key, direction, today)) == ids(once)

    def test_equal_keys_keep_input_order_in_both_directions(self, rows):
        """Records 2 and 4 tie on cost; 2 precedes 4 whichever way the column is sorted."""
        for direction in ("asc", "desc", "asc"):
            order = ids(sort_records(rows, "cost", direction))
            assert order.index(2) < order.index(4)

    def test_status_sorts_by_severity(self, rows):
        assert ids(sort_records(rows, "status", "desc")) == [2, 3, 1, 4, 5]

    def test_remaining_column(self, rows, today):
        assert ids(sort_records(rows, "remaining", "asc", today)) == [3, 4, 1, 2, 5]

    def test_unknown_key_keeps_order(self, rows):
        assert ids(sort_records(rows, "colour")) == [1, 2, 3, 4, 5]

    def test_input_not_mutated(self, rows):
        sort_records(rows, "name", "desc")
        assert ids(rows) == [1, 2, 3, 4, 5]

    def test_invalid_direction(self, rows):
        with pytest.raises(ValueError):
            sort_records(rows, "name", "up")


class TestSortState:
    """Test column toggling."""

    def test_first_request_is_ascending(self):
        state = SortState().request("name")
        assert (state.key, state.direction) == ("name", "asc")

    def test_same_key_toggles(self):
        state = SortState().request("name").request("name")
        assert state.direction == "desc"
        assert state.request("name").direction == "asc"

    def test_new_key_resets_to_ascending(self):
        state = SortState().request("name").request("name").request("cost")
        assert (state.key, state.direction) == ("cost", "asc")

    def test_apply_without_key_keeps_order(self, rows):
        assert ids(SortState().apply(rows)) == [1, 2, 3, 4, 5]

    def test_toggle_twice_restores_order(self, rows):
        """Ascending, descending, ascending again gives the first ordering, ties included."""
        state = SortState().request("cost")
        first = state.apply(rows)
        state.request("cost")
        flipped = state.apply(first)
        state.request("cost")
        assert state.direction == "asc"
        assert ids(state.apply(flipped)) == ids(first)

    @pytest.mark.parametrize("key", ["name", "expiry_date", "cost", "status"])
    @pytest.mark.parametrize("direction", ["asc", "desc"])
    def test_apply_is_idempotent(self, rows, key, direction):
        state = SortState(key=key, direction=direction)
        once = state.apply(rows)
        assert ids(state.apply(once)) == ids(once)


class TestFilterRecords:
    """Test free-text filtering."""

    def test_empty_query_matches_all(self, rows):
        assert len(filter_records(rows, "  ")) == 5
        assert len(filter_records(rows, None)) == 5

    def test_case_insensitive_substring(self, rows):
        assert ids(filter_records(rows, "ALP")) == [2]

    def test_searches_configured_fields_only(self, rows):
        assert filter_records(rows, "2024") == []

    def test_procedure_fields(self):
        procedures = [
            {"license_name": "Trade", "authority": "Economic Department", "password": "secret"},
            {"license_name": "Civil", "authority": "Civil Defense", "password": "other"},
        ]
        assert len(filter_records(procedures, "economic", PROCEDURE_SEARCH_FIELDS)) == 1
        assert filter_records(procedures, "secret", PROCEDURE_SEARCH_FIELDS) == []

    def test_filter_by_status(self, rows):
        assert ids(filter_by_status(rows, ComplianceState.ACTIVE)) == [1, 4, 5]
        assert len(filter_by_status(rows, None)) == 5
