"""
Sortable/Filterable Table Engine.
Generic sorting and free-text filtering for any record collection: pydantic
records, unified records or plain mappings.
"""

import unicodedata
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, List, Optional, Sequence, Tuple, TypeVar

from compliance_tracker.core.records import applicable_expiry_date
from compliance_tracker.core.remaining import remaining_days
from compliance_tracker.core.status import ComplianceState, parse_calendar_date

T = TypeVar("T")

ASCENDING = "asc"
DESCENDING = "desc"
SORT_DIRECTIONS = (ASCENDING, DESCENDING)

STATUS_KEY = "status"
REMAINING_KEY = "remaining"
DATE_KEYS = (
    "expiry_date",
    "documented_expiry_date",
    "internal_expiry_date",
    "registration_date",
)

RECORD_SEARCH_FIELDS: Tuple[str, ...] = ("name", "number", "notes")
PROCEDURE_SEARCH_FIELDS: Tuple[str, ...] = (
    "license_name",
    "authority",
    "contact_numbers",
    "email",
    "website_name",
    "website_url",
    "username",
    "notes",
)


def field_value(record: Any, key: str) -> Any:
    """Read a field from a mapping or an object; missing fields read as None."""
    if isinstance(record, dict):
        return record.get(key)
    return getattr(record, key, None)


def collation_key(text: str) -> str:
    """Case-insensitive comparison key for display text."""
    return unicodedata.normalize("NFKC", text).casefold()


def _status_weight(value: Any) -> Optional[int]:
    try:
        return ComplianceState(value).weight
    except ValueError:
        return None


def _generic_key(value: Any) -> Tuple[int, Any]:
    if isinstance(value, bool):
        return (1, collation_key(str(value)))
    if isinstance(value, (int, float)):
        return (0, value)
    return (1, collation_key(str(value)))


def sort_value(record: Any, key: str, reference_date: Optional[date] = None) -> Any:
    """
    Comparable value of a record for a column, or None when it has none.

    Args:
        record: Record to read
        key: Column key
        reference_date: Day used for the remaining column (default: today)

    Returns:
        A value comparable with other records' values for the same key
    """
    if key == REMAINING_KEY:
        return remaining_days(applicable_expiry_date(record), reference_date)

    value = field_value(record, key)
    if value is None or (isinstance(value, str) and not value.strip()):
        return None

    if key == STATUS_KEY:
        return _status_weight(value)
    if key in DATE_KEYS:
        return parse_calendar_date(value)
    return _generic_key(value)


def sort_records(
    records: Iterable[T],
    key: str,
    direction: str = ASCENDING,
    reference_date: Optional[date] = None
) -> List[T]:
    """
    Sort records by a column.

    Records without a value for the column always follow the records that
    have one, in their original order, whichever the direction. Equal keys
    keep their input order.

    Args:
        records: Records to sort
        key: Column key
        direction: "asc" or "desc"
        reference_date: Day used for the remaining column (default: today)

    Returns:
        New sorted list
    """
    if direction not in SORT_DIRECTIONS:
        raise ValueError(f"Unknown sort direction: {direction!r}")

    present: List[Tuple[Any, T]] = []
    missing: List[T] = []
    for record in records:
        value = sort_value(record, key, reference_date)
        if value is None:
            missing.append(record)
        else:
            present.append((value, record))

    present.sort(key=lambda pair: pair[0], reverse=(direction == DESCENDING))
    return [record for _, record in present] + missing


def filter_records(
    records: Iterable[T],
    query: Optional[str],
    fields: Sequence[str] = RECORD_SEARCH_FIELDS
) -> List[T]:
    """
    Keep records whose configured text fields contain the query.

    Args:
        records: Records to filter
        query: Free-text query; empty matches everything
        fields: Text fields searched for this view

    Returns:
        Matching records in input order
    """
    records = list(records)
    needle = (query or "").strip()
    if not needle:
        return records

    needle = collation_key(needle)
    return [
        record for record in records
        if any(
            needle in collation_key(str(field_value(record, field)))
            for field in fields
            if field_value(record, field) is not None
        )
    ]


def filter_by_status(
    records: Iterable[T],
    status: Optional[ComplianceState]
) -> List[T]:
    """Keep records in the given compliance state; None keeps everything."""
    records = list(records)
    if status is None:
        return records
    return [record for record in records if field_value(record, STATUS_KEY) == status]


@dataclass
class SortState:
    """Current sort column and direction of a table view."""
    key: Optional[str] = None
    direction: str = ASCENDING

    def request(self, key: str) -> "SortState":
        """Select a column: the same column flips direction, a new column starts ascending."""
        if self.key == key and self.direction == ASCENDING:
            self.direction = DESCENDING
        else:
            self.direction = ASCENDING
        self.key = key
        return self

    def apply(self, records: Iterable[T], reference_date: Optional[date] = None) -> List[T]:
        if self.key is None:
            return list(records)
        return sort_records(records, self.key, self.direction, reference_date)
