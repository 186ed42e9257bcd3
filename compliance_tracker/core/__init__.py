"""Temporal classification and aggregation engine."""

from compliance_tracker.core.status import (
    SOON_TO_EXPIRE_DAYS,
    ComplianceState,
    TrackStatuses,
    aggregate,
    classify,
    most_severe,
    parse_calendar_date,
)
from compliance_tracker.core.remaining import RemainingPeriod, Severity, remaining, remaining_days
from compliance_tracker.core.records import (
    Category,
    DualTrackRecord,
    Procedure,
    TrackedRecord,
    UnknownCategoryError,
)
from compliance_tracker.core.normalizer import UnifiedRecord, normalize, normalize_collections
from compliance_tracker.core.table import SortState, filter_by_status, filter_records, sort_records

__all__ = [
    "SOON_TO_EXPIRE_DAYS",
    "ComplianceState",
    "TrackStatuses",
    "aggregate",
    "classify",
    "most_severe",
    "parse_calendar_date",
    "RemainingPeriod",
    "Severity",
    "remaining",
    "remaining_days",
    "Category",
    "DualTrackRecord",
    "Procedure",
    "TrackedRecord",
    "UnknownCategoryError",
    "UnifiedRecord",
    "normalize",
    "normalize_collections",
    "SortState",
    "filter_by_status",
    "filter_records",
    "sort_records",
]
