"""
Dashboard statistics: status counts, compliance rate, costs per category and
a twelve-month expiry timeline.
"""

import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from compliance_tracker.core.records import (
    CATEGORY_KINDS,
    TRACKABLE_CATEGORIES,
    Category,
    DualTrackRecord,
    applicable_expiry_date,
)
from compliance_tracker.core.status import ComplianceState, parse_calendar_date

logger = logging.getLogger(__name__)

TIMELINE_MONTHS = 12


def _record_cost(record: Any) -> float:
    if isinstance(record, DualTrackRecord):
        return record.total_cost
    return record.cost or 0


def _status_counts(records: List[Any], reference_date: date) -> Dict[str, int]:
    statuses = [record.status_on(reference_date) for record in records]
    return {
        "total": len(records),
        "active": statuses.count(ComplianceState.ACTIVE),
        "soon_to_expire": statuses.count(ComplianceState.SOON_TO_EXPIRE),
        "expired": statuses.count(ComplianceState.EXPIRED),
    }


def _timeline_date(record: Any) -> Optional[date]:
    return parse_calendar_date(applicable_expiry_date(record))


def expiry_timeline(records: List[Any], reference_date: date) -> List[Dict[str, Any]]:
    """Count records expiring in each of the next twelve months, current month first."""
    expiry_months = []
    for record in records:
        expiry = _timeline_date(record)
        if expiry is not None:
            expiry_months.append((expiry.year, expiry.month))

    timeline = []
    year, month = reference_date.year, reference_date.month
    for _ in range(TIMELINE_MONTHS):
        timeline.append({
            "month": f"{year:04d}-{month:02d}",
            "count": expiry_months.count((year, month)),
        })
        month += 1
        if month > 12:
            month = 1
            year += 1
    return timeline


def compute_dashboard(
    collections: Dict[Category, Iterable[Any]],
    reference_date: Optional[date] = None
) -> Dict[str, Any]:
    """
    Compute dashboard statistics over all collections.

    Args:
        collections: Records per category, procedures included
        reference_date: Day statuses are derived for (default: today)

    Returns:
        Dictionary with totals, status counts, compliance rate, costs and timeline
    """
    reference_date = reference_date or date.today()

    per_category: Dict[str, Dict[str, int]] = {}
    category_costs: Dict[str, float] = {}
    trackable: List[Any] = []

    for category in TRACKABLE_CATEGORIES:
        records = list(collections.get(category, []))
        trackable.extend(records)
        per_category[category.value] = _status_counts(records, reference_date)
        category_costs[category.value] = sum(_record_cost(record) for record in records)

    procedure_count = sum(
        len(list(collections.get(category, [])))
        for category in Category
        if CATEGORY_KINDS[category] == "procedure"
    )

    counts = _status_counts(trackable, reference_date)
    compliance_rate = round(counts["active"] / counts["total"] * 100) if counts["total"] else 0

    logger.debug(f"Dashboard computed over {counts['total']} trackable records")

    return {
        "total_records": counts["total"] + procedure_count,
        "active_count": counts["active"],
        "soon_to_expire_count": counts["soon_to_expire"],
        "expired_count": counts["expired"],
        "compliance_rate": compliance_rate,
        "total_cost": sum(category_costs.values()),
        "category_costs": category_costs,
        "categories": per_category,
        "expiry_timeline": expiry_timeline(trackable, reference_date),
    }
