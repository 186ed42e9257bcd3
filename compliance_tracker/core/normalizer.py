"""
Record Normalizer.
Projects single-date records and dual-track contracts into one unified shape
for the cross-category records view. The projection is read-only; every
unified record keeps its original record and category so edits and deletes
can be routed back to the source collection.
"""

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional, Union

from pydantic import BaseModel, Field

from compliance_tracker.core.records import (
    CATEGORY_KINDS,
    CATEGORY_LABELS,
    TRACKABLE_CATEGORIES,
    Category,
    DualTrackRecord,
    TrackedRecord,
    UnknownCategoryError,
    applicable_expiry_date,
    resolve_category,
)
from compliance_tracker.core.status import ComplianceState

logger = logging.getLogger(__name__)


class UnifiedRecord(BaseModel):
    """Flattened row of the cross-category records view."""
    id: Optional[int]
    category: Category
    category_label: str
    name: str
    number: str
    expiry_date: Optional[str] = None
    status: ComplianceState
    display_cost: float
    notes: Optional[str] = None
    original: Union[TrackedRecord, DualTrackRecord] = Field(discriminator="kind")


def category_label(category: Union[str, Category]) -> str:
    """Display text for a category."""
    return CATEGORY_LABELS[resolve_category(category)]


def normalize(
    record: Union[TrackedRecord, DualTrackRecord],
    category: Union[str, Category],
    reference_date: Optional[date] = None
) -> UnifiedRecord:
    """
    Project one record into the unified shape.

    Args:
        record: Single-date or dual-track record
        category: Collection the record belongs to
        reference_date: Day statuses are derived for (default: today)

    Returns:
        UnifiedRecord referencing the original record

    Raises:
        UnknownCategoryError: If the category is not trackable or does not
            match the record's shape
    """
    category = resolve_category(category)
    kind = CATEGORY_KINDS[category]
    reference_date = reference_date or date.today()

    if kind == "single" and isinstance(record, TrackedRecord):
        return UnifiedRecord(
            id=record.id,
            category=category,
            category_label=CATEGORY_LABELS[category],
            name=record.name,
            number=record.number,
            expiry_date=record.expiry_date,
            status=record.status_on(reference_date),
            display_cost=record.cost or 0,
            notes=record.notes,
            original=record,
        )

    if kind == "dual" and isinstance(record, DualTrackRecord):
        return UnifiedRecord(
            id=record.id,
            category=category,
            category_label=CATEGORY_LABELS[category],
            name=record.name,
            number=record.number,
            expiry_date=applicable_expiry_date(record),
            status=record.status_on(reference_date),
            display_cost=record.total_cost,
            notes=record.notes,
            original=record,
        )

    raise UnknownCategoryError(
        f"Cannot normalize {type(record).__name__} as category {category.value!r}"
    )


def normalize_collections(
    collections: Dict[Category, Iterable[Union[TrackedRecord, DualTrackRecord]]],
    reference_date: Optional[date] = None
) -> List[UnifiedRecord]:
    """Build the unified view over all trackable collections, in category order."""
    unified: List[UnifiedRecord] = []
    for category in TRACKABLE_CATEGORIES:
        for record in collections.get(category, []):
            unified.append(normalize(record, category, reference_date))
    logger.debug(f"Normalized {len(unified)} records for the unified view")
    return unified
