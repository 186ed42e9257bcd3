"""
Record Models for Compliance Tracking.
Defines the record categories and the three record shapes: single-date
records, dual-track contracts and reference-only procedures.

Derived statuses are computed properties evaluated against the current date
on every read; they are serialized in responses but never accepted as input.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from compliance_tracker.core.status import (
    ComplianceState,
    TrackStatuses,
    aggregate,
    classify,
    parse_calendar_date,
)


class Category(str, Enum):
    """Record collections tracked by the service."""
    COMMERCIAL_LICENSE = "commercial_license"
    OPERATIONAL_LICENSE = "operational_license"
    CIVIL_DEFENSE_CERT = "civil_defense_cert"
    SPECIAL_AGENCY = "special_agency"
    LEASE_CONTRACT = "lease_contract"
    GENERAL_CONTRACT = "general_contract"
    TRADEMARK_CERT = "trademark_cert"
    OTHER_TOPIC = "other_topic"
    PROCEDURE = "procedure"


CATEGORY_KINDS: Dict[Category, str] = {
    Category.COMMERCIAL_LICENSE: "single",
    Category.OPERATIONAL_LICENSE: "single",
    Category.CIVIL_DEFENSE_CERT: "single",
    Category.SPECIAL_AGENCY: "single",
    Category.LEASE_CONTRACT: "dual",
    Category.GENERAL_CONTRACT: "single",
    Category.TRADEMARK_CERT: "single",
    Category.OTHER_TOPIC: "single",
    Category.PROCEDURE: "procedure",
}

CATEGORY_LABELS: Dict[Category, str] = {
    Category.COMMERCIAL_LICENSE: "Commercial License",
    Category.OPERATIONAL_LICENSE: "Operational License",
    Category.CIVIL_DEFENSE_CERT: "Civil Defense",
    Category.SPECIAL_AGENCY: "Special Agency",
    Category.LEASE_CONTRACT: "Lease Contract",
    Category.GENERAL_CONTRACT: "Supplier Contract",
    Category.TRADEMARK_CERT: "Trademark",
    Category.OTHER_TOPIC: "Other Topic",
    Category.PROCEDURE: "Procedure",
}

TRACKABLE_CATEGORIES = tuple(
    category for category in Category if CATEGORY_KINDS[category] != "procedure"
)

# Candidate dates in applicable order
EXPIRY_DATE_KEYS = ("expiry_date", "documented_expiry_date", "internal_expiry_date")


class UnknownCategoryError(ValueError):
    """Raised when a category is not one of the closed set, or not valid for an operation."""


def resolve_category(value: Union[str, Category]) -> Category:
    """Look up a category by value, failing loudly on anything outside the closed set."""
    try:
        return Category(value)
    except ValueError:
        raise UnknownCategoryError(f"Unknown record category: {value!r}") from None


class RenewalType(str, Enum):
    MANUAL = "manual"
    AUTOMATIC = "automatic"


class ContractType(str, Enum):
    DOCUMENTED = "documented"
    INTERNAL = "internal"
    DOCUMENTED_AND_INTERNAL = "documented_and_internal"


def _normalize_date_field(value: Any) -> Optional[str]:
    """Store dates as ISO strings; keep malformed text so it reads as unknown."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    value = str(value).strip()
    return value or None


class Attachment(BaseModel):
    """Opaque file attachment; never inspected by the tracker."""
    name: Optional[str] = None
    type: Optional[str] = None
    data: Optional[str] = None


class RecordBase(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    notes: Optional[str] = None
    attachments: List[Attachment] = Field(default_factory=list)


class TrackedRecord(RecordBase):
    """A license-like record with a single expiry date."""
    kind: Literal["single"] = "single"
    name: str
    number: str = ""
    expiry_date: Optional[str] = None
    registration_date: Optional[str] = None
    renewal_type: Optional[RenewalType] = None
    cost: Optional[float] = 0.0

    @field_validator("expiry_date", "registration_date", mode="before")
    @classmethod
    def normalize_dates(cls, value: Any) -> Optional[str]:
        return _normalize_date_field(value)

    @computed_field
    @property
    def status(self) -> ComplianceState:
        return classify(self.expiry_date)

    def status_on(self, reference_date: date) -> ComplianceState:
        return classify(self.expiry_date, reference_date)


class DualTrackRecord(RecordBase):
    """A lease contract with independent documented and internal expiry tracks."""
    kind: Literal["dual"] = "dual"
    name: str
    number: str = ""
    contract_type: Optional[ContractType] = None
    documented_expiry_date: Optional[str] = None
    internal_expiry_date: Optional[str] = None
    documented_cost: Optional[float] = None
    internal_cost: Optional[float] = None

    @field_validator("documented_expiry_date", "internal_expiry_date", mode="before")
    @classmethod
    def normalize_dates(cls, value: Any) -> Optional[str]:
        return _normalize_date_field(value)

    def tracks_on(self, reference_date: Optional[date] = None) -> TrackStatuses:
        return aggregate(self.documented_expiry_date, self.internal_expiry_date, reference_date)

    @computed_field
    @property
    def documented_status(self) -> Optional[ComplianceState]:
        return self.tracks_on().documented_status

    @computed_field
    @property
    def internal_status(self) -> Optional[ComplianceState]:
        return self.tracks_on().internal_status

    @computed_field
    @property
    def status(self) -> ComplianceState:
        return self.tracks_on().overall_status

    def status_on(self, reference_date: date) -> ComplianceState:
        return self.tracks_on(reference_date).overall_status

    @property
    def total_cost(self) -> float:
        return (self.documented_cost or 0) + (self.internal_cost or 0)


class Procedure(RecordBase):
    """Reference data for renewing a license; carries no expiry and no status."""
    kind: Literal["procedure"] = "procedure"
    license_name: str
    authority: str = ""
    contact_numbers: str = ""
    email: str = ""
    website_name: str = ""
    website_url: str = ""
    username: str = ""
    password: str = ""
    employee_name: str = ""
    employee_number: str = ""
    requirements: str = ""


Record = Union[TrackedRecord, DualTrackRecord, Procedure]

RECORD_MODELS: Dict[str, Type[RecordBase]] = {
    "single": TrackedRecord,
    "dual": DualTrackRecord,
    "procedure": Procedure,
}


def model_for(category: Category) -> Type[RecordBase]:
    return RECORD_MODELS[CATEGORY_KINDS[category]]


def applicable_expiry_date(record: Any) -> Optional[str]:
    """
    The single date that represents a record in cross-category views.

    Single-date records use their expiry date; dual-track records use the
    documented date, falling back to the internal date when the documented
    one is missing or unparsable. If no candidate parses, the first present
    value is returned as written so it still reads as unknown.
    """
    def _get(key: str) -> Any:
        if isinstance(record, dict):
            return record.get(key)
        return getattr(record, key, None)

    candidates = [_get(key) for key in EXPIRY_DATE_KEYS]
    for value in candidates:
        if parse_calendar_date(value) is not None:
            return value
    return next((value for value in candidates if value), None)
