"""
Status Classification for Compliance Tracking.
Derives compliance states from expiry dates and folds dual-track contracts
into a single overall state.
"""

import re
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Iterable, Optional, Union

logger = logging.getLogger(__name__)

# Four months; fixed policy, not configurable per record
SOON_TO_EXPIRE_DAYS = 120

DateLike = Union[str, date, datetime, None]

_ISO_DATE_PATTERN = re.compile(r'^\d{4}-\d{1,2}-\d{1,2}$')

DATE_FORMATS = [
    "%Y-%m-%d",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
]


class ComplianceState(str, Enum):
    """Compliance state of a single expiry date."""
    ACTIVE = "active"
    SOON_TO_EXPIRE = "soon_to_expire"
    EXPIRED = "expired"

    @property
    def weight(self) -> int:
        return SEVERITY_WEIGHTS[self]


SEVERITY_WEIGHTS = {
    ComplianceState.ACTIVE: 1,
    ComplianceState.SOON_TO_EXPIRE: 2,
    ComplianceState.EXPIRED: 3,
}


def parse_calendar_date(value: DateLike) -> Optional[date]:
    """
    Parse a calendar date, truncating any time-of-day component.

    Args:
        value: ISO date string, ISO datetime string, date or datetime

    Returns:
        The calendar date, or None if the value is missing or unparsable
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    date_str = str(value).strip()
    if not date_str:
        return None

    if _ISO_DATE_PATTERN.match(date_str):
        try:
            year, month, day = (int(part) for part in date_str.split('-'))
            return date(year, month, day)
        except ValueError:
            return None

    # ISO datetime: keep the calendar day as written, ignore the clock
    if 'T' in date_str and _ISO_DATE_PATTERN.match(date_str.split('T', 1)[0]):
        return parse_calendar_date(date_str.split('T', 1)[0])

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(date_str, fmt).date()
        except ValueError:
            continue

    logger.debug(f"Unparsable expiry date treated as unknown: {date_str[:50]!r}")
    return None


def classify(
    expiry_date: DateLike,
    reference_date: Optional[date] = None
) -> ComplianceState:
    """
    Classify an expiry date into a compliance state.

    A record without a known expiry cannot be judged overdue, so missing or
    unparsable dates classify as active.

    Args:
        expiry_date: Expiry date of the record
        reference_date: Day to classify against (default: today)

    Returns:
        ComplianceState for the date
    """
    expiry = parse_calendar_date(expiry_date)
    if expiry is None:
        return ComplianceState.ACTIVE

    today = parse_calendar_date(reference_date) or date.today()

    if expiry < today:
        return ComplianceState.EXPIRED
    if expiry <= today + timedelta(days=SOON_TO_EXPIRE_DAYS):
        return ComplianceState.SOON_TO_EXPIRE
    return ComplianceState.ACTIVE


def most_severe(states: Iterable[Optional[ComplianceState]]) -> ComplianceState:
    """Return the most severe of the present states; active when none are present."""
    present = [state for state in states if state is not None]
    if not present:
        return ComplianceState.ACTIVE
    return max(present, key=lambda state: state.weight)


@dataclass(frozen=True)
class TrackStatuses:
    """Per-track and overall states of a dual-track record."""
    documented_status: Optional[ComplianceState]
    internal_status: Optional[ComplianceState]
    overall_status: ComplianceState


def _has_track(value: DateLike) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def aggregate(
    documented_date: DateLike,
    internal_date: DateLike,
    reference_date: Optional[date] = None
) -> TrackStatuses:
    """
    Combine the documented and internal expiry tracks of a contract.

    An absent date means the track does not exist and yields no per-track
    state. A present date that cannot be parsed still counts as a track and
    classifies as active.

    Args:
        documented_date: Documented (registered) expiry date
        internal_date: Internal expiry date
        reference_date: Day to classify against (default: today)

    Returns:
        TrackStatuses with per-track states and the overall state
    """
    documented_status = (
        classify(documented_date, reference_date) if _has_track(documented_date) else None
    )
    internal_status = (
        classify(internal_date, reference_date) if _has_track(internal_date) else None
    )
    return TrackStatuses(
        documented_status=documented_status,
        internal_status=internal_status,
        overall_status=most_severe([documented_status, internal_status]),
    )
