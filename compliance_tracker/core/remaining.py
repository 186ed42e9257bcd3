"""
Remaining-Period Formatter.
Computes whole days until expiry with a severity tier that matches the
status classifier, plus a display label for tables and exports.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

from compliance_tracker.core.status import DateLike, SOON_TO_EXPIRE_DAYS, parse_calendar_date


class Severity(str, Enum):
    """Display tier of a remaining period."""
    EXPIRED = "expired"
    SOON = "soon"
    ACTIVE = "active"
    NONE = "none"


LABELS = {
    "en": {
        "today": "Expires today",
        "future": "Expires in {days} days",
        "future_one": "Expires in 1 day",
        "past": "Expired {days} days ago",
        "past_one": "Expired 1 day ago",
        "unknown": "No expiry date",
    },
    "ar": {
        "today": "ينتهي اليوم",
        "future": "متبقي {days} يوم",
        "future_one": "متبقي يوم واحد",
        "past": "منتهي منذ {days} يوم",
        "past_one": "منتهي منذ يوم واحد",
        "unknown": "لا يوجد تاريخ انتهاء",
    },
}

DEFAULT_LOCALE = "en"


@dataclass(frozen=True)
class RemainingPeriod:
    """Remaining time until an expiry date."""
    days: Optional[int]
    tier: Severity
    label: str


def remaining_days(
    expiry_date: DateLike,
    reference_date: Optional[date] = None
) -> Optional[int]:
    """Whole days from the reference day to expiry; negative when overdue."""
    expiry = parse_calendar_date(expiry_date)
    if expiry is None:
        return None
    today = parse_calendar_date(reference_date) or date.today()
    return (expiry - today).days


def _tier_for(days: Optional[int]) -> Severity:
    if days is None:
        return Severity.NONE
    if days < 0:
        return Severity.EXPIRED
    if days <= SOON_TO_EXPIRE_DAYS:
        return Severity.SOON
    return Severity.ACTIVE


def format_label(days: Optional[int], locale: str = DEFAULT_LOCALE) -> str:
    """Render a remaining-days value as display text."""
    labels = LABELS.get(locale, LABELS[DEFAULT_LOCALE])
    if days is None:
        return labels["unknown"]
    if days == 0:
        return labels["today"]
    if days == 1:
        return labels["future_one"]
    if days == -1:
        return labels["past_one"]
    if days > 0:
        return labels["future"].format(days=days)
    return labels["past"].format(days=abs(days))


def remaining(
    expiry_date: DateLike,
    reference_date: Optional[date] = None,
    locale: str = DEFAULT_LOCALE
) -> RemainingPeriod:
    """
    Describe the time left until an expiry date.

    Args:
        expiry_date: Expiry date of the record
        reference_date: Day to measure from (default: today)
        locale: Label language ("en" or "ar")

    Returns:
        RemainingPeriod with numeric days, tier and label
    """
    days = remaining_days(expiry_date, reference_date)
    return RemainingPeriod(days=days, tier=_tier_for(days), label=format_label(days, locale))
