"""
Unit tests for the remaining-period formatter.

Run with: pytest tests/test_remaining.py -v
"""
from datetime import timedelta

import pytest

from compliance_tracker.core.remaining import Severity, format_label, remaining, remaining_days
from compliance_tracker.core.status import ComplianceState, classify


class TestRemainingDays:

    def test_future_and_past(self, today):
        assert remaining_days("2024-07-15", today) == 44
        assert remaining_days("2024-05-30", today) == -2

    def test_missing_date(self, today):
        assert remaining_days(None, today) is None
        assert remaining_days("unknown", today) is None


class TestRemaining:
    """Test tiers and labels."""

    def test_expires_today(self, today):
        period = remaining(today, today)
        assert period.days == 0
        assert period.tier == Severity.SOON
        assert period.label == "Expires today"

    def test_overdue(self, today):
        period = remaining(today - timedelta(days=5), today)
        assert period.days == -5
        assert period.tier == Severity.EXPIRED
        assert period.label == "Expired 5 days ago"

    def test_far_future(self, today):
        period = remaining(today + timedelta(days=365), today)
        assert period.tier == Severity.ACTIVE
        assert period.label == "Expires in 365 days"

    def test_no_date(self, today):
        period = remaining(None, today)
        assert period.days is None
        assert period.tier == Severity.NONE
        assert period.label == "No expiry date"

    def test_arabic_labels(self, today):
        assert remaining(None, today, locale="ar").label == "لا يوجد تاريخ انتهاء"

    def test_unknown_locale_falls_back_to_english(self, today):
        assert remaining(today, today, locale="fr").label == "Expires today"

    @pytest.mark.parametrize("offset", [-30, -1, 0, 1, 120, 121, 400])
    def test_tier_matches_classifier(self, today, offset):
        """The tier and the compliance state agree for every dated record."""
        expiry = today + timedelta(days=offset)
        expected = {
            ComplianceState.EXPIRED: Severity.EXPIRED,
            ComplianceState.SOON_TO_EXPIRE: Severity.SOON,
            ComplianceState.ACTIVE: Severity.ACTIVE,
        }[classify(expiry, today)]
        assert remaining(expiry, today).tier == expected


class TestFormatLabel:

    def test_singular_forms(self):
        assert format_label(1) == "Expires in 1 day"
        assert format_label(-1) == "Expired 1 day ago"
