"""Expiry notifications: daily scan, banner state and outbound sending."""

from compliance_tracker.notifications.markers import FileMarkerStore, InMemoryMarkerStore
from compliance_tracker.notifications.scanner import (
    NOTIFICATION_HORIZON_DAYS,
    ExpiryAlert,
    ExpiryNotificationScanner,
    NotificationSession,
    SessionRegistry,
)

__all__ = [
    "FileMarkerStore",
    "InMemoryMarkerStore",
    "NOTIFICATION_HORIZON_DAYS",
    "ExpiryAlert",
    "ExpiryNotificationScanner",
    "NotificationSession",
    "SessionRegistry",
]
