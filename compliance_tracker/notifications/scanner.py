"""
Expiry Notification Scanner.
Scans all trackable collections once per calendar day for records expiring
within the notification horizon, and tracks per-session banner dismissal.

The daily marker is process-wide and persisted; the dismissal flag belongs
to exactly one session and is never shared.
"""

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Callable, Dict, Iterable, List, Optional

from compliance_tracker.core.records import CATEGORY_KINDS, Category, applicable_expiry_date
from compliance_tracker.core.status import parse_calendar_date
from compliance_tracker.notifications.markers import LAST_SCAN_DATE

logger = logging.getLogger(__name__)

# Separate from the 120-day classification window
NOTIFICATION_HORIZON_DAYS = 90

DEFAULT_SUBJECT = "Alert: licenses and contracts about to expire"

DEFAULT_MAX_SESSIONS = 10000
DEFAULT_SESSION_TTL_SECONDS = 12 * 60 * 60


@dataclass(frozen=True)
class ExpiryAlert:
    """One record expiring inside the notification horizon."""
    category: Category
    record_id: Optional[int]
    name: str
    number: str
    expiry_date: date


@dataclass
class NotificationSession:
    """Banner state of one operator session."""
    session_id: str
    dismissed: bool = False
    last_seen: float = 0.0


@dataclass
class BannerState:
    visible: bool
    alerts: List[ExpiryAlert] = field(default_factory=list)
    last_scan_date: Optional[str] = None


class SessionRegistry:
    """
    Notification sessions by id; unknown ids start a fresh, undismissed session.

    Sessions idle longer than the TTL are dropped, and the registry never
    holds more than max_sessions entries (least recently used go first).
    """

    def __init__(
        self,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
        idle_ttl_seconds: float = DEFAULT_SESSION_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic
    ):
        self.max_sessions = max_sessions
        self.idle_ttl_seconds = idle_ttl_seconds
        self._clock = clock
        self._sessions: "OrderedDict[str, NotificationSession]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _evict(self, now: float) -> None:
        # Oldest first: stop at the first session still inside the TTL
        while self._sessions:
            session_id, session = next(iter(self._sessions.items()))
            if now - session.last_seen <= self.idle_ttl_seconds:
                break
            del self._sessions[session_id]
        while len(self._sessions) > self.max_sessions:
            self._sessions.popitem(last=False)

    def get(self, session_id: str) -> NotificationSession:
        now = self._clock()
        with self._lock:
            self._evict(now)
            session = self._sessions.get(session_id)
            if session is None:
                session = NotificationSession(session_id=session_id)
                self._sessions[session_id] = session
            else:
                self._sessions.move_to_end(session_id)
            session.last_seen = now
            self._evict(now)
            return session

    def end(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)
        logger.debug(f"Notification session {session_id} ended")


def _scan_date(record: Any) -> Optional[date]:
    return parse_calendar_date(applicable_expiry_date(record))


class ExpiryNotificationScanner:
    """Once-per-day expiry scan with session-scoped banner dismissal."""

    def __init__(
        self,
        marker_store,
        sender=None,
        recipient: Optional[str] = None,
        horizon_days: int = NOTIFICATION_HORIZON_DAYS,
        auto_send: bool = False
    ):
        """
        Initialize the scanner.

        Args:
            marker_store: Persisted key/value store holding the last scan date
            sender: Notification sender with send(recipient, subject, body)
            recipient: Address the alert message is sent to
            horizon_days: Days ahead a record must expire within to alert
            auto_send: Send the alert message right after each daily scan
        """
        self.marker_store = marker_store
        self.sender = sender
        self.recipient = recipient
        self.horizon_days = horizon_days
        self.auto_send = auto_send
        self.alerts: List[ExpiryAlert] = []
        self._lock = threading.Lock()

    @property
    def last_scan_date(self) -> Optional[str]:
        return self.marker_store.get(LAST_SCAN_DATE)

    def scan(
        self,
        collections: Dict[Category, Iterable[Any]],
        today: Optional[date] = None
    ) -> List[ExpiryAlert]:
        """
        Find records expiring after today and no later than the horizon.

        Args:
            collections: Records per category
            today: Scan day (default: today)

        Returns:
            Alerts in category order
        """
        today = today or date.today()
        horizon = today + timedelta(days=self.horizon_days)

        alerts: List[ExpiryAlert] = []
        for category in Category:
            if CATEGORY_KINDS[category] == "procedure":
                continue
            for record in collections.get(category, []):
                expiry = _scan_date(record)
                if expiry is not None and today < expiry <= horizon:
                    alerts.append(ExpiryAlert(
                        category=category,
                        record_id=record.id,
                        name=record.name,
                        number=record.number,
                        expiry_date=expiry,
                    ))
        return alerts

    def run_if_due(
        self,
        collections: Dict[Category, Iterable[Any]],
        today: Optional[date] = None
    ) -> Optional[List[ExpiryAlert]]:
        """
        Scan once per calendar day.

        The marker check and update happen under one lock so concurrent
        requests never scan the same day twice.

        Returns:
            The new alert set, or None if today was already scanned
        """
        today = today or date.today()
        with self._lock:
            if self.last_scan_date == today.isoformat():
                logger.debug(f"Expiry scan already done for {today.isoformat()}")
                return None

            alerts = self.scan(collections, today)
            self.alerts = alerts
            self.marker_store.set(LAST_SCAN_DATE, today.isoformat())

        logger.info(f"Expiry scan for {today.isoformat()} found {len(alerts)} records")

        if self.auto_send and alerts:
            self.send_alerts()
        return alerts

    def banner(self, session: NotificationSession) -> BannerState:
        """Banner state for a session: visible while alerts exist and it has not dismissed."""
        alerts = list(self.alerts)
        return BannerState(
            visible=bool(alerts) and not session.dismissed,
            alerts=alerts,
            last_scan_date=self.last_scan_date,
        )

    def dismiss(self, session: NotificationSession) -> None:
        """Hide the banner for the rest of the session; the alert set is kept."""
        session.dismissed = True
        logger.info(f"Notification banner dismissed for session {session.session_id}")

    def compose_message(self, alerts: Optional[List[ExpiryAlert]] = None) -> Dict[str, str]:
        """Build the subject and body listing each alerting record."""
        alerts = self.alerts if alerts is None else alerts
        lines = [
            f"- {alert.name} (No. {alert.number}) - expiry date: {alert.expiry_date.isoformat()}"
            for alert in alerts
        ]
        body = (
            "Hello,\n\n"
            "The following licenses and contracts will expire soon:\n\n"
            + "\n".join(lines)
            + "\n\nPlease take the necessary renewal actions.\n\n"
            "Regards,\nLicense and Contract Management System\n"
        )
        return {"subject": DEFAULT_SUBJECT, "body": body}

    def send_alerts(self, recipient: Optional[str] = None) -> bool:
        """
        Send the current alert set to the recipient.

        Failures are logged and reported as False; they never affect the
        daily scan marker.
        """
        recipient = recipient or self.recipient
        if not self.alerts:
            logger.info("No expiring records; notification not sent")
            return False
        if self.sender is None or not recipient:
            logger.warning("No notification sender or recipient configured; notification not sent")
            return False

        message = self.compose_message()
        try:
            result = self.sender.send(recipient, message["subject"], message["body"])
        except Exception as e:
            logger.error(f"Failed to send expiry notification: {e}", exc_info=True)
            return False
        return result is not False
