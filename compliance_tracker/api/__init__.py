"""API module for the Compliance Records Tracker."""

from compliance_tracker.api.routes import router
from compliance_tracker.api.models import (
    HealthResponse,
    CategoryInfo,
    RecordListResponse,
    NotificationResponse,
    SendResponse
)

__all__ = [
    "router",
    "HealthResponse",
    "CategoryInfo",
    "RecordListResponse",
    "NotificationResponse",
    "SendResponse"
]
