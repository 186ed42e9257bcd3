"""
Pydantic Models for the Compliance Tracker API.
Defines request and response schemas.
"""

from typing import List, Dict, Any, Optional
from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field("healthy", description="Service status")
    version: str = Field(..., description="API version")
    timestamp: str = Field(..., description="Current timestamp")


class CategoryInfo(BaseModel):
    """A record collection exposed by the API."""
    id: str = Field(..., description="Category identifier used in paths")
    label: str = Field(..., description="Display label")
    kind: str = Field(..., description="Record shape: single, dual or procedure")


class RemainingResponse(BaseModel):
    days: Optional[int] = Field(None, description="Whole days until expiry, negative when overdue")
    tier: str = Field(..., description="expired, soon, active or none")
    label: str = Field(..., description="Display text")


class RecordListResponse(BaseModel):
    """Records of one collection or of the unified view."""
    category: Optional[str] = Field(None, description="Category, or null for the unified view")
    count: int = Field(..., description="Number of records returned")
    records: List[Dict[str, Any]] = Field(default=[], description="Records with derived fields")


class AlertResponse(BaseModel):
    category: str
    record_id: Optional[int] = None
    name: str
    number: str
    expiry_date: str


class NotificationResponse(BaseModel):
    """Banner state for the calling session."""
    session_id: str = Field(..., description="Session the banner state belongs to")
    visible: bool = Field(..., description="Whether the banner should be shown")
    count: int = Field(..., description="Number of records in the alert set")
    last_scan_date: Optional[str] = Field(None, description="Day of the last expiry scan")
    alerts: List[AlertResponse] = Field(default=[], description="Records expiring soon")


class SendResponse(BaseModel):
    sent: bool = Field(..., description="Whether the message was handed to the sender")
    count: int = Field(..., description="Number of records listed in the message")
    recipient: Optional[str] = None
