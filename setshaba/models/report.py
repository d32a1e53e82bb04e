"""
Pydantic models for citizen reports.
These models handle validation for report submission, updates and responses.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from setshaba.models.municipality import MunicipalitySummary
from setshaba.models.user import UserSummary


class ReportStatus(str, Enum):
    """
    Report lifecycle states. New reports start OPEN; only officials of the
    report's municipality move them forward.
    """
    OPEN = "open"
    ACKNOWLEDGED = "acknowledged"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class ReportCreate(BaseModel):
    """
    Model for creating a new report (incoming POST request).
    These are the fields citizens provide when submitting a report.
    """
    title: str = Field(..., min_length=1, max_length=200, description="Short summary of the problem")
    description: str = Field(..., min_length=1, max_length=2000, description="What the citizen observed")
    category: str = Field(..., min_length=1, max_length=100, description="Service category (water, roads, ...)")
    lat: float = Field(..., ge=-90, le=90, description="Latitude coordinate")
    lng: float = Field(..., ge=-180, le=180, description="Longitude coordinate")
    address: str = Field(..., min_length=1, max_length=500, description="Street address of the problem")
    photo_url: Optional[str] = Field(None, max_length=2048, description="Optional photo URL")

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Burst water pipe",
                "description": "Water has been running down the street since Monday.",
                "category": "water",
                "lat": -25.7479,
                "lng": 28.2293,
                "address": "12 Church Street, Pretoria",
                "photo_url": "https://example.com/pipe.jpg",
            }
        }
        extra = "ignore"


class ReportUpdate(BaseModel):
    """
    Partial update applied by an official. Unknown keys (id, created_by,
    municipality_id, ...) are dropped during validation.
    """
    status: Optional[ReportStatus] = None
    assigned_official: Optional[str] = Field(None, min_length=1, description="User id of an official; null clears")
    category: Optional[str] = Field(None, min_length=1, max_length=100)

    class Config:
        extra = "ignore"


class StatusHistoryEntry(BaseModel):
    """Status transition history entry."""
    from_status: Optional[str] = Field(None, description="Previous status")
    to_status: str = Field(..., description="New status")
    changed_by: str = Field(..., description="User who made the change")
    timestamp: datetime = Field(..., description="When change occurred")


class ReportResponse(BaseModel):
    """
    Model for report responses (what API returns).
    Joined summaries are present only where the endpoint includes them.
    """
    id: str = Field(..., description="Firestore document ID")
    title: str
    description: str
    category: str
    lat: float
    lng: float
    address: str
    photo_url: Optional[str] = None
    municipality_id: str
    created_by: str
    status: ReportStatus = ReportStatus.OPEN
    assigned_official: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    status_history: List[StatusHistoryEntry] = Field(default_factory=list)
    upvote_count: Optional[int] = Field(None, description="Derived from upvote rows, not stored")
    municipality: Optional[MunicipalitySummary] = None
    created_by_user: Optional[UserSummary] = None
    assigned_official_user: Optional[UserSummary] = None


class ReportPayload(BaseModel):
    report: ReportResponse


class UpvotePayload(BaseModel):
    upvoted: bool
    upvote_count: int
