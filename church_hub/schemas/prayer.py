"""
Pydantic schemas for prayer requests.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from church_hub.db.models import MemberBranch, PrayerPriority, PrayerStatus


class PrayerCreate(BaseModel):
    title: str = Field(..., min_length=5, max_length=100)
    description: str = Field(..., min_length=10, max_length=1000)
    is_anonymous: bool = False
    priority: PrayerPriority = PrayerPriority.NORMAL


class PrayerUpdate(BaseModel):
    """Submitters edit text and priority; administrators may also archive."""

    title: str | None = Field(None, min_length=5, max_length=100)
    description: str | None = Field(None, min_length=10, max_length=1000)
    priority: PrayerPriority | None = None
    status: PrayerStatus | None = None


class PrayerAnswered(BaseModel):
    answered_description: str = Field(..., min_length=1, max_length=500)


class PrayerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    submitted_by_id: int | None = None
    submitter_branch: MemberBranch
    is_anonymous: bool
    prayer_count: int
    status: PrayerStatus
    answered_description: str | None = None
    answered_at: datetime | None = None
    priority: PrayerPriority
    created_at: datetime | None = None

    # Filled in by PrayerService.describe
    display_name: str = "Member"
    days_old: int = 0
    has_prayed: bool = False
    can_edit: bool = False
