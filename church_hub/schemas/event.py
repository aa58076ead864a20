"""
Pydantic schemas for event management.
"""

from datetime import datetime
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from church_hub.db.models import CreatorKind, EventBranch
from church_hub.utils.datetime_helpers import to_naive_utc, utc_now


class EventCreate(BaseModel):
    """
    Schema for creating an event.

    **VALIDATION RULES:**
    1. starts_at must be in the future
    2. ends_at, when given, must be after starts_at
    3. branch is ignored for members (their own branch is used)
    """

    title: str = Field(..., min_length=3, max_length=100)
    description: str = Field(..., min_length=10, max_length=2000)
    starts_at: datetime
    ends_at: datetime | None = None
    location: str = Field(..., min_length=1, max_length=200)
    branch: EventBranch | None = None
    max_attendees: int | None = Field(None, ge=1)
    request_cross_branch: bool = False

    @field_validator("starts_at")
    @classmethod
    def validate_starts_in_future(cls, v: datetime) -> datetime:
        v = to_naive_utc(v)
        if v <= utc_now():
            raise ValueError("Event start must be in the future")
        return v

    @field_validator("ends_at")
    @classmethod
    def normalize_ends_at(cls, v: datetime | None) -> datetime | None:
        return None if v is None else to_naive_utc(v)

    @model_validator(mode="after")
    def validate_end_after_start(self) -> Self:
        if self.ends_at is not None and self.ends_at <= self.starts_at:
            raise ValueError("Event end must be after its start")
        return self


class EventUpdate(BaseModel):
    """All fields optional; ``branch`` may only be changed by administrators."""

    title: str | None = Field(None, min_length=3, max_length=100)
    description: str | None = Field(None, min_length=10, max_length=2000)
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    location: str | None = Field(None, min_length=1, max_length=200)
    branch: EventBranch | None = None
    max_attendees: int | None = Field(None, ge=1)

    @field_validator("starts_at")
    @classmethod
    def validate_starts_in_future(cls, v: datetime | None) -> datetime | None:
        if v is None:
            return None
        v = to_naive_utc(v)
        if v <= utc_now():
            raise ValueError("Event start must be in the future")
        return v

    @field_validator("ends_at")
    @classmethod
    def normalize_ends_at(cls, v: datetime | None) -> datetime | None:
        return None if v is None else to_naive_utc(v)


class EventOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    starts_at: datetime
    ends_at: datetime | None = None
    location: str
    branch: EventBranch
    created_by_id: int
    creator_kind: CreatorKind
    cross_branch_requested: bool
    cross_branch_approved: bool
    approved_by_admin_id: int | None = None
    max_attendees: int | None = None
    is_active: bool
    created_at: datetime | None = None

    # Filled in by EventService.describe
    attendee_count: int = 0
    available_spots: int | None = None
    timing: str = "upcoming"
    can_edit: bool = False
    is_registered: bool = False
