"""
Pydantic schemas for members and their approval lifecycle.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from church_hub.db.models import ApprovalStatus, MemberBranch


class MemberOut(BaseModel):
    """Member snapshot returned to members and administrators."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str
    bio: str | None = None
    avatar_url: str | None = None
    branch: MemberBranch
    branch_selected_at: datetime | None = None
    approval_status: ApprovalStatus
    rejection_reason: str | None = None
    approved_by_id: int | None = None
    approved_at: datetime | None = None
    is_active: bool
    last_login_at: datetime | None = None
    created_at: datetime | None = None


class MemberRegistration(BaseModel):
    """
    Manual pre-registration.

    The member is created ``pending`` without an identity subject and is
    linked on first login with the same email.
    """

    email: EmailStr
    name: str = Field(..., min_length=2, max_length=50)
    bio: str | None = Field(None, max_length=500)
    avatar_url: str | None = Field(None, max_length=500)


class MemberProfileUpdate(BaseModel):
    name: str | None = Field(None, min_length=2, max_length=50)
    bio: str | None = Field(None, max_length=500)
    avatar_url: str | None = Field(None, max_length=500)


class BranchSelection(BaseModel):
    """Branch chosen by a member; validated against branch1/branch2 by the service."""

    branch: str = Field(..., description="branch1 or branch2")


class ApprovalDecision(BaseModel):
    reason: str | None = Field(None, max_length=200)


class BulkApproveRequest(BaseModel):
    member_ids: list[int] = Field(..., min_length=1, max_length=50)


class BulkOperation(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    ACTIVATE = "activate"
    DEACTIVATE = "deactivate"


class BulkOperationRequest(BaseModel):
    """
    One operation applied to up to 100 members.

    ``reason`` is stored as the rejection reason for ``reject``.
    """

    operation: BulkOperation
    member_ids: list[int] = Field(..., min_length=1, max_length=100)
    reason: str | None = Field(None, max_length=200)
