"""
Business logic service for member accounts.

Covers self-service profile management, manual pre-registration and the
administrator views used during approval review.
"""

import logging

from sqlalchemy.orm import Session

from church_hub.core.exceptions import DuplicateEmailError, NotFoundError
from church_hub.db.models import (
    ApprovalStatus,
    CreatorKind,
    Event,
    EventAttendee,
    Member,
    MemberBranch,
    PrayerRequest,
)
from church_hub.repositories.administrator_repository import AdministratorRepository
from church_hub.repositories.member_repository import MemberRepository
from church_hub.schemas.member import MemberProfileUpdate, MemberRegistration

logger = logging.getLogger(__name__)


class MemberService:
    """Service for member account business logic."""

    def __init__(self, db: Session):
        self.db = db
        self.members = MemberRepository(db)

    def get_member(self, member_id: int) -> Member:
        member = self.members.get_by_id(member_id)
        if not member:
            raise NotFoundError("User not found")
        return member

    def pre_register(self, data: MemberRegistration) -> Member:
        """
        Create a pending member ahead of their first login.

        Raises:
            DuplicateEmailError: If any member or administrator already uses the email
        """
        email = data.email.lower()
        if self.members.get_by_email(email) or AdministratorRepository(self.db).get_by_email(email):
            raise DuplicateEmailError()

        member = self.members.create(
            {
                "email": email,
                "name": data.name.strip(),
                "bio": data.bio,
                "avatar_url": data.avatar_url,
                "branch": MemberBranch.UNSET,
                "approval_status": ApprovalStatus.PENDING,
            }
        )
        self.db.commit()
        logger.info(f"Member {member.id} pre-registered for {email}")
        return member

    def update_profile(self, member: Member, data: MemberProfileUpdate) -> Member:
        for key, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(member, key, value.strip() if key == "name" else value)
        self.db.commit()
        self.db.refresh(member)
        logger.info(f"Member {member.id} updated profile")
        return member

    def deactivate(self, member: Member) -> None:
        member.is_active = False
        self.db.commit()
        logger.info(f"Member {member.id} deactivated their account")

    def list_members(
        self,
        offset: int = 0,
        limit: int = 10,
        branch: MemberBranch | None = None,
        status: ApprovalStatus | None = None,
        search: str | None = None,
    ) -> tuple[list[Member], int]:
        query = self.members.search(branch=branch, status=status, search=search)
        total = query.count()
        return query.offset(offset).limit(limit).all(), total

    def recent_activity(self, member_id: int, limit: int = 5) -> dict:
        """Recent events created and prayers submitted by a member."""
        events = (
            self.db.query(Event)
            .filter(
                Event.creator_kind == CreatorKind.MEMBER,
                Event.created_by_id == member_id,
                Event.is_active.is_(True),
            )
            .order_by(Event.created_at.desc(), Event.id.desc())
            .limit(limit)
            .all()
        )
        prayers = (
            self.db.query(PrayerRequest)
            .filter(
                PrayerRequest.submitted_by_id == member_id,
                PrayerRequest.is_visible.is_(True),
            )
            .order_by(PrayerRequest.created_at.desc(), PrayerRequest.id.desc())
            .limit(limit)
            .all()
        )
        return {"events": events, "prayers": prayers}

    def activity_counts(self, member_id: int) -> dict:
        events_created = (
            self.db.query(Event)
            .filter(
                Event.creator_kind == CreatorKind.MEMBER,
                Event.created_by_id == member_id,
                Event.is_active.is_(True),
            )
            .count()
        )
        events_registered = (
            self.db.query(EventAttendee).filter(EventAttendee.member_id == member_id).count()
        )
        prayers_submitted = (
            self.db.query(PrayerRequest)
            .filter(
                PrayerRequest.submitted_by_id == member_id,
                PrayerRequest.is_visible.is_(True),
            )
            .count()
        )
        return {
            "events_created": events_created,
            "events_registered": events_registered,
            "prayers_submitted": prayers_submitted,
        }
