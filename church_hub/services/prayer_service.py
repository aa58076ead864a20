"""
Business logic service for the prayer board.

Prayer requests are visible to every approved member regardless of branch;
``submitter_branch`` is a label administrators can filter on.
"""

import logging

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from church_hub.core.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidBranchError,
    NotFoundError,
    PrayerNotActiveError,
)
from church_hub.db.models import (
    Member,
    MemberBranch,
    PrayerPriority,
    PrayerRequest,
    PrayerStatus,
    PrayerSupporter,
)
from church_hub.schemas.prayer import PrayerCreate, PrayerOut, PrayerUpdate
from church_hub.services.principal_resolver import AuthContext
from church_hub.utils.datetime_helpers import days_since, utc_now

logger = logging.getLogger(__name__)

ANONYMOUS_NAME = "Anonymous"
STATUS_ALL = "all"


class PrayerService:
    """Service for prayer request business logic."""

    def __init__(self, db: Session):
        self.db = db

    def _visible_query(self):
        return self.db.query(PrayerRequest).filter(PrayerRequest.is_visible.is_(True))

    def get_visible(self, prayer_id: int) -> PrayerRequest:
        prayer = self._visible_query().filter(PrayerRequest.id == prayer_id).first()
        if not prayer:
            raise NotFoundError("Prayer request not found")
        return prayer

    @staticmethod
    def can_edit(context: AuthContext, prayer: PrayerRequest) -> bool:
        if context.is_administrator:
            return True
        return prayer.submitted_by_id is not None and prayer.submitted_by_id == context.principal.id

    def _get_editable(self, context: AuthContext, prayer_id: int) -> PrayerRequest:
        prayer = self.get_visible(prayer_id)
        if not self.can_edit(context, prayer):
            raise ForbiddenError(
                "Only the submitter or an administrator can modify this prayer request"
            )
        return prayer

    def list_prayers(
        self,
        context: AuthContext,
        offset: int = 0,
        limit: int = 10,
        status: str = PrayerStatus.ACTIVE.value,
        priority: PrayerPriority | None = None,
        branch: MemberBranch | None = None,
        search: str | None = None,
    ) -> tuple[list[PrayerRequest], int]:
        """
        List visible prayer requests, newest first.

        Args:
            status: A prayer status, or "all" to disable status filtering
            branch: Submitter branch filter, honoured for administrators only

        Returns:
            (prayers, total matching count)
        """
        query = self._visible_query()

        if status != STATUS_ALL:
            query = query.filter(PrayerRequest.status == PrayerStatus(status))
        if priority:
            query = query.filter(PrayerRequest.priority == priority)
        if branch and context.is_administrator:
            query = query.filter(PrayerRequest.submitter_branch == branch)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(PrayerRequest.title.ilike(pattern), PrayerRequest.description.ilike(pattern))
            )

        total = query.count()
        prayers = (
            query.order_by(PrayerRequest.created_at.desc(), PrayerRequest.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return prayers, total

    def list_for_member(
        self, member: Member, offset: int = 0, limit: int = 10
    ) -> tuple[list[PrayerRequest], int]:
        query = self._visible_query().filter(PrayerRequest.submitted_by_id == member.id)
        total = query.count()
        prayers = (
            query.order_by(PrayerRequest.created_at.desc(), PrayerRequest.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return prayers, total

    def recent_answered(self, limit: int = 5) -> list[PrayerRequest]:
        return (
            self._visible_query()
            .filter(PrayerRequest.status == PrayerStatus.ANSWERED)
            .order_by(PrayerRequest.answered_at.desc(), PrayerRequest.id.desc())
            .limit(limit)
            .all()
        )

    def create_prayer(self, member: Member, data: PrayerCreate) -> PrayerRequest:
        """
        Submit a prayer request.

        Anonymous requests do not record the submitter.

        Raises:
            InvalidBranchError: If the member has not selected a branch
        """
        if member.branch == MemberBranch.UNSET:
            raise InvalidBranchError("Select a branch before submitting prayer requests")

        prayer = PrayerRequest(
            title=data.title.strip(),
            description=data.description,
            submitted_by_id=None if data.is_anonymous else member.id,
            submitter_branch=member.branch,
            submitter_display_name=ANONYMOUS_NAME if data.is_anonymous else member.name,
            is_anonymous=data.is_anonymous,
            priority=data.priority,
            status=PrayerStatus.ACTIVE,
            prayer_count=0,
            is_visible=True,
        )
        self.db.add(prayer)
        self.db.commit()
        self.db.refresh(prayer)
        logger.info(f"Prayer request {prayer.id} submitted (anonymous={data.is_anonymous})")
        return prayer

    def toggle_pray(self, member: Member, prayer_id: int) -> tuple[bool, int]:
        """
        Add or remove the member's prayer for a request.

        The member's supporter row is deleted first; only when nothing was
        deleted is a new row inserted. ``prayer_count`` is adjusted in SQL.

        Returns:
            (has_prayed after the toggle, new prayer count)

        Raises:
            NotFoundError: If the prayer request does not exist
            PrayerNotActiveError: If it is hidden or no longer active
        """
        prayer = self.db.get(PrayerRequest, prayer_id)
        if not prayer:
            raise NotFoundError("Prayer request not found")
        if not prayer.is_visible or prayer.status != PrayerStatus.ACTIVE:
            raise PrayerNotActiveError()

        removed = (
            self.db.query(PrayerSupporter)
            .filter(PrayerSupporter.prayer_id == prayer_id, PrayerSupporter.member_id == member.id)
            .delete(synchronize_session=False)
        )

        if removed:
            delta = -1
        else:
            try:
                self.db.add(
                    PrayerSupporter(prayer_id=prayer_id, member_id=member.id, prayed_at=utc_now())
                )
                self.db.flush()
            except IntegrityError:
                self.db.rollback()
                raise ConflictError("Prayer is already being recorded") from None
            delta = 1

        self.db.query(PrayerRequest).filter(PrayerRequest.id == prayer_id).update(
            {PrayerRequest.prayer_count: PrayerRequest.prayer_count + delta},
            synchronize_session=False,
        )
        self.db.commit()

        prayer = self.db.get(PrayerRequest, prayer_id, populate_existing=True)
        has_prayed = delta > 0
        logger.info(
            f"Member {member.id} {'prayed for' if has_prayed else 'withdrew prayer from'} "
            f"request {prayer_id}"
        )
        return has_prayed, prayer.prayer_count

    def update_prayer(
        self, context: AuthContext, prayer_id: int, data: PrayerUpdate
    ) -> PrayerRequest:
        prayer = self._get_editable(context, prayer_id)
        update_data = data.model_dump(exclude_unset=True, exclude_none=True)

        if "status" in update_data:
            if not context.is_administrator:
                raise ForbiddenError("Only administrators can change a prayer request's status")
            if update_data["status"] == PrayerStatus.ANSWERED:
                raise ConflictError("Use the answered endpoint to mark a prayer as answered")

        for key, value in update_data.items():
            setattr(prayer, key, value)

        self.db.commit()
        self.db.refresh(prayer)
        logger.info(f"Prayer request {prayer_id} updated by {context.kind.value} {context.principal.id}")
        return prayer

    def mark_answered(self, context: AuthContext, prayer_id: int, description: str) -> PrayerRequest:
        """
        Mark a prayer request as answered.

        Raises:
            ForbiddenError: If the caller is neither submitter nor administrator
        """
        prayer = self._get_editable(context, prayer_id)
        prayer.status = PrayerStatus.ANSWERED
        prayer.answered_description = description
        prayer.answered_at = utc_now()
        self.db.commit()
        self.db.refresh(prayer)
        logger.info(f"Prayer request {prayer_id} marked answered")
        return prayer

    def delete_prayer(self, context: AuthContext, prayer_id: int) -> None:
        """Hide a prayer request from the board."""
        prayer = self._get_editable(context, prayer_id)
        prayer.is_visible = False
        self.db.commit()
        logger.info(f"Prayer request {prayer_id} hidden by {context.kind.value} {context.principal.id}")

    def prayed_ids(self, member: Member | None, prayer_ids: list[int]) -> set[int]:
        if member is None or not prayer_ids:
            return set()
        rows = (
            self.db.query(PrayerSupporter.prayer_id)
            .filter(
                PrayerSupporter.member_id == member.id,
                PrayerSupporter.prayer_id.in_(prayer_ids),
            )
            .all()
        )
        return {row[0] for row in rows}

    def describe_many(self, context: AuthContext, prayers: list[PrayerRequest]) -> list[dict]:
        prayed = self.prayed_ids(context.member, [p.id for p in prayers])
        return [self._describe(context, p, p.id in prayed) for p in prayers]

    def describe(self, context: AuthContext, prayer: PrayerRequest) -> dict:
        return self.describe_many(context, [prayer])[0]

    def _describe(self, context: AuthContext, prayer: PrayerRequest, has_prayed: bool) -> dict:
        data = PrayerOut.model_validate(prayer).model_dump(mode="json")
        if prayer.is_anonymous:
            display_name = ANONYMOUS_NAME
        else:
            display_name = prayer.submitter_display_name or "Member"
        data.update(
            {
                "display_name": display_name,
                "days_old": days_since(prayer.created_at),
                "has_prayed": has_prayed,
                "can_edit": self.can_edit(context, prayer),
            }
        )
        return data
