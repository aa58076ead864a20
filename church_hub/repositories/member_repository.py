"""
Data access layer for Member model.

Approval transitions are single conditional UPDATE statements, so two
administrators acting on the same member cannot both succeed.
"""

from datetime import datetime

from sqlalchemy import or_, update
from sqlalchemy.orm import Session

from church_hub.db.models import ApprovalStatus, Member, MemberBranch


class MemberRepository:
    """Repository for Member data access operations."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, member_id: int, fresh: bool = False) -> Member | None:
        """Get member by ID; ``fresh`` reloads attributes from the database."""
        return self.db.get(Member, member_id, populate_existing=fresh)

    def get_by_subject(self, subject_id: str) -> Member | None:
        return self.db.query(Member).filter(Member.external_subject_id == subject_id).first()

    def get_by_email(self, email: str) -> Member | None:
        return self.db.query(Member).filter(Member.email == email.strip().lower()).first()

    def create(self, member_data: dict) -> Member:
        member = Member(**member_data)
        self.db.add(member)
        self.db.flush()
        return member

    def transition_status(
        self,
        member_id: int,
        target: ApprovalStatus,
        values: dict,
        guard: bool = True,
    ) -> int:
        """
        Move a member to ``target`` in one statement.

        Args:
            member_id: Member to update
            target: New approval status
            values: Additional columns to set
            guard: Only update when the member is not already in ``target``

        Returns:
            Number of rows updated (0 or 1)
        """
        stmt = update(Member).where(Member.id == member_id)
        if guard:
            stmt = stmt.where(Member.approval_status != target)
        result = self.db.execute(stmt.values(approval_status=target, **values))
        return result.rowcount

    def decide_pending(
        self, member_ids: list[int], status: ApprovalStatus, values: dict
    ) -> int:
        """Move the pending members among ``member_ids`` to ``status``."""
        result = self.db.execute(
            update(Member)
            .where(
                Member.id.in_(member_ids),
                Member.approval_status == ApprovalStatus.PENDING,
            )
            .values(approval_status=status, **values)
        )
        return result.rowcount

    def set_active(self, member_ids: list[int], active: bool) -> int:
        result = self.db.execute(
            update(Member)
            .where(Member.id.in_(member_ids), Member.is_active.is_(not active))
            .values(is_active=active)
        )
        return result.rowcount

    def reset_branch(self, member_id: int, branch: MemberBranch, selected_at: datetime) -> int:
        result = self.db.execute(
            update(Member)
            .where(Member.id == member_id)
            .values(
                branch=branch,
                branch_selected_at=selected_at,
                approval_status=ApprovalStatus.PENDING,
                approved_by_id=None,
                approved_at=None,
                rejection_reason=None,
            )
        )
        return result.rowcount

    def search(
        self,
        branch: MemberBranch | None = None,
        status: ApprovalStatus | None = None,
        search: str | None = None,
    ):
        """Build a filtered member query, newest first."""
        query = self.db.query(Member)
        if branch:
            query = query.filter(Member.branch == branch)
        if status:
            query = query.filter(Member.approval_status == status)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(Member.name.ilike(pattern), Member.email.ilike(pattern)))
        return query.order_by(Member.created_at.desc(), Member.id.desc())
