"""
Member approval lifecycle.

States are pending, approved and rejected. Administrators move members
between them; members only re-enter ``pending`` by selecting a branch.
Each transition is one guarded UPDATE so concurrent decisions cannot
both apply.
"""

import logging

from sqlalchemy.orm import Session

from church_hub.core.exceptions import (
    AlreadyApprovedError,
    AlreadyRejectedError,
    InvalidBranchError,
    NotFoundError,
)
from church_hub.db.models import Administrator, ApprovalStatus, Member, MemberBranch
from church_hub.repositories.member_repository import MemberRepository
from church_hub.schemas.member import BulkOperation
from church_hub.utils.datetime_helpers import utc_now

logger = logging.getLogger(__name__)

DEFAULT_REJECTION_REASON = "No reason provided"
DEFAULT_REVOCATION_REASON = "Access revoked by administrator"
DEFAULT_BULK_REJECTION_REASON = "Bulk rejection"
SELECTABLE_BRANCHES = (MemberBranch.BRANCH1, MemberBranch.BRANCH2)


class ApprovalService:
    """Service for member approval transitions."""

    def __init__(self, db: Session):
        self.db = db
        self.members = MemberRepository(db)

    def _reload(self, member_id: int) -> Member:
        member = self.members.get_by_id(member_id, fresh=True)
        if member is None:
            raise NotFoundError("User not found")
        return member

    def approve(self, member_id: int, administrator: Administrator) -> Member:
        """
        Approve a member.

        Raises:
            NotFoundError: If the member does not exist
            AlreadyApprovedError: If the member is already approved
        """
        updated = self.members.transition_status(
            member_id,
            ApprovalStatus.APPROVED,
            {
                "approved_by_id": administrator.id,
                "approved_at": utc_now(),
                "rejection_reason": None,
            },
        )
        if not updated:
            self._reload(member_id)
            raise AlreadyApprovedError()

        self.db.commit()
        logger.info(f"Member {member_id} approved by administrator {administrator.id}")
        return self._reload(member_id)

    def reject(
        self, member_id: int, administrator: Administrator, reason: str | None = None
    ) -> Member:
        """
        Reject a member.

        Raises:
            NotFoundError: If the member does not exist
            AlreadyRejectedError: If the member is already rejected
        """
        updated = self.members.transition_status(
            member_id,
            ApprovalStatus.REJECTED,
            self._decision_values(administrator, reason or DEFAULT_REJECTION_REASON),
        )
        if not updated:
            self._reload(member_id)
            raise AlreadyRejectedError()

        self.db.commit()
        logger.info(f"Member {member_id} rejected by administrator {administrator.id}")
        return self._reload(member_id)

    def revoke(
        self, member_id: int, administrator: Administrator, reason: str | None = None
    ) -> Member:
        """Force a member to rejected regardless of current state."""
        updated = self.members.transition_status(
            member_id,
            ApprovalStatus.REJECTED,
            self._decision_values(administrator, reason or DEFAULT_REVOCATION_REASON),
            guard=False,
        )
        if not updated:
            raise NotFoundError("User not found")

        self.db.commit()
        logger.info(f"Member {member_id} access revoked by administrator {administrator.id}")
        return self._reload(member_id)

    def bulk_approve(self, member_ids: list[int], administrator: Administrator) -> int:
        """Approve the pending members among ``member_ids``; returns how many changed."""
        approved = self.members.decide_pending(
            list(set(member_ids)),
            ApprovalStatus.APPROVED,
            {
                "approved_by_id": administrator.id,
                "approved_at": utc_now(),
                "rejection_reason": None,
            },
        )
        self.db.commit()
        logger.info(
            f"Bulk approval by administrator {administrator.id}: "
            f"{approved} of {len(member_ids)} members approved"
        )
        return approved

    def bulk_operation(
        self,
        operation: BulkOperation,
        member_ids: list[int],
        administrator: Administrator,
        reason: str | None = None,
    ) -> int:
        """
        Apply one operation to many members.

        Approve and reject only touch pending members; activate and deactivate
        only touch members whose flag differs.

        Returns:
            Number of members that changed
        """
        ids = list(set(member_ids))
        if operation == BulkOperation.APPROVE:
            return self.bulk_approve(ids, administrator)

        if operation == BulkOperation.REJECT:
            affected = self.members.decide_pending(
                ids,
                ApprovalStatus.REJECTED,
                self._decision_values(administrator, reason or DEFAULT_BULK_REJECTION_REASON),
            )
        else:
            affected = self.members.set_active(ids, operation == BulkOperation.ACTIVATE)

        self.db.commit()
        logger.info(
            f"Bulk {operation.value} by administrator {administrator.id}: "
            f"{affected} of {len(ids)} members changed"
        )
        return affected

    def change_branch(self, member: Member, branch: str) -> Member:
        """
        Select a new branch for a member and send them back for review.

        Raises:
            InvalidBranchError: If ``branch`` is not branch1 or branch2
        """
        try:
            new_branch = MemberBranch(branch)
        except ValueError:
            raise InvalidBranchError(
                errors=[{"field": "branch", "message": "Branch must be branch1 or branch2"}]
            ) from None
        if new_branch not in SELECTABLE_BRANCHES:
            raise InvalidBranchError(
                errors=[{"field": "branch", "message": "Branch must be branch1 or branch2"}]
            )

        previous = member.branch
        self.members.reset_branch(member.id, new_branch, utc_now())
        self.db.commit()
        logger.info(
            f"Member {member.id} changed branch {previous.value} -> {new_branch.value}, "
            "approval reset to pending"
        )
        return self._reload(member.id)

    @staticmethod
    def _decision_values(administrator: Administrator, reason: str) -> dict:
        return {
            "approved_by_id": administrator.id,
            "approved_at": utc_now(),
            "rejection_reason": reason[:200],
        }
