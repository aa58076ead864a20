"""
Administrator routes for member review and approval.

All routes require the `manageUsers` permission.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from church_hub.core.dependencies import PageParams, get_page_params, require_permission
from church_hub.core.responses import build_pagination, success_response
from church_hub.db.models import Administrator, ApprovalStatus, MemberBranch, Permission
from church_hub.db.session import get_db
from church_hub.schemas.event import EventOut
from church_hub.schemas.member import (
    ApprovalDecision,
    BulkApproveRequest,
    BulkOperationRequest,
    MemberOut,
)
from church_hub.schemas.prayer import PrayerOut
from church_hub.services.approval_service import ApprovalService
from church_hub.services.member_service import MemberService

router = APIRouter(prefix="/admin/users", tags=["Member Administration"])

manage_users = require_permission(Permission.MANAGE_USERS)


def _member_data(member) -> dict:
    return MemberOut.model_validate(member).model_dump(mode="json")


@router.get("", summary="List Members")
def list_members(
    branch: MemberBranch | None = Query(None, description="Filter by branch"),
    approval_status: ApprovalStatus | None = Query(None, alias="status"),
    search: str | None = Query(None, max_length=100, description="Match name or email"),
    paging: PageParams = Depends(get_page_params),
    administrator: Administrator = Depends(manage_users),
    db: Session = Depends(get_db),
):
    members, total = MemberService(db).list_members(
        offset=paging.offset,
        limit=paging.per_page,
        branch=branch,
        status=approval_status,
        search=search,
    )
    return success_response(
        message="Users retrieved successfully",
        data=[_member_data(m) for m in members],
        pagination=build_pagination(paging.page, paging.per_page, total),
    )


@router.get("/pending", summary="List Pending Approvals")
def list_pending(
    branch: MemberBranch | None = Query(None),
    paging: PageParams = Depends(get_page_params),
    administrator: Administrator = Depends(manage_users),
    db: Session = Depends(get_db),
):
    members, total = MemberService(db).list_members(
        offset=paging.offset,
        limit=paging.per_page,
        branch=branch,
        status=ApprovalStatus.PENDING,
    )
    return success_response(
        message="Pending approvals retrieved successfully",
        data=[_member_data(m) for m in members],
        pagination=build_pagination(paging.page, paging.per_page, total),
    )


@router.post("/bulk-approve", summary="Bulk Approve Members")
def bulk_approve(
    request: BulkApproveRequest,
    administrator: Administrator = Depends(manage_users),
    db: Session = Depends(get_db),
):
    """Approve up to 50 members; only those still pending change."""
    approved = ApprovalService(db).bulk_approve(request.member_ids, administrator)
    return success_response(
        message=f"{approved} users approved successfully",
        data={"approved_count": approved, "requested_count": len(set(request.member_ids))},
    )


@router.post("/bulk-operations", summary="Bulk Member Operation")
def bulk_operation(
    request: BulkOperationRequest,
    administrator: Administrator = Depends(manage_users),
    db: Session = Depends(get_db),
):
    """Approve, reject, activate or deactivate up to 100 members at once."""
    affected = ApprovalService(db).bulk_operation(
        request.operation, request.member_ids, administrator, request.reason
    )
    return success_response(
        message=f"Bulk {request.operation.value} completed successfully",
        data={
            "operation": request.operation.value,
            "affected": affected,
            "total": len(set(request.member_ids)),
        },
    )


@router.get("/{member_id}", summary="Get Member Details")
def get_member(
    member_id: int,
    administrator: Administrator = Depends(manage_users),
    db: Session = Depends(get_db),
):
    service = MemberService(db)
    member = service.get_member(member_id)
    activity = service.recent_activity(member_id)
    data = _member_data(member)
    data["recent_events"] = [
        EventOut.model_validate(e).model_dump(mode="json") for e in activity["events"]
    ]
    data["recent_prayers"] = [
        PrayerOut.model_validate(p).model_dump(mode="json") for p in activity["prayers"]
    ]
    return success_response(message="User retrieved successfully", data=data)


@router.post("/{member_id}/approve", summary="Approve Member")
def approve_member(
    member_id: int,
    administrator: Administrator = Depends(manage_users),
    db: Session = Depends(get_db),
):
    member = ApprovalService(db).approve(member_id, administrator)
    return success_response(message="User approved successfully", data=_member_data(member))


@router.post("/{member_id}/reject", summary="Reject Member")
def reject_member(
    member_id: int,
    decision: ApprovalDecision | None = None,
    administrator: Administrator = Depends(manage_users),
    db: Session = Depends(get_db),
):
    reason = decision.reason if decision else None
    member = ApprovalService(db).reject(member_id, administrator, reason)
    return success_response(message="User rejected", data=_member_data(member))


@router.post("/{member_id}/revoke", summary="Revoke Member Access")
def revoke_member(
    member_id: int,
    decision: ApprovalDecision | None = None,
    administrator: Administrator = Depends(manage_users),
    db: Session = Depends(get_db),
):
    """Force a member back to rejected, whatever their current status."""
    reason = decision.reason if decision else None
    member = ApprovalService(db).revoke(member_id, administrator, reason)
    return success_response(message="User access revoked", data=_member_data(member))
