"""
API routes for the prayer board.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from church_hub.core.dependencies import (
    PageParams,
    get_page_params,
    require_approved,
    require_approved_member,
)
from church_hub.core.responses import build_pagination, created_response, success_response
from church_hub.db.models import Member, MemberBranch, PrayerPriority
from church_hub.db.session import get_db
from church_hub.schemas.prayer import PrayerAnswered, PrayerCreate, PrayerUpdate
from church_hub.services.prayer_service import PrayerService
from church_hub.services.principal_resolver import AuthContext

router = APIRouter(prefix="/prayers", tags=["Prayer Requests"])


@router.get(
    "",
    summary="List Prayer Requests",
    description="""
List visible prayer requests, newest first.

**QUERY PARAMETERS:**
- status (active, answered, archived, all; default active)
- priority (low, normal, high, urgent)
- branch (branch1, branch2): submitter branch, administrators only
- search (string): Match title or description
    """,
)
def list_prayers(
    prayer_status: str = Query("active", alias="status", pattern=r"^(active|answered|archived|all)$"),
    priority: PrayerPriority | None = Query(None),
    branch: MemberBranch | None = Query(None),
    search: str | None = Query(None, max_length=100),
    paging: PageParams = Depends(get_page_params),
    context: AuthContext = Depends(require_approved),
    db: Session = Depends(get_db),
):
    service = PrayerService(db)
    prayers, total = service.list_prayers(
        context,
        offset=paging.offset,
        limit=paging.per_page,
        status=prayer_status,
        priority=priority,
        branch=branch,
        search=search,
    )
    return success_response(
        message="Prayer requests retrieved successfully",
        data=service.describe_many(context, prayers),
        pagination=build_pagination(paging.page, paging.per_page, total),
    )


@router.get("/mine", summary="List My Prayer Requests")
def my_prayers(
    paging: PageParams = Depends(get_page_params),
    context: AuthContext = Depends(require_approved),
    member: Member = Depends(require_approved_member),
    db: Session = Depends(get_db),
):
    service = PrayerService(db)
    prayers, total = service.list_for_member(member, offset=paging.offset, limit=paging.per_page)
    return success_response(
        message="Prayer requests retrieved successfully",
        data=service.describe_many(context, prayers),
        pagination=build_pagination(paging.page, paging.per_page, total),
    )


@router.get("/answered/recent", summary="Recently Answered Prayers")
def recent_answered(
    limit: int = Query(5, ge=1, le=20),
    context: AuthContext = Depends(require_approved),
    db: Session = Depends(get_db),
):
    service = PrayerService(db)
    return success_response(
        message="Answered prayers retrieved successfully",
        data=service.describe_many(context, service.recent_answered(limit)),
    )


@router.get("/{prayer_id}", summary="Get Prayer Request")
def get_prayer(
    prayer_id: int,
    context: AuthContext = Depends(require_approved),
    db: Session = Depends(get_db),
):
    service = PrayerService(db)
    prayer = service.get_visible(prayer_id)
    return success_response(
        message="Prayer request retrieved successfully", data=service.describe(context, prayer)
    )


@router.post("", status_code=status.HTTP_201_CREATED, summary="Submit Prayer Request")
def create_prayer(
    data: PrayerCreate,
    context: AuthContext = Depends(require_approved),
    member: Member = Depends(require_approved_member),
    db: Session = Depends(get_db),
):
    service = PrayerService(db)
    prayer = service.create_prayer(member, data)
    return created_response(
        message="Prayer request submitted successfully", data=service.describe(context, prayer)
    )


@router.post("/{prayer_id}/pray", summary="Toggle Prayer")
def toggle_pray(
    prayer_id: int,
    member: Member = Depends(require_approved_member),
    db: Session = Depends(get_db),
):
    """Pray for a request, or withdraw a previous prayer."""
    has_prayed, prayer_count = PrayerService(db).toggle_pray(member, prayer_id)
    message = "Prayer recorded" if has_prayed else "Prayer removed"
    return success_response(
        message=message, data={"has_prayed": has_prayed, "prayer_count": prayer_count}
    )


@router.put("/{prayer_id}", summary="Update Prayer Request")
def update_prayer(
    prayer_id: int,
    data: PrayerUpdate,
    context: AuthContext = Depends(require_approved),
    db: Session = Depends(get_db),
):
    service = PrayerService(db)
    prayer = service.update_prayer(context, prayer_id, data)
    return success_response(
        message="Prayer request updated successfully", data=service.describe(context, prayer)
    )


@router.patch("/{prayer_id}/answered", summary="Mark Prayer Answered")
def mark_answered(
    prayer_id: int,
    data: PrayerAnswered,
    context: AuthContext = Depends(require_approved),
    db: Session = Depends(get_db),
):
    service = PrayerService(db)
    prayer = service.mark_answered(context, prayer_id, data.answered_description)
    return success_response(
        message="Prayer marked as answered", data=service.describe(context, prayer)
    )


@router.delete("/{prayer_id}", summary="Delete Prayer Request")
def delete_prayer(
    prayer_id: int,
    context: AuthContext = Depends(require_approved),
    db: Session = Depends(get_db),
):
    PrayerService(db).delete_prayer(context, prayer_id)
    return success_response(message="Prayer request deleted successfully")
