"""
Member self-service routes.

Profile routes work at any approval status; activity routes require an
approved member.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from church_hub.core.dependencies import (
    PageParams,
    get_page_params,
    require_approved,
    require_approved_member,
    require_member,
)
from church_hub.core.responses import build_pagination, success_response
from church_hub.db.models import Member
from church_hub.db.session import get_db
from church_hub.schemas.blog import BlogSummaryOut
from church_hub.schemas.member import BranchSelection, MemberOut, MemberProfileUpdate
from church_hub.services.approval_service import ApprovalService
from church_hub.services.blog_service import BlogService
from church_hub.services.event_service import EventService
from church_hub.services.member_service import MemberService
from church_hub.services.prayer_service import PrayerService
from church_hub.services.principal_resolver import AuthContext

router = APIRouter(prefix="/users", tags=["Members"])


def _member_data(member: Member) -> dict:
    return MemberOut.model_validate(member).model_dump(mode="json")


@router.get("/profile", summary="Get My Profile")
def get_profile(member: Member = Depends(require_member)):
    return success_response(message="Profile retrieved successfully", data=_member_data(member))


@router.put("/profile", summary="Update My Profile")
def update_profile(
    data: MemberProfileUpdate,
    member: Member = Depends(require_member),
    db: Session = Depends(get_db),
):
    """Update name, bio and avatar. Branch changes go through `PUT /users/branch`."""
    member = MemberService(db).update_profile(member, data)
    return success_response(message="Profile updated successfully", data=_member_data(member))


@router.put("/branch", summary="Change My Branch")
def change_branch(
    selection: BranchSelection,
    member: Member = Depends(require_member),
    db: Session = Depends(get_db),
):
    member = ApprovalService(db).change_branch(member, selection.branch)
    return success_response(
        message="Branch updated. Your account is pending approval.", data=_member_data(member)
    )


@router.patch("/deactivate", summary="Deactivate My Account")
def deactivate(member: Member = Depends(require_member), db: Session = Depends(get_db)):
    MemberService(db).deactivate(member)
    return success_response(message="Account deactivated successfully")


@router.get("/events", summary="List My Events")
def my_events(
    paging: PageParams = Depends(get_page_params),
    context: AuthContext = Depends(require_approved),
    member: Member = Depends(require_approved_member),
    db: Session = Depends(get_db),
):
    """Events created by the current member."""
    service = EventService(db)
    events, total = service.list_events(
        context, offset=paging.offset, limit=paging.per_page, mine=True
    )
    return success_response(
        message="Events retrieved successfully",
        data=[service.describe(context, e) for e in events],
        pagination=build_pagination(paging.page, paging.per_page, total),
    )


@router.get("/prayers", summary="List My Prayer Requests")
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


@router.get("/dashboard", summary="Member Dashboard")
def dashboard(
    context: AuthContext = Depends(require_approved),
    member: Member = Depends(require_approved_member),
    db: Session = Depends(get_db),
):
    """Activity counts, recent own events and prayers, and the latest published blogs."""
    member_service = MemberService(db)
    event_service = EventService(db)
    prayer_service = PrayerService(db)
    activity = member_service.recent_activity(member.id)

    return success_response(
        message="Dashboard retrieved successfully",
        data={
            "profile": _member_data(member),
            "counts": member_service.activity_counts(member.id),
            "recent_events": [event_service.describe(context, e) for e in activity["events"]],
            "recent_prayers": prayer_service.describe_many(context, activity["prayers"]),
            "latest_blogs": [
                BlogSummaryOut.model_validate(b).model_dump(mode="json")
                for b in BlogService(db).latest_published()
            ],
        },
    )
