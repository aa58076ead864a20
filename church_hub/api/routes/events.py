"""
API routes for branch-scoped events.

Members only ever see events for their own branch, events for both
branches and approved cross-branch events; anything else is reported as
not found.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from church_hub.core.dependencies import (
    PageParams,
    get_page_params,
    require_administrator,
    require_approved,
    require_approved_member,
    require_permission,
)
from church_hub.core.responses import build_pagination, created_response, success_response
from church_hub.db.models import Administrator, EventBranch, Member, Permission
from church_hub.db.session import get_db
from church_hub.schemas.event import EventCreate, EventUpdate
from church_hub.services.event_service import EventService
from church_hub.services.principal_resolver import AuthContext

router = APIRouter(prefix="/events", tags=["Events"])


@router.get(
    "",
    summary="List Events",
    description="""
List events visible to the caller.

**QUERY PARAMETERS:**
- upcoming (boolean): Only events that have not started yet
- search (string): Match title, description or location
- mine (boolean): Only events created by the caller
- branch (branch1, branch2, both): Administrators only
- page, limit: Pagination
    """,
)
def list_events(
    upcoming: bool = Query(False),
    search: str | None = Query(None, max_length=100),
    mine: bool = Query(False),
    branch: EventBranch | None = Query(None),
    paging: PageParams = Depends(get_page_params),
    context: AuthContext = Depends(require_approved),
    db: Session = Depends(get_db),
):
    service = EventService(db)
    events, total = service.list_events(
        context,
        offset=paging.offset,
        limit=paging.per_page,
        upcoming_only=upcoming,
        search=search,
        mine=mine,
        branch=branch,
    )
    return success_response(
        message="Events retrieved successfully",
        data=[service.describe(context, e) for e in events],
        pagination=build_pagination(paging.page, paging.per_page, total),
    )


@router.get("/upcoming", summary="Upcoming Events")
def upcoming_events(
    limit: int = Query(5, ge=1, le=20),
    context: AuthContext = Depends(require_approved),
    db: Session = Depends(get_db),
):
    service = EventService(db)
    events, _ = service.list_events(context, limit=limit, upcoming_only=True)
    return success_response(
        message="Upcoming events retrieved successfully",
        data=[service.describe(context, e) for e in events],
    )


@router.get("/{event_id}", summary="Get Event")
def get_event(
    event_id: int,
    context: AuthContext = Depends(require_approved),
    db: Session = Depends(get_db),
):
    service = EventService(db)
    event = service.get_visible(context, event_id)
    return success_response(
        message="Event retrieved successfully", data=service.describe(context, event)
    )


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create Event")
def create_event(
    data: EventCreate,
    context: AuthContext = Depends(require_approved),
    db: Session = Depends(get_db),
):
    """Members create events for their own branch; administrators choose the branch."""
    service = EventService(db)
    event = service.create_event(context, data)
    return created_response(
        message="Event created successfully", data=service.describe(context, event)
    )


@router.put("/{event_id}", summary="Update Event")
def update_event(
    event_id: int,
    data: EventUpdate,
    context: AuthContext = Depends(require_approved),
    db: Session = Depends(get_db),
):
    service = EventService(db)
    event = service.update_event(context, event_id, data)
    return success_response(
        message="Event updated successfully", data=service.describe(context, event)
    )


@router.delete("/{event_id}", summary="Delete Event")
def delete_event(
    event_id: int,
    context: AuthContext = Depends(require_approved),
    db: Session = Depends(get_db),
):
    EventService(db).delete_event(context, event_id)
    return success_response(message="Event deleted successfully")


@router.delete("/{event_id}/permanent", summary="Permanently Delete Event")
def purge_event(
    event_id: int,
    administrator: Administrator = Depends(require_administrator),
    db: Session = Depends(get_db),
):
    EventService(db).purge_event(administrator, event_id)
    return success_response(message="Event permanently deleted")


@router.post("/{event_id}/request-cross-branch", summary="Request Cross-Branch Visibility")
def request_cross_branch(
    event_id: int,
    context: AuthContext = Depends(require_approved),
    db: Session = Depends(get_db),
):
    service = EventService(db)
    event = service.request_cross_branch(context, event_id)
    return success_response(
        message="Cross-branch visibility requested", data=service.describe(context, event)
    )


@router.post("/{event_id}/approve-cross-branch", summary="Approve Cross-Branch Visibility")
def approve_cross_branch(
    event_id: int,
    context: AuthContext = Depends(require_approved),
    administrator: Administrator = Depends(require_permission(Permission.MANAGE_BOTH_BRANCHES)),
    db: Session = Depends(get_db),
):
    service = EventService(db)
    event = service.approve_cross_branch(administrator, event_id)
    return success_response(
        message="Cross-branch visibility approved", data=service.describe(context, event)
    )


@router.post("/{event_id}/register", summary="Register for Event")
def register_for_event(
    event_id: int,
    context: AuthContext = Depends(require_approved),
    member: Member = Depends(require_approved_member),
    db: Session = Depends(get_db),
):
    service = EventService(db)
    event = service.register_attendee(context, member, event_id)
    return success_response(
        message="Successfully registered for event", data=service.describe(context, event)
    )


@router.delete("/{event_id}/register", summary="Unregister from Event")
def unregister_from_event(
    event_id: int,
    context: AuthContext = Depends(require_approved),
    member: Member = Depends(require_approved_member),
    db: Session = Depends(get_db),
):
    """Succeeds whether or not the member was registered; `removed` says which."""
    removed = EventService(db).unregister_attendee(context, member, event_id)
    message = "Successfully unregistered from event" if removed else "You were not registered"
    return success_response(message=message, data={"removed": removed})
