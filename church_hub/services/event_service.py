"""
Business logic service for branch-scoped events.

Every read, write and registration goes through ``_visible_query`` so a
member can neither see, count nor act on an event hidden from their branch;
hidden events are reported as not found.
"""

import logging

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from church_hub.core.branch_filter import event_visibility_clause
from church_hub.core.exceptions import (
    AlreadyRegisteredError,
    ConflictError,
    EventFullError,
    ForbiddenError,
    InvalidBranchError,
    NotFoundError,
    ValidationFailedError,
)
from church_hub.db.models import (
    Administrator,
    CreatorKind,
    Event,
    EventAttendee,
    EventBranch,
    Member,
    MemberBranch,
)
from church_hub.schemas.event import EventCreate, EventOut, EventUpdate
from church_hub.services.principal_resolver import AuthContext
from church_hub.utils.datetime_helpers import utc_now

logger = logging.getLogger(__name__)

EVENT_NOT_FOUND = "Event not found"


class EventService:
    """Service for event business logic."""

    def __init__(self, db: Session):
        self.db = db

    def _visible_query(self, context: AuthContext) -> Query:
        return self.db.query(Event).filter(
            Event.is_active.is_(True),
            event_visibility_clause(context.branch_scope),
        )

    def get_visible(self, context: AuthContext, event_id: int) -> Event:
        """
        Get an active event the caller may see.

        Raises:
            NotFoundError: If the event does not exist or is hidden from the caller
        """
        event = self._visible_query(context).filter(Event.id == event_id).first()
        if not event:
            raise NotFoundError(EVENT_NOT_FOUND)
        return event

    def _get_editable(self, context: AuthContext, event_id: int) -> Event:
        event = self.get_visible(context, event_id)
        if not self.can_edit(context, event):
            raise ForbiddenError("Only the event creator or an administrator can modify this event")
        return event

    @staticmethod
    def can_edit(context: AuthContext, event: Event) -> bool:
        return context.is_administrator or context.owns(event.creator_kind.value, event.created_by_id)

    def list_events(
        self,
        context: AuthContext,
        offset: int = 0,
        limit: int = 10,
        upcoming_only: bool = False,
        search: str | None = None,
        mine: bool = False,
        branch: EventBranch | None = None,
    ) -> tuple[list[Event], int]:
        """
        List events visible to the caller.

        Args:
            context: Caller
            offset: Rows to skip
            limit: Maximum rows to return
            upcoming_only: Only events that have not started yet
            search: Case-insensitive match on title, description or location
            mine: Only events created by the caller
            branch: Branch filter, honoured for administrators only

        Returns:
            (events, total matching count)
        """
        query = self._visible_query(context)

        if upcoming_only:
            query = query.filter(Event.starts_at >= utc_now())
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    Event.title.ilike(pattern),
                    Event.description.ilike(pattern),
                    Event.location.ilike(pattern),
                )
            )
        if mine:
            query = query.filter(
                Event.creator_kind == CreatorKind(context.kind.value),
                Event.created_by_id == context.principal.id,
            )
        if branch is not None and context.is_administrator:
            query = query.filter(Event.branch == branch)

        total = query.count()
        order = Event.starts_at.asc() if upcoming_only else Event.starts_at.desc()
        events = query.order_by(order, Event.id.asc()).offset(offset).limit(limit).all()
        return events, total

    def create_event(self, context: AuthContext, data: EventCreate) -> Event:
        """
        Create an event.

        Members always create events for their own branch; administrators pick
        the branch (default both).

        Raises:
            InvalidBranchError: If a member has not selected a branch
        """
        if context.is_administrator:
            branch = data.branch or EventBranch.BOTH
        else:
            if context.principal.branch == MemberBranch.UNSET:
                raise InvalidBranchError("Select a branch before creating events")
            branch = EventBranch(context.principal.branch.value)

        event = Event(
            title=data.title.strip(),
            description=data.description,
            starts_at=data.starts_at,
            ends_at=data.ends_at,
            location=data.location.strip(),
            branch=branch,
            created_by_id=context.principal.id,
            creator_kind=CreatorKind(context.kind.value),
            cross_branch_requested=data.request_cross_branch and branch != EventBranch.BOTH,
            max_attendees=data.max_attendees,
            is_active=True,
        )
        self.db.add(event)
        self.db.commit()
        self.db.refresh(event)

        logger.info(
            f"Event {event.id} created by {context.kind.value} {context.principal.id} "
            f"for branch {branch.value}"
        )
        return event

    def update_event(self, context: AuthContext, event_id: int, data: EventUpdate) -> Event:
        """
        Update an event.

        Raises:
            NotFoundError: If the event is not visible to the caller
            ForbiddenError: If the caller is neither creator nor administrator,
                or a member tries to change the branch
            ValidationFailedError: If the resulting end is not after the start
        """
        event = self._get_editable(context, event_id)
        update_data = data.model_dump(exclude_unset=True)

        if "branch" in update_data and not context.is_administrator:
            raise ForbiddenError("Members cannot change an event's branch")

        starts_at = update_data.get("starts_at") or event.starts_at
        ends_at = update_data.get("ends_at", event.ends_at)
        if ends_at is not None and ends_at <= starts_at:
            raise ValidationFailedError(
                "Event end must be after its start",
                errors=[{"field": "ends_at", "message": "Event end must be after its start"}],
            )

        max_attendees = update_data.get("max_attendees")
        if max_attendees is not None and max_attendees < len(event.attendees):
            raise ValidationFailedError(
                "Capacity cannot be lower than the current number of attendees",
                errors=[{"field": "max_attendees", "message": "Below current attendee count"}],
            )

        for key, value in update_data.items():
            if value is not None or key in ("ends_at", "max_attendees"):
                setattr(event, key, value)

        self.db.commit()
        self.db.refresh(event)
        logger.info(f"Event {event.id} updated by {context.kind.value} {context.principal.id}")
        return event

    def delete_event(self, context: AuthContext, event_id: int) -> None:
        """Soft delete an event."""
        event = self._get_editable(context, event_id)
        event.is_active = False
        self.db.commit()
        logger.info(f"Event {event_id} deactivated by {context.kind.value} {context.principal.id}")

    def purge_event(self, administrator: Administrator, event_id: int) -> None:
        """Permanently delete an event and its registrations."""
        event = self.db.get(Event, event_id)
        if not event:
            raise NotFoundError(EVENT_NOT_FOUND)
        self.db.delete(event)
        self.db.commit()
        logger.info(f"Event {event_id} permanently deleted by administrator {administrator.id}")

    def request_cross_branch(self, context: AuthContext, event_id: int) -> Event:
        """
        Ask for an event to be shown to the other branch.

        Raises:
            ValidationFailedError: If the event is already for both branches
            ConflictError: If visibility was already requested
        """
        event = self._get_editable(context, event_id)
        if event.branch == EventBranch.BOTH:
            raise ValidationFailedError("Event is already visible to both branches")
        if event.cross_branch_requested:
            raise ConflictError("Cross-branch visibility has already been requested")

        event.cross_branch_requested = True
        self.db.commit()
        logger.info(f"Cross-branch visibility requested for event {event_id}")
        return event

    def approve_cross_branch(self, administrator: Administrator, event_id: int) -> Event:
        """
        Approve a pending cross-branch request.

        Raises:
            NotFoundError: If the event does not exist
            ValidationFailedError: If no request is pending
            ConflictError: If the request was already approved
        """
        event = (
            self.db.query(Event).filter(Event.id == event_id, Event.is_active.is_(True)).first()
        )
        if not event:
            raise NotFoundError(EVENT_NOT_FOUND)
        if not event.cross_branch_requested:
            raise ValidationFailedError("Cross-branch visibility has not been requested")
        if event.cross_branch_approved:
            raise ConflictError("Cross-branch visibility is already approved")

        event.cross_branch_approved = True
        event.approved_by_admin_id = administrator.id
        self.db.commit()
        logger.info(f"Cross-branch visibility for event {event_id} approved by {administrator.id}")
        return event

    def register_attendee(self, context: AuthContext, member: Member, event_id: int) -> Event:
        """
        Register a member for an event.

        The event row is locked while capacity is checked and the unique
        (event, member) constraint rejects a racing duplicate.

        Raises:
            NotFoundError: If the event is not visible to the member
            ValidationFailedError: If the event has already started
            EventFullError: If the event is at capacity
            AlreadyRegisteredError: If the member is already registered
        """
        event = (
            self._visible_query(context)
            .filter(Event.id == event_id)
            .with_for_update()
            .first()
        )
        if not event:
            raise NotFoundError(EVENT_NOT_FOUND)
        if event.starts_at <= utc_now():
            raise ValidationFailedError("Cannot register for an event that has already started")

        attendee_count = self._attendee_count(event_id)
        if event.max_attendees is not None and attendee_count >= event.max_attendees:
            raise EventFullError()

        already = (
            self.db.query(EventAttendee.id)
            .filter(EventAttendee.event_id == event_id, EventAttendee.member_id == member.id)
            .first()
        )
        if already:
            raise AlreadyRegisteredError()

        try:
            self.db.add(EventAttendee(event_id=event_id, member_id=member.id, registered_at=utc_now()))
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise AlreadyRegisteredError() from None

        self.db.refresh(event)
        logger.info(f"Member {member.id} registered for event {event_id}")
        return event

    def unregister_attendee(self, context: AuthContext, member: Member, event_id: int) -> bool:
        """
        Remove a member's registration.

        Returns:
            True if a registration was removed, False if there was none
        """
        self.get_visible(context, event_id)
        removed = (
            self.db.query(EventAttendee)
            .filter(EventAttendee.event_id == event_id, EventAttendee.member_id == member.id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        if removed:
            logger.info(f"Member {member.id} unregistered from event {event_id}")
        return bool(removed)

    def _attendee_count(self, event_id: int) -> int:
        return (
            self.db.query(func.count(EventAttendee.id))
            .filter(EventAttendee.event_id == event_id)
            .scalar()
        )

    def describe(self, context: AuthContext, event: Event) -> dict:
        """Serialize an event with counts and caller-specific flags."""
        self.db.expire(event, ["attendees"])
        attendee_ids = {a.member_id for a in event.attendees}
        count = len(attendee_ids)

        data = EventOut.model_validate(event).model_dump(mode="json")
        data.update(
            {
                "attendee_count": count,
                "available_spots": (
                    max(event.max_attendees - count, 0) if event.max_attendees else None
                ),
                "timing": "upcoming" if event.starts_at > utc_now() else "past",
                "can_edit": self.can_edit(context, event),
                "is_registered": context.member is not None and context.principal.id in attendee_ids,
            }
        )
        return data
