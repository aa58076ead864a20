"""
Branch partition rules for event visibility.

``is_event_visible`` and ``event_visibility_clause`` express the same rule,
once for Python values and once as a SQL predicate, so list counts, detail
fetches and registration all see the same set of events.
"""

from sqlalchemy import and_, or_, true
from sqlalchemy.sql.elements import ColumnElement

from church_hub.db.models import Event, EventBranch, MemberBranch


def is_event_visible(
    member_branch: MemberBranch, event_branch: EventBranch, cross_branch_approved: bool
) -> bool:
    """Return True when a member of ``member_branch`` may see the event."""
    same_branch = event_branch.value == member_branch.value
    return (
        same_branch
        or event_branch == EventBranch.BOTH
        or (not same_branch and cross_branch_approved)
    )


def event_visibility_clause(member_branch: MemberBranch | None) -> ColumnElement[bool]:
    """
    Build the visibility predicate for an event query.

    Args:
        member_branch: The member's branch, or None for administrators

    Returns:
        A SQL expression; administrators get an unrestricted ``true()``
    """
    if member_branch is None:
        return true()

    if member_branch == MemberBranch.UNSET:
        return or_(Event.branch == EventBranch.BOTH, Event.cross_branch_approved.is_(True))

    own_branch = EventBranch(member_branch.value)
    return or_(
        Event.branch == own_branch,
        Event.branch == EventBranch.BOTH,
        and_(Event.branch != own_branch, Event.cross_branch_approved.is_(True)),
    )
