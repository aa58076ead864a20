"""
Tests for event management, registration and cross-branch requests.
"""

from datetime import timedelta

import pytest

from church_hub.db.models import (
    CreatorKind,
    Event,
    EventAttendee,
    EventBranch,
    MemberBranch,
    Permission,
)
from church_hub.utils.datetime_helpers import utc_now


def _event_payload(**overrides) -> dict:
    payload = {
        "title": "Community Picnic",
        "description": "Food and fellowship in the park",
        "starts_at": (utc_now() + timedelta(days=7)).isoformat(),
        "location": "Riverside Park",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def create_event(db):
    def _create(
        branch: EventBranch = EventBranch.BRANCH1,
        max_attendees: int | None = None,
        starts_in: timedelta = timedelta(days=7),
        created_by_id: int = 1,
        creator_kind: CreatorKind = CreatorKind.ADMINISTRATOR,
    ) -> Event:
        event = Event(
            title="Prayer Meeting",
            description="Weekly prayer meeting",
            starts_at=utc_now() + starts_in,
            location="Chapel",
            branch=branch,
            created_by_id=created_by_id,
            creator_kind=creator_kind,
            cross_branch_requested=False,
            cross_branch_approved=False,
            max_attendees=max_attendees,
            is_active=True,
        )
        db.add(event)
        db.commit()
        db.refresh(event)
        return event

    return _create


def test_event_full(client, create_member, member_headers, create_event):
    event = create_event(max_attendees=1)
    member_a = create_member(email="a@test.com")
    member_b = create_member(email="b@test.com")

    first = client.post(f"/api/v1/events/{event.id}/register", headers=member_headers(member_a))
    assert first.status_code == 200
    assert first.json()["data"]["attendee_count"] == 1
    assert first.json()["data"]["available_spots"] == 0
    assert first.json()["data"]["is_registered"] is True

    second = client.post(f"/api/v1/events/{event.id}/register", headers=member_headers(member_b))
    assert second.status_code == 409
    assert second.json()["error_code"] == "EventFull"


def test_double_registration_conflicts(client, create_member, member_headers, create_event, db):
    event = create_event()
    member = create_member()

    client.post(f"/api/v1/events/{event.id}/register", headers=member_headers(member))
    again = client.post(f"/api/v1/events/{event.id}/register", headers=member_headers(member))

    assert again.status_code == 409
    assert again.json()["error_code"] == "AlreadyRegistered"
    assert db.query(EventAttendee).count() == 1


def test_cannot_register_for_started_event(client, create_member, member_headers, create_event):
    event = create_event(starts_in=timedelta(hours=-1))
    member = create_member()

    resp = client.post(f"/api/v1/events/{event.id}/register", headers=member_headers(member))

    assert resp.status_code == 400


def test_unregister_is_idempotent(client, create_member, member_headers, create_event):
    event = create_event()
    member = create_member()
    client.post(f"/api/v1/events/{event.id}/register", headers=member_headers(member))

    first = client.delete(f"/api/v1/events/{event.id}/register", headers=member_headers(member))
    second = client.delete(f"/api/v1/events/{event.id}/register", headers=member_headers(member))

    assert first.status_code == 200
    assert first.json()["data"]["removed"] is True
    assert second.status_code == 200
    assert second.json()["data"]["removed"] is False


def test_member_event_is_forced_to_own_branch(client, create_member, member_headers):
    member = create_member(branch=MemberBranch.BRANCH2)

    resp = client.post(
        "/api/v1/events", json=_event_payload(branch="branch1"), headers=member_headers(member)
    )

    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["branch"] == "branch2"
    assert data["creator_kind"] == "member"
    assert data["can_edit"] is True


def test_administrator_event_defaults_to_both(client, create_admin, admin_headers):
    admin = create_admin()

    resp = client.post("/api/v1/events", json=_event_payload(), headers=admin_headers(admin))

    assert resp.status_code == 201
    assert resp.json()["data"]["branch"] == "both"


def test_event_must_start_in_future(client, create_member, member_headers):
    member = create_member()
    past = (utc_now() - timedelta(days=1)).isoformat()

    resp = client.post(
        "/api/v1/events", json=_event_payload(starts_at=past), headers=member_headers(member)
    )

    assert resp.status_code == 400
    assert resp.json()["error_code"] == "ValidationFailed"


def test_only_creator_or_admin_can_edit(client, create_member, member_headers):
    owner = create_member(email="owner@test.com")
    other = create_member(email="other@test.com")
    event_id = client.post(
        "/api/v1/events", json=_event_payload(), headers=member_headers(owner)
    ).json()["data"]["id"]

    resp = client.put(
        f"/api/v1/events/{event_id}", json={"title": "Renamed"}, headers=member_headers(other)
    )
    assert resp.status_code == 403

    resp = client.put(
        f"/api/v1/events/{event_id}", json={"title": "Renamed Picnic"}, headers=member_headers(owner)
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["title"] == "Renamed Picnic"


def test_member_cannot_change_event_branch(client, create_member, member_headers):
    owner = create_member()
    event_id = client.post(
        "/api/v1/events", json=_event_payload(), headers=member_headers(owner)
    ).json()["data"]["id"]

    resp = client.put(
        f"/api/v1/events/{event_id}", json={"branch": "both"}, headers=member_headers(owner)
    )

    assert resp.status_code == 403


def test_soft_deleted_event_disappears(client, create_member, member_headers):
    owner = create_member()
    event_id = client.post(
        "/api/v1/events", json=_event_payload(), headers=member_headers(owner)
    ).json()["data"]["id"]

    assert client.delete(f"/api/v1/events/{event_id}", headers=member_headers(owner)).status_code == 200
    assert client.get(f"/api/v1/events/{event_id}", headers=member_headers(owner)).status_code == 404


def test_cross_branch_request_and_approval(
    client, create_member, member_headers, create_admin, admin_headers
):
    owner = create_member(email="owner@test.com", branch=MemberBranch.BRANCH1)
    viewer = create_member(email="viewer@test.com", branch=MemberBranch.BRANCH2)
    admin = create_admin()

    event_id = client.post(
        "/api/v1/events", json=_event_payload(), headers=member_headers(owner)
    ).json()["data"]["id"]
    assert client.get(f"/api/v1/events/{event_id}", headers=member_headers(viewer)).status_code == 404

    resp = client.post(
        f"/api/v1/events/{event_id}/request-cross-branch", headers=member_headers(owner)
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["cross_branch_requested"] is True

    again = client.post(
        f"/api/v1/events/{event_id}/request-cross-branch", headers=member_headers(owner)
    )
    assert again.status_code == 409

    resp = client.post(
        f"/api/v1/events/{event_id}/approve-cross-branch", headers=admin_headers(admin)
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["cross_branch_approved"] is True

    visible = client.get(f"/api/v1/events/{event_id}", headers=member_headers(viewer))
    assert visible.status_code == 200


def test_approve_cross_branch_requires_permission(
    client, create_event, create_admin, admin_headers
):
    event = create_event()
    admin = create_admin(permissions=[Permission.MANAGE_CONTENT.value])

    resp = client.post(
        f"/api/v1/events/{event.id}/approve-cross-branch", headers=admin_headers(admin)
    )

    assert resp.status_code == 403


def test_approve_without_request_is_rejected(client, create_event, create_admin, admin_headers):
    event = create_event()
    admin = create_admin()

    resp = client.post(
        f"/api/v1/events/{event.id}/approve-cross-branch", headers=admin_headers(admin)
    )

    assert resp.status_code == 400


def test_upcoming_events_only_lists_future(client, create_member, member_headers, create_event):
    member = create_member()
    future = create_event(starts_in=timedelta(days=2))
    create_event(starts_in=timedelta(days=-2))

    resp = client.get("/api/v1/events/upcoming", headers=member_headers(member))

    assert [e["id"] for e in resp.json()["data"]] == [future.id]


def test_purge_removes_registrations(
    client, create_member, member_headers, create_event, create_admin, admin_headers, db
):
    event = create_event()
    member = create_member()
    admin = create_admin()
    client.post(f"/api/v1/events/{event.id}/register", headers=member_headers(member))

    resp = client.delete(f"/api/v1/events/{event.id}/permanent", headers=admin_headers(admin))

    assert resp.status_code == 200
    assert db.query(EventAttendee).count() == 0
    assert db.query(Event).count() == 0
