"""
Tests for bulk member operations and retention cleanup.
"""

from datetime import timedelta

import pytest

from church_hub.db.models import (
    AdminLevel,
    ApprovalStatus,
    CreatorKind,
    Event,
    EventAttendee,
    EventBranch,
    Member,
    MemberBranch,
    PrayerRequest,
    PrayerSupporter,
    Sermon,
)
from church_hub.utils.datetime_helpers import utc_now


def _bulk(client, headers, operation, member_ids, **extra):
    return client.post(
        "/api/v1/admin/users/bulk-operations",
        json={"operation": operation, "member_ids": member_ids, **extra},
        headers=headers,
    )


def test_bulk_reject_only_touches_pending(client, create_member, create_admin, admin_headers, db):
    admin = create_admin()
    pending = create_member(email="p@test.com", status=ApprovalStatus.PENDING)
    approved = create_member(email="a@test.com")

    resp = _bulk(
        client, admin_headers(admin), "reject", [pending.id, approved.id], reason="Unknown visitor"
    )

    assert resp.status_code == 200
    assert resp.json()["data"] == {"operation": "reject", "affected": 1, "total": 2}
    db.expire_all()
    rejected = db.get(Member, pending.id)
    assert rejected.approval_status == ApprovalStatus.REJECTED
    assert rejected.rejection_reason == "Unknown visitor"
    assert rejected.approved_by_id == admin.id
    assert db.get(Member, approved.id).approval_status == ApprovalStatus.APPROVED


def test_bulk_deactivate_then_activate(client, create_member, create_admin, admin_headers, db):
    admin = create_admin()
    first = create_member(email="one@test.com")
    second = create_member(email="two@test.com")
    headers = admin_headers(admin)

    resp = _bulk(client, headers, "deactivate", [first.id, second.id])
    assert resp.json()["data"]["affected"] == 2
    status = client.get(
        "/api/v1/auth/status", headers={"Authorization": "Bearer token-one@test.com"}
    )
    assert status.status_code == 401

    again = _bulk(client, headers, "deactivate", [first.id])
    assert again.json()["data"]["affected"] == 0

    resp = _bulk(client, headers, "activate", [first.id])
    assert resp.json()["data"] == {"operation": "activate", "affected": 1, "total": 1}
    db.expire_all()
    assert db.get(Member, first.id).is_active is True
    assert db.get(Member, second.id).is_active is False


def test_bulk_approve_operation(client, create_member, create_admin, admin_headers, db):
    admin = create_admin()
    pending = create_member(email="p@test.com", status=ApprovalStatus.PENDING)

    resp = _bulk(client, admin_headers(admin), "approve", [pending.id, pending.id])

    assert resp.json()["data"] == {"operation": "approve", "affected": 1, "total": 1}
    db.expire_all()
    assert db.get(Member, pending.id).approval_status == ApprovalStatus.APPROVED


@pytest.mark.parametrize(
    "payload",
    [
        {"operation": "archive", "member_ids": [1]},
        {"operation": "approve", "member_ids": []},
        {"operation": "approve", "member_ids": list(range(1, 102))},
    ],
)
def test_bulk_operation_rejects_invalid_requests(client, create_admin, admin_headers, payload):
    admin = create_admin()
    resp = client.post(
        "/api/v1/admin/users/bulk-operations", json=payload, headers=admin_headers(admin)
    )
    assert resp.status_code == 400
    assert resp.json()["error_code"] == "ValidationFailed"


def test_bulk_operation_requires_manage_users(client, create_admin, admin_headers):
    admin = create_admin(permissions=[])
    resp = _bulk(client, admin_headers(admin), "activate", [1])
    assert resp.status_code == 403


@pytest.fixture
def stale_data(db, create_member, create_admin):
    """One expired and one recent row for every cleanup category."""
    admin = create_admin(level=AdminLevel.SUPER)
    long_ago = utc_now() - timedelta(days=45)
    recently = utc_now() - timedelta(days=2)

    old_member = create_member(email="old@test.com", status=ApprovalStatus.REJECTED)
    recent_member = create_member(email="recent@test.com", status=ApprovalStatus.REJECTED)
    old_member.approved_at = long_ago
    recent_member.approved_at = recently
    supporter = create_member(email="supporter@test.com")

    def sermon(title):
        row = Sermon(
            title=title,
            description="Message",
            category="Faith",
            video_url=f"/media/{title}.mp4",
            uploaded_by_id=admin.id,
            is_active=False,
        )
        db.add(row)
        return row

    def event(title):
        row = Event(
            title=title,
            description="Gathering",
            starts_at=utc_now(),
            location="Hall",
            branch=EventBranch.BOTH,
            created_by_id=admin.id,
            creator_kind=CreatorKind.ADMINISTRATOR,
            is_active=False,
        )
        db.add(row)
        return row

    def prayer(title, visible=False, submitted_by=None):
        row = PrayerRequest(
            title=title,
            description="Please pray",
            submitted_by_id=submitted_by.id if submitted_by else None,
            submitter_branch=MemberBranch.BRANCH1,
            submitter_display_name="Member",
            is_visible=visible,
        )
        db.add(row)
        return row

    rows = {
        "old_sermon": sermon("old"),
        "recent_sermon": sermon("recent"),
        "old_event": event("old"),
        "recent_event": event("recent"),
        "old_prayer": prayer("old"),
        "recent_prayer": prayer("recent"),
        "open_prayer": prayer("open", visible=True, submitted_by=old_member),
    }
    db.flush()

    db.add(EventAttendee(event_id=rows["old_event"].id, member_id=supporter.id))
    db.add(PrayerSupporter(prayer_id=rows["old_prayer"].id, member_id=supporter.id))
    db.add(PrayerSupporter(prayer_id=rows["open_prayer"].id, member_id=old_member.id))
    db.add(PrayerSupporter(prayer_id=rows["open_prayer"].id, member_id=supporter.id))
    rows["open_prayer"].prayer_count = 2
    db.commit()

    for model, key in ((Sermon, "old_sermon"), (Event, "old_event"), (PrayerRequest, "old_prayer")):
        db.query(model).filter(model.id == rows[key].id).update(
            {model.updated_at: long_ago}, synchronize_session=False
        )
    for model, key in (
        (Sermon, "recent_sermon"),
        (Event, "recent_event"),
        (PrayerRequest, "recent_prayer"),
    ):
        db.query(model).filter(model.id == rows[key].id).update(
            {model.updated_at: recently}, synchronize_session=False
        )
    db.commit()

    return {"admin": admin, "old_member": old_member, "supporter": supporter, **rows}


def test_cleanup_dry_run_counts_without_deleting(client, admin_headers, stale_data, db):
    resp = client.post("/api/v1/admin/system/cleanup", headers=admin_headers(stale_data["admin"]))

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["dry_run"] is True
    assert data["rejected_members"] == 1
    assert data["inactive_sermons"] == 1
    assert data["inactive_events"] == 1
    assert data["hidden_prayers"] == 1
    assert data["total"] == 4
    assert db.query(Sermon).count() == 2
    assert db.query(Member).count() == 3


def test_cleanup_deletes_expired_rows(client, admin_headers, stale_data, db):
    resp = client.post(
        "/api/v1/admin/system/cleanup",
        params={"dry_run": "false"},
        headers=admin_headers(stale_data["admin"]),
    )

    assert resp.status_code == 200
    assert resp.json()["data"]["total"] == 4
    db.expire_all()
    assert {m.email for m in db.query(Member).all()} == {"recent@test.com", "supporter@test.com"}
    assert [s.title for s in db.query(Sermon).all()] == ["recent"]
    assert [e.title for e in db.query(Event).all()] == ["recent"]
    assert {p.title for p in db.query(PrayerRequest).all()} == {"recent", "open"}
    assert db.query(EventAttendee).count() == 0

    open_prayer = db.get(PrayerRequest, stale_data["open_prayer"].id)
    assert open_prayer.submitted_by_id is None
    assert open_prayer.prayer_count == 1
    assert [s.member_id for s in db.query(PrayerSupporter).all()] == [stale_data["supporter"].id]


def test_cleanup_requires_create_admins(client, create_admin, admin_headers):
    admin = create_admin()
    resp = client.post("/api/v1/admin/system/cleanup", headers=admin_headers(admin))
    assert resp.status_code == 403
