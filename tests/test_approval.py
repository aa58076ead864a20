"""
Tests for the member approval lifecycle and the approval gate.
"""

from church_hub.db.models import ApprovalStatus, Member, MemberBranch, Permission


def test_registration_to_approval_flow(client, identity_verifier, create_admin, admin_headers):
    admin = create_admin()
    token = identity_verifier.add("tok-a", "uid-a", "a@x.com", "A")
    headers = {"Authorization": f"Bearer {token}"}

    client.post("/api/v1/auth/login", headers=headers)
    status = client.get("/api/v1/auth/status", headers=headers).json()["data"]["principal"]
    assert status["approval_status"] == "pending"
    assert status["branch"] == "unset"

    resp = client.post("/api/v1/auth/select-branch", json={"branch": "branch1"}, headers=headers)
    assert resp.status_code == 200
    status = resp.json()["data"]["principal"]
    assert status["approval_status"] == "pending"
    assert status["branch"] == "branch1"

    resp = client.post(
        f"/api/v1/admin/users/{status['id']}/approve", headers=admin_headers(admin)
    )
    assert resp.status_code == 200
    approved = resp.json()["data"]
    assert approved["approval_status"] == "approved"
    assert approved["approved_by_id"] == admin.id

    resp = client.put("/api/v1/users/branch", json={"branch": "branch2"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["approval_status"] == "pending"
    assert resp.json()["data"]["branch"] == "branch2"


def test_approve_twice_conflicts(client, create_member, create_admin, admin_headers):
    admin = create_admin()
    member = create_member(status=ApprovalStatus.PENDING)

    first = client.post(f"/api/v1/admin/users/{member.id}/approve", headers=admin_headers(admin))
    second = client.post(f"/api/v1/admin/users/{member.id}/approve", headers=admin_headers(admin))

    assert first.status_code == 200
    assert second.status_code == 409
    assert second.json()["error_code"] == "AlreadyApproved"


def test_approve_unknown_member_is_not_found(client, create_admin, admin_headers):
    admin = create_admin()
    resp = client.post("/api/v1/admin/users/999/approve", headers=admin_headers(admin))
    assert resp.status_code == 404


def test_reject_records_reason(client, create_member, create_admin, admin_headers):
    admin = create_admin()
    member = create_member(status=ApprovalStatus.PENDING)

    resp = client.post(
        f"/api/v1/admin/users/{member.id}/reject",
        json={"reason": "Unknown to the congregation"},
        headers=admin_headers(admin),
    )

    assert resp.status_code == 200
    assert resp.json()["data"]["approval_status"] == "rejected"
    assert resp.json()["data"]["rejection_reason"] == "Unknown to the congregation"

    again = client.post(f"/api/v1/admin/users/{member.id}/reject", headers=admin_headers(admin))
    assert again.status_code == 409
    assert again.json()["error_code"] == "AlreadyRejected"


def test_reject_without_body_uses_default_reason(client, create_member, create_admin, admin_headers):
    admin = create_admin()
    member = create_member(status=ApprovalStatus.PENDING)

    resp = client.post(f"/api/v1/admin/users/{member.id}/reject", headers=admin_headers(admin))

    assert resp.json()["data"]["rejection_reason"] == "No reason provided"


def test_rejected_member_can_be_approved_on_review(client, create_member, create_admin, admin_headers):
    admin = create_admin()
    member = create_member(status=ApprovalStatus.REJECTED)

    resp = client.post(f"/api/v1/admin/users/{member.id}/approve", headers=admin_headers(admin))

    assert resp.status_code == 200
    assert resp.json()["data"]["approval_status"] == "approved"
    assert resp.json()["data"]["rejection_reason"] is None


def test_revoke_approved_member(client, create_member, create_admin, admin_headers, member_headers):
    admin = create_admin()
    member = create_member()

    resp = client.post(f"/api/v1/admin/users/{member.id}/revoke", headers=admin_headers(admin))
    assert resp.status_code == 200
    assert resp.json()["data"]["approval_status"] == "rejected"
    assert resp.json()["data"]["rejection_reason"] == "Access revoked by administrator"

    blocked = client.get("/api/v1/events", headers=member_headers(member))
    assert blocked.status_code == 403


def test_bulk_approve_counts_only_pending(client, create_member, create_admin, admin_headers, db):
    admin = create_admin()
    pending_a = create_member(email="a@test.com", status=ApprovalStatus.PENDING)
    pending_b = create_member(email="b@test.com", status=ApprovalStatus.PENDING)
    approved = create_member(email="c@test.com")

    resp = client.post(
        "/api/v1/admin/users/bulk-approve",
        json={"member_ids": [pending_a.id, pending_b.id, approved.id]},
        headers=admin_headers(admin),
    )

    assert resp.status_code == 200
    assert resp.json()["data"]["approved_count"] == 2
    db.expire_all()
    statuses = {m.approval_status for m in db.query(Member).all()}
    assert statuses == {ApprovalStatus.APPROVED}


def test_pending_member_gets_account_not_approved(client, create_member, member_headers):
    member = create_member(status=ApprovalStatus.PENDING, branch=MemberBranch.BRANCH2)

    resp = client.get("/api/v1/sermons", headers=member_headers(member))

    assert resp.status_code == 403
    body = resp.json()
    assert body["error_code"] == "AccountNotApproved"
    assert body["data"]["approval_status"] == "pending"
    assert body["data"]["branch"] == "branch2"


def test_rejected_member_sees_rejection_reason(client, create_member, member_headers, db):
    member = create_member(status=ApprovalStatus.REJECTED)
    member.rejection_reason = "Duplicate account"
    db.commit()

    resp = client.get("/api/v1/prayers", headers=member_headers(member))

    assert resp.status_code == 403
    assert resp.json()["data"]["rejection_reason"] == "Duplicate account"


def test_member_cannot_call_admin_routes(client, create_member, member_headers):
    member = create_member()
    other = create_member(email="other@test.com", status=ApprovalStatus.PENDING)

    resp = client.post(f"/api/v1/admin/users/{other.id}/approve", headers=member_headers(member))

    assert resp.status_code == 403
    assert resp.json()["error_code"] == "Forbidden"


def test_admin_without_manage_users_is_forbidden(client, create_member, create_admin, admin_headers):
    admin = create_admin(permissions=[Permission.MANAGE_CONTENT.value])
    member = create_member(status=ApprovalStatus.PENDING)

    resp = client.post(f"/api/v1/admin/users/{member.id}/approve", headers=admin_headers(admin))

    assert resp.status_code == 403


def test_list_pending_members(client, create_member, create_admin, admin_headers):
    admin = create_admin()
    create_member(email="a@test.com", status=ApprovalStatus.PENDING)
    create_member(email="b@test.com", status=ApprovalStatus.PENDING, branch=MemberBranch.BRANCH2)
    create_member(email="c@test.com")

    resp = client.get("/api/v1/admin/users/pending", headers=admin_headers(admin))

    assert resp.status_code == 200
    assert resp.json()["pagination"]["total_count"] == 2
    assert {m["email"] for m in resp.json()["data"]} == {"a@test.com", "b@test.com"}


def test_list_members_filters_by_branch(client, create_member, create_admin, admin_headers):
    admin = create_admin()
    create_member(email="a@test.com", branch=MemberBranch.BRANCH1)
    create_member(email="b@test.com", branch=MemberBranch.BRANCH2)

    resp = client.get(
        "/api/v1/admin/users", params={"branch": "branch2"}, headers=admin_headers(admin)
    )

    assert resp.status_code == 200
    assert [m["email"] for m in resp.json()["data"]] == ["b@test.com"]
