"""
Tests for the prayer board.
"""

from church_hub.db.models import MemberBranch, PrayerRequest, PrayerStatus, PrayerSupporter


def _prayer_payload(**overrides) -> dict:
    payload = {
        "title": "Healing for my mother",
        "description": "Please pray for her recovery after surgery.",
    }
    payload.update(overrides)
    return payload


def _submit(client, headers, **overrides) -> dict:
    resp = client.post("/api/v1/prayers", json=_prayer_payload(**overrides), headers=headers)
    assert resp.status_code == 201
    return resp.json()["data"]


def test_toggle_pray_twice_restores_count(client, create_member, member_headers):
    author = create_member(email="author@test.com")
    supporter = create_member(email="supporter@test.com", branch=MemberBranch.BRANCH2)
    prayer = _submit(client, member_headers(author))
    assert prayer["prayer_count"] == 0

    first = client.post(f"/api/v1/prayers/{prayer['id']}/pray", headers=member_headers(supporter))
    assert first.status_code == 200
    assert first.json()["data"] == {"has_prayed": True, "prayer_count": 1}

    second = client.post(f"/api/v1/prayers/{prayer['id']}/pray", headers=member_headers(supporter))
    assert second.json()["data"] == {"has_prayed": False, "prayer_count": 0}


def test_prayer_count_tracks_supporters(client, create_member, member_headers, db):
    author = create_member(email="author@test.com")
    prayer = _submit(client, member_headers(author))
    for i in range(3):
        supporter = create_member(email=f"s{i}@test.com")
        client.post(f"/api/v1/prayers/{prayer['id']}/pray", headers=member_headers(supporter))

    stored = db.get(PrayerRequest, prayer["id"])
    assert stored.prayer_count == 3
    assert db.query(PrayerSupporter).count() == 3


def test_has_prayed_flag_in_listing(client, create_member, member_headers):
    member = create_member()
    prayer = _submit(client, member_headers(member))
    client.post(f"/api/v1/prayers/{prayer['id']}/pray", headers=member_headers(member))

    listed = client.get("/api/v1/prayers", headers=member_headers(member)).json()["data"]

    assert listed[0]["has_prayed"] is True
    assert listed[0]["can_edit"] is True


def test_cannot_pray_for_answered_request(client, create_member, member_headers):
    member = create_member()
    prayer = _submit(client, member_headers(member))
    resp = client.patch(
        f"/api/v1/prayers/{prayer['id']}/answered",
        json={"answered_description": "Surgery went well"},
        headers=member_headers(member),
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "answered"

    resp = client.post(f"/api/v1/prayers/{prayer['id']}/pray", headers=member_headers(member))

    assert resp.status_code == 400
    assert resp.json()["error_code"] == "PrayerNotActive"


def test_pray_for_missing_request(client, create_member, member_headers):
    member = create_member()
    resp = client.post("/api/v1/prayers/999/pray", headers=member_headers(member))
    assert resp.status_code == 404


def test_anonymous_prayer_hides_submitter(client, create_member, member_headers, db):
    member = create_member(name="Jane Doe")

    data = _submit(client, member_headers(member), is_anonymous=True)

    assert data["display_name"] == "Anonymous"
    assert data["submitted_by_id"] is None
    assert db.get(PrayerRequest, data["id"]).submitted_by_id is None


def test_prayers_visible_across_branches(client, create_member, member_headers):
    author = create_member(email="author@test.com", branch=MemberBranch.BRANCH1)
    reader = create_member(email="reader@test.com", branch=MemberBranch.BRANCH2)
    prayer = _submit(client, member_headers(author))

    resp = client.get(f"/api/v1/prayers/{prayer['id']}", headers=member_headers(reader))

    assert resp.status_code == 200
    assert resp.json()["data"]["submitter_branch"] == "branch1"
    assert resp.json()["data"]["can_edit"] is False


def test_only_submitter_can_edit(client, create_member, member_headers):
    author = create_member(email="author@test.com")
    other = create_member(email="other@test.com")
    prayer = _submit(client, member_headers(author))

    resp = client.put(
        f"/api/v1/prayers/{prayer['id']}",
        json={"title": "Changed title"},
        headers=member_headers(other),
    )

    assert resp.status_code == 403


def test_member_cannot_archive(client, create_member, member_headers):
    author = create_member()
    prayer = _submit(client, member_headers(author))

    resp = client.put(
        f"/api/v1/prayers/{prayer['id']}",
        json={"status": "archived"},
        headers=member_headers(author),
    )

    assert resp.status_code == 403


def test_administrator_archives_and_filters(
    client, create_member, member_headers, create_admin, admin_headers
):
    author = create_member()
    admin = create_admin()
    prayer = _submit(client, member_headers(author))

    resp = client.put(
        f"/api/v1/prayers/{prayer['id']}",
        json={"status": "archived"},
        headers=admin_headers(admin),
    )
    assert resp.json()["data"]["status"] == PrayerStatus.ARCHIVED.value

    active = client.get("/api/v1/prayers", headers=admin_headers(admin)).json()
    archived = client.get(
        "/api/v1/prayers", params={"status": "archived"}, headers=admin_headers(admin)
    ).json()
    assert active["pagination"]["total_count"] == 0
    assert archived["pagination"]["total_count"] == 1


def test_deleted_prayer_is_hidden(client, create_member, member_headers):
    author = create_member()
    prayer = _submit(client, member_headers(author))

    assert client.delete(
        f"/api/v1/prayers/{prayer['id']}", headers=member_headers(author)
    ).status_code == 200
    assert client.get(
        f"/api/v1/prayers/{prayer['id']}", headers=member_headers(author)
    ).status_code == 404


def test_invalid_status_filter(client, create_member, member_headers):
    member = create_member()
    resp = client.get("/api/v1/prayers", params={"status": "pending"}, headers=member_headers(member))
    assert resp.status_code == 400
