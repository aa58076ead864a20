"""
Tests for the pastor blog.
"""

import math

import pytest

from church_hub.db.models import Permission
from church_hub.utils.content_helpers import calculate_read_time

EXCERPT = "A short reflection on grace and patience."


def _words(count: int) -> str:
    return " ".join(["grace"] * count)


def _create_blog(client, headers, **overrides) -> dict:
    payload = {"title": "Walking in Faith", "content": _words(450), "excerpt": EXCERPT}
    payload.update(overrides)
    resp = client.post("/api/v1/blogs", json=payload, headers=headers)
    assert resp.status_code == 201
    return resp.json()["data"]


@pytest.mark.parametrize("words", [1, 199, 200, 201, 450])
def test_read_time_rounds_up(words):
    assert calculate_read_time(_words(words)) == math.ceil(words / 200)


def test_create_blog_sets_read_time_and_slug(client, create_admin, admin_headers):
    admin = create_admin()

    data = _create_blog(client, admin_headers(admin))

    assert data["read_time_minutes"] == 3
    assert data["slug"] == "walking-in-faith"
    assert data["status"] == "draft"
    assert data["published_at"] is None
    assert data["author"]["id"] == admin.id


def test_update_content_recomputes_read_time(client, create_admin, admin_headers):
    admin = create_admin()
    blog = _create_blog(client, admin_headers(admin))

    resp = client.put(
        f"/api/v1/blogs/{blog['id']}", json={"content": _words(120)}, headers=admin_headers(admin)
    )

    assert resp.status_code == 200
    assert resp.json()["data"]["read_time_minutes"] == 1


def test_draft_hidden_from_members(client, create_admin, admin_headers, create_member, member_headers):
    admin = create_admin()
    member = create_member()
    blog = _create_blog(client, admin_headers(admin))

    assert client.get(f"/api/v1/blogs/{blog['id']}", headers=member_headers(member)).status_code == 404
    assert client.get(f"/api/v1/blogs/{blog['id']}", headers=admin_headers(admin)).status_code == 200

    published = client.get("/api/v1/blogs/published", headers=member_headers(member)).json()
    assert published["pagination"]["total_count"] == 0


def test_publish_then_read_counts_views(
    client, create_admin, admin_headers, create_member, member_headers
):
    admin = create_admin()
    member = create_member()
    blog = _create_blog(client, admin_headers(admin))

    resp = client.patch(f"/api/v1/blogs/{blog['id']}/publish", headers=admin_headers(admin))
    assert resp.status_code == 200
    assert resp.json()["data"]["published_at"] is not None

    again = client.patch(f"/api/v1/blogs/{blog['id']}/publish", headers=admin_headers(admin))
    assert again.status_code == 409

    first = client.get(f"/api/v1/blogs/{blog['id']}", headers=member_headers(member))
    second = client.get(f"/api/v1/blogs/{blog['id']}", headers=member_headers(member))
    assert first.json()["data"]["view_count"] == 1
    assert second.json()["data"]["view_count"] == 2


def test_published_list_filters_by_tag(client, create_admin, admin_headers, create_member, member_headers):
    admin = create_admin()
    member = create_member()
    _create_blog(client, admin_headers(admin), status="published", tags=["Prayer", "hope"])
    _create_blog(client, admin_headers(admin), title="Another Post", status="published", tags=["joy"])

    resp = client.get(
        "/api/v1/blogs/published", params={"tag": "prayer"}, headers=member_headers(member)
    )

    assert resp.json()["pagination"]["total_count"] == 1
    assert resp.json()["data"][0]["tags"] == ["prayer", "hope"]
    assert "content" not in resp.json()["data"][0]


def test_tag_filter_paginates_matching_blogs(
    client, create_admin, admin_headers, create_member, member_headers
):
    admin = create_admin()
    member = create_member()
    for i in range(3):
        _create_blog(
            client, admin_headers(admin), title=f"Prayer Week {i}", status="published", tags=["prayer"]
        )
    _create_blog(client, admin_headers(admin), title="Praise Night", status="published", tags=["pray"])

    resp = client.get(
        "/api/v1/blogs/published",
        params={"tag": "prayer", "page": 2, "limit": 2},
        headers=member_headers(member),
    )

    body = resp.json()
    assert body["pagination"]["total_count"] == 3
    assert body["pagination"]["total_pages"] == 2
    assert [b["title"] for b in body["data"]] == ["Prayer Week 0"]


def test_only_author_or_super_admin_can_edit(client, create_admin, admin_headers):
    author = create_admin(email="author@test.com")
    other = create_admin(email="other@test.com")
    blog = _create_blog(client, admin_headers(author))

    resp = client.put(
        f"/api/v1/blogs/{blog['id']}", json={"title": "Hijacked Title"}, headers=admin_headers(other)
    )

    assert resp.status_code == 403


def test_member_cannot_create_blog(client, create_member, member_headers):
    member = create_member()
    resp = client.post(
        "/api/v1/blogs",
        json={"title": "Walking in Faith", "content": _words(60), "excerpt": EXCERPT},
        headers=member_headers(member),
    )
    assert resp.status_code == 403


def test_admin_without_manage_content_cannot_create(client, create_admin, admin_headers):
    admin = create_admin(permissions=[Permission.MANAGE_SERMONS.value])
    resp = client.post(
        "/api/v1/blogs",
        json={"title": "Walking in Faith", "content": _words(60), "excerpt": EXCERPT},
        headers=admin_headers(admin),
    )
    assert resp.status_code == 403


def test_delete_blog(client, create_admin, admin_headers):
    admin = create_admin()
    blog = _create_blog(client, admin_headers(admin))

    assert client.delete(f"/api/v1/blogs/{blog['id']}", headers=admin_headers(admin)).status_code == 200
    assert client.get(f"/api/v1/blogs/{blog['id']}", headers=admin_headers(admin)).status_code == 404


def test_upload_featured_image(client, create_admin, admin_headers, blob_storage):
    admin = create_admin()

    resp = client.post(
        "/api/v1/blogs/featured-image",
        files={"file": ("Cover Photo.png", b"\x89PNG fake image", "image/png")},
        headers=admin_headers(admin),
    )

    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["url"].startswith("/media/blog-images/")
    assert data["path"].endswith("-cover_photo.png")
    assert (blob_storage.root / "blog-images" / data["path"]).exists()
