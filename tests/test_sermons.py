"""
Tests for sermon upload and browsing.
"""

import io

import pytest
from fastapi import UploadFile

from church_hub.core.exceptions import ValidationFailedError
from church_hub.db.models import ApprovalStatus, Permission, Sermon
from church_hub.services.storage_service import read_upload


@pytest.fixture
def sermon_admin(create_admin):
    return create_admin()


def _upload(client, headers, filename="Sunday Service.mp4", **fields) -> dict:
    form = {
        "title": "Faith Over Fear",
        "description": "Trusting God when the road is unclear.",
        "category": "Faith",
        "tags": "faith, courage",
        "duration_seconds": "2712",
    }
    form.update(fields)
    resp = client.post(
        "/api/v1/sermons",
        data=form,
        files={"file": (filename, b"fake video bytes", "video/mp4")},
        headers=headers,
    )
    return resp


def test_sermon_views_increment(client, sermon_admin, admin_headers, create_member, member_headers):
    member = create_member()
    resp = _upload(client, admin_headers(sermon_admin))
    assert resp.status_code == 201
    sermon = resp.json()["data"]
    assert sermon["category"] == "Faith"
    assert sermon["view_count"] == 0
    assert sermon["tags"] == ["faith", "courage"]
    assert sermon["formatted_duration"] == "45:12"
    assert sermon["uploaded_by"]["id"] == sermon_admin.id

    first = client.get(f"/api/v1/sermons/{sermon['id']}", headers=member_headers(member))
    second = client.get(f"/api/v1/sermons/{sermon['id']}", headers=member_headers(member))

    assert first.json()["data"]["view_count"] == 1
    assert second.json()["data"]["view_count"] == 2


def test_upload_stores_video(client, sermon_admin, admin_headers, blob_storage, db):
    resp = _upload(client, admin_headers(sermon_admin))

    sermon = db.get(Sermon, resp.json()["data"]["id"])
    assert sermon.video_url.startswith("/media/sermons/")
    assert (blob_storage.root / "sermons" / sermon.video_path).exists()
    assert sermon.file_size_bytes == len(b"fake video bytes")


def test_upload_rejects_unsupported_file(client, sermon_admin, admin_headers, db):
    resp = _upload(client, admin_headers(sermon_admin), filename="notes.txt")

    assert resp.status_code == 400
    assert resp.json()["error_code"] == "ValidationFailed"
    assert db.query(Sermon).count() == 0


def test_upload_rejects_invalid_metadata(client, sermon_admin, admin_headers):
    resp = _upload(client, admin_headers(sermon_admin), title="Hi")

    assert resp.status_code == 400
    assert resp.json()["errors"][0]["field"] == "title"


def test_upload_requires_manage_sermons(client, create_admin, admin_headers):
    admin = create_admin(permissions=[Permission.MANAGE_CONTENT.value])

    resp = _upload(client, admin_headers(admin))

    assert resp.status_code == 403


def test_pending_member_cannot_browse(client, sermon_admin, admin_headers, create_member, member_headers):
    member = create_member(status=ApprovalStatus.PENDING)
    _upload(client, admin_headers(sermon_admin))

    resp = client.get("/api/v1/sermons", headers=member_headers(member))

    assert resp.status_code == 403


def test_list_filters_and_categories(client, sermon_admin, admin_headers, create_member, member_headers):
    member = create_member()
    _upload(client, admin_headers(sermon_admin), category="Faith")
    _upload(client, admin_headers(sermon_admin), title="Living Hope", category="Hope")
    _upload(client, admin_headers(sermon_admin), title="Walking by Faith", category="Faith")

    resp = client.get(
        "/api/v1/sermons", params={"category": "faith"}, headers=member_headers(member)
    )
    assert resp.json()["pagination"]["total_count"] == 2

    categories = client.get("/api/v1/sermons/categories", headers=member_headers(member)).json()
    assert categories["data"] == [
        {"category": "Faith", "count": 2},
        {"category": "Hope", "count": 1},
    ]


def test_delete_sermon_removes_blob(client, sermon_admin, admin_headers, blob_storage, db):
    sermon_id = _upload(client, admin_headers(sermon_admin)).json()["data"]["id"]
    path = db.get(Sermon, sermon_id).video_path

    resp = client.delete(f"/api/v1/sermons/{sermon_id}", headers=admin_headers(sermon_admin))

    assert resp.status_code == 200
    assert not (blob_storage.root / "sermons" / path).exists()
    assert client.get(
        f"/api/v1/sermons/{sermon_id}", headers=admin_headers(sermon_admin)
    ).status_code == 404


def test_toggle_download(client, sermon_admin, admin_headers):
    sermon_id = _upload(client, admin_headers(sermon_admin)).json()["data"]["id"]

    resp = client.patch(
        f"/api/v1/sermons/{sermon_id}/toggle-download", headers=admin_headers(sermon_admin)
    )

    assert resp.json()["data"]["downloadable"] is False


class _CountingBuffer(io.BytesIO):
    bytes_read = 0

    def read(self, size=-1):
        data = super().read(size)
        self.bytes_read += len(data)
        return data


def test_oversized_upload_rejected_without_reading_content():
    buffer = _CountingBuffer(b"\0" * (5 * 1024 * 1024))
    upload = UploadFile(file=buffer, filename="long.mp4")

    with pytest.raises(ValidationFailedError) as exc_info:
        read_upload(upload, [".mp4"], max_size_bytes=1024)

    assert exc_info.value.errors == [{"field": "file", "message": "File too large"}]
    assert buffer.bytes_read == 0


def test_read_upload_returns_full_content():
    upload = UploadFile(file=io.BytesIO(b"sermon audio"), filename="Evening Word.MP4")

    content, path, _ = read_upload(upload, [".mp4"], max_size_bytes=1024)

    assert content == b"sermon audio"
    assert path.endswith("-evening_word.mp4")
