"""
API routes for sermon management.

Reads are open to approved members and administrators; uploads and edits
require the `manageSermons` permission.
"""

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from church_hub.core.dependencies import (
    PageParams,
    get_blob_storage,
    get_page_params,
    require_approved,
    require_permission,
)
from church_hub.core.exceptions import ValidationFailedError
from church_hub.core.responses import (
    build_pagination,
    created_response,
    format_validation_errors,
    success_response,
)
from church_hub.db.models import Administrator, Permission
from church_hub.db.session import get_db
from church_hub.schemas.sermon import SermonMetadata, SermonOut, SermonUpdate
from church_hub.services.principal_resolver import AuthContext
from church_hub.services.sermon_service import SermonService
from church_hub.services.storage_service import BlobStorage

router = APIRouter(prefix="/sermons", tags=["Sermons"])

manage_sermons = require_permission(Permission.MANAGE_SERMONS)


def _sermon_data(sermon) -> dict:
    return SermonOut.model_validate(sermon).model_dump(mode="json")


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Upload Sermon",
    description="""
Upload a sermon video with its metadata as `multipart/form-data`.

**FORM FIELDS:**
- file (required): video file (.mp4, .mov, .avi, .mkv, .webm)
- title, description, category (required)
- thumbnail_url, duration_seconds, downloadable, tags (comma separated) (optional)

**AUTHENTICATION:**
- Requires the `manageSermons` permission
    """,
)
def upload_sermon(
    file: UploadFile = File(...),
    title: str = Form(...),
    description: str = Form(...),
    category: str = Form(...),
    thumbnail_url: str | None = Form(None),
    duration_seconds: int | None = Form(None),
    downloadable: bool = Form(True),
    tags: str = Form(""),
    administrator: Administrator = Depends(manage_sermons),
    storage: BlobStorage = Depends(get_blob_storage),
    db: Session = Depends(get_db),
):
    try:
        metadata = SermonMetadata(
            title=title,
            description=description,
            category=category,
            thumbnail_url=thumbnail_url,
            duration_seconds=duration_seconds,
            downloadable=downloadable,
            tags=[t for t in tags.split(",") if t.strip()],
        )
    except ValidationError as e:
        raise ValidationFailedError(errors=format_validation_errors(e.errors())) from None

    sermon = SermonService(db, storage).upload_sermon(administrator, metadata, file)
    return created_response(message="Sermon uploaded successfully", data=_sermon_data(sermon))


@router.get("", summary="List Sermons")
def list_sermons(
    category: str | None = Query(None, max_length=50, description="Category contains (any case)"),
    search: str | None = Query(None, max_length=100),
    uploaded_by: int | None = Query(None, description="Administrator id"),
    sort: str = Query("-created_at", pattern=r"^-?(created_at|view_count|title)$"),
    paging: PageParams = Depends(get_page_params),
    context: AuthContext = Depends(require_approved),
    db: Session = Depends(get_db),
):
    sermons, total = SermonService(db).list_sermons(
        offset=paging.offset,
        limit=paging.per_page,
        category=category,
        search=search,
        uploaded_by_id=uploaded_by,
        sort=sort,
    )
    return success_response(
        message="Sermons retrieved successfully",
        data=[_sermon_data(s) for s in sermons],
        pagination=build_pagination(paging.page, paging.per_page, total),
    )


@router.get("/categories", summary="List Sermon Categories")
def list_categories(
    context: AuthContext = Depends(require_approved), db: Session = Depends(get_db)
):
    return success_response(
        message="Categories retrieved successfully", data=SermonService(db).list_categories()
    )


@router.get("/popular", summary="Popular Sermons")
def popular_sermons(
    limit: int = Query(5, ge=1, le=20),
    context: AuthContext = Depends(require_approved),
    db: Session = Depends(get_db),
):
    sermons = SermonService(db).list_popular(limit)
    return success_response(
        message="Popular sermons retrieved successfully", data=[_sermon_data(s) for s in sermons]
    )


@router.get("/{sermon_id}", summary="Get Sermon")
def get_sermon(
    sermon_id: int,
    context: AuthContext = Depends(require_approved),
    db: Session = Depends(get_db),
):
    """Every fetch counts as a view."""
    sermon = SermonService(db).view_sermon(sermon_id)
    return success_response(message="Sermon retrieved successfully", data=_sermon_data(sermon))


@router.put("/{sermon_id}", summary="Update Sermon")
def update_sermon(
    sermon_id: int,
    data: SermonUpdate,
    administrator: Administrator = Depends(manage_sermons),
    db: Session = Depends(get_db),
):
    sermon = SermonService(db).update_sermon(sermon_id, data)
    return success_response(message="Sermon updated successfully", data=_sermon_data(sermon))


@router.delete("/{sermon_id}", summary="Delete Sermon")
def delete_sermon(
    sermon_id: int,
    administrator: Administrator = Depends(manage_sermons),
    storage: BlobStorage = Depends(get_blob_storage),
    db: Session = Depends(get_db),
):
    SermonService(db, storage).delete_sermon(sermon_id)
    return success_response(message="Sermon deleted successfully")


@router.patch("/{sermon_id}/toggle-download", summary="Toggle Sermon Download")
def toggle_download(
    sermon_id: int,
    administrator: Administrator = Depends(manage_sermons),
    db: Session = Depends(get_db),
):
    sermon = SermonService(db).toggle_download(sermon_id)
    state = "enabled" if sermon.downloadable else "disabled"
    return success_response(message=f"Download {state}", data=_sermon_data(sermon))
