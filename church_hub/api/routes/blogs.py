"""
API routes for the pastor blog.
"""

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.orm import Session

from church_hub.core.dependencies import (
    PageParams,
    get_blob_storage,
    get_page_params,
    require_approved,
    require_permission,
)
from church_hub.core.responses import build_pagination, created_response, success_response
from church_hub.db.models import Administrator, BlogStatus, Permission
from church_hub.db.session import get_db
from church_hub.schemas.blog import BlogCreate, BlogOut, BlogSummaryOut, BlogUpdate
from church_hub.services.blog_service import BlogService
from church_hub.services.principal_resolver import AuthContext
from church_hub.services.storage_service import BlobStorage

router = APIRouter(prefix="/blogs", tags=["Blogs"])

manage_content = require_permission(Permission.MANAGE_CONTENT)


def _blog_data(blog) -> dict:
    return BlogOut.model_validate(blog).model_dump(mode="json")


def _summary_data(blog) -> dict:
    return BlogSummaryOut.model_validate(blog).model_dump(mode="json")


@router.get("/published", summary="List Published Blogs")
def list_published(
    search: str | None = Query(None, max_length=100),
    tag: str | None = Query(None, max_length=50),
    paging: PageParams = Depends(get_page_params),
    context: AuthContext = Depends(require_approved),
    db: Session = Depends(get_db),
):
    blogs, total = BlogService(db).list_published(
        offset=paging.offset, limit=paging.per_page, search=search, tag=tag
    )
    return success_response(
        message="Blogs retrieved successfully",
        data=[_summary_data(b) for b in blogs],
        pagination=build_pagination(paging.page, paging.per_page, total),
    )


@router.get("", summary="List All Blogs (Administrator)")
def list_all(
    blog_status: BlogStatus | None = Query(None, alias="status"),
    paging: PageParams = Depends(get_page_params),
    administrator: Administrator = Depends(manage_content),
    db: Session = Depends(get_db),
):
    """Drafts and published posts."""
    blogs, total = BlogService(db).list_all(
        offset=paging.offset, limit=paging.per_page, status=blog_status
    )
    return success_response(
        message="Blogs retrieved successfully",
        data=[_summary_data(b) for b in blogs],
        pagination=build_pagination(paging.page, paging.per_page, total),
    )


@router.post("/featured-image", status_code=status.HTTP_201_CREATED, summary="Upload Featured Image")
def upload_featured_image(
    file: UploadFile = File(...),
    administrator: Administrator = Depends(manage_content),
    storage: BlobStorage = Depends(get_blob_storage),
    db: Session = Depends(get_db),
):
    stored = BlogService(db, storage).upload_featured_image(administrator, file)
    return created_response(message="Image uploaded successfully", data=stored)


@router.get("/{blog_id}", summary="Get Blog")
def get_blog(
    blog_id: int,
    context: AuthContext = Depends(require_approved),
    db: Session = Depends(get_db),
):
    """Drafts are hidden from members; reading a published post counts a view."""
    blog = BlogService(db).view_blog(context, blog_id)
    return success_response(message="Blog retrieved successfully", data=_blog_data(blog))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create Blog")
def create_blog(
    data: BlogCreate,
    administrator: Administrator = Depends(manage_content),
    db: Session = Depends(get_db),
):
    blog = BlogService(db).create_blog(administrator, data)
    return created_response(message="Blog created successfully", data=_blog_data(blog))


@router.put("/{blog_id}", summary="Update Blog")
def update_blog(
    blog_id: int,
    data: BlogUpdate,
    administrator: Administrator = Depends(manage_content),
    db: Session = Depends(get_db),
):
    blog = BlogService(db).update_blog(administrator, blog_id, data)
    return success_response(message="Blog updated successfully", data=_blog_data(blog))


@router.patch("/{blog_id}/publish", summary="Publish Blog")
def publish_blog(
    blog_id: int,
    administrator: Administrator = Depends(manage_content),
    db: Session = Depends(get_db),
):
    blog = BlogService(db).publish_blog(administrator, blog_id)
    return success_response(message="Blog published successfully", data=_blog_data(blog))


@router.delete("/{blog_id}", summary="Delete Blog")
def delete_blog(
    blog_id: int,
    administrator: Administrator = Depends(manage_content),
    db: Session = Depends(get_db),
):
    BlogService(db).delete_blog(administrator, blog_id)
    return success_response(message="Blog deleted successfully")
