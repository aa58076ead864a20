"""
Business logic service for the pastor blog.
"""

import logging

from fastapi import UploadFile
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from church_hub.core.config import settings
from church_hub.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from church_hub.db.models import Administrator, Blog, BlogStatus
from church_hub.schemas.blog import BlogCreate, BlogUpdate
from church_hub.services.principal_resolver import AuthContext
from church_hub.services.storage_service import BLOG_IMAGE_CONTAINER, BlobStorage, read_upload
from church_hub.utils.content_helpers import calculate_read_time
from church_hub.utils.datetime_helpers import utc_now

logger = logging.getLogger(__name__)

BLOG_NOT_FOUND = "Blog not found"


class BlogService:
    """Service for blog business logic."""

    def __init__(self, db: Session, storage: BlobStorage | None = None):
        self.db = db
        self.storage = storage

    def _get(self, blog_id: int) -> Blog:
        blog = self.db.get(Blog, blog_id)
        if not blog:
            raise NotFoundError(BLOG_NOT_FOUND)
        return blog

    def _get_owned(self, administrator: Administrator, blog_id: int) -> Blog:
        blog = self._get(blog_id)
        if blog.author_id != administrator.id and not administrator.is_super_admin:
            raise ForbiddenError("Only the author or a super administrator can modify this blog")
        return blog

    def list_published(
        self,
        offset: int = 0,
        limit: int = 10,
        search: str | None = None,
        tag: str | None = None,
    ) -> tuple[list[Blog], int]:
        query = self.db.query(Blog).filter(Blog.status == BlogStatus.PUBLISHED)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(Blog.title.ilike(pattern), Blog.excerpt.ilike(pattern), Blog.content.ilike(pattern))
            )

        if tag:
            query = query.filter(self._has_tag(tag.strip().lower()))

        total = query.count()
        blogs = (
            query.order_by(Blog.published_at.desc(), Blog.id.desc()).offset(offset).limit(limit).all()
        )
        return blogs, total

    def _has_tag(self, tag: str) -> ColumnElement[bool]:
        """Membership test on the JSON ``tags`` list, per database dialect."""
        if self.db.get_bind().dialect.name == "mysql":
            return func.json_contains(Blog.tags, func.json_quote(tag)) == 1
        tags = func.json_each(Blog.tags).table_valued("value")
        return select(tags.c.value).where(tags.c.value == tag).exists()

    def list_all(
        self, offset: int = 0, limit: int = 10, status: BlogStatus | None = None
    ) -> tuple[list[Blog], int]:
        query = self.db.query(Blog)
        if status:
            query = query.filter(Blog.status == status)
        total = query.count()
        blogs = query.order_by(Blog.created_at.desc(), Blog.id.desc()).offset(offset).limit(limit).all()
        return blogs, total

    def latest_published(self, limit: int = 3) -> list[Blog]:
        return (
            self.db.query(Blog)
            .filter(Blog.status == BlogStatus.PUBLISHED)
            .order_by(Blog.published_at.desc(), Blog.id.desc())
            .limit(limit)
            .all()
        )

    def view_blog(self, context: AuthContext, blog_id: int) -> Blog:
        """
        Fetch a blog for reading.

        Drafts are only visible to administrators; published posts count a view.

        Raises:
            NotFoundError: If the blog does not exist or is a draft the caller cannot see
        """
        blog = self._get(blog_id)
        if blog.status != BlogStatus.PUBLISHED:
            if not context.is_administrator:
                raise NotFoundError(BLOG_NOT_FOUND)
            return blog

        self.db.query(Blog).filter(Blog.id == blog_id).update(
            {Blog.view_count: Blog.view_count + 1}, synchronize_session=False
        )
        self.db.commit()
        return self.db.get(Blog, blog_id, populate_existing=True)

    def create_blog(self, administrator: Administrator, data: BlogCreate) -> Blog:
        blog = Blog(
            title=data.title.strip(),
            content=data.content,
            excerpt=data.excerpt.strip(),
            author_id=administrator.id,
            status=data.status,
            tags=data.tags,
            featured_image_url=data.featured_image_url,
            view_count=0,
            read_time_minutes=calculate_read_time(data.content),
            published_at=utc_now() if data.status == BlogStatus.PUBLISHED else None,
        )
        self.db.add(blog)
        self.db.commit()
        self.db.refresh(blog)
        logger.info(f"Blog {blog.id} created by administrator {administrator.id} ({blog.status.value})")
        return blog

    def update_blog(self, administrator: Administrator, blog_id: int, data: BlogUpdate) -> Blog:
        """
        Update a blog.

        Read time is recomputed whenever content changes; the first transition
        to published stamps ``published_at``.
        """
        blog = self._get_owned(administrator, blog_id)
        update_data = data.model_dump(exclude_unset=True, exclude_none=True)

        for key, value in update_data.items():
            setattr(blog, key, value)

        if "content" in update_data:
            blog.read_time_minutes = calculate_read_time(blog.content)
        if blog.status == BlogStatus.PUBLISHED and blog.published_at is None:
            blog.published_at = utc_now()

        self.db.commit()
        self.db.refresh(blog)
        logger.info(f"Blog {blog_id} updated by administrator {administrator.id}")
        return blog

    def publish_blog(self, administrator: Administrator, blog_id: int) -> Blog:
        blog = self._get_owned(administrator, blog_id)
        if blog.status == BlogStatus.PUBLISHED:
            raise ConflictError("Blog is already published")
        blog.status = BlogStatus.PUBLISHED
        blog.published_at = utc_now()
        self.db.commit()
        self.db.refresh(blog)
        logger.info(f"Blog {blog_id} published by administrator {administrator.id}")
        return blog

    def delete_blog(self, administrator: Administrator, blog_id: int) -> None:
        blog = self._get_owned(administrator, blog_id)
        self.db.delete(blog)
        self.db.commit()
        logger.info(f"Blog {blog_id} deleted by administrator {administrator.id}")

    def upload_featured_image(self, administrator: Administrator, file: UploadFile) -> dict:
        content, path, content_type = read_upload(
            file, settings.allowed_image_extensions, settings.max_image_size_bytes
        )
        stored = self.storage.upload(BLOG_IMAGE_CONTAINER, path, content, content_type)
        logger.info(f"Featured image {path} uploaded by administrator {administrator.id}")
        return stored
