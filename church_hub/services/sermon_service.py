"""
Business logic service for sermon management.

Sermon videos live in blob storage; this service keeps the database row and
the stored object in step on upload and deletion.
"""

import logging

from fastapi import UploadFile
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from church_hub.core.config import settings
from church_hub.core.exceptions import ApplicationError, NotFoundError
from church_hub.db.models import Administrator, Sermon
from church_hub.schemas.sermon import SermonMetadata, SermonUpdate
from church_hub.services.storage_service import SERMON_CONTAINER, BlobStorage, read_upload

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    "created_at": Sermon.created_at,
    "view_count": Sermon.view_count,
    "title": Sermon.title,
}


class SermonService:
    """Service for sermon business logic."""

    def __init__(self, db: Session, storage: BlobStorage | None = None):
        self.db = db
        self.storage = storage

    def _active_query(self):
        return self.db.query(Sermon).filter(Sermon.is_active.is_(True))

    def get_sermon(self, sermon_id: int) -> Sermon:
        sermon = self._active_query().filter(Sermon.id == sermon_id).first()
        if not sermon:
            raise NotFoundError("Sermon not found")
        return sermon

    def upload_sermon(
        self, administrator: Administrator, metadata: SermonMetadata, file: UploadFile
    ) -> Sermon:
        """
        Store a sermon video and create its record.

        Args:
            administrator: Uploading administrator
            metadata: Validated sermon metadata
            file: Video upload

        Returns:
            Created sermon

        Raises:
            ValidationFailedError: If the file type or size is not accepted
        """
        content, path, content_type = read_upload(
            file, settings.allowed_video_extensions, settings.max_video_size_bytes
        )
        stored = self.storage.upload(SERMON_CONTAINER, path, content, content_type)

        try:
            sermon = Sermon(
                title=metadata.title,
                description=metadata.description,
                category=metadata.category,
                video_url=stored["url"],
                video_path=stored["path"],
                thumbnail_url=metadata.thumbnail_url,
                duration_seconds=metadata.duration_seconds,
                file_size_bytes=len(content),
                uploaded_by_id=administrator.id,
                downloadable=metadata.downloadable,
                view_count=0,
                tags=metadata.tags,
                is_active=True,
            )
            self.db.add(sermon)
            self.db.commit()
        except Exception:
            self.db.rollback()
            self._delete_blob(stored["path"])
            raise

        self.db.refresh(sermon)
        logger.info(
            f"Sermon {sermon.id} uploaded by administrator {administrator.id} "
            f"({len(content)} bytes)"
        )
        return sermon

    def list_sermons(
        self,
        offset: int = 0,
        limit: int = 10,
        category: str | None = None,
        search: str | None = None,
        uploaded_by_id: int | None = None,
        sort: str = "-created_at",
    ) -> tuple[list[Sermon], int]:
        """
        List active sermons.

        Args:
            category: Case-insensitive substring match on category
            search: Case-insensitive match on title, description or category
            uploaded_by_id: Only sermons from this administrator
            sort: Field name, prefixed with "-" for descending

        Returns:
            (sermons, total matching count)
        """
        query = self._active_query()

        if category:
            query = query.filter(func.lower(Sermon.category).contains(category.strip().lower()))
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    Sermon.title.ilike(pattern),
                    Sermon.description.ilike(pattern),
                    Sermon.category.ilike(pattern),
                )
            )
        if uploaded_by_id:
            query = query.filter(Sermon.uploaded_by_id == uploaded_by_id)

        total = query.count()

        descending = sort.startswith("-")
        column = SORT_FIELDS.get(sort.lstrip("-"), Sermon.created_at)
        order = column.desc() if descending else column.asc()
        sermons = query.order_by(order, Sermon.id.desc()).offset(offset).limit(limit).all()
        return sermons, total

    def list_categories(self) -> list[dict]:
        rows = (
            self.db.query(Sermon.category, func.count(Sermon.id))
            .filter(Sermon.is_active.is_(True))
            .group_by(Sermon.category)
            .order_by(Sermon.category)
            .all()
        )
        return [{"category": category, "count": count} for category, count in rows]

    def list_popular(self, limit: int = 5) -> list[Sermon]:
        return (
            self._active_query()
            .order_by(Sermon.view_count.desc(), Sermon.id.desc())
            .limit(limit)
            .all()
        )

    def view_sermon(self, sermon_id: int) -> Sermon:
        """Fetch a sermon, incrementing its view count in the same statement set."""
        updated = (
            self._active_query()
            .filter(Sermon.id == sermon_id)
            .update({Sermon.view_count: Sermon.view_count + 1}, synchronize_session=False)
        )
        if not updated:
            raise NotFoundError("Sermon not found")
        self.db.commit()
        return self.db.get(Sermon, sermon_id, populate_existing=True)

    def update_sermon(self, sermon_id: int, data: SermonUpdate) -> Sermon:
        sermon = self.get_sermon(sermon_id)
        for key, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(sermon, key, value)
        self.db.commit()
        self.db.refresh(sermon)
        logger.info(f"Sermon {sermon_id} updated")
        return sermon

    def toggle_download(self, sermon_id: int) -> Sermon:
        sermon = self.get_sermon(sermon_id)
        sermon.downloadable = not sermon.downloadable
        self.db.commit()
        logger.info(f"Sermon {sermon_id} downloadable set to {sermon.downloadable}")
        return sermon

    def delete_sermon(self, sermon_id: int) -> None:
        """Deactivate a sermon and remove its video from storage."""
        sermon = self.get_sermon(sermon_id)
        sermon.is_active = False
        self.db.commit()
        if sermon.video_path:
            self._delete_blob(sermon.video_path)
        logger.info(f"Sermon {sermon_id} deleted")

    def _delete_blob(self, path: str) -> None:
        try:
            self.storage.delete(SERMON_CONTAINER, path)
        except ApplicationError as e:
            logger.error(f"Failed to delete sermon video {path}: {e.message}")
