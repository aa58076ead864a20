"""
Pydantic schemas for sermon management.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from church_hub.utils.content_helpers import format_duration, format_file_size


def _clean_tags(tags: list[str]) -> list[str]:
    seen: list[str] = []
    for tag in tags:
        tag = tag.strip().lower()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


class SermonMetadata(BaseModel):
    """
    Metadata submitted alongside a sermon video upload.

    **REQUIRED FIELDS:**
    - title (3-100 chars), description (10-1000 chars), category (2-50 chars)

    **OPTIONAL FIELDS:**
    - thumbnail_url, duration_seconds, downloadable (default true), tags
    """

    title: str = Field(..., min_length=3, max_length=100)
    description: str = Field(..., min_length=10, max_length=1000)
    category: str = Field(..., min_length=2, max_length=50)
    thumbnail_url: str | None = Field(None, max_length=500)
    duration_seconds: int | None = Field(None, ge=0)
    downloadable: bool = True
    tags: list[str] = Field(default_factory=list)

    @field_validator("title", "category")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: list[str]) -> list[str]:
        return _clean_tags(v)


class SermonUpdate(BaseModel):
    title: str | None = Field(None, min_length=3, max_length=100)
    description: str | None = Field(None, min_length=10, max_length=1000)
    category: str | None = Field(None, min_length=2, max_length=50)
    thumbnail_url: str | None = Field(None, max_length=500)
    duration_seconds: int | None = Field(None, ge=0)
    downloadable: bool | None = None
    tags: list[str] | None = None

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: list[str] | None) -> list[str] | None:
        return None if v is None else _clean_tags(v)


class SermonUploader(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    title: str


class SermonOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    category: str
    video_url: str
    thumbnail_url: str | None = None
    duration_seconds: int | None = None
    file_size_bytes: int | None = None
    uploaded_by_id: int
    uploaded_by: SermonUploader | None = None
    downloadable: bool
    view_count: int
    tags: list[str]
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @computed_field
    @property
    def formatted_duration(self) -> str:
        return format_duration(self.duration_seconds)

    @computed_field
    @property
    def formatted_file_size(self) -> str:
        return format_file_size(self.file_size_bytes)
