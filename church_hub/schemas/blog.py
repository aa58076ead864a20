"""
Pydantic schemas for blog posts.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from church_hub.db.models import BlogStatus
from church_hub.utils.content_helpers import slugify


def _clean_tags(tags: list[str]) -> list[str]:
    return list(dict.fromkeys(t.strip().lower() for t in tags if t.strip()))


class BlogCreate(BaseModel):
    """
    Schema for creating a blog post.

    **REQUIRED FIELDS:**
    - title (5-100 chars), content (50+ chars), excerpt (20-300 chars)

    **OPTIONAL FIELDS:**
    - status (draft or published, default draft), tags, featured_image_url
    """

    title: str = Field(..., min_length=5, max_length=100)
    content: str = Field(..., min_length=50)
    excerpt: str = Field(..., min_length=20, max_length=300)
    status: BlogStatus = BlogStatus.DRAFT
    tags: list[str] = Field(default_factory=list)
    featured_image_url: str | None = Field(None, max_length=500)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: list[str]) -> list[str]:
        return _clean_tags(v)


class BlogUpdate(BaseModel):
    title: str | None = Field(None, min_length=5, max_length=100)
    content: str | None = Field(None, min_length=50)
    excerpt: str | None = Field(None, min_length=20, max_length=300)
    status: BlogStatus | None = None
    tags: list[str] | None = None
    featured_image_url: str | None = Field(None, max_length=500)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: list[str] | None) -> list[str] | None:
        return None if v is None else _clean_tags(v)


class BlogAuthor(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    title: str
    avatar_url: str | None = None


class BlogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    content: str
    excerpt: str
    author_id: int
    author: BlogAuthor | None = None
    status: BlogStatus
    tags: list[str]
    featured_image_url: str | None = None
    view_count: int
    read_time_minutes: int
    published_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @computed_field
    @property
    def slug(self) -> str:
        return slugify(self.title)


class BlogSummaryOut(BlogOut):
    """List view without the full body."""

    content: str = Field("", exclude=True)
