"""
SQLAlchemy database models.

This module contains all the database table definitions using SQLAlchemy ORM
for members, administrators and the content they share across branches.
"""

from enum import Enum

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    event,
)
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import declarative_base, deferred, relationship
from sqlalchemy.sql import func

Base = declarative_base()


def _enum_column(enum_cls: type[Enum], name: str) -> SQLEnum:
    """Store enum values (not member names) so the database sees lowercase strings."""
    return SQLEnum(
        enum_cls,
        name=name,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )


class MemberBranch(str, Enum):
    """Branch a member belongs to."""

    BRANCH1 = "branch1"
    BRANCH2 = "branch2"
    UNSET = "unset"


class EventBranch(str, Enum):
    """Branch an event is hosted for."""

    BRANCH1 = "branch1"
    BRANCH2 = "branch2"
    BOTH = "both"


class ApprovalStatus(str, Enum):
    """Member approval lifecycle."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AdminLevel(str, Enum):
    STANDARD = "standard"
    SUPER = "super"


class Permission(str, Enum):
    """Capability flags granted to administrators."""

    MANAGE_USERS = "manageUsers"
    MANAGE_BOTH_BRANCHES = "manageBothBranches"
    MANAGE_CONTENT = "manageContent"
    MANAGE_SERMONS = "manageSermons"
    CREATE_ADMINS = "createAdmins"


DEFAULT_ADMIN_PERMISSIONS = [
    Permission.MANAGE_USERS.value,
    Permission.MANAGE_BOTH_BRANCHES.value,
    Permission.MANAGE_CONTENT.value,
    Permission.MANAGE_SERMONS.value,
]


class CreatorKind(str, Enum):
    MEMBER = "member"
    ADMINISTRATOR = "administrator"


class BlogStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class PrayerStatus(str, Enum):
    ACTIVE = "active"
    ANSWERED = "answered"
    ARCHIVED = "archived"


class PrayerPriority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class Administrator(Base):
    """
    Pastor or staff principal with branch-unrestricted access.

    Password-based administrators carry a bcrypt ``password_hash``; administrators
    signing in through the identity provider carry an ``external_subject_id``.
    """

    __tablename__ = "administrators"

    id = Column(Integer, primary_key=True, index=True)
    external_subject_id = Column(String(128), unique=True, nullable=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(50), nullable=False)
    title = Column(String(50), nullable=False, default="Pastor")
    bio = Column(String(1000), nullable=True)
    avatar_url = Column(String(500), nullable=True)

    # Loaded only for password checks
    password_hash = deferred(Column(String(255), nullable=True))

    admin_level = Column(
        _enum_column(AdminLevel, "admin_level"), nullable=False, default=AdminLevel.STANDARD
    )
    permissions = Column(JSON, nullable=False, default=lambda: list(DEFAULT_ADMIN_PERMISSIONS))

    is_active = Column(Boolean, nullable=False, default=True)
    last_login_at = Column(DateTime, nullable=True)
    created_by_admin_id = Column(Integer, ForeignKey("administrators.id"), nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    @property
    def is_super_admin(self) -> bool:
        return self.admin_level == AdminLevel.SUPER

    def has_permission(self, permission: Permission) -> bool:
        """Super administrators implicitly hold every permission."""
        if self.is_super_admin:
            return True
        return permission.value in (self.permissions or [])

    def __repr__(self):
        return f"<Administrator(id={self.id}, email='{self.email}', level='{self.admin_level}')>"


class Member(Base):
    """
    Regular congregation member.

    ``approval_status`` gates access to branch content and only changes through
    an administrator decision or the member re-selecting a branch.
    """

    __tablename__ = "members"

    id = Column(Integer, primary_key=True, index=True)
    external_subject_id = Column(String(128), unique=True, nullable=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(50), nullable=False)
    bio = Column(String(500), nullable=True)
    avatar_url = Column(String(500), nullable=True)

    branch = Column(
        _enum_column(MemberBranch, "member_branch"), nullable=False, default=MemberBranch.UNSET
    )
    branch_selected_at = Column(DateTime, nullable=True)

    approval_status = Column(
        _enum_column(ApprovalStatus, "approval_status"),
        nullable=False,
        default=ApprovalStatus.PENDING,
        index=True,
    )
    rejection_reason = Column(String(200), nullable=True)
    approved_by_id = Column(Integer, ForeignKey("administrators.id"), nullable=True)
    approved_at = Column(DateTime, nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)
    last_login_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    __table_args__ = (Index("idx_member_branch_status", "branch", "approval_status"),)

    def __repr__(self):
        return (
            f"<Member(id={self.id}, email='{self.email}', "
            f"branch='{self.branch}', status='{self.approval_status}')>"
        )


class Sermon(Base):
    """Video sermon uploaded by an administrator."""

    __tablename__ = "sermons"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(50), nullable=False, index=True)
    video_url = Column(String(500), nullable=False)
    video_path = Column(String(500), nullable=True)  # Blob path, used for deletion
    thumbnail_url = Column(String(500), nullable=True)
    duration_seconds = Column(Integer, nullable=True)
    file_size_bytes = Column(Integer, nullable=True)
    uploaded_by_id = Column(Integer, ForeignKey("administrators.id"), nullable=False)
    downloadable = Column(Boolean, nullable=False, default=True)
    view_count = Column(Integer, nullable=False, default=0)
    tags = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    created_at = Column(DateTime, server_default=func.now(), index=True)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    uploaded_by = relationship("Administrator", lazy="joined")

    def __repr__(self):
        return f"<Sermon(id={self.id}, title='{self.title}', category='{self.category}')>"


class Event(Base):
    """
    Branch-scoped event.

    Events hosted for one branch become visible to the other branch only once
    an administrator approves a cross-branch request.
    """

    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    starts_at = Column(DateTime, nullable=False, index=True)
    ends_at = Column(DateTime, nullable=True)
    location = Column(String(200), nullable=False)
    branch = Column(_enum_column(EventBranch, "event_branch"), nullable=False, index=True)

    created_by_id = Column(Integer, nullable=False)
    creator_kind = Column(_enum_column(CreatorKind, "creator_kind"), nullable=False)

    cross_branch_requested = Column(Boolean, nullable=False, default=False)
    cross_branch_approved = Column(Boolean, nullable=False, default=False)
    approved_by_admin_id = Column(Integer, ForeignKey("administrators.id"), nullable=True)

    max_attendees = Column(Integer, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    attendees = relationship(
        "EventAttendee",
        order_by="EventAttendee.registered_at",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("idx_event_branch_active_start", "branch", "is_active", "starts_at"),
    )

    def __repr__(self):
        return f"<Event(id={self.id}, title='{self.title}', branch='{self.branch}')>"


class EventAttendee(Base):
    """Registration of one member for one event."""

    __tablename__ = "event_attendees"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    member_id = Column(Integer, ForeignKey("members.id", ondelete="CASCADE"), nullable=False)
    registered_at = Column(DateTime, nullable=False, server_default=func.now())

    __table_args__ = (UniqueConstraint("event_id", "member_id", name="uq_event_attendee"),)


class Blog(Base):
    """Pastor blog post."""

    __tablename__ = "blogs"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(100), nullable=False)
    content = Column(Text, nullable=False)
    excerpt = Column(String(300), nullable=False)
    author_id = Column(Integer, ForeignKey("administrators.id"), nullable=False)
    status = Column(
        _enum_column(BlogStatus, "blog_status"), nullable=False, default=BlogStatus.DRAFT
    )
    tags = Column(JSON, nullable=False, default=list)
    featured_image_url = Column(String(500), nullable=True)
    view_count = Column(Integer, nullable=False, default=0)
    read_time_minutes = Column(Integer, nullable=False, default=1)
    published_at = Column(DateTime, nullable=True, index=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    author = relationship("Administrator", lazy="joined")

    __table_args__ = (Index("idx_blog_status_published", "status", "published_at"),)

    def __repr__(self):
        return f"<Blog(id={self.id}, title='{self.title}', status='{self.status}')>"


class PrayerRequest(Base):
    """Prayer request shared on the prayer board."""

    __tablename__ = "prayer_requests"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    submitted_by_id = Column(
        Integer, ForeignKey("members.id", ondelete="SET NULL"), nullable=True
    )
    submitter_branch = Column(
        _enum_column(MemberBranch, "submitter_branch"), nullable=False, index=True
    )
    submitter_display_name = Column(String(50), nullable=False)
    is_anonymous = Column(Boolean, nullable=False, default=False)
    prayer_count = Column(Integer, nullable=False, default=0)
    status = Column(
        _enum_column(PrayerStatus, "prayer_status"),
        nullable=False,
        default=PrayerStatus.ACTIVE,
        index=True,
    )
    answered_description = Column(String(500), nullable=True)
    answered_at = Column(DateTime, nullable=True)
    is_visible = Column(Boolean, nullable=False, default=True)
    priority = Column(
        _enum_column(PrayerPriority, "prayer_priority"),
        nullable=False,
        default=PrayerPriority.NORMAL,
    )

    created_at = Column(DateTime, server_default=func.now(), index=True)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<PrayerRequest(id={self.id}, title='{self.title}', status='{self.status}')>"


class PrayerSupporter(Base):
    """A member who prayed for a request."""

    __tablename__ = "prayer_supporters"

    id = Column(Integer, primary_key=True, index=True)
    prayer_id = Column(
        Integer, ForeignKey("prayer_requests.id", ondelete="CASCADE"), nullable=False
    )
    member_id = Column(Integer, ForeignKey("members.id", ondelete="CASCADE"), nullable=False)
    prayed_at = Column(DateTime, nullable=False, server_default=func.now())

    __table_args__ = (UniqueConstraint("prayer_id", "member_id", name="uq_prayer_supporter"),)


@event.listens_for(Member, "before_insert")
@event.listens_for(Member, "before_update")
@event.listens_for(Administrator, "before_insert")
@event.listens_for(Administrator, "before_update")
def normalize_principal_email(mapper, connection, target):  # type: ignore[misc]
    """Normalize email to lowercase before saving."""
    if target.email:
        target.email = target.email.strip().lower()
