"""initial_schema

Revision ID: 20261001_0001
Revises:
Create Date: 2026-10-01 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261001_0001'
down_revision = None
branch_labels = None
depends_on = None

member_branch = sa.Enum('branch1', 'branch2', 'unset', name='member_branch')
event_branch = sa.Enum('branch1', 'branch2', 'both', name='event_branch')


def upgrade() -> None:
    op.create_table(
        'administrators',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('external_subject_id', sa.String(length=128), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('title', sa.String(length=50), nullable=False),
        sa.Column('bio', sa.String(length=1000), nullable=True),
        sa.Column('avatar_url', sa.String(length=500), nullable=True),
        sa.Column('password_hash', sa.String(length=255), nullable=True),
        sa.Column('admin_level', sa.Enum('standard', 'super', name='admin_level'), nullable=False),
        sa.Column('permissions', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('last_login_at', sa.DateTime(), nullable=True),
        sa.Column('created_by_admin_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(['created_by_admin_id'], ['administrators.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_administrators_id', 'administrators', ['id'])
    op.create_index('ix_administrators_email', 'administrators', ['email'], unique=True)
    op.create_index(
        'ix_administrators_external_subject_id', 'administrators', ['external_subject_id'], unique=True
    )

    op.create_table(
        'members',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('external_subject_id', sa.String(length=128), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('bio', sa.String(length=500), nullable=True),
        sa.Column('avatar_url', sa.String(length=500), nullable=True),
        sa.Column('branch', member_branch, nullable=False),
        sa.Column('branch_selected_at', sa.DateTime(), nullable=True),
        sa.Column(
            'approval_status',
            sa.Enum('pending', 'approved', 'rejected', name='approval_status'),
            nullable=False,
        ),
        sa.Column('rejection_reason', sa.String(length=200), nullable=True),
        sa.Column('approved_by_id', sa.Integer(), nullable=True),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('last_login_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(['approved_by_id'], ['administrators.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_members_id', 'members', ['id'])
    op.create_index('ix_members_email', 'members', ['email'], unique=True)
    op.create_index('ix_members_external_subject_id', 'members', ['external_subject_id'], unique=True)
    op.create_index('ix_members_approval_status', 'members', ['approval_status'])
    op.create_index('idx_member_branch_status', 'members', ['branch', 'approval_status'])

    op.create_table(
        'sermons',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('category', sa.String(length=50), nullable=False),
        sa.Column('video_url', sa.String(length=500), nullable=False),
        sa.Column('video_path', sa.String(length=500), nullable=True),
        sa.Column('thumbnail_url', sa.String(length=500), nullable=True),
        sa.Column('duration_seconds', sa.Integer(), nullable=True),
        sa.Column('file_size_bytes', sa.Integer(), nullable=True),
        sa.Column('uploaded_by_id', sa.Integer(), nullable=False),
        sa.Column('downloadable', sa.Boolean(), nullable=False),
        sa.Column('view_count', sa.Integer(), nullable=False),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(['uploaded_by_id'], ['administrators.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_sermons_id', 'sermons', ['id'])
    op.create_index('ix_sermons_category', 'sermons', ['category'])
    op.create_index('ix_sermons_is_active', 'sermons', ['is_active'])
    op.create_index('ix_sermons_created_at', 'sermons', ['created_at'])

    op.create_table(
        'events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('starts_at', sa.DateTime(), nullable=False),
        sa.Column('ends_at', sa.DateTime(), nullable=True),
        sa.Column('location', sa.String(length=200), nullable=False),
        sa.Column('branch', event_branch, nullable=False),
        sa.Column('created_by_id', sa.Integer(), nullable=False),
        sa.Column(
            'creator_kind', sa.Enum('member', 'administrator', name='creator_kind'), nullable=False
        ),
        sa.Column('cross_branch_requested', sa.Boolean(), nullable=False),
        sa.Column('cross_branch_approved', sa.Boolean(), nullable=False),
        sa.Column('approved_by_admin_id', sa.Integer(), nullable=True),
        sa.Column('max_attendees', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(['approved_by_admin_id'], ['administrators.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_events_id', 'events', ['id'])
    op.create_index('ix_events_starts_at', 'events', ['starts_at'])
    op.create_index('ix_events_branch', 'events', ['branch'])
    op.create_index('idx_event_branch_active_start', 'events', ['branch', 'is_active', 'starts_at'])

    op.create_table(
        'event_attendees',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('member_id', sa.Integer(), nullable=False),
        sa.Column('registered_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['member_id'], ['members.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('event_id', 'member_id', name='uq_event_attendee'),
    )
    op.create_index('ix_event_attendees_id', 'event_attendees', ['id'])

    op.create_table(
        'blogs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=100), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('excerpt', sa.String(length=300), nullable=False),
        sa.Column('author_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.Enum('draft', 'published', name='blog_status'), nullable=False),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('featured_image_url', sa.String(length=500), nullable=True),
        sa.Column('view_count', sa.Integer(), nullable=False),
        sa.Column('read_time_minutes', sa.Integer(), nullable=False),
        sa.Column('published_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(['author_id'], ['administrators.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_blogs_id', 'blogs', ['id'])
    op.create_index('ix_blogs_published_at', 'blogs', ['published_at'])
    op.create_index('idx_blog_status_published', 'blogs', ['status', 'published_at'])

    op.create_table(
        'prayer_requests',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('submitted_by_id', sa.Integer(), nullable=True),
        sa.Column(
            'submitter_branch',
            sa.Enum('branch1', 'branch2', 'unset', name='submitter_branch'),
            nullable=False,
        ),
        sa.Column('submitter_display_name', sa.String(length=50), nullable=False),
        sa.Column('is_anonymous', sa.Boolean(), nullable=False),
        sa.Column('prayer_count', sa.Integer(), nullable=False),
        sa.Column(
            'status',
            sa.Enum('active', 'answered', 'archived', name='prayer_status'),
            nullable=False,
        ),
        sa.Column('answered_description', sa.String(length=500), nullable=True),
        sa.Column('answered_at', sa.DateTime(), nullable=True),
        sa.Column('is_visible', sa.Boolean(), nullable=False),
        sa.Column(
            'priority',
            sa.Enum('low', 'normal', 'high', 'urgent', name='prayer_priority'),
            nullable=False,
        ),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(['submitted_by_id'], ['members.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_prayer_requests_id', 'prayer_requests', ['id'])
    op.create_index('ix_prayer_requests_submitter_branch', 'prayer_requests', ['submitter_branch'])
    op.create_index('ix_prayer_requests_status', 'prayer_requests', ['status'])
    op.create_index('ix_prayer_requests_created_at', 'prayer_requests', ['created_at'])

    op.create_table(
        'prayer_supporters',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('prayer_id', sa.Integer(), nullable=False),
        sa.Column('member_id', sa.Integer(), nullable=False),
        sa.Column('prayed_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['prayer_id'], ['prayer_requests.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['member_id'], ['members.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('prayer_id', 'member_id', name='uq_prayer_supporter'),
    )
    op.create_index('ix_prayer_supporters_id', 'prayer_supporters', ['id'])


def downgrade() -> None:
    op.drop_table('prayer_supporters')
    op.drop_table('prayer_requests')
    op.drop_table('blogs')
    op.drop_table('event_attendees')
    op.drop_table('events')
    op.drop_table('sermons')
    op.drop_table('members')
    op.drop_table('administrators')
