"""
Periodic data cleanup.

Hard-deletes rows that were soft-deleted or rejected longer ago than
``settings.cleanup_retention_days``: rejected members, inactive sermons,
inactive events and hidden prayer requests.
"""

import logging
from datetime import timedelta

from sqlalchemy import func
from sqlalchemy.orm import Session

from church_hub.core.config import settings
from church_hub.db.models import (
    ApprovalStatus,
    Event,
    EventAttendee,
    Member,
    PrayerRequest,
    PrayerSupporter,
    Sermon,
)
from church_hub.utils.datetime_helpers import utc_now

logger = logging.getLogger(__name__)


class MaintenanceService:
    """Service for retention cleanup."""

    def __init__(self, db: Session):
        self.db = db

    def cleanup_inactive_data(self, dry_run: bool = True) -> dict:
        """
        Delete expired rejected members and soft-deleted content.

        Args:
            dry_run: Only count what would be deleted

        Returns:
            dict with the cutoff, per-category counts and their total
        """
        cutoff = utc_now() - timedelta(days=settings.cleanup_retention_days)

        member_ids = self._ids(
            Member.id,
            Member.approval_status == ApprovalStatus.REJECTED,
            Member.approved_at.isnot(None),
            Member.approved_at < cutoff,
        )
        sermon_ids = self._ids(Sermon.id, Sermon.is_active.is_(False), Sermon.updated_at < cutoff)
        event_ids = self._ids(Event.id, Event.is_active.is_(False), Event.updated_at < cutoff)
        prayer_ids = self._ids(
            PrayerRequest.id,
            PrayerRequest.is_visible.is_(False),
            PrayerRequest.updated_at < cutoff,
        )

        if not dry_run:
            self._delete_prayers(prayer_ids)
            self._delete_members(member_ids)
            self._delete_events(event_ids)
            if sermon_ids:
                self.db.query(Sermon).filter(Sermon.id.in_(sermon_ids)).delete(
                    synchronize_session=False
                )
            self.db.commit()

        counts = {
            "rejected_members": len(member_ids),
            "inactive_sermons": len(sermon_ids),
            "inactive_events": len(event_ids),
            "hidden_prayers": len(prayer_ids),
        }
        counts["total"] = sum(counts.values())
        logger.info(
            f"Cleanup {'simulated' if dry_run else 'completed'} for data older than "
            f"{cutoff.isoformat()}: {counts}"
        )
        return {"dry_run": dry_run, "cutoff": cutoff, **counts}

    def _ids(self, column, *criteria) -> list[int]:
        return [row[0] for row in self.db.query(column).filter(*criteria).all()]

    def _delete_prayers(self, prayer_ids: list[int]) -> None:
        if not prayer_ids:
            return
        self.db.query(PrayerSupporter).filter(PrayerSupporter.prayer_id.in_(prayer_ids)).delete(
            synchronize_session=False
        )
        self.db.query(PrayerRequest).filter(PrayerRequest.id.in_(prayer_ids)).delete(
            synchronize_session=False
        )

    def _delete_events(self, event_ids: list[int]) -> None:
        if not event_ids:
            return
        self.db.query(EventAttendee).filter(EventAttendee.event_id.in_(event_ids)).delete(
            synchronize_session=False
        )
        self.db.query(Event).filter(Event.id.in_(event_ids)).delete(synchronize_session=False)

    def _delete_members(self, member_ids: list[int]) -> None:
        """Remove members; prayers they submitted stay, without a submitter."""
        if not member_ids:
            return
        supported = (
            self.db.query(PrayerSupporter.prayer_id, func.count(PrayerSupporter.id))
            .filter(PrayerSupporter.member_id.in_(member_ids))
            .group_by(PrayerSupporter.prayer_id)
            .all()
        )
        for prayer_id, removed in supported:
            self.db.query(PrayerRequest).filter(PrayerRequest.id == prayer_id).update(
                {PrayerRequest.prayer_count: PrayerRequest.prayer_count - removed},
                synchronize_session=False,
            )
        self.db.query(PrayerSupporter).filter(PrayerSupporter.member_id.in_(member_ids)).delete(
            synchronize_session=False
        )
        self.db.query(EventAttendee).filter(EventAttendee.member_id.in_(member_ids)).delete(
            synchronize_session=False
        )
        self.db.query(PrayerRequest).filter(PrayerRequest.submitted_by_id.in_(member_ids)).update(
            {PrayerRequest.submitted_by_id: None}, synchronize_session=False
        )
        self.db.query(Member).filter(Member.id.in_(member_ids)).delete(synchronize_session=False)
