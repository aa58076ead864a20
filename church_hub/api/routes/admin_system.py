"""
Administrator maintenance routes.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from church_hub.core.dependencies import require_permission
from church_hub.core.responses import success_response
from church_hub.db.models import Administrator, Permission
from church_hub.db.session import get_db
from church_hub.services.maintenance_service import MaintenanceService

router = APIRouter(prefix="/admin/system", tags=["System Maintenance"])


@router.post("/cleanup", summary="Clean Up Inactive Data")
def cleanup_inactive_data(
    dry_run: bool = Query(True, description="Only count rows that would be deleted"),
    administrator: Administrator = Depends(require_permission(Permission.CREATE_ADMINS)),
    db: Session = Depends(get_db),
):
    """
    Hard-delete rejected members, inactive sermons, inactive events and hidden
    prayer requests older than the retention window.
    """
    result = MaintenanceService(db).cleanup_inactive_data(dry_run=dry_run)
    message = "Cleanup simulation completed" if dry_run else "Cleanup completed successfully"
    return success_response(message=message, data=result)
