"""
Business logic services for the application.

This module contains service classes that encapsulate business logic,
keeping route handlers clean and focused on HTTP concerns.
"""

from .administrator_service import AdministratorService
from .approval_service import ApprovalService
from .blog_service import BlogService
from .event_service import EventService
from .maintenance_service import MaintenanceService
from .member_service import MemberService
from .prayer_service import PrayerService
from .principal_resolver import PrincipalResolver
from .sermon_service import SermonService

__all__ = [
    "AdministratorService",
    "ApprovalService",
    "BlogService",
    "EventService",
    "MaintenanceService",
    "MemberService",
    "PrayerService",
    "PrincipalResolver",
    "SermonService",
]
