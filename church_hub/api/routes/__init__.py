"""
API routes package initialization.

This package contains all API route modules organized by functionality.
"""

from . import (
    admin_auth,
    admin_system,
    admin_users,
    auth,
    blogs,
    events,
    health,
    prayers,
    sermons,
    users,
)

__all__ = [
    "admin_auth",
    "admin_system",
    "admin_users",
    "auth",
    "blogs",
    "events",
    "health",
    "prayers",
    "sermons",
    "users",
]
