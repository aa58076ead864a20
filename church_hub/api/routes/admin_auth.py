"""
Password authentication and profile routes for administrators.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from church_hub.core.dependencies import require_administrator, require_permission
from church_hub.core.responses import created_response, success_response
from church_hub.db.models import Administrator, Permission
from church_hub.db.session import get_db
from church_hub.schemas.administrator import (
    AdministratorLogin,
    AdministratorOut,
    AdministratorProfileUpdate,
    AdministratorSignup,
    PasswordChange,
)
from church_hub.services.administrator_service import AdministratorService

router = APIRouter(prefix="/admin-auth", tags=["Administrator Authentication"])


def _administrator_data(administrator: Administrator) -> dict:
    return AdministratorOut.model_validate(administrator).model_dump(mode="json")


@router.post(
    "/signup",
    status_code=status.HTTP_201_CREATED,
    summary="Create Administrator",
    description="""
Create a password-based administrator.

**AUTHENTICATION:**
- Requires an administrator with the `createAdmins` permission
    """,
)
def signup(
    data: AdministratorSignup,
    creator: Administrator = Depends(require_permission(Permission.CREATE_ADMINS)),
    db: Session = Depends(get_db),
):
    administrator = AdministratorService(db).signup(creator, data)
    return created_response(
        message="Administrator created successfully", data=_administrator_data(administrator)
    )


@router.post("/login", summary="Administrator Login")
def login(credentials: AdministratorLogin, db: Session = Depends(get_db)):
    """Exchange email and password for a bearer token."""
    administrator, token = AdministratorService(db).login(credentials.email, credentials.password)
    return success_response(
        message="Login successful",
        data={
            "access_token": token,
            "token_type": "bearer",
            "administrator": _administrator_data(administrator),
        },
    )


@router.get("/profile", summary="Get Administrator Profile")
def get_profile(administrator: Administrator = Depends(require_administrator)):
    return success_response(
        message="Profile retrieved successfully", data=_administrator_data(administrator)
    )


@router.put("/profile", summary="Update Administrator Profile")
def update_profile(
    data: AdministratorProfileUpdate,
    administrator: Administrator = Depends(require_administrator),
    db: Session = Depends(get_db),
):
    administrator = AdministratorService(db).update_profile(administrator, data)
    return success_response(
        message="Profile updated successfully", data=_administrator_data(administrator)
    )


@router.post("/change-password", summary="Change Administrator Password")
def change_password(
    data: PasswordChange,
    administrator: Administrator = Depends(require_administrator),
    db: Session = Depends(get_db),
):
    AdministratorService(db).change_password(administrator, data)
    return success_response(message="Password changed successfully")
