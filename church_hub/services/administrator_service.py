"""
Business logic service for administrator accounts.

Password-based administrators sign up through an existing administrator
holding ``createAdmins`` and log in with email and password.
"""

import logging

from sqlalchemy.orm import Session

from church_hub.core.exceptions import (
    DuplicateEmailError,
    ForbiddenError,
    InvalidCredentialError,
    ValidationFailedError,
)
from church_hub.core.security import create_administrator_token, get_password_hash, verify_password
from church_hub.db.models import DEFAULT_ADMIN_PERMISSIONS, Administrator, AdminLevel, Permission
from church_hub.repositories.administrator_repository import AdministratorRepository
from church_hub.repositories.member_repository import MemberRepository
from church_hub.schemas.administrator import (
    AdministratorProfileUpdate,
    AdministratorSignup,
    PasswordChange,
)
from church_hub.utils.datetime_helpers import utc_now

logger = logging.getLogger(__name__)

INVALID_LOGIN = "Invalid email or password"


def permissions_for(
    level: AdminLevel,
    requested: list[Permission] | None = None,
    creator: Administrator | None = None,
) -> list[str]:
    """
    Resolve the permission list stored for a new administrator.

    Standard-level creators can only create standard administrators holding a
    subset of their own permissions; without an explicit list the defaults are
    narrowed to what the creator holds.

    Raises:
        ForbiddenError: If a standard-level creator asks for more than they hold
    """
    limited = creator is not None and not creator.is_super_admin
    if limited and level == AdminLevel.SUPER:
        raise ForbiddenError("Only super administrators can create super administrators")

    if requested is not None:
        permissions = list(dict.fromkeys(p.value for p in requested))
        if limited:
            missing = [p for p in permissions if p not in (creator.permissions or [])]
            if missing:
                raise ForbiddenError(
                    f"Cannot grant permissions you do not hold: {', '.join(missing)}"
                )
    elif limited:
        permissions = [p for p in DEFAULT_ADMIN_PERMISSIONS if p in (creator.permissions or [])]
    else:
        permissions = list(DEFAULT_ADMIN_PERMISSIONS)
    if level == AdminLevel.SUPER and Permission.CREATE_ADMINS.value not in permissions:
        permissions.append(Permission.CREATE_ADMINS.value)
    return permissions


class AdministratorService:
    """Service for administrator account business logic."""

    def __init__(self, db: Session):
        self.db = db
        self.administrators = AdministratorRepository(db)

    def signup(self, creator: Administrator | None, data: AdministratorSignup) -> Administrator:
        """
        Create a password-based administrator.

        Args:
            creator: Administrator performing the signup (None when seeding)
            data: Signup details

        Returns:
            Created administrator

        Raises:
            DuplicateEmailError: If the email already belongs to an administrator or member
            ForbiddenError: If a standard-level creator exceeds their own level or permissions
        """
        email = data.email.lower()
        if self.administrators.get_by_email(email) or MemberRepository(self.db).get_by_email(email):
            raise DuplicateEmailError()

        administrator = self.administrators.create(
            {
                "email": email,
                "name": data.name.strip(),
                "title": data.title,
                "bio": data.bio,
                "password_hash": get_password_hash(data.password),
                "admin_level": data.admin_level,
                "permissions": permissions_for(data.admin_level, data.permissions, creator),
                "created_by_admin_id": creator.id if creator else None,
            }
        )
        self.db.commit()
        logger.info(
            f"Administrator {administrator.id} ({data.admin_level.value}) created by "
            f"{creator.id if creator else 'seed'}"
        )
        return administrator

    def login(self, email: str, password: str) -> tuple[Administrator, str]:
        """
        Authenticate a password-based administrator.

        Returns:
            (administrator, access token)

        Raises:
            InvalidCredentialError: On unknown email, wrong password or deactivated account
        """
        administrator = self.administrators.get_with_password(email)
        if administrator is None or not administrator.password_hash:
            logger.warning(f"Administrator login failed for {email}")
            raise InvalidCredentialError(INVALID_LOGIN)
        if not verify_password(password, administrator.password_hash):
            logger.warning(f"Administrator login failed for {email}: wrong password")
            raise InvalidCredentialError(INVALID_LOGIN)
        if not administrator.is_active:
            raise InvalidCredentialError("Account has been deactivated")

        administrator.last_login_at = utc_now()
        self.db.commit()
        logger.info(f"Administrator {administrator.id} logged in")
        return administrator, create_administrator_token(administrator.id)

    def update_profile(
        self, administrator: Administrator, data: AdministratorProfileUpdate
    ) -> Administrator:
        for key, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(administrator, key, value)
        self.db.commit()
        self.db.refresh(administrator)
        logger.info(f"Administrator {administrator.id} updated profile")
        return administrator

    def change_password(self, administrator: Administrator, data: PasswordChange) -> None:
        """
        Raises:
            ValidationFailedError: If the account has no password or the current password is wrong
        """
        self.db.refresh(administrator, attribute_names=["password_hash"])
        if not administrator.password_hash:
            raise ValidationFailedError("This account signs in through the identity provider")
        if not verify_password(data.current_password, administrator.password_hash):
            raise ValidationFailedError(
                "Current password is incorrect",
                errors=[{"field": "current_password", "message": "Current password is incorrect"}],
            )
        administrator.password_hash = get_password_hash(data.new_password)
        self.db.commit()
        logger.info(f"Administrator {administrator.id} changed password")
