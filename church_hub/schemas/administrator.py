"""
Pydantic schemas for administrators and password authentication.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from church_hub.db.models import AdminLevel, Permission

ADMIN_TITLES = ("Pastor", "Associate Pastor", "Admin")


def _validate_password_strength(v: str) -> str:
    if not any(c.isupper() for c in v) or not any(c.islower() for c in v):
        raise ValueError("Password must contain both uppercase and lowercase letters")
    if not any(c.isdigit() for c in v):
        raise ValueError("Password must contain at least one digit")
    return v


class AdministratorOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str
    title: str
    bio: str | None = None
    avatar_url: str | None = None
    admin_level: AdminLevel
    permissions: list[str]
    is_active: bool
    last_login_at: datetime | None = None
    created_by_admin_id: int | None = None
    created_at: datetime | None = None


class AdministratorSignup(BaseModel):
    """
    Schema for creating a password-based administrator.

    **REQUIRED FIELDS:**
    - email, name (2-50 chars), password (8-128 chars, mixed case and a digit)

    **OPTIONAL FIELDS:**
    - title: Pastor, Associate Pastor or Admin (default Pastor)
    - admin_level: standard or super (super also grants createAdmins)
    - permissions: explicit capability list (defaults to every capability except createAdmins)
    """

    email: EmailStr
    name: str = Field(..., min_length=2, max_length=50)
    password: str = Field(..., min_length=8, max_length=128)
    title: str = Field("Pastor")
    bio: str | None = Field(None, max_length=1000)
    admin_level: AdminLevel = AdminLevel.STANDARD
    permissions: list[Permission] | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        if v not in ADMIN_TITLES:
            raise ValueError(f"Title must be one of: {', '.join(ADMIN_TITLES)}")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _validate_password_strength(v)


class AdministratorLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class AdministratorProfileUpdate(BaseModel):
    name: str | None = Field(None, min_length=2, max_length=50)
    title: str | None = None
    bio: str | None = Field(None, max_length=1000)
    avatar_url: str | None = Field(None, max_length=500)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str | None) -> str | None:
        if v is not None and v not in ADMIN_TITLES:
            raise ValueError(f"Title must be one of: {', '.join(ADMIN_TITLES)}")
        return v


class PasswordChange(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=128)

    @field_validator("new_password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _validate_password_strength(v)
