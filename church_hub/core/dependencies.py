"""
FastAPI dependency functions for authentication and authorization.

The chain is verify -> resolve -> authorize: ``get_auth_context`` turns the
bearer token into an ``AuthContext`` and the ``require_*`` dependencies
narrow it for individual routes.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from church_hub.core.config import settings
from church_hub.core.exceptions import (
    AccountNotApprovedError,
    ForbiddenError,
    InvalidCredentialError,
)
from church_hub.core.identity import IdentityVerifier, VerifiedIdentity
from church_hub.core.security import decode_administrator_token, is_local_token
from church_hub.db.models import Administrator, ApprovalStatus, Member, Permission
from church_hub.db.session import get_db
from church_hub.repositories.administrator_repository import AdministratorRepository
from church_hub.services.principal_resolver import AuthContext, PrincipalKind, PrincipalResolver
from church_hub.services.storage_service import BlobStorage

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_identity_verifier(request: Request) -> IdentityVerifier:
    """Identity verifier built at startup."""
    return request.app.state.identity_verifier


def get_blob_storage(request: Request) -> BlobStorage:
    """Blob storage gateway built at startup."""
    return request.app.state.blob_storage


def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    if credentials is None or not credentials.credentials:
        raise InvalidCredentialError("Authentication token is required")
    return credentials.credentials


def get_verified_identity(
    token: str = Depends(get_bearer_token),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> VerifiedIdentity:
    return verifier.verify(token)


def get_auth_context(
    token: str = Depends(get_bearer_token),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
    db: Session = Depends(get_db),
) -> AuthContext:
    """
    Build the request's AuthContext from its bearer token.

    Locally signed administrator tokens are decoded here; anything else goes
    to the identity provider. Principals are never created on this path,
    only by ``POST /auth/login``.

    Raises:
        InvalidCredentialError: Token invalid, principal unknown or deactivated
        ServiceUnavailableError: Identity provider unreachable
    """
    if is_local_token(token):
        administrator_id = decode_administrator_token(token)
        administrator = AdministratorRepository(db).get_by_id(administrator_id)
        if administrator is None:
            raise InvalidCredentialError("Account not found")
        context = AuthContext(PrincipalKind.ADMINISTRATOR, administrator)
    else:
        identity = verifier.verify(token)
        context = PrincipalResolver(db).lookup(identity.subject_id)
        if context is None:
            raise InvalidCredentialError("Account not found. Please log in first.")

    if not context.principal.is_active:
        logger.warning(f"Deactivated {context.kind.value} {context.principal.id} attempted access")
        raise InvalidCredentialError("Account has been deactivated")

    return context


def approval_denial(member: Member) -> AccountNotApprovedError:
    """Build the error returned to members who are not approved."""
    if member.approval_status == ApprovalStatus.REJECTED:
        message = "Your account has been rejected"
    else:
        message = "Your account is pending approval by an administrator"
    return AccountNotApprovedError(
        message,
        data={
            "approval_status": member.approval_status.value,
            "rejection_reason": member.rejection_reason,
            "branch": member.branch.value,
        },
    )


def require_approved(context: AuthContext = Depends(get_auth_context)) -> AuthContext:
    """Reject members who are not approved; administrators always pass."""
    if context.is_administrator:
        return context
    if context.principal.approval_status != ApprovalStatus.APPROVED:
        raise approval_denial(context.principal)
    return context


def require_member(context: AuthContext = Depends(get_auth_context)) -> Member:
    """Any member regardless of approval status."""
    if context.kind != PrincipalKind.MEMBER:
        raise ForbiddenError("This action is only available to members")
    return context.principal


def require_approved_member(context: AuthContext = Depends(require_approved)) -> Member:
    if context.kind != PrincipalKind.MEMBER:
        raise ForbiddenError("This action is only available to members")
    return context.principal


def require_administrator(context: AuthContext = Depends(get_auth_context)) -> Administrator:
    if not context.is_administrator:
        raise ForbiddenError("Administrator access required")
    return context.principal


def require_permission(permission: Permission) -> Callable[..., Administrator]:
    """
    Dependency factory for administrator capabilities.

    Usage:
        @router.post("/sermons")
        def upload_sermon(
            administrator: Administrator = Depends(require_permission(Permission.MANAGE_SERMONS)),
        ):
            ...
    """

    def dependency(administrator: Administrator = Depends(require_administrator)) -> Administrator:
        if not administrator.has_permission(permission):
            raise ForbiddenError(f"Permission required: {permission.value}")
        return administrator

    return dependency


@dataclass(frozen=True)
class PageParams:
    page: int
    per_page: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page


def get_page_params(
    page: int = Query(1, ge=1, description="Page number (1-based)"),
    limit: int = Query(
        settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        description="Items per page",
    ),
) -> PageParams:
    return PageParams(page=page, per_page=limit)
