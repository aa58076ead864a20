"""
Maps verified identities to members and administrators.

Every authenticated request carries an ``AuthContext``, a tagged value
holding exactly one principal. Handlers branch on ``ctx.kind`` once instead
of checking for a member and then an administrator separately.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from church_hub.core.exceptions import DuplicateEmailError, InvalidCredentialError
from church_hub.core.identity import VerifiedIdentity
from church_hub.db.models import (
    DEFAULT_ADMIN_PERMISSIONS,
    Administrator,
    AdminLevel,
    ApprovalStatus,
    Member,
    MemberBranch,
)
from church_hub.repositories.administrator_repository import AdministratorRepository
from church_hub.repositories.member_repository import MemberRepository
from church_hub.utils.datetime_helpers import utc_now

logger = logging.getLogger(__name__)


class PrincipalKind(str, Enum):
    MEMBER = "member"
    ADMINISTRATOR = "administrator"


class ResolutionKind(str, Enum):
    """How a login was resolved."""

    MEMBER = "member"
    ADMINISTRATOR = "administrator"
    CREATED_MEMBER_NEEDS_BRANCH = "created-member-needs-branch"
    CREATED_ADMINISTRATOR = "created-administrator"


@dataclass(frozen=True)
class AuthContext:
    """The authenticated principal for one request."""

    kind: PrincipalKind
    principal: Member | Administrator

    @property
    def is_administrator(self) -> bool:
        return self.kind == PrincipalKind.ADMINISTRATOR

    @property
    def member(self) -> Member | None:
        return self.principal if self.kind == PrincipalKind.MEMBER else None

    @property
    def administrator(self) -> Administrator | None:
        return self.principal if self.kind == PrincipalKind.ADMINISTRATOR else None

    @property
    def branch_scope(self) -> MemberBranch | None:
        """Branch used to filter events; None means unrestricted."""
        return None if self.is_administrator else self.principal.branch

    def owns(self, creator_kind: str, creator_id: int | None) -> bool:
        return creator_kind == self.kind.value and creator_id == self.principal.id


@dataclass(frozen=True)
class Resolution:
    kind: ResolutionKind
    context: AuthContext


def member_next_step(member: Member) -> str:
    """Where the client should send a member after login."""
    if member.branch == MemberBranch.UNSET:
        return "select-branch"
    if member.approval_status == ApprovalStatus.REJECTED:
        return "rejected"
    if member.approval_status == ApprovalStatus.PENDING:
        return "pending-approval"
    return "dashboard"


def next_step(context: AuthContext) -> str:
    if context.is_administrator:
        return "admin-dashboard"
    return member_next_step(context.principal)


def _ensure_active(principal: Member | Administrator) -> None:
    if not principal.is_active:
        raise InvalidCredentialError("Account has been deactivated")


class PrincipalResolver:
    """Resolves identity subjects to principals, creating them on first login."""

    def __init__(self, db: Session, administrator_emails: list[str] | None = None):
        self.db = db
        self.members = MemberRepository(db)
        self.administrators = AdministratorRepository(db)
        self.administrator_emails = {e.lower() for e in administrator_emails or []}

    def lookup(self, subject_id: str) -> AuthContext | None:
        """Find the principal bound to ``subject_id`` without creating anything."""
        member = self.members.get_by_subject(subject_id)
        if member:
            return AuthContext(PrincipalKind.MEMBER, member)

        administrator = self.administrators.get_by_subject(subject_id)
        if administrator:
            return AuthContext(PrincipalKind.ADMINISTRATOR, administrator)

        return None

    def resolve(self, identity: VerifiedIdentity) -> Resolution:
        """
        Resolve a verified identity to exactly one principal.

        Lookup order is: existing subject binding, then a pre-registered member
        or administrator with the same email and no subject yet, then creation.
        Repeated calls with the same subject return the same principal.

        Args:
            identity: Verified identity claims

        Returns:
            Resolution with the principal and how it was obtained

        Raises:
            DuplicateEmailError: If the email already belongs to another subject
            InvalidCredentialError: If the principal has been deactivated
        """
        context = self.lookup(identity.subject_id)
        if context:
            _ensure_active(context.principal)
            return self._login(context, created=False)

        try:
            context, created = self._link_or_create(identity)
            self.db.flush()
        except IntegrityError:
            # A concurrent login created the principal first
            self.db.rollback()
            context = self.lookup(identity.subject_id)
            if context is None:
                raise DuplicateEmailError() from None
            created = False

        return self._login(context, created=created)

    def _link_or_create(self, identity: VerifiedIdentity) -> tuple[AuthContext, bool]:
        email = identity.email.lower()

        member = self.members.get_by_email(email)
        administrator = self.administrators.get_by_email(email)
        existing = member or administrator
        if existing is not None:
            _ensure_active(existing)
            if existing.external_subject_id and existing.external_subject_id != identity.subject_id:
                logger.warning(f"Email {email} already bound to a different identity subject")
                raise DuplicateEmailError()
            existing.external_subject_id = identity.subject_id
            if not existing.avatar_url and identity.picture_url:
                existing.avatar_url = identity.picture_url
            kind = PrincipalKind.MEMBER if member else PrincipalKind.ADMINISTRATOR
            logger.info(f"Linked pre-registered {kind.value} {existing.id} to identity subject")
            return AuthContext(kind, existing), False

        name = (identity.name or email.split("@")[0])[:50]

        if email in self.administrator_emails:
            administrator = self.administrators.create(
                {
                    "external_subject_id": identity.subject_id,
                    "email": email,
                    "name": name,
                    "avatar_url": identity.picture_url,
                    "admin_level": AdminLevel.STANDARD,
                    "permissions": list(DEFAULT_ADMIN_PERMISSIONS),
                }
            )
            logger.info(f"Created administrator {administrator.id} from pre-seeded email {email}")
            return AuthContext(PrincipalKind.ADMINISTRATOR, administrator), True

        member = self.members.create(
            {
                "external_subject_id": identity.subject_id,
                "email": email,
                "name": name,
                "avatar_url": identity.picture_url,
                "branch": MemberBranch.UNSET,
                "approval_status": ApprovalStatus.PENDING,
            }
        )
        logger.info(f"Created member {member.id} for {email}, awaiting branch selection")
        return AuthContext(PrincipalKind.MEMBER, member), True

    def _login(self, context: AuthContext, created: bool) -> Resolution:
        context.principal.last_login_at = utc_now()
        self.db.commit()

        if context.is_administrator:
            kind = ResolutionKind.CREATED_ADMINISTRATOR if created else ResolutionKind.ADMINISTRATOR
        else:
            kind = ResolutionKind.CREATED_MEMBER_NEEDS_BRANCH if created else ResolutionKind.MEMBER
        return Resolution(kind, context)
