"""
Member and identity-provider authentication routes.

``POST /auth/login`` is the only endpoint that creates principals; every
other route resolves an existing one.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from church_hub.core.config import settings
from church_hub.core.dependencies import get_auth_context, get_verified_identity, require_member
from church_hub.core.identity import VerifiedIdentity
from church_hub.core.responses import created_response, success_response
from church_hub.db.models import Member
from church_hub.db.session import get_db
from church_hub.schemas.administrator import AdministratorOut
from church_hub.schemas.member import BranchSelection, MemberOut, MemberRegistration
from church_hub.services.approval_service import ApprovalService
from church_hub.services.member_service import MemberService
from church_hub.services.principal_resolver import (
    AuthContext,
    PrincipalResolver,
    member_next_step,
    next_step,
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def principal_snapshot(context: AuthContext) -> dict:
    """Serialize the principal with its kind and the client's next step."""
    schema = AdministratorOut if context.is_administrator else MemberOut
    return {
        "kind": context.kind.value,
        "next_step": next_step(context),
        "principal": schema.model_validate(context.principal).model_dump(mode="json"),
    }


@router.post(
    "/login",
    summary="Login with Identity Token",
    description="""
Resolve the bearer identity token to a member or administrator.

First-time logins create a pending member (or an administrator for
pre-seeded administrator emails). The response includes `result`
(`member`, `administrator`, `created-member-needs-branch`,
`created-administrator`) and `next_step` (`select-branch`,
`pending-approval`, `rejected`, `dashboard`, `admin-dashboard`).
    """,
)
def login(
    identity: VerifiedIdentity = Depends(get_verified_identity),
    db: Session = Depends(get_db),
):
    resolution = PrincipalResolver(db, settings.administrator_emails).resolve(identity)

    data = principal_snapshot(resolution.context)
    data["result"] = resolution.kind.value
    return success_response(message="Login successful", data=data)


@router.post("/register", status_code=status.HTTP_201_CREATED, summary="Pre-register Member")
def register(data: MemberRegistration, db: Session = Depends(get_db)):
    """Create a pending member that is linked on first login with the same email."""
    member = MemberService(db).pre_register(data)
    return created_response(
        message="Registration received. Please log in to select your branch.",
        data=MemberOut.model_validate(member).model_dump(mode="json"),
    )


@router.post("/select-branch", summary="Select Branch")
def select_branch(
    selection: BranchSelection,
    member: Member = Depends(require_member),
    db: Session = Depends(get_db),
):
    """
    Choose branch1 or branch2.

    Selecting a branch always sends the member back to pending approval.
    """
    member = ApprovalService(db).change_branch(member, selection.branch)
    return success_response(
        message="Branch selected. Your account is pending approval.",
        data={
            "next_step": member_next_step(member),
            "principal": MemberOut.model_validate(member).model_dump(mode="json"),
        },
    )


@router.get("/status", summary="Current Principal Status")
def get_status(context: AuthContext = Depends(get_auth_context)):
    return success_response(message="Status retrieved successfully", data=principal_snapshot(context))


@router.post("/logout", summary="Logout")
def logout(context: AuthContext = Depends(get_auth_context)):
    """Tokens are stateless; clients discard them."""
    return success_response(message="Logged out successfully")
