"""
Pytest configuration and shared fixtures.

This file is automatically loaded by pytest before any tests run.
"""

import os
import tempfile

# Set test environment variables BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["ENVIRONMENT"] = "testing"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-for-testing"
os.environ["USE_GCS"] = "false"  # Disable GCS for tests
os.environ["UPLOAD_DIRECTORY"] = tempfile.mkdtemp(prefix="church-hub-uploads-")
os.environ["RATE_LIMIT_CALLS"] = "100000"
os.environ["ADMINISTRATOR_EMAILS"] = '["pastor@church.org"]'

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from church_hub.core.dependencies import get_blob_storage, get_identity_verifier  # noqa: E402
from church_hub.core.exceptions import InvalidCredentialError  # noqa: E402
from church_hub.core.identity import VerifiedIdentity  # noqa: E402
from church_hub.core.security import create_administrator_token, get_password_hash  # noqa: E402
from church_hub.db.models import (  # noqa: E402
    DEFAULT_ADMIN_PERMISSIONS,
    Administrator,
    AdminLevel,
    ApprovalStatus,
    Base,
    Member,
    MemberBranch,
)
from church_hub.db.session import SessionLocal, engine  # noqa: E402
from church_hub.services.storage_service import LocalBlobStorage  # noqa: E402
from main import app  # noqa: E402


class FakeIdentityVerifier:
    """Accepts only tokens registered with ``add``."""

    def __init__(self):
        self.identities: dict[str, VerifiedIdentity] = {}

    def add(self, token: str, subject_id: str, email: str, name: str | None = None) -> str:
        self.identities[token] = VerifiedIdentity(subject_id=subject_id, email=email, name=name)
        return token

    def verify(self, token: str) -> VerifiedIdentity:
        identity = self.identities.get(token)
        if identity is None:
            raise InvalidCredentialError()
        return identity


@pytest.fixture(autouse=True)
def setup_and_teardown_db():
    """Create and drop tables for each test."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def identity_verifier():
    return FakeIdentityVerifier()


@pytest.fixture
def blob_storage(tmp_path):
    return LocalBlobStorage(tmp_path / "blobs", base_url="/media")


@pytest.fixture
def client(identity_verifier, blob_storage):
    app.dependency_overrides[get_identity_verifier] = lambda: identity_verifier
    app.dependency_overrides[get_blob_storage] = lambda: blob_storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def create_member(db, identity_verifier):
    """Factory for members bound to an identity token ``token-<email>``."""

    def _create(
        email: str = "member@test.com",
        branch: MemberBranch = MemberBranch.BRANCH1,
        status: ApprovalStatus = ApprovalStatus.APPROVED,
        name: str = "Test Member",
    ) -> Member:
        member = Member(
            email=email,
            name=name,
            branch=branch,
            approval_status=status,
            external_subject_id=f"uid-{email}",
            is_active=True,
        )
        db.add(member)
        db.commit()
        db.refresh(member)
        identity_verifier.add(f"token-{email}", f"uid-{email}", email, name)
        return member

    return _create


@pytest.fixture
def create_admin(db):
    """Factory for password-based administrators."""

    def _create(
        email: str = "admin@test.com",
        level: AdminLevel = AdminLevel.STANDARD,
        permissions: list[str] | None = None,
        password: str = "Secret123",
    ) -> Administrator:
        administrator = Administrator(
            email=email,
            name="Test Pastor",
            title="Pastor",
            password_hash=get_password_hash(password),
            admin_level=level,
            permissions=list(DEFAULT_ADMIN_PERMISSIONS) if permissions is None else permissions,
            is_active=True,
        )
        db.add(administrator)
        db.commit()
        db.refresh(administrator)
        return administrator

    return _create


@pytest.fixture
def member_headers():
    def _headers(member: Member) -> dict:
        return {"Authorization": f"Bearer token-{member.email}"}

    return _headers


@pytest.fixture
def admin_headers():
    def _headers(administrator: Administrator) -> dict:
        return {"Authorization": f"Bearer {create_administrator_token(administrator.id)}"}

    return _headers
