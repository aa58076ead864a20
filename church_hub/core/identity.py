"""
Identity provider verification.

Verifies Firebase ID tokens with google-auth and exposes the verified
subject and profile claims. The verifier is built once at startup and
held on ``app.state``.
"""

import logging
from dataclasses import dataclass
from typing import Protocol

import google.auth.exceptions
import google.auth.transport.requests
from google.oauth2 import id_token

from church_hub.core.exceptions import InvalidCredentialError, ServiceUnavailableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerifiedIdentity:
    """Claims taken from a verified identity token."""

    subject_id: str
    email: str
    name: str | None = None
    picture_url: str | None = None


class IdentityVerifier(Protocol):
    def verify(self, token: str) -> VerifiedIdentity: ...


class GoogleIdentityVerifier:
    """Verifies Firebase ID tokens against Google's public keys."""

    def __init__(self, project_id: str):
        self.project_id = project_id
        self._request = google.auth.transport.requests.Request()
        logger.info(f"Initialized identity verifier for project: {project_id}")

    def verify(self, token: str) -> VerifiedIdentity:
        """
        Verify a bearer token.

        Args:
            token: Raw ID token from the Authorization header

        Returns:
            VerifiedIdentity with subject id and profile claims

        Raises:
            ServiceUnavailableError: If Google's certificate endpoint is unreachable
            InvalidCredentialError: If the token is malformed, expired or revoked
        """
        try:
            claims = id_token.verify_firebase_token(
                token, self._request, audience=self.project_id
            )
        except google.auth.exceptions.TransportError as e:
            logger.error(f"Identity provider unreachable: {e}")
            raise ServiceUnavailableError() from None
        except (ValueError, google.auth.exceptions.GoogleAuthError) as e:
            logger.warning(f"Identity token rejected: {e}")
            raise InvalidCredentialError() from None

        if not claims or not claims.get("sub") or not claims.get("email"):
            raise InvalidCredentialError("Identity token is missing required claims")

        return VerifiedIdentity(
            subject_id=claims["sub"],
            email=claims["email"].strip().lower(),
            name=claims.get("name"),
            picture_url=claims.get("picture"),
        )
