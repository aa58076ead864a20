"""
Domain exception hierarchy.

Services and dependencies raise these close to where a problem is detected.
The handlers registered in ``main.py`` translate them into the standard
error envelope, so route handlers never build error responses themselves.
"""

from typing import Any

from fastapi import status


class ApplicationError(Exception):
    """Base exception class for application errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "Internal"
    default_message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: str | None = None,
        data: Any = None,
        errors: list[dict[str, str]] | None = None,
    ):
        self.message = message or self.default_message
        self.data = data
        self.errors = errors
        super().__init__(self.message)


class InvalidCredentialError(ApplicationError):
    """Bearer credential missing, malformed, expired or revoked."""

    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "InvalidCredential"
    default_message = "Invalid or expired authentication token"


class ServiceUnavailableError(ApplicationError):
    """An upstream provider could not be reached."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "ServiceUnavailable"
    default_message = "Authentication service is temporarily unavailable"


class ForbiddenError(ApplicationError):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "Forbidden"
    default_message = "You do not have permission to perform this action"


class AccountNotApprovedError(ForbiddenError):
    """Member has not been approved by an administrator."""

    error_code = "AccountNotApproved"
    default_message = "Your account is awaiting approval"


class NotFoundError(ApplicationError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NotFound"
    default_message = "Resource not found"


class ValidationFailedError(ApplicationError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "ValidationFailed"
    default_message = "Validation failed"


class InvalidBranchError(ValidationFailedError):
    error_code = "InvalidBranch"
    default_message = "Branch must be one of: branch1, branch2"


class PrayerNotActiveError(ApplicationError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "PrayerNotActive"
    default_message = "Cannot pray for an inactive prayer request"


class ConflictError(ApplicationError):
    status_code = status.HTTP_409_CONFLICT
    error_code = "Conflict"
    default_message = "Request conflicts with the current state of the resource"


class AlreadyApprovedError(ConflictError):
    error_code = "AlreadyApproved"
    default_message = "User is already approved"


class AlreadyRejectedError(ConflictError):
    error_code = "AlreadyRejected"
    default_message = "User is already rejected"


class AlreadyRegisteredError(ConflictError):
    error_code = "AlreadyRegistered"
    default_message = "You are already registered for this event"


class EventFullError(ConflictError):
    error_code = "EventFull"
    default_message = "Event is full"


class DuplicateEmailError(ConflictError):
    error_code = "DuplicateEmail"
    default_message = "An account with this email already exists"


class RateLimitedError(ApplicationError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    error_code = "RateLimited"
    default_message = "Too many requests, please try again later"
