# clockwise/core/exceptions.py
# Domain errors raised by the services layer and mapped to HTTP status codes by the endpoints.
import logging
from typing import Dict, Optional

from fastapi import HTTPException, status

logger = logging.getLogger(__name__)


class ClockWiseError(Exception):
    """Base exception for business rule violations."""

    status_code = status.HTTP_400_BAD_REQUEST


class ValidationError(ClockWiseError):
    """Raised when a payload fails validation. Carries one message per field."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, errors: Dict[str, str]):
        self.errors = errors
        super().__init__("; ".join(f"{field}: {msg}" for field, msg in errors.items()))


class AuthenticationError(ClockWiseError):
    status_code = status.HTTP_401_UNAUTHORIZED


class AuthorizationError(ClockWiseError):
    status_code = status.HTTP_403_FORBIDDEN


class MissingOrganizationError(ClockWiseError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(ClockWiseError):
    status_code = status.HTTP_404_NOT_FOUND


class InvalidTransitionError(ClockWiseError):
    """Raised when an entry is moved to a status its current status does not allow."""

    status_code = status.HTTP_409_CONFLICT


class DataIntegrityError(ClockWiseError):
    """Raised when stored data breaks an invariant validation should have enforced."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class AuthProviderError(ClockWiseError):
    """Raised when the auth provider's admin API answers with an error."""

    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, message: str, provider_status: Optional[int] = None):
        self.message = message
        self.provider_status = provider_status
        super().__init__(message)


def to_http_exception(error: ClockWiseError) -> HTTPException:
    if isinstance(error, ValidationError):
        return HTTPException(status_code=error.status_code, detail=error.errors)
    return HTTPException(status_code=error.status_code, detail=str(error))


def user_error_message(error: object, context: str = "operation") -> str:
    """
    Maps a technical error to a message that can be shown to an end user.
    The technical message is logged, never returned.
    """
    technical = str(error) or error.__class__.__name__
    logger.error("Error in %s: %s", context, technical)

    lowered = technical.lower()
    if "duplicate key" in lowered or "unique constraint" in lowered:
        return "This record already exists. Please use a different value."
    if "foreign key" in lowered:
        return "Cannot complete this action. Related records may be in use."
    if "permission denied" in lowered or "policy" in lowered:
        return "You don't have permission to perform this action."
    if "fetch" in lowered or "network" in lowered:
        return "Connection error. Please check your internet and try again."
    if "validation" in lowered or "invalid" in lowered:
        return technical
    if "auth" in lowered or "unauthorized" in lowered:
        return "Authentication error. Please sign in again."

    if "create user" in context or "user creation" in context:
        return "Failed to create user. Please check the email address and try again."
    if "update user" in context or "user update" in context:
        return "Failed to update user information. Please try again."
    if "department" in context:
        return "Failed to process department. Please try again."
    if "timesheet" in context or "entry" in context:
        return "Failed to process timesheet entry. Please try again."
    if "approval" in context:
        return "Failed to process approval. Please try again."
    return f"Failed to complete {context}. Please try again."
