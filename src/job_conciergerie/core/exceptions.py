from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""

    status_code = 404


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403


class ExternalServiceError(DomainError):
    """Raised when a third-party service (file pinning, SMTP) fails."""

    status_code = 502

    def __init__(self, message: str, *, status_code: Optional[int] = None, details: Optional[str] = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code
        self.details = details


class StorageError(ExternalServiceError):
    """Raised when the file pinning API rejects a request."""


class EmailDeliveryError(ExternalServiceError):
    """Raised when the SMTP relay cannot deliver a message."""
