from __future__ import annotations

from datetime import datetime
from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class BadRequestError(DomainError):
    """Raised when a request cannot be processed as given."""


class ValidationError(BadRequestError):
    """Raised when input data is invalid or violates domain rules."""


class ResourceNotFoundError(DomainError):
    """Raised when a requested resource does not exist for the tenant."""


class ConflictError(DomainError):
    """Raised when a resource with the same identity already exists."""


class UnauthorizedError(DomainError):
    """Raised when the caller is not authenticated."""


class AuthenticationError(UnauthorizedError):
    """Raised when login credentials are invalid."""


class ForbiddenError(DomainError):
    """Raised when a user lacks permission for an action."""


class UserBlockedError(ForbiddenError):
    def __init__(self, message: str, *, blocked_until: datetime):
        super().__init__(message)
        self.blocked_until = blocked_until


class PasswordResetRequiredError(ForbiddenError):
    def __init__(self, message: str, *, reset_token: Optional[str] = None):
        super().__init__(message)
        self.reset_token = reset_token


class PinSetupRequiredError(BadRequestError):
    """Raised when PIN login is attempted before a PIN was configured."""


# Volume (shipping package) errors
class VolumeNotFoundError(ResourceNotFoundError):
    pass


class VolumeItemNotFoundError(ResourceNotFoundError):
    pass


class VolumeAlreadyExistsError(ConflictError):
    pass


class VolumeItemAlreadyExistsError(ConflictError):
    pass


class VolumeCannotBeClosedError(BadRequestError):
    pass


class InvalidVolumeStatusError(BadRequestError):
    pass
