"""Custom exception hierarchy for the CAD API."""

from __future__ import annotations


class AppError(Exception):
    """Base application error with a stable machine-readable code."""

    def __init__(self, message: str, code: str, status_code: int = 400) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> dict[str, str]:
        """Serialize the error in the API standard shape."""
        return {"error": self.message, "code": self.code}


class NotFoundError(AppError):
    """Raised when a requested resource does not exist."""

    def __init__(self, resource: str) -> None:
        super().__init__(message=f"{resource} not found", code="NOT_FOUND", status_code=404)


class ForbiddenError(AppError):
    """Raised when the user lacks permission for the action."""

    def __init__(self, reason: str = "You don't have permission") -> None:
        super().__init__(message=reason, code="FORBIDDEN", status_code=403)


class ConflictError(AppError):
    """Raised on duplicate/conflicting operations."""

    def __init__(self, reason: str, code: str = "CONFLICT") -> None:
        super().__init__(message=reason, code=code, status_code=409)


class UnauthorizedError(AppError):
    """Raised when the caller is not authenticated."""

    def __init__(self, reason: str = "Unauthorized") -> None:
        super().__init__(message=reason, code="UNAUTHORIZED", status_code=401)


class InvalidInputError(AppError):
    """Raised for request payload or parameter validation issues."""

    def __init__(self, reason: str) -> None:
        super().__init__(message=reason, code="INVALID_INPUT", status_code=400)


class InvalidInviteError(AppError):
    """Raised when an invite code is unknown or has no uses left."""

    def __init__(self, reason: str = "Invite code is invalid or expired") -> None:
        super().__init__(message=reason, code="INVALID_INVITE", status_code=400)


class ExpiredInviteError(AppError):
    """Raised when an invite code is past its expiry.

    The use consumed by the redemption attempt is not refunded.
    """

    def __init__(self) -> None:
        super().__init__(message="Invite code has expired", code="INVITE_EXPIRED")


class StoreUnavailableError(AppError):
    """Raised for transient backing store failures."""

    def __init__(self, reason: str = "Database unavailable") -> None:
        super().__init__(message=reason, code="STORE_UNAVAILABLE", status_code=500)
