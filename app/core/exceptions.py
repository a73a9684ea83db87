from typing import Optional

from fastapi import status

from app.core.enums import RuleKind


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class UnauthenticatedError(ServiceError):
    def __init__(self, message: str = "Could not validate credentials") -> None:
        super().__init__(message, status.HTTP_401_UNAUTHORIZED)


class ForbiddenError(ServiceError):
    def __init__(self, message: str = "Insufficient permissions") -> None:
        super().__init__(message, status.HTTP_403_FORBIDDEN)


class NotFoundError(ServiceError):
    def __init__(self, message: str = "Not found") -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class RuleViolation(ServiceError):
    """Expected, correctable business-rule failure. The message is returned to the caller verbatim."""

    def __init__(self, kind: RuleKind, message: str) -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST)
        self.kind = kind


class CalendarValidationError(RuleViolation):
    """InvalidRange, Overlap or OutOfBounds."""


class LockedError(RuleViolation):
    def __init__(self, message: str) -> None:
        super().__init__(RuleKind.LOCKED, message)


class SystemFailure(ServiceError):
    """Persistence or transport failure. Details stay in the server log."""

    def __init__(self, message: str = "Internal server error", cause: Optional[BaseException] = None) -> None:
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.cause = cause
