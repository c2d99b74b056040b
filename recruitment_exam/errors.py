"""
errors.py

Exception hierarchy shared by the services and the HTTP layer.
Messages are single-line and safe to show to candidates.
"""

from enum import Enum
from typing import Optional


class StoreErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    TRANSIENT = "transient"
    OTHER = "other"


class PortalError(Exception):
    """Base class for every error raised on purpose by this package."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class StoreError(PortalError):
    """Failure reported by a document store adapter, tagged with its kind."""

    def __init__(
        self,
        kind: StoreErrorKind,
        message: str,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, cause)
        self.kind = kind

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"


class _ServiceError(PortalError):
    @property
    def kind(self) -> Optional[StoreErrorKind]:
        return self.cause.kind if isinstance(self.cause, StoreError) else None


class StatusTrackerError(_ServiceError):
    pass


class ResultRecorderError(_ServiceError):
    pass


class AuthError(PortalError):
    pass
