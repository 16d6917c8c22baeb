"""
Error types and the Outcome result returned to front ends.

Store and auth code raise the FolioError subclasses below; the application
controller turns each one into an Outcome so nothing reaches the caller as an
unhandled exception.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class FolioError(Exception):
    """Base class for folio errors."""

    reason = "error"


class NotFound(FolioError):
    """No record with the requested id."""

    reason = "not_found"


class BootstrapUnavailable(FolioError):
    """The seed data source could not be read."""

    reason = "bootstrap_unavailable"


class StorageUnavailable(FolioError):
    """The backing store could not be read or written."""

    reason = "storage_unavailable"


class AuthFailure(FolioError):
    """Credentials were rejected."""

    reason = "auth_failure"


class PermissionDenied(FolioError):
    """A mutating operation was attempted while logged out."""

    reason = "permission_denied"


@dataclass(frozen=True)
class Outcome:
    """Success or failure of one user-facing operation."""

    ok: bool
    reason: str = "ok"
    message: str = ""
    value: Any = None

    @classmethod
    def success(cls, value: Any = None, message: str = "") -> Outcome:
        return cls(ok=True, value=value, message=message)

    @classmethod
    def failure(cls, error: FolioError) -> Outcome:
        return cls(ok=False, reason=error.reason, message=str(error))

    def __bool__(self) -> bool:
        return self.ok
