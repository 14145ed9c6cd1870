"""Structured failures shared by every analytics operation.

Hierarchy:
    AnalyticsError
    ├── ScopingError       : no active company (400)
    ├── ValidationError    : malformed query parameter (400)
    ├── AuthenticationError: no resolvable user identity (401)
    ├── MembershipError    : caller may not read this company/project (403)
    └── NotFoundError      : project/sprint not found inside the company (404)

Anything else escaping an operation is an unexpected failure and is reported
to callers without its details.
"""

from __future__ import annotations

from typing import Any


class AnalyticsError(Exception):
    """Base error carrying a machine-checkable kind and a user-facing message."""

    kind = "error"
    status_code = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, "kind": self.kind}


class ScopingError(AnalyticsError):
    """Raised when the request carries no active company."""

    kind = "scoping"
    status_code = 400

    def __init__(self, message: str = "Company context required") -> None:
        super().__init__(message)


class ValidationError(AnalyticsError):
    """Raised for unparseable dates or unknown grouping keys."""

    kind = "validation"
    status_code = 400


class AuthenticationError(AnalyticsError):
    kind = "authentication"
    status_code = 401

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class MembershipError(AnalyticsError):
    kind = "membership"
    status_code = 403

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message)


class NotFoundError(AnalyticsError):
    """Raised when a referenced project or sprint is absent from the active company.

    Projects belonging to another company produce the same error, so a caller
    cannot test for their existence.
    """

    kind = "not_found"
    status_code = 404
