"""Error taxonomy shared by the services and the HTTP boundary.

Every error carries the HTTP status and machine-readable code it is rendered
with, so handlers never need to map exception types to responses themselves.
"""
from __future__ import annotations

from typing import Any, Iterable, Optional


class CRMError(Exception):
    """Base class for all errors surfaced to API callers."""

    status_code = 500
    code = "internal_error"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class Unauthorized(CRMError):
    """No or invalid caller identity, or the caller may not touch the row."""

    status_code = 401
    code = "unauthorized"

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class Forbidden(Unauthorized):
    """Caller is known but lacks the role the operation needs."""

    status_code = 403
    code = "forbidden"

    def __init__(self, message: str = "Insufficient role") -> None:
        super().__init__(message)


class ValidationError(CRMError):
    """A required field is missing or a value is malformed."""

    status_code = 400
    code = "validation_error"

    def __init__(self, fields: Iterable[str], message: Optional[str] = None) -> None:
        self.fields = list(fields)
        if message is None:
            message = f"Missing required fields: {', '.join(self.fields)}"
        super().__init__(message, details={"fields": self.fields})


class NotFoundOrForbidden(CRMError):
    """Update matched no row; a foreign row looks exactly like a missing one."""

    status_code = 404
    code = "not_found"

    def __init__(self, resource: str, identifier: str) -> None:
        super().__init__(f"{resource} not found: {identifier}")


class StoreError(CRMError):
    """The relational store rejected or failed the operation."""

    status_code = 500
    code = "store_error"


class MalformedPayload(CRMError):
    """Webhook body does not have the expected shape."""

    status_code = 400
    code = "malformed_payload"

    def __init__(self, message: str = "Invalid request payload") -> None:
        super().__init__(message)
