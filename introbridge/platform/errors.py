"""Domain error taxonomy shared by every engine component.

Services raise these; ``main.py`` renders them as
``{"detail": {"code": ..., "message": ..., **details}}`` with the status code
carried by the class.
"""

from __future__ import annotations

from typing import Any


class DomainError(Exception):
    code = "Error"
    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: str | None = None, **details: Any):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_detail(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        payload.update({k: v for k, v in self.details.items() if v is not None})
        return payload


class Unauthorized(DomainError):
    code = "Unauthorized"
    status_code = 401
    default_message = "Authentication required"


class Forbidden(DomainError):
    code = "Forbidden"
    status_code = 403
    default_message = "Insufficient permissions"


class ValidationFailed(DomainError):
    """Malformed input. ``fields`` is a list of ``{"field", "message"}``."""

    code = "ValidationError"
    status_code = 400
    default_message = "Invalid request data"

    def __init__(self, message: str | None = None, *, field: str | None = None, **details: Any):
        if field is not None:
            details.setdefault("fields", [{"field": field, "message": message or self.default_message}])
        super().__init__(message, **details)


class NotFound(DomainError):
    code = "NotFound"
    status_code = 404
    default_message = "Resource not found"


class InvalidState(DomainError):
    code = "InvalidState"
    status_code = 409
    default_message = "Operation not allowed in the current state"

    def __init__(self, message: str | None = None, *, current: str | None = None, required: str | None = None, **details: Any):
        super().__init__(message, current=current, required=required, **details)


class InvalidTransition(DomainError):
    code = "InvalidTransition"
    status_code = 400

    def __init__(self, from_status: str, to_status: str):
        super().__init__(
            f"Invalid status transition from {from_status} to {to_status}",
            **{"from": from_status, "to": to_status},
        )
        self.from_status = from_status
        self.to_status = to_status


class Conflict(DomainError):
    """State conflict with a machine-readable ``reason``."""

    code = "Conflict"
    status_code = 409
    default_message = "Request conflicts with the current state"

    def __init__(self, reason: str, message: str | None = None, **details: Any):
        super().__init__(message or reason, reason=reason, **details)
        self.reason = reason


class InsufficientCredits(DomainError):
    code = "InsufficientCredits"
    status_code = 402
    default_message = "Insufficient introduction credits"

    def __init__(self, *, balance: int, required: int):
        super().__init__(None, balance=balance, required=required)
        self.balance = balance
        self.required = required
