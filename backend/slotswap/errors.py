"""
Business errors raised by the slot booking engine.

Each error carries the HTTP status and machine-readable code the API
returns in its error envelope. Routes never build error responses by hand;
they raise one of these and the application handler renders it.
"""

from typing import Any, Dict, Optional


class SlotSwapError(Exception):
    """Base exception for all slot booking failures"""

    status_code = 500
    default_code = "INTERNAL"

    def __init__(self, message: str, code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.code = code or self.default_code
        self.details = details
        super().__init__(message)

    def to_payload(self) -> Dict[str, Any]:
        error: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details is not None:
            error["details"] = self.details
        return {"error": error}


class ValidationFailed(SlotSwapError):
    """Malformed or missing input; never retried"""

    status_code = 400
    default_code = "VALIDATION"


class NotAuthenticated(SlotSwapError):
    status_code = 401
    default_code = "UNAUTHENTICATED"


class Forbidden(SlotSwapError):
    """Role or team mismatch; never retried"""

    status_code = 403
    default_code = "FORBIDDEN"


class NotFound(SlotSwapError):
    status_code = 404
    default_code = "NOT_FOUND"


class StateConflict(SlotSwapError):
    """
    Wrong status for the requested transition, double booking, or a lost
    optimistic-concurrency race. Safe to retry after re-reading state.
    """

    status_code = 409
    default_code = "CONFLICT"
