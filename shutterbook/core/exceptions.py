"""
Custom application exceptions
"""

from typing import Optional, Dict, Any, List


class ShutterbookException(Exception):
    """Base exception for Shutterbook application"""

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None,
        errors: Optional[List[str]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        self.errors = errors
        super().__init__(self.message)


class AuthenticationError(ShutterbookException):
    """Authentication related errors"""

    def __init__(self, message: str = "Authentication failed", details: Optional[Dict] = None):
        super().__init__(
            message=message,
            code="AUTH_ERROR",
            status_code=401,
            details=details
        )


class AuthorizationError(ShutterbookException):
    """Authorization related errors"""

    def __init__(self, message: str = "Not authorized", details: Optional[Dict] = None):
        super().__init__(
            message=message,
            code="AUTH_FORBIDDEN",
            status_code=403,
            details=details
        )


class NotFoundError(ShutterbookException):
    """Resource not found errors"""

    def __init__(self, resource: str, identifier: Any = None, message: Optional[str] = None):
        message = message or f"{resource} not found"
        details = {"resource": resource}
        if identifier:
            details["id"] = str(identifier)
        super().__init__(
            message=message,
            code="NOT_FOUND",
            status_code=404,
            details=details
        )


class ValidationError(ShutterbookException):
    """Validation errors"""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        errors: Optional[List[str]] = None
    ):
        details = {"field": field} if field else {}
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=400,
            details=details,
            errors=errors
        )


class ConflictError(ShutterbookException):
    """Resource conflict errors"""

    def __init__(self, message: str, details: Optional[Dict] = None, status_code: int = 409):
        super().__init__(
            message=message,
            code="CONFLICT",
            status_code=status_code,
            details=details
        )


class StateTransitionError(ConflictError):
    """Illegal status transition on a ledger record.

    Reported as 400 to keep the HTTP contract clients already depend on.
    """

    def __init__(self, resource: str, action: str, current_status: str):
        super().__init__(
            message=f"Cannot {action} {resource.lower()} with status: {current_status}",
            details={"resource": resource, "status": current_status},
            status_code=400
        )
        self.code = "INVALID_STATE_TRANSITION"


class ConcurrencyError(ConflictError):
    """Concurrency conflict error"""

    def __init__(self, message: str = "Resource was modified by another process"):
        super().__init__(message=message)
        self.code = "CONCURRENCY_ERROR"
