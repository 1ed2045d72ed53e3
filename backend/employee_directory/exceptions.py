"""
Employee Directory Backend - Custom Exception Hierarchy
=========================================================

What:  Application-specific exceptions for each failure kind the API knows.
Why:   Typed exceptions let the global handlers pick the status code and a
       user-safe message, instead of string-matching error text.
How:   Each exception carries a message (safe to return) and a context dict
       (logged server-side only). Handlers are registered in main.py.
Who:   Raised by the repository and service layers; caught by handlers.

Exception Hierarchy:
    EmployeeDirectoryError (base)
    ├── ValidationError                  → 400 Bad Request
    │   └── EmptyUpdateError             → 400 Bad Request
    ├── NotFoundError                    → 404 Not Found
    ├── DuplicateEmailError              → 409 Conflict
    └── DatabaseError                    → 500 Internal Server Error
        └── UniqueConstraintViolation    → 409 Conflict
"""

from typing import Any, Dict, Optional, Sequence


class EmployeeDirectoryError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(EmployeeDirectoryError):
    """
    Raised when client input fails a business rule.

    Schema-level problems (missing fields, bad email shape) are caught by
    pydantic before the service runs; this covers the rest.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class EmptyUpdateError(ValidationError):
    """An update named none of the mutable fields. Rejected before storage."""

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="Please provide at least one field to update",
            context=context,
        )


class NotFoundError(EmployeeDirectoryError):
    """
    Raised when a requested resource does not exist.

    The repository returns None / False for missing rows; the service turns
    that into this exception so the handler can answer 404.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id is not None:
            message = f"{resource.capitalize()} with ID {resource_id} does not exist"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DuplicateEmailError(EmployeeDirectoryError):
    """Another employee already uses this email address."""

    def __init__(self, email: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        if email:
            ctx["email"] = email
        super().__init__(
            message="An employee with this email already exists",
            context=ctx,
        )


class DatabaseError(EmployeeDirectoryError):
    """
    Raised when a storage operation fails unexpectedly.

    Security Note:
        The message returned to the client is always generic. The driver
        error is kept in `context` and logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UniqueConstraintViolation(DatabaseError):
    """
    The storage engine rejected a write because it would duplicate a value
    under a UNIQUE or PRIMARY KEY constraint.

    Attributes:
        table:   Table the constraint belongs to (when the engine reports it)
        columns: Columns covered by the violated constraint
    """

    def __init__(
        self,
        table: Optional[str] = None,
        columns: Sequence[str] = (),
        context: Optional[Dict[str, Any]] = None,
    ):
        self.table = table
        self.columns = tuple(columns)
        ctx = context or {}
        ctx["table"] = table
        ctx["columns"] = list(self.columns)
        target = ", ".join(f"{table}.{c}" if table else c for c in self.columns) or "unknown"
        super().__init__(
            message=f"Unique constraint violated on {target}",
            context=ctx,
        )

    @property
    def constraint(self) -> str:
        return ",".join(self.columns)

    def involves(self, column: str) -> bool:
        return column in self.columns
