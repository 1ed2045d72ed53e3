"""
Employee Directory Backend - Pydantic Request/Response Schemas
================================================================

What:  Pydantic models defining the API contract with the Angular frontend.
Why:   Input validation, serialization and OpenAPI docs from one definition.
How:   Request models run the shared rules from `validators.py`; response
       models are built from ORM rows (from_attributes).

Envelope:
    Every response body has the shape {success, data?, message?, error?}.
    Successful responses use ApiResponse[T]; failures use ErrorResponse,
    produced by the exception handlers in main.py.
"""

from datetime import datetime
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field, field_validator

from employee_directory.validators import is_not_empty, is_valid_email, is_valid_phone

DataT = TypeVar("DataT")


# ══════════════════════════════════════════════════════════════════════════
# Field checks shared by create and update
# ══════════════════════════════════════════════════════════════════════════


def _check_text(value: Optional[str], label: str) -> str:
    if not is_not_empty(value):
        raise ValueError(f"{label} must be a non-empty string")
    return value.strip()


def _check_email(value: Optional[str]) -> str:
    value = _check_text(value, "Email")
    if not is_valid_email(value):
        raise ValueError("Please provide a valid email address")
    return value


def _check_phone(value: Optional[str]) -> str:
    value = _check_text(value, "Phone")
    if not is_valid_phone(value):
        raise ValueError("Please provide a valid phone number")
    return value


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class EmployeeCreate(BaseModel):
    """
    Body of POST /api/employees. All four fields are required.

    Values come out trimmed; lowercasing the email happens in the service.
    """
    name: str = Field(description="Full name", examples=["John Doe"])
    email: str = Field(description="Unique email address", examples=["john@example.com"])
    position: str = Field(description="Job title", examples=["Developer"])
    phone: str = Field(description="Phone number, 10-16 digits", examples=["+1 (555) 123-4567"])

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _check_text(v, "Name")

    @field_validator("position")
    @classmethod
    def validate_position(cls, v: str) -> str:
        return _check_text(v, "Position")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        return _check_phone(v)


class EmployeeUpdate(BaseModel):
    """
    Body of PUT /api/employees/{id}. Any subset of the four fields.

    An explicit null is rejected; leave the field out instead. An empty
    body passes schema validation and is rejected by the service with
    EmptyUpdateError, before storage is touched.
    """
    name: Optional[str] = Field(default=None, description="Full name")
    email: Optional[str] = Field(default=None, description="Unique email address")
    position: Optional[str] = Field(default=None, description="Job title")
    phone: Optional[str] = Field(default=None, description="Phone number")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> str:
        return _check_text(v, "Name")

    @field_validator("position")
    @classmethod
    def validate_position(cls, v: Optional[str]) -> str:
        return _check_text(v, "Position")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> str:
        return _check_email(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> str:
        return _check_phone(v)

    def provided_fields(self) -> dict:
        """Only the fields the client actually sent."""
        return self.model_dump(exclude_unset=True)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class EmployeeResponse(BaseModel):
    """One employee as returned by every endpoint."""
    id: int = Field(description="Employee identifier")
    name: str
    email: str
    position: str
    phone: str
    created_at: datetime = Field(description="When the employee was created")
    updated_at: datetime = Field(description="Last successful update")

    model_config = {"from_attributes": True}


class PaginationInfo(BaseModel):
    """
    Pagination window of a list response.

    limit falls back to total and offset to 0 when the client sent none;
    hasMore is only computed when an offset was supplied.
    """
    total: int = Field(description="Rows matching the filters")
    limit: int = Field(description="Requested page size (total when not given)")
    offset: int = Field(description="Rows skipped")
    has_more: bool = Field(alias="hasMore", description="More rows after this page")

    model_config = {"populate_by_name": True}


class EmployeeListData(BaseModel):
    employees: List[EmployeeResponse]
    pagination: PaginationInfo


class DeletedEmployee(BaseModel):
    id: int


class ApiResponse(BaseModel, Generic[DataT]):
    """Success envelope: {success, data, message}."""
    success: bool = True
    data: Optional[DataT] = None
    message: Optional[str] = None


class ErrorResponse(BaseModel):
    """
    Failure envelope.

    Example:
        {
            "success": false,
            "error": "duplicate_email",
            "message": "An employee with this email already exists",
            "request_id": "1a2b3c4d"
        }
    """
    success: bool = False
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[Any] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and database status."""
    status: str = Field(description="healthy or unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    timestamp: datetime = Field(description="Server time (UTC)")
    uptime_seconds: float = Field(description="Seconds since service started")
