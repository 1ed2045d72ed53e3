"""
Employee Directory Backend - Employee Route Handlers
======================================================

What:  CRUD + search endpoints under /api/employees.
Why:   The HTTP contract consumed by the Angular frontend.
How:   Parses path/query/body, delegates to EmployeeService, wraps the
       result in the {success, data, message} envelope.

Route Inventory:
    GET    /api/employees          list with query/position/limit/offset
    GET    /api/employees/{id}     single employee
    POST   /api/employees          create (201)
    PUT    /api/employees/{id}     partial update
    DELETE /api/employees/{id}     delete

Parameter errors (non-numeric id, negative limit, bad body) are turned
into 400 responses by the RequestValidationError handler in main.py.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from employee_directory.database import get_db_session
from employee_directory.repositories.employee_repository import SQLITE_MAX_INTEGER
from employee_directory.schemas.employee import (
    ApiResponse,
    DeletedEmployee,
    EmployeeCreate,
    EmployeeListData,
    EmployeeResponse,
    EmployeeUpdate,
    ErrorResponse,
)
from employee_directory.services.employee_service import employee_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/employees", tags=["Employees"])

_NOT_FOUND = {404: {"description": "Employee not found", "model": ErrorResponse}}
_BAD_REQUEST = {400: {"description": "Invalid input", "model": ErrorResponse}}
_CONFLICT = {409: {"description": "Email already exists", "model": ErrorResponse}}
_SERVER_ERROR = {500: {"description": "Server error", "model": ErrorResponse}}


@router.get(
    "",
    response_model=ApiResponse[EmployeeListData],
    responses={**_BAD_REQUEST, **_SERVER_ERROR},
    summary="List and search employees",
    description=(
        "Returns employees newest first. `query` matches a substring of name, email "
        "or phone; `position` is an exact match. `limit`/`offset` page the result."
    ),
)
async def list_employees(
    response: Response,
    query: Optional[str] = Query(default=None, description="Substring of name, email or phone"),
    position: Optional[str] = Query(default=None, description="Exact position"),
    limit: Optional[int] = Query(
        default=None, ge=0, le=SQLITE_MAX_INTEGER, description="Page size; omit for all rows"
    ),
    offset: Optional[int] = Query(default=None, ge=0, le=SQLITE_MAX_INTEGER, description="Rows to skip"),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[EmployeeListData]:
    result = await employee_service.list_employees(
        db=db,
        query=query,
        position=position,
        limit=limit,
        offset=offset,
    )
    response.headers["X-Total-Count"] = str(result.pagination.total)
    return ApiResponse(data=result, message="Employees retrieved successfully")


@router.get(
    "/{employee_id}",
    response_model=ApiResponse[EmployeeResponse],
    responses={**_BAD_REQUEST, **_NOT_FOUND, **_SERVER_ERROR},
    summary="Get an employee by ID",
)
async def get_employee(
    employee_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[EmployeeResponse]:
    employee = await employee_service.get_employee(db=db, employee_id=employee_id)
    return ApiResponse(data=employee, message="Employee retrieved successfully")


@router.post(
    "",
    status_code=201,
    response_model=ApiResponse[EmployeeResponse],
    responses={**_BAD_REQUEST, **_CONFLICT, **_SERVER_ERROR},
    summary="Create an employee",
    description="All fields are required. The email is stored lowercased and must be unique.",
)
async def create_employee(
    payload: EmployeeCreate,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[EmployeeResponse]:
    employee = await employee_service.create_employee(db=db, payload=payload)
    return ApiResponse(data=employee, message="Employee created successfully")


@router.put(
    "/{employee_id}",
    response_model=ApiResponse[EmployeeResponse],
    responses={**_BAD_REQUEST, **_NOT_FOUND, **_CONFLICT, **_SERVER_ERROR},
    summary="Update an employee",
    description="Send any subset of name, email, position and phone; at least one is required.",
)
async def update_employee(
    payload: EmployeeUpdate,
    employee_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[EmployeeResponse]:
    employee = await employee_service.update_employee(
        db=db,
        employee_id=employee_id,
        payload=payload,
    )
    return ApiResponse(data=employee, message="Employee updated successfully")


@router.delete(
    "/{employee_id}",
    response_model=ApiResponse[DeletedEmployee],
    responses={**_BAD_REQUEST, **_NOT_FOUND, **_SERVER_ERROR},
    summary="Delete an employee",
)
async def delete_employee(
    employee_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[DeletedEmployee]:
    deleted_id = await employee_service.delete_employee(db=db, employee_id=employee_id)
    return ApiResponse(data=DeletedEmployee(id=deleted_id), message="Employee deleted successfully")
