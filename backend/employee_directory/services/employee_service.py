"""
Employee Directory Backend - Employee Service (Business Logic)
================================================================

What:  Orchestrates every employee use case between the routes and the
       repository.
Why:   Keeps normalization, existence checks, error translation and
       pagination metadata out of both HTTP handlers and SQL.
How:   Each call wraps the request's AsyncSession in an EmployeeRepository,
       runs one or more repository operations in order, and returns
       response schemas.
Who:   Called by route handlers in routes/employees.py.

Error Translation:
    repository get() → None                    → NotFoundError       (404)
    update with no fields                      → EmptyUpdateError    (400)
    UniqueConstraintViolation on email         → DuplicateEmailError (409)
    DatabaseError                              → propagated          (500)

Design Decision:
    EmployeeService is stateless; it receives the db session per call,
    so tests can hand it a mock session or patch the repository.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from employee_directory.exceptions import (
    DuplicateEmailError,
    EmptyUpdateError,
    NotFoundError,
    UniqueConstraintViolation,
)
from employee_directory.repositories.employee_repository import EmployeeRepository
from employee_directory.schemas.employee import (
    EmployeeCreate,
    EmployeeListData,
    EmployeeResponse,
    EmployeeUpdate,
    PaginationInfo,
)
from employee_directory.validators import normalize_fields, normalize_search_term

logger = logging.getLogger(__name__)


class EmployeeService:
    """
    Business logic layer for employee operations.

    Responsibilities:
        - create_employee(): normalize, insert, re-read
        - get_employee(): single lookup with not-found handling
        - list_employees(): search + page + pagination metadata
        - update_employee(): partial update with empty/missing/duplicate checks
        - delete_employee(): existence check + delete
    """

    async def create_employee(self, db: AsyncSession, payload: EmployeeCreate) -> EmployeeResponse:
        """
        Create an employee from a validated payload.

        The email is lowercased here, so "JOHN@EXAMPLE.COM" and
        "john@example.com" collide on the UNIQUE constraint.

        Raises:
            DuplicateEmailError: another employee already has this email
            DatabaseError: storage failure
        """
        fields = normalize_fields(payload.model_dump())
        repository = EmployeeRepository(db)

        try:
            employee_id = await repository.create(**fields)
        except UniqueConstraintViolation as e:
            if not e.involves("email"):
                raise
            raise self._duplicate(e, fields["email"]) from e

        return await self._reload(repository, employee_id)

    async def get_employee(self, db: AsyncSession, employee_id: int) -> EmployeeResponse:
        """
        Raises:
            NotFoundError: no employee with this id (→ 404)
        """
        employee = await EmployeeRepository(db).get(employee_id)
        if employee is None:
            raise NotFoundError(resource="employee", resource_id=employee_id)
        return EmployeeResponse.model_validate(employee)

    async def list_employees(
        self,
        db: AsyncSession,
        query: Optional[str] = None,
        position: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> EmployeeListData:
        """
        Search employees and build the pagination block.

        Page and count are two statements issued back to back on the same
        session; a write landing between them can make them disagree.

        Pagination metadata:
            limit   = requested limit, or total when none was given
            offset  = requested offset, or 0
            hasMore = offset + limit < total when an offset was supplied
                      (0 included), otherwise False
        """
        query = normalize_search_term(query)
        position = normalize_search_term(position)
        repository = EmployeeRepository(db)

        employees = await repository.list(query=query, position=position, limit=limit, offset=offset)
        total = await repository.count(query=query, position=position)

        page_limit = limit if limit is not None else total
        page_offset = offset or 0
        has_more = page_offset + page_limit < total if offset is not None else False

        return EmployeeListData(
            employees=[EmployeeResponse.model_validate(e) for e in employees],
            pagination=PaginationInfo(
                total=total,
                limit=page_limit,
                offset=page_offset,
                has_more=has_more,
            ),
        )

    async def update_employee(
        self,
        db: AsyncSession,
        employee_id: int,
        payload: EmployeeUpdate,
    ) -> EmployeeResponse:
        """
        Apply a partial update.

        Order of checks:
            1. Nothing to update → EmptyUpdateError (storage untouched)
            2. Unknown id → NotFoundError
            3. Write; email collision → DuplicateEmailError
            4. Zero rows changed (deleted in between) → NotFoundError
        """
        fields = normalize_fields(payload.provided_fields())
        if not fields:
            raise EmptyUpdateError(context={"employee_id": employee_id})

        repository = EmployeeRepository(db)
        if await repository.get(employee_id) is None:
            raise NotFoundError(resource="employee", resource_id=employee_id)

        try:
            updated = await repository.update(employee_id, fields)
        except UniqueConstraintViolation as e:
            if not e.involves("email"):
                raise
            raise self._duplicate(e, fields.get("email")) from e

        if not updated:
            raise NotFoundError(resource="employee", resource_id=employee_id)

        return await self._reload(repository, employee_id)

    async def delete_employee(self, db: AsyncSession, employee_id: int) -> int:
        """Delete an employee and return its id. NotFoundError if absent."""
        repository = EmployeeRepository(db)
        if await repository.get(employee_id) is None:
            raise NotFoundError(resource="employee", resource_id=employee_id)

        if not await repository.delete(employee_id):
            raise NotFoundError(resource="employee", resource_id=employee_id)

        return employee_id

    # ── Helpers ───────────────────────────────────────────────────────────

    @staticmethod
    async def _reload(repository: EmployeeRepository, employee_id: int) -> EmployeeResponse:
        employee = await repository.get(employee_id)
        if employee is None:
            # Written a moment ago; only a concurrent delete gets here
            raise NotFoundError(resource="employee", resource_id=employee_id)
        return EmployeeResponse.model_validate(employee)

    @staticmethod
    def _duplicate(error: UniqueConstraintViolation, email: Optional[str]) -> DuplicateEmailError:
        logger.info("Rejected duplicate email: %s", email)
        return DuplicateEmailError(email=email, context=dict(error.context))


# ── Singleton Instance ────────────────────────────────────────────────────
employee_service = EmployeeService()
