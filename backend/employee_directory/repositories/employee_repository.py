"""
Employee Directory Backend - Employee Repository
==================================================

What:  Data access for the `employees` table.
Why:   The search + filter + pagination composition is the one piece of
       non-trivial query logic in the system, and `list` and `count` must
       share the exact same predicate.
How:   SQLAlchemy 2.0 statements on an AsyncSession. Every write is one
       statement in its own transaction (commit on success, rollback on
       failure), so a rejected write leaves the session usable.
Who:   Constructed per request by EmployeeService around the request session.

Result Conventions:
    - Missing rows are normal outcomes: get() → None, update()/delete() → False
    - Email collisions raise UniqueConstraintViolation (structured SQLite
      error name, never message matching)
    - Any other driver failure raises DatabaseError
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

from sqlalchemy import Select, delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from employee_directory.exceptions import DatabaseError, UniqueConstraintViolation
from employee_directory.models.employee import Employee
from employee_directory.validators import MUTABLE_FIELDS

logger = logging.getLogger(__name__)

# Extended result codes exposed by sqlite3 (Python 3.11+) as `sqlite_errorname`
_UNIQUE_ERROR_NAMES = frozenset({"SQLITE_CONSTRAINT_UNIQUE", "SQLITE_CONSTRAINT_PRIMARYKEY"})

# SQLite INTEGER is a signed 64-bit value; larger Python ints fail to bind
SQLITE_MAX_INTEGER = 2**63 - 1


def fits_sqlite_integer(value: int) -> bool:
    return -SQLITE_MAX_INTEGER - 1 <= value <= SQLITE_MAX_INTEGER


def unique_violation_from(exc: IntegrityError) -> Optional[UniqueConstraintViolation]:
    """
    Classify an IntegrityError as a unique-constraint violation.

    Returns None for other integrity failures (NOT NULL, CHECK, ...).
    The classification uses the driver's extended error name; the message
    text is only read to report which columns were involved.
    """
    candidates = (exc.orig, getattr(exc.orig, "__cause__", None))
    driver_error = next(
        (err for err in candidates if getattr(err, "sqlite_errorname", None) in _UNIQUE_ERROR_NAMES),
        None,
    )
    if driver_error is None:
        return None

    # SQLite detail format: "UNIQUE constraint failed: employees.email"
    _, _, target = str(driver_error).partition(":")
    table: Optional[str] = None
    columns: List[str] = []
    for item in target.split(","):
        item = item.strip()
        if not item:
            continue
        prefix, _, column = item.rpartition(".")
        table = prefix or table
        columns.append(column)

    return UniqueConstraintViolation(
        table=table,
        columns=columns,
        context={"sqlite_errorname": driver_error.sqlite_errorname},
    )


class EmployeeRepository:
    """
    CRUD, search and count over the employees table.

    Args:
        session: The AsyncSession this repository issues statements on.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    # ── Write ─────────────────────────────────────────────────────────────

    async def create(self, *, name: str, email: str, position: str, phone: str) -> int:
        """
        Insert a new employee and return its id.

        Values are stored exactly as given; trimming and lowercasing the
        email are the caller's job. created_at/updated_at come from the
        engine's CURRENT_TIMESTAMP defaults.

        Raises:
            UniqueConstraintViolation: email already used by another employee
            DatabaseError: any other storage failure
        """
        employee = Employee(name=name, email=email, position=position, phone=phone)
        async with self._write("create"):
            self._session.add(employee)
            await self._session.flush()
            employee_id = employee.id
        logger.info("Created employee #%s", employee_id)
        return employee_id

    async def update(self, employee_id: int, fields: Dict[str, Optional[str]]) -> bool:
        """
        Apply a partial update and refresh updated_at.

        Args:
            employee_id: Primary key of the row to change
            fields: Subset of name/email/position/phone; None values count
                    as "not named"

        Returns:
            True if a row changed. False when nothing was named (no
            statement is issued) or when no row has this id.

        Raises:
            ValueError: a key outside the mutable fields
            UniqueConstraintViolation: new email collides with another employee
        """
        unknown = set(fields) - set(MUTABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update field(s): {', '.join(sorted(unknown))}")

        values = {key: value for key, value in fields.items() if value is not None}
        if not values or not fits_sqlite_integer(employee_id):
            return False

        stmt = (
            update(Employee)
            .where(Employee.id == employee_id)
            .values(**values, updated_at=func.current_timestamp())
            .execution_options(synchronize_session=False)
        )
        async with self._write("update"):
            result = await self._session.execute(stmt)
        updated = result.rowcount > 0
        if updated:
            logger.info("Updated employee #%s (%s)", employee_id, ", ".join(sorted(values)))
        return updated

    async def delete(self, employee_id: int) -> bool:
        """Delete by id. Returns whether a row was actually removed."""
        if not fits_sqlite_integer(employee_id):
            return False
        stmt = (
            delete(Employee)
            .where(Employee.id == employee_id)
            .execution_options(synchronize_session=False)
        )
        async with self._write("delete"):
            result = await self._session.execute(stmt)
        deleted = result.rowcount > 0
        if deleted:
            logger.info("Deleted employee #%s", employee_id)
        return deleted

    # ── Read ──────────────────────────────────────────────────────────────

    async def get(self, employee_id: int) -> Optional[Employee]:
        """Fetch one employee, or None when the id does not exist."""
        if not fits_sqlite_integer(employee_id):
            return None
        stmt = (
            select(Employee)
            .where(Employee.id == employee_id)
            .execution_options(populate_existing=True)
        )
        async with self._read("get"):
            result = await self._session.execute(stmt)
            return result.scalar_one_or_none()

    async def list(
        self,
        query: Optional[str] = None,
        position: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Sequence[Employee]:
        """
        Search and page through employees, newest first.

        Args:
            query:    Substring matched against name, email or phone (OR).
                      SQLite LIKE is case-insensitive for ASCII letters;
                      %, _ and / in the query match literally.
            position: Exact position match, ANDed with the query.
            limit:    Maximum rows; None = no cap, 0 = no rows.
            offset:   Rows skipped after filtering and ordering; None and 0
                      both mean "skip nothing".

        Order is created_at DESC, then id DESC, so rows inserted within the
        same second still come back in a stable newest-first order.
        """
        if limit is not None and limit < 0:
            raise ValueError("limit must be >= 0")
        if offset is not None and offset < 0:
            raise ValueError("offset must be >= 0")
        if (limit is not None and limit > SQLITE_MAX_INTEGER) or (
            offset is not None and offset > SQLITE_MAX_INTEGER
        ):
            raise ValueError(f"limit and offset must be <= {SQLITE_MAX_INTEGER}")

        stmt = self._apply_filters(select(Employee), query, position)
        stmt = stmt.order_by(Employee.created_at.desc(), Employee.id.desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        if offset:
            stmt = stmt.offset(offset)
        stmt = stmt.execution_options(populate_existing=True)

        async with self._read("list"):
            result = await self._session.execute(stmt)
            return result.scalars().all()

    async def count(self, query: Optional[str] = None, position: Optional[str] = None) -> int:
        """Number of rows `list` would return for these filters with no window."""
        stmt = self._apply_filters(select(func.count()).select_from(Employee), query, position)
        async with self._read("count"):
            result = await self._session.execute(stmt)
            return result.scalar_one()

    # ── Helpers ───────────────────────────────────────────────────────────

    @staticmethod
    def _apply_filters(stmt: Select, query: Optional[str], position: Optional[str]) -> Select:
        """The shared WHERE clause of list() and count()."""
        if query:
            stmt = stmt.where(
                or_(
                    Employee.name.contains(query, autoescape=True),
                    Employee.email.contains(query, autoescape=True),
                    Employee.phone.contains(query, autoescape=True),
                )
            )
        if position:
            stmt = stmt.where(Employee.position == position)
        return stmt

    @asynccontextmanager
    async def _write(self, operation: str) -> AsyncIterator[None]:
        """Commit the statement(s) in the block, or roll back and translate."""
        try:
            yield
            await self._session.commit()
        except IntegrityError as exc:
            await self._session.rollback()
            violation = unique_violation_from(exc)
            if violation is not None:
                logger.info("Employee %s rejected: unique constraint on %s", operation, violation.constraint)
                raise violation from exc
            logger.error("Integrity error during employee %s: %s", operation, exc.orig)
            raise DatabaseError(context=self._error_context(operation, exc)) from exc
        except SQLAlchemyError as exc:
            await self._session.rollback()
            logger.error("Database error during employee %s: %s", operation, exc, exc_info=True)
            raise DatabaseError(context=self._error_context(operation, exc)) from exc

    @asynccontextmanager
    async def _read(self, operation: str) -> AsyncIterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            logger.error("Database error during employee %s: %s", operation, exc, exc_info=True)
            raise DatabaseError(context=self._error_context(operation, exc)) from exc

    @staticmethod
    def _error_context(operation: str, exc: Exception) -> Dict[str, Any]:
        return {"operation": operation, "error_type": type(exc).__name__}
