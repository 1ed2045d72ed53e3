"""
Employee Directory Backend - Employee SQLAlchemy Model
========================================================

What:  ORM model representing the `employees` table.
Why:   Maps rows to Python objects and registers the table on Base.metadata,
       which `Database.create_schema()` uses for CREATE TABLE IF NOT EXISTS.
Who:   Used by EmployeeRepository for every statement.

Table Design Rationale:
    - INTEGER PRIMARY KEY AUTOINCREMENT: SQLite would otherwise hand out the
      id of a deleted last row again; AUTOINCREMENT keeps ids unique forever
    - UNIQUE(email): the engine is the only arbiter of email uniqueness;
      the service never pre-checks (no read-modify-write race)
    - created_at / updated_at: CURRENT_TIMESTAMP defaults, second granularity,
      which is why listings also sort on id
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from employee_directory.database import Base


class Employee(Base):
    """
    One person in the directory.

    Query Patterns:
        - Page of recent employees: ORDER BY created_at DESC, id DESC LIMIT/OFFSET
          → idx_employees_created_at
        - Position filter: WHERE position = :position
          → idx_employees_position
        - Free-text search: LIKE on name/email/phone (full scan; small table)
    """

    __tablename__ = "employees"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(Text, nullable=False)

    # Stored lowercased (the service normalizes before insert/update)
    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)

    position: Mapped[str] = mapped_column(Text, nullable=False)

    # Stored as entered (trimmed), not in the stripped digits-only form
    phone: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.current_timestamp(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.current_timestamp(),
    )

    __table_args__ = (
        Index("idx_employees_created_at", "created_at"),
        Index("idx_employees_position", "position"),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return f"<Employee(id={self.id}, email='{self.email}')>"
