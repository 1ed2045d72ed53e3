"""
Employee Directory Backend - Application Package
==================================================

What: REST backend for the employee management system: create, read,
      update, delete and search employee records stored in SQLite.
Who:  Imported by uvicorn (employee_directory.main:app) and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │       Services (Business Rules)     │  ← normalization, 404/409 mapping
    ├─────────────────────────────────────┤
    │     Repositories (Persistence)      │  ← SQL, constraint detection
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Engine/Sessions)   │  ← Async SQLAlchemy + aiosqlite
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
