"""
Employee Directory Backend - Database Handle
==============================================

What:  The `Database` object owning the async SQLAlchemy engine, its session
       factory and the schema bootstrap.
Why:   One explicitly constructed handle per process, created by the app
       factory and injected into routes, instead of a module-level engine.
How:   Wraps create_async_engine + async_sessionmaker over aiosqlite.
       `create_schema()` runs CREATE TABLE IF NOT EXISTS for every model,
       `dispose()` closes pooled connections at shutdown.
Who:   Built by `create_app()`; sessions handed out by `get_db_session`.
When:  Engine constructed at app creation (no I/O), schema created in the
       lifespan startup, disposed in the lifespan shutdown.

Connection Strategy:
    SQLite is a single local file with single-writer semantics, so no
    pool tuning is needed:
    - file database:     engine default pool, busy timeout from settings
    - :memory: database: StaticPool, one shared connection (otherwise every
                         new connection would see an empty database)
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from employee_directory.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, which `Database.create_schema()` uses
    to bootstrap the tables.
    """
    pass


class Database:
    """
    Process-wide storage handle.

    Attributes:
        url:             The SQLAlchemy URL this handle connects to
        engine:          AsyncEngine (connection management)
        session_factory: async_sessionmaker producing AsyncSession objects
    """

    def __init__(self, url: str, *, echo: bool = False, timeout: float = 5.0):
        self.url = url
        parsed = make_url(url)
        self._database_path: Optional[str] = parsed.database
        self.is_memory = self._database_path in (None, "", ":memory:")

        engine_kwargs = {
            "echo": echo,
            "connect_args": {"timeout": timeout},
        }
        if self.is_memory:
            engine_kwargs["poolclass"] = StaticPool

        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        # expire_on_commit=False: repository writes commit per statement and
        # callers still read attributes (e.g. the new id) afterwards.
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.database_url,
            echo=settings.sql_echo,
            timeout=settings.db_timeout,
        )

    async def create_schema(self) -> None:
        """
        Create every registered table if it does not exist yet.

        Idempotent: safe to call on every process start. For a file-backed
        database the parent directory is created first.
        """
        # Models register themselves on Base.metadata when imported
        from employee_directory.models import employee  # noqa: F401

        if not self.is_memory:
            data_dir = Path(self._database_path).expanduser().parent
            if not data_dir.exists():
                data_dir.mkdir(parents=True, exist_ok=True)
                logger.info("Created data directory: %s", data_dir.resolve())

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ready (%s)", self.engine.url.render_as_string(hide_password=True))

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Provide a session that commits on success and rolls back on error.

        Repository writes already commit per statement; the final commit
        here only closes out read transactions.
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def ping(self) -> bool:
        """Run SELECT 1; True when the database answers."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True

    async def dispose(self) -> None:
        """Close all pooled connections (graceful shutdown)."""
        await self.engine.dispose()
        logger.info("Database connections closed")


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    The `Database` lives on `app.state.database` (set by create_app), so
    tests can build an app around their own in-memory database.

    Example usage in a route:
        @router.get("/employees")
        async def list_employees(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session
