"""
ConnectPair Backend: Persistence Store
=======================================

What:  The async SQLAlchemy engine, session factory, schema bootstrap and the
       FastAPI session dependency.
How:   `Store` is constructed once by the app factory and kept on
       `app.state.store`. Routes obtain a session per request through
       `get_db_session`; services own their commits.
When:  Schema creation runs at startup; the engine is disposed at shutdown.

SQLite notes:
    - The storage engine serializes writes with its own file lock, so the
      pipeline never takes an application-level lock.
    - Foreign keys are declared for shape only. SQLite does not enforce them
      unless PRAGMA foreign_keys is enabled, and it is not.
"""

import logging
from typing import Any, AsyncGenerator, Sequence

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

logger = logging.getLogger(__name__)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Every model registers its table on this metadata, which is what
    `Store.create_schema()` creates.
    """
    pass


# ── Store ─────────────────────────────────────────────────────────────────
class Store:
    """
    Process-lifetime handle on the relational store.

    Attributes:
        engine:           AsyncEngine bound to `database_url`
        session_factory:  Creates AsyncSession instances with shared config

    expire_on_commit=False keeps generated ids and defaults readable on the
    ORM instance after a commit without another round trip.
    """

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url
        self.engine: AsyncEngine = create_async_engine(
            database_url,
            echo=echo,
            pool_pre_ping=True,
        )
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def create_schema(self) -> None:
        """
        Create every table that does not exist yet.

        Idempotent: create_all checks for each table first, so running it on
        an existing database is a no-op. There are no migrations beyond this
        additive creation.
        """
        # Registers all five tables on Base.metadata
        from connectpair import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ready (%d tables)", len(Base.metadata.tables))

    async def ping(self) -> bool:
        """Connectivity probe (SELECT 1). Logs and returns False on failure."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.error("Database ping failed: %s", str(e))
            return False
        return True

    async def dispose(self) -> None:
        """
        What:  Closes all pooled connections.
        When:  Called during application shutdown (lifespan handler).
        """
        await self.engine.dispose()
        logger.info("Database connection closed.")


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a session from the store on `app.state`
        2. Yields it to the route handler
        3. On error: rolls back anything left pending
        4. Always: closes the session (returns the connection to the pool)

    Services commit explicitly, so a write is durable before the response
    is built and before any notification is scheduled.
    """
    store: Store = request.app.state.store
    async with store.session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


# ── Conflict Policy ───────────────────────────────────────────────────────
_INSERT_CONSTRUCTS = {
    "sqlite": sqlite_insert,
    "postgresql": postgresql_insert,
}


def insert_or_ignore(
    session: AsyncSession,
    model: Any,
    conflict_columns: Sequence[str],
    **values: Any,
):
    """
    Build an INSERT that silently does nothing when `conflict_columns`
    already hold these values.

    Compiles to `INSERT ... ON CONFLICT (cols) DO NOTHING` on the session's
    dialect (SQLite by default, PostgreSQL when DATABASE_URL points there).
    """
    bind = session.bind
    dialect_name = getattr(getattr(bind, "dialect", None), "name", "sqlite")
    insert = _INSERT_CONSTRUCTS.get(dialect_name, sqlite_insert)
    return (
        insert(model)
        .values(**values)
        .on_conflict_do_nothing(index_elements=list(conflict_columns))
    )
