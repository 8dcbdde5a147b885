"""Database Session Manager — async connection pool with scoped sessions.

Invariants:
    - Every session is closed on every exit path; exceptions roll back first
    - Database errors are logged and re-raised unchanged: the error Guard owns them
    - Connection pool uses pool_pre_ping for stale connection detection
    - postgres:// URLs are rebuilt for asyncpg with an explicit ssl mode (default require)

Design Decisions:
    - Singleton db_manager initialized on startup: FastAPI lifespan manages lifecycle
      (no global import side effects)
    - expire_on_commit=False: ORM rows stay readable after commit in async context
    - Missing-table detection recognizes SQLite's message as well as SQLSTATE 42P01
      so the soft "schema not ready" paths are exercised by the SQLite test suite
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncGenerator

from sqlalchemy import text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError, DBAPIError
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)

logger = logging.getLogger(__name__)

DEFAULT_POSTGRES_PORT = 5432
DEFAULT_SSL_MODE = "require"
UNDEFINED_TABLE_SQLSTATE = "42P01"

_POSTGRES_SCHEMES = ("postgres", "postgresql")


@dataclass(frozen=True)
class DatabaseTarget:
    """Resolved engine URL plus driver connect arguments."""
    url: URL | str
    connect_args: dict[str, Any] = field(default_factory=dict)


def resolve_database_url(raw: str) -> DatabaseTarget:
    """Turn DATABASE_URL into something create_async_engine accepts.

    postgres:// and postgresql:// URLs (Railway, Neon) are split into their
    components and rebuilt for asyncpg; the sslmode query parameter becomes the
    asyncpg ssl argument. Anything else is already a SQLAlchemy URL.
    """
    scheme = raw.split("://", 1)[0].lower() if "://" in raw else ""
    if scheme not in _POSTGRES_SCHEMES:
        return DatabaseTarget(raw)

    try:
        parsed = make_url(raw)
        ssl_mode = DEFAULT_SSL_MODE
        for key, value in parsed.query.items():
            if key.lower() == "sslmode":
                ssl_mode = value[0] if isinstance(value, tuple) else value
                break
        url = URL.create(
            "postgresql+asyncpg",
            username=parsed.username,
            password=parsed.password or None,
            host=parsed.host,
            port=parsed.port or DEFAULT_POSTGRES_PORT,
            database=parsed.database,
        )
    except (ArgumentError, ValueError) as e:
        logger.warning(f"Failed to parse PostgreSQL URL, using it as-is: {e}")
        return DatabaseTarget(raw)

    return DatabaseTarget(url, {"ssl": ssl_mode.lower()})


def is_missing_table_error(exc: DBAPIError) -> bool:
    """True when the driver reports that the referenced table does not exist."""
    orig = exc.orig
    for candidate in (orig, getattr(orig, "__cause__", None)):
        if candidate is None:
            continue
        sqlstate = (
            getattr(candidate, "sqlstate", None)
            or getattr(candidate, "pgcode", None)
        )
        if sqlstate == UNDEFINED_TABLE_SQLSTATE:
            return True
    return "no such table" in str(orig).lower()


class DatabaseSessionManager:
    """Manages async database sessions with pooling, rollback, and health checks."""

    def __init__(
        self, database_url: str, pool_size: int = 5, max_overflow: int = 5,
    ):
        target = resolve_database_url(database_url)
        engine_kwargs: dict[str, Any] = {
            "pool_pre_ping": True,
            "connect_args": target.connect_args,
        }
        if not str(target.url).startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_recycle=3600,
            )
        self.engine = create_async_engine(target.url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback on exception and guaranteed close."""
        session = self._session_factory()
        try:
            yield session
        except Exception as e:
            await session.rollback()
            logger.debug(f"Session rolled back after {type(e).__name__}: {e}")
            raise
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


# Singleton (initialized on startup)
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs):
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)


async def close_db() -> None:
    global db_manager
    if db_manager is not None:
        await db_manager.dispose()
        db_manager = None


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions."""
    if not db_manager:
        raise RuntimeError("Database connection string not found")
    async with db_manager.session() as session:
        yield session
