"""
Database connection and session management.
Uses SQLAlchemy 2.0 async pattern.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import event
from sqlalchemy.exc import (
    DataError,
    DBAPIError,
    IntegrityError,
    OperationalError,
    SQLAlchemyError,
    TimeoutError as PoolTimeoutError,
)
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from projectstore.config import Settings, get_settings
from projectstore.errors import ConstraintViolationError, ProjectManagerError, StorageError
from projectstore.logging_config import get_logger

logger = get_logger(__name__)


def create_engine(url: Optional[str] = None, settings: Optional[Settings] = None) -> AsyncEngine:
    """Build an async engine with backend-specific options."""
    settings = settings or get_settings()
    url = url or settings.database_url

    if url.startswith("sqlite"):
        # NullPool: every session gets its own connection so concurrent
        # writers contend on the SQLite lock instead of sharing one handle.
        engine = create_async_engine(
            url,
            echo=settings.debug,
            connect_args={"check_same_thread": False},
            poolclass=NullPool,
        )
        busy_timeout = settings.sqlite_busy_timeout_ms

        @event.listens_for(engine.sync_engine, "connect")
        def _set_sqlite_pragma(dbapi_conn, connection_record):
            """Enable WAL mode + foreign keys on every new SQLite connection."""
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute(f"PRAGMA busy_timeout={int(busy_timeout)}")
            cursor.close()

        return engine

    # PostgreSQL settings with connection pooling
    return create_async_engine(
        url,
        echo=settings.debug,
        pool_pre_ping=True,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
    )


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory shared by all stores."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine = create_engine()
async_session_maker = create_session_maker(engine)


@asynccontextmanager
async def session_scope(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """
    Run one store operation as a single transaction.

    Commits on success, rolls back on any error. SQLAlchemy failures are
    translated into the store's error taxonomy; store errors raised inside
    the block pass through unchanged.
    """
    try:
        async with session_maker() as session:
            async with session.begin():
                yield session
    except ProjectManagerError:
        raise
    except (IntegrityError, DataError) as exc:
        raise ConstraintViolationError(str(exc.orig or exc)) from exc
    except (OperationalError, PoolTimeoutError) as exc:
        logger.warning("Transient storage failure: %s", exc)
        raise StorageError(str(exc), transient=True) from exc
    except DBAPIError as exc:
        raise StorageError(str(exc), transient=exc.connection_invalidated) from exc
    except SQLAlchemyError as exc:
        raise StorageError(str(exc)) from exc


async def init_db(bind: Optional[AsyncEngine] = None) -> None:
    """Create all store tables."""
    # Import Base from kernel models to ensure all models are registered
    from projectstore.kernel.models import Base

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db(bind: Optional[AsyncEngine] = None) -> None:
    """Close database connections."""
    await (bind or engine).dispose()
