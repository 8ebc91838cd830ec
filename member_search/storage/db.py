import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    create_async_engine,
)
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import member_search.models  # noqa: F401
from member_search.exceptions import StoreError
from member_search.logging import logger
from member_search.settings import app_settings
from member_search.utils.query_monitor import enable_query_monitoring


def _get_engine_options(database_url: str) -> dict[str, Any]:
    """
    Get engine options based on database type.

    SQLite has no server-side pool; an in-memory database must share one
    connection (StaticPool) or every session would see an empty database.
    """
    options: dict[str, Any] = {"echo": app_settings.DB_ECHO}

    if database_url.startswith("sqlite"):
        if ":memory:" in database_url:
            options["poolclass"] = StaticPool
            options["connect_args"] = {"check_same_thread": False}
    else:
        options.update(
            pool_size=app_settings.DB_POOL_SIZE,
            max_overflow=app_settings.DB_MAX_OVERFLOW,
            pool_recycle=app_settings.DB_POOL_RECYCLE,
            pool_pre_ping=app_settings.DB_POOL_PRE_PING,
        )
    return options


def _disable_driver_begin(  # type: ignore[no-untyped-def]
    dbapi_connection, connection_record
):
    dbapi_connection.isolation_level = None


def _emit_begin(conn):  # type: ignore[no-untyped-def]
    conn.exec_driver_sql("BEGIN")


def enable_sqlite_transactions(engine: Engine) -> None:
    """
    Start SQLite transactions with an explicit BEGIN, reads included.

    pysqlite and aiosqlite only open a transaction before DML, so the
    SELECTs of one read_session() would otherwise each run in autocommit
    and could see different data on a file database. The driver's own
    BEGIN handling is switched off on connect and one BEGIN is emitted
    whenever SQLAlchemy starts a transaction. Must run before the engine
    opens its first connection.

    Pass `async_engine.sync_engine` for async engines. Calling this again
    for the same engine is a no-op.

    Args:
        engine: SQLite engine.
    """
    if event.contains(engine, "begin", _emit_begin):
        return

    event.listen(engine, "connect", _disable_driver_begin)
    event.listen(engine, "begin", _emit_begin)


engine: AsyncEngine = create_async_engine(
    app_settings.DATABASE_URL, **_get_engine_options(app_settings.DATABASE_URL)
)
async_session = sessionmaker(
    engine, expire_on_commit=False, class_=AsyncSession
)

if engine.dialect.name == "sqlite":
    enable_sqlite_transactions(engine.sync_engine)

# Enable database query performance monitoring
enable_query_monitoring(engine.sync_engine)


def read_isolation_level(dialect_name: str) -> str:
    """
    Isolation level giving one snapshot for every statement of a session.

    SQLite transactions are always serializable once begun (see
    enable_sqlite_transactions()); server databases use the configured
    level (REPEATABLE READ by default).

    Args:
        dialect_name: SQLAlchemy dialect name, e.g. "postgresql", "sqlite".

    Returns:
        Isolation level name accepted by SQLAlchemy.
    """
    if dialect_name == "sqlite":
        return "SERIALIZABLE"
    return app_settings.DB_READ_ISOLATION_LEVEL


async def wait_and_init_db(
    retry_interval: int | None = None,
    max_retries: int | None = None,
) -> None:
    """
    Block until the database accepts connections, then create missing tables.

    Meant for service startup and local tooling; the search path itself
    never retries.

    Args:
        retry_interval: Seconds to sleep between attempts.
            Defaults to app_settings.DB_INIT_RETRY_INTERVAL
        max_retries: Attempts before giving up.
            Defaults to app_settings.DB_INIT_MAX_RETRIES

    Raises:
        RuntimeError: If no attempt succeeded.
    """
    retry_interval = retry_interval or app_settings.DB_INIT_RETRY_INTERVAL
    max_retries = max_retries or app_settings.DB_INIT_MAX_RETRIES

    for attempt in range(1, max_retries + 1):
        try:
            async with engine.begin() as conn:
                await conn.run_sync(SQLModel.metadata.create_all)
        except OperationalError as ex:
            logger.warning(
                f"Database unavailable ({ex.orig}), attempt {attempt}/{max_retries}; "
                f"retrying in {retry_interval}s"
            )
            await asyncio.sleep(retry_interval)
        else:
            logger.info("Database schema ready")
            return

    logger.error(f"Database still unavailable after {max_retries} attempts")
    raise RuntimeError("Database connection could not be established.")


@asynccontextmanager
async def write_session() -> AsyncIterator[AsyncSession]:
    """
    Open a read-write session that commits when the block exits cleanly.

    Any exception raised inside the block leaves the transaction
    uncommitted; the session rolls it back on close.

    Example:
        ```python
        async with write_session() as session:
            command = AssignTeamCommand(
                MemberRepository(session), TeamRepository(session)
            )
            await command.execute(AssignTeamInput(member_id=1, team_name="teamB"))
        ```

    Yields:
        AsyncSession: Session whose changes are committed on exit.

    Raises:
        StoreError: If the commit fails.
    """
    async with async_session() as session:
        yield session
        try:
            await session.commit()
        except SQLAlchemyError as ex:
            await session.rollback()
            logger.error(f"Commit failed, session rolled back: {ex}")
            raise StoreError(f"Error committing changes: {ex}") from ex


@asynccontextmanager
async def read_session() -> AsyncIterator[AsyncSession]:
    """
    Open a session whose statements all observe one consistent snapshot.

    The content and count statements of a page must run inside the same
    read_session() so that a concurrent write cannot slip in between them.
    The transaction is rolled back and the session closed on every exit
    path: normal return, store error and task cancellation.

    On SQLite the snapshot relies on enable_sqlite_transactions() having
    been applied to the engine, which this module does for its own engine.

    Example:
        ```python
        async with read_session() as session:
            repo = MemberRepository(session)
            page = await repo.search_page(condition, page_request)
        ```

    Yields:
        AsyncSession: Session bound to a single read transaction.
    """
    async with async_session() as session:
        await session.connection(
            execution_options={
                "isolation_level": read_isolation_level(engine.dialect.name)
            }
        )
        try:
            yield session
        finally:
            await session.rollback()
