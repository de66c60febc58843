"""Database configuration and session management."""

from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_conn, connection_record) -> None:  # noqa: ARG001
    """SQLite ignores FOREIGN KEY clauses unless this pragma is set per connection."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def enable_sqlite_transactions(engine: Engine) -> None:
    """Make SQLAlchemy, not the sqlite3 driver, open every transaction.

    The driver only issues BEGIN ahead of DML, so DDL would otherwise
    autocommit statement by statement. Works for pysqlite and aiosqlite;
    pass ``AsyncEngine.sync_engine`` for the latter.
    """

    @event.listens_for(engine, "connect")
    def _disable_driver_begin(dbapi_conn, connection_record) -> None:  # noqa: ARG001
        dbapi_conn.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn) -> None:
        conn.exec_driver_sql("BEGIN")


class Database:
    """Owns the engine and connection pool for one database URL.

    Built once per process (or per test) and handed to whatever needs a
    session; nothing in the package reaches for a module-level engine.
    """

    def __init__(self, url: str, echo: bool = False) -> None:
        self.url = url
        self.engine = create_async_engine(url, echo=echo, pool_pre_ping=True)
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
            enable_sqlite_transactions(self.engine.sync_engine)
        self.sessionmaker = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session, committing on success and rolling back on failure.

        The pooled connection goes back to the pool when the block exits,
        including when the surrounding task is cancelled.
        """
        async with self.sessionmaker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def dispose(self) -> None:
        """Close every pooled connection."""
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency that provides a database session."""
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session
