"""Versioned schema migrations.

Each migration unit is an Alembic revision under ``api/migrations/versions``.
Units are ordered by their ``down_revision`` chain, so the order never
depends on how the filesystem lists the directory. Every unit runs in its
own transaction; a failing unit stops the run and the error propagates.

Usage:
    python -m postgate.migrations upgrade
    python -m postgate.migrations downgrade -n 1
    python -m postgate.migrations status
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import TypeVar

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import create_engine, pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from postgate.database import enable_sqlite_transactions
from postgate.errors import ValidationError

logger = logging.getLogger("postgate.migrations")

API_ROOT = Path(__file__).resolve().parents[1]

T = TypeVar("T")


@dataclass(frozen=True)
class MigrationState:
    """One migration unit and whether it is currently applied."""

    revision: str
    description: str
    applied: bool


class MigrationStatus:
    """Lazy view over every migration unit, oldest first.

    Each iteration reads the database afresh, so the same object can be
    iterated again after migrations are applied or reverted.
    """

    def __init__(self, manager: MigrationManager) -> None:
        self._manager = manager

    def __iter__(self) -> Iterator[MigrationState]:
        applied = set(self._manager.applied())
        for script in self._manager.scripts():
            yield MigrationState(
                revision=script.revision,
                description=script.doc or "",
                applied=script.revision in applied,
            )


class MigrationManager:
    """Applies and reverts migration units against one database."""

    def __init__(
        self,
        database_url: str,
        ini_path: Path = API_ROOT / "alembic.ini",
        script_location: Path = API_ROOT / "migrations",
    ) -> None:
        self.database_url = database_url
        self.ini_path = ini_path
        self.script_location = script_location

    def _alembic_config(self) -> Config:
        config = Config(str(self.ini_path))
        config.set_main_option("script_location", str(self.script_location))
        # ConfigParser interpolation treats "%" as special
        config.set_main_option("sqlalchemy.url", self.database_url.replace("%", "%%"))
        return config

    def _script_directory(self) -> ScriptDirectory:
        return ScriptDirectory.from_config(self._alembic_config())

    def _with_connection(self, fn: Callable[[Connection], T]) -> T:
        """Run ``fn`` with a short-lived sync connection, async driver or not."""
        if "+asyncpg" in self.database_url or "+aiosqlite" in self.database_url:

            async def _run() -> T:
                engine = create_async_engine(self.database_url, poolclass=pool.NullPool)
                if engine.dialect.name == "sqlite":
                    enable_sqlite_transactions(engine.sync_engine)
                try:
                    async with engine.connect() as conn:
                        return await conn.run_sync(fn)
                finally:
                    await engine.dispose()

            return asyncio.run(_run())

        engine = create_engine(self.database_url, poolclass=pool.NullPool)
        if engine.dialect.name == "sqlite":
            enable_sqlite_transactions(engine)
        try:
            with engine.connect() as conn:
                return fn(conn)
        finally:
            engine.dispose()

    def scripts(self) -> list:
        """All migration units, oldest first."""
        return list(reversed(list(self._script_directory().walk_revisions("base", "heads"))))

    def current(self) -> str | None:
        """Revision id of the most recently applied unit, or None."""

        def _read(conn: Connection) -> str | None:
            return MigrationContext.configure(conn).get_current_revision()

        return self._with_connection(_read)

    def applied(self) -> list[str]:
        """Applied revision ids, oldest first."""
        current = self.current()
        if current is None:
            return []
        revisions = self._script_directory().iterate_revisions(current, "base")
        return list(reversed([script.revision for script in revisions]))

    def pending(self) -> list[str]:
        applied = set(self.applied())
        return [script.revision for script in self.scripts() if script.revision not in applied]

    def status(self) -> MigrationStatus:
        return MigrationStatus(self)

    def apply_pending(self) -> list[str]:
        """Apply every pending unit in ascending order.

        Returns the revision ids that were applied.
        """
        pending = self.pending()
        if not pending:
            logger.info("Schema is up to date at %s", self.current())
            return []

        logger.info("Applying %d migration(s): %s", len(pending), ", ".join(pending))
        try:
            command.upgrade(self._alembic_config(), "head")
        except Exception:
            logger.exception("Migration failed; schema left at %s", self.current())
            raise
        return pending

    def revert_last(self, n: int = 1) -> list[str]:
        """Revert the ``n`` most recently applied units, newest first.

        Returns the revision ids that were reverted.
        """
        applied = self.applied()
        if n < 1:
            raise ValidationError("Number of migrations to revert must be at least 1")
        if n > len(applied):
            raise ValidationError(
                f"Cannot revert {n} migration(s); only {len(applied)} applied"
            )

        target = applied[-n - 1] if n < len(applied) else "base"
        reverted = list(reversed(applied[-n:]))
        logger.info("Reverting %d migration(s): %s", n, ", ".join(reverted))
        command.downgrade(self._alembic_config(), target)
        return reverted


async def migrate_db(database_url: str) -> list[str]:
    """Async wrapper to run migrations without blocking the event loop."""
    return await asyncio.to_thread(MigrationManager(database_url).apply_pending)


def main(argv: list[str] | None = None) -> int:
    from postgate.config import get_settings
    from postgate.logging_config import configure_logging

    parser = argparse.ArgumentParser(description="Manage Postgate schema migrations.")
    parser.add_argument("--database-url", help="Override DATABASE_URL from the environment")
    subparsers = parser.add_subparsers(dest="action", required=True)
    subparsers.add_parser("upgrade", help="Apply all pending migrations")
    downgrade_parser = subparsers.add_parser("downgrade", help="Revert applied migrations")
    downgrade_parser.add_argument("-n", type=int, default=1, help="How many to revert (default 1)")
    subparsers.add_parser("status", help="List migrations and whether each is applied")
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level)
    manager = MigrationManager(args.database_url or settings.database_url)

    if args.action == "upgrade":
        applied = manager.apply_pending()
        print(f"Applied {len(applied)} migration(s).")
    elif args.action == "downgrade":
        try:
            reverted = manager.revert_last(args.n)
        except ValidationError as exc:
            print(exc.message, file=sys.stderr)
            return 1
        print(f"Reverted {len(reverted)} migration(s).")
    else:
        for state in manager.status():
            marker = "x" if state.applied else " "
            print(f"[{marker}] {state.revision}  {state.description}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
