"""Database connection management, initialization, and migration runner.

Manages a single aiosqlite connection with WAL mode and foreign key enforcement.
Rows come back as ``aiosqlite.Row`` so the repository can read columns by name.
Migrations are read from SQL files in the migrations/ directory and applied in order.
"""

import datetime
import logging
from pathlib import Path
from types import TracebackType

import aiosqlite

logger = logging.getLogger(__name__)

_MIGRATIONS_DIR = Path(__file__).parent / "migrations"

_MEMORY_PATH = ":memory:"


def _pending_migrations(applied_versions: set[int]) -> list[tuple[int, Path]]:
    """Return ``(version, path)`` pairs not yet applied, in version order.

    Files are named NNN_description.sql; the numeric prefix is the version.
    """
    pending: list[tuple[int, Path]] = []
    for migration_file in sorted(_MIGRATIONS_DIR.glob("*.sql")):
        version = int(migration_file.name.split("_", 1)[0])
        if version not in applied_versions:
            pending.append((version, migration_file))
    return pending


class Database:
    """Async SQLite database with connection lifecycle and migration support.

    Usage::

        async with Database("data/swing_scout.db") as db:
            repo = Repository(db)
            ...
    """

    def __init__(self, db_path: str = "data/swing_scout.db") -> None:
        self._db_path = db_path
        self._connection: aiosqlite.Connection | None = None

    @property
    def connection(self) -> aiosqlite.Connection:
        """Return the active connection or raise if not connected."""
        if self._connection is None:
            msg = "Database is not connected. Call connect() or use 'async with'."
            raise RuntimeError(msg)
        return self._connection

    async def connect(self) -> None:
        """Open the connection, enable WAL + foreign keys, run migrations.

        The parent directory of a file-backed database is created if missing.
        """
        if self._db_path != _MEMORY_PATH:
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)

        self._connection = await aiosqlite.connect(self._db_path)
        self._connection.row_factory = aiosqlite.Row
        await self._connection.execute("PRAGMA journal_mode=WAL")
        await self._connection.execute("PRAGMA foreign_keys=ON")
        await self._run_migrations()
        logger.info("Database connected: %s", self._db_path)

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None
            logger.info("Database closed: %s", self._db_path)

    async def __aenter__(self) -> "Database":
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def _run_migrations(self) -> None:
        """Apply pending SQL migrations, recording each in ``schema_version``.

        Running twice is safe: applied versions are skipped.
        """
        conn = self.connection

        await conn.execute(
            "CREATE TABLE IF NOT EXISTS schema_version "
            "(version INTEGER PRIMARY KEY, applied_at TEXT NOT NULL)"
        )
        await conn.commit()

        cursor = await conn.execute("SELECT version FROM schema_version ORDER BY version")
        applied_rows = await cursor.fetchall()
        applied_versions: set[int] = {row[0] for row in applied_rows}

        for version, migration_file in _pending_migrations(applied_versions):
            logger.info("Applying migration %03d: %s", version, migration_file.name)
            sql = migration_file.read_text(encoding="utf-8")
            # NOTE: executescript() commits per statement; a failed migration is
            # left unrecorded and retried on next connect, so keep files atomic.
            await conn.executescript(sql)
            applied_at = datetime.datetime.now(datetime.UTC).isoformat()
            await conn.execute(
                "INSERT INTO schema_version (version, applied_at) VALUES (?, ?)",
                (version, applied_at),
            )
            await conn.commit()
            logger.info("Migration %03d applied successfully.", version)
