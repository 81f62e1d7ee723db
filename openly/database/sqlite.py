"""SQLite implementation for Openly storage."""

import os
import asyncio
import logging
import sqlite3
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from functools import partial
from typing import Optional, List

from .base import OpenlyDBBase
from .models import Link, to_db_time
from ..errors import StorageError, DuplicateShortIDError

SQLITE_MAX_INTEGER = 2**63 - 1
SQLITE_MIN_INTEGER = -(2**63)


class OpenlySQLiteDB(OpenlyDBBase):
    """SQLite storage for links and sessions.

    One connection is shared by every operation and driven from a single
    worker thread, so the effective pool size is 1. Writes additionally hold
    ``write_lock`` for their whole duration; reads do not.
    """

    SCHEMA_SQL = """
    CREATE TABLE IF NOT EXISTS links (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        short_id TEXT NOT NULL UNIQUE,
        long_url TEXT NOT NULL,
        created_at TEXT NOT NULL
    );

    CREATE TABLE IF NOT EXISTS sessions (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        session_id TEXT NOT NULL UNIQUE,
        expiry_time TEXT NOT NULL,
        created_at TEXT NOT NULL
    );
    """

    def __init__(
        self,
        db_config: str = "openly.db",
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize SQLite storage.

        Args:
            db_config: Path of the SQLite database file
            logger: Optional logger instance
        """
        super().__init__(db_config)

        self.logger = logger or logging.getLogger(__name__)
        self.db_path = db_config
        self.write_lock = asyncio.Lock()

        self._conn: Optional[sqlite3.Connection] = None
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="openly-db")
        self._closed = False

    async def _run(self, func, *args):
        """Run a blocking call on the database thread."""
        if self._closed:
            raise StorageError("Database is closed")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, partial(func, *args))

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StorageError("Database is not open")
        return self._conn

    def _open_sync(self) -> None:
        directory = os.path.dirname(os.path.abspath(self.db_path))
        os.makedirs(directory, exist_ok=True)

        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA journal_mode=WAL;")
            conn.executescript(self.SCHEMA_SQL)
            conn.commit()
        except sqlite3.Error:
            conn.close()
            raise
        self._conn = conn

    async def open(self) -> None:
        """Open the database file and create tables if they don't exist."""
        try:
            await self._run(self._open_sync)
        except (sqlite3.Error, OSError) as e:
            self.logger.error(f"Error opening database {self.db_path}: {e}")
            raise StorageError(f"Cannot open database {self.db_path}") from e

        self.logger.info(f"Opened database {self.db_path}")

    # Links

    def _insert_link_sync(self, short_id: str, long_url: str, created_at: str) -> int:
        conn = self._connection()
        with conn:
            cursor = conn.execute(
                "INSERT INTO links (short_id, long_url, created_at) VALUES (?, ?, ?)",
                (short_id, long_url, created_at),
            )
        return cursor.lastrowid

    async def create_link(
        self,
        short_id: str,
        long_url: str,
        created_at: Optional[datetime] = None,
    ) -> Link:
        """Insert a new link under the write lock."""
        if created_at is None:
            created_at = datetime.now(timezone.utc)

        async with self.write_lock:
            try:
                link_id = await self._run(
                    self._insert_link_sync, short_id, long_url, to_db_time(created_at)
                )
            except sqlite3.IntegrityError as e:
                if "short_id" in str(e):
                    self.logger.warning(f"Short ID already exists: {short_id}")
                    raise DuplicateShortIDError(short_id) from e
                self.logger.error(f"Error creating link: {e}")
                raise StorageError("Error creating link") from e
            except sqlite3.Error as e:
                self.logger.error(f"Error creating link: {e}")
                raise StorageError("Error creating link") from e

        self.logger.debug(f"Inserted link {link_id}: {short_id} -> {long_url}")
        return Link(id=link_id, short_id=short_id, long_url=long_url, created_at=created_at)

    def _get_link_sync(self, short_id: str) -> Optional[sqlite3.Row]:
        return self._connection().execute(
            "SELECT id, short_id, long_url, created_at FROM links WHERE short_id = ?",
            (short_id,),
        ).fetchone()

    async def get_link(self, short_id: str) -> Optional[Link]:
        """Get the link for an exact short ID, or None."""
        try:
            row = await self._run(self._get_link_sync, short_id)
        except sqlite3.Error as e:
            self.logger.error(f"Error getting link {short_id}: {e}")
            raise StorageError("Error getting link") from e

        return Link.from_row(row) if row else None

    def _list_links_sync(self) -> List[sqlite3.Row]:
        return self._connection().execute(
            "SELECT id, short_id, long_url, created_at FROM links ORDER BY id"
        ).fetchall()

    async def list_links(self) -> List[Link]:
        """List all links in storage order."""
        try:
            rows = await self._run(self._list_links_sync)
        except sqlite3.Error as e:
            self.logger.error(f"Error listing links: {e}")
            raise StorageError("Error listing links") from e

        return [Link.from_row(row) for row in rows]

    def _delete_link_sync(self, link_id: int) -> Optional[str]:
        conn = self._connection()
        with conn:
            row = conn.execute("SELECT short_id FROM links WHERE id = ?", (link_id,)).fetchone()
            conn.execute("DELETE FROM links WHERE id = ?", (link_id,))
        return row["short_id"] if row else None

    async def delete_link(self, link_id: int) -> Optional[str]:
        """Delete a link by id under the write lock.

        Ids outside SQLite's INTEGER range cannot match a row.
        """
        if not SQLITE_MIN_INTEGER <= link_id <= SQLITE_MAX_INTEGER:
            self.logger.debug(f"No link with id {link_id}")
            return None

        async with self.write_lock:
            try:
                short_id = await self._run(self._delete_link_sync, link_id)
            except sqlite3.Error as e:
                self.logger.error(f"Error deleting link {link_id}: {e}")
                raise StorageError("Error deleting link") from e

        if short_id is None:
            self.logger.debug(f"No link with id {link_id}")
        return short_id

    # Sessions

    def _write_sync(self, sql: str, params: tuple) -> int:
        conn = self._connection()
        with conn:
            cursor = conn.execute(sql, params)
        return cursor.rowcount

    async def create_session(
        self,
        session_id: str,
        expiry_time: datetime,
        created_at: Optional[datetime] = None,
    ) -> None:
        """Store a session token under the write lock."""
        if created_at is None:
            created_at = datetime.now(timezone.utc)

        async with self.write_lock:
            try:
                await self._run(
                    self._write_sync,
                    "INSERT INTO sessions (session_id, expiry_time, created_at) VALUES (?, ?, ?)",
                    (session_id, to_db_time(expiry_time), to_db_time(created_at)),
                )
            except sqlite3.Error as e:
                self.logger.error(f"Error creating session: {e}")
                raise StorageError("Error creating session") from e

    def _session_active_sync(self, session_id: str, now: str) -> bool:
        row = self._connection().execute(
            "SELECT 1 FROM sessions WHERE session_id = ? AND expiry_time > ? LIMIT 1",
            (session_id, now),
        ).fetchone()
        return row is not None

    async def session_is_active(self, session_id: str, now: datetime) -> bool:
        """True if session_id exists and expires strictly after now."""
        try:
            return await self._run(self._session_active_sync, session_id, to_db_time(now))
        except sqlite3.Error as e:
            self.logger.error(f"Error checking session: {e}")
            raise StorageError("Error checking session") from e

    async def delete_session(self, session_id: str) -> bool:
        """Delete a session token under the write lock."""
        async with self.write_lock:
            try:
                deleted = await self._run(
                    self._write_sync,
                    "DELETE FROM sessions WHERE session_id = ?",
                    (session_id,),
                )
            except sqlite3.Error as e:
                self.logger.error(f"Error deleting session: {e}")
                raise StorageError("Error deleting session") from e

        return deleted > 0

    async def delete_expired_sessions(self, now: datetime) -> int:
        """Delete sessions whose expiry is not after now."""
        async with self.write_lock:
            try:
                return await self._run(
                    self._write_sync,
                    "DELETE FROM sessions WHERE expiry_time <= ?",
                    (to_db_time(now),),
                )
            except sqlite3.Error as e:
                self.logger.error(f"Error purging sessions: {e}")
                raise StorageError("Error purging sessions") from e

    def _count_sessions_sync(self) -> int:
        return self._connection().execute("SELECT COUNT(*) FROM sessions").fetchone()[0]

    async def count_sessions(self) -> int:
        """Number of stored session rows, expired or not."""
        try:
            return await self._run(self._count_sessions_sync)
        except sqlite3.Error as e:
            raise StorageError("Error counting sessions") from e

    async def health_check(self) -> bool:
        """Check if database is healthy."""
        try:
            await self._run(lambda: self._connection().execute("SELECT 1").fetchone())
            return True
        except (sqlite3.Error, StorageError) as e:
            self.logger.error(f"Health check failed: {e}")
            return False

    def _close_sync(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    async def close(self) -> None:
        """Close the connection and stop the database thread."""
        if self._closed:
            return
        try:
            await self._run(self._close_sync)
        except sqlite3.Error as e:
            self.logger.error(f"Error closing database: {e}")
        finally:
            self._closed = True
            self._executor.shutdown(wait=True)
        self.logger.debug(f"Closed database {self.db_path}")
