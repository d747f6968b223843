"""
SQLite database layer for PartLookup.

Stores:
- parts: one row per part number with its storage location

Uses aiosqlite for async SQLite access. The database file lives at
backend/data/partlookup.db by default and is auto-created on first open.

A PartStore keeps two connections on the same file in WAL mode. Lookups go
through the reader connection; an import's clear+insert pair runs on the
writer connection as a single transaction, so readers only ever see the last
committed table.
"""

import asyncio
import logging
from collections.abc import Iterable
from pathlib import Path

import aiosqlite

from app.schemas.parts import PartRecord

logger = logging.getLogger(__name__)

# Default database file location
DB_PATH = Path(__file__).parent.parent / "data" / "partlookup.db"

# Bumping this drops and recreates the parts table on next open.
SCHEMA_VERSION = 2

_COLUMNS = "partNumber, description, location, quantity, newReference"


class StorageFault(Exception):
    """Underlying persistence failure during a read or write."""


class PartStore:
    """Persistent part lookup table, replaceable wholesale."""

    def __init__(self, db_path: str | Path | None = None, timeout: float = 5.0):
        self.db_path = Path(db_path) if db_path else DB_PATH
        self.timeout = timeout
        self._reader: aiosqlite.Connection | None = None
        self._writer: aiosqlite.Connection | None = None
        self._write_lock = asyncio.Lock()

    @property
    def is_open(self) -> bool:
        return self._reader is not None

    async def open(self) -> None:
        """Open both connections and make sure the schema is current."""
        if self.is_open:
            return
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._writer = await aiosqlite.connect(str(self.db_path), timeout=self.timeout)
            await self._writer.execute("PRAGMA journal_mode=WAL")
            await _init_tables(self._writer)

            self._reader = await aiosqlite.connect(str(self.db_path), timeout=self.timeout)
            self._reader.row_factory = aiosqlite.Row
        except (aiosqlite.Error, OSError) as e:
            await self.close()
            raise StorageFault(f"Could not open part database at {self.db_path}: {e}") from e
        logger.info(f"SQLite database initialized at {self.db_path}")

    async def close(self) -> None:
        """Close the database connections."""
        for conn in (self._reader, self._writer):
            if conn is not None:
                await conn.close()
        if self._reader is not None or self._writer is not None:
            logger.info("SQLite database connection closed")
        self._reader = None
        self._writer = None

    async def __aenter__(self) -> "PartStore":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _require_reader(self) -> aiosqlite.Connection:
        if self._reader is None:
            raise StorageFault("Part database is not open")
        return self._reader

    # ─── Reads ───────────────────────────────────────────────────────

    async def get_part(self, part_number: str) -> PartRecord | None:
        """Fetch one part by exact part number."""
        db = self._require_reader()
        try:
            cursor = await db.execute(f"SELECT {_COLUMNS} FROM parts WHERE partNumber = ?", (part_number,))
            row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StorageFault(str(e)) from e
        return _row_to_record(row) if row else None

    async def list_parts(self, limit: int = 100, offset: int = 0) -> list[PartRecord]:
        """List parts ordered by part number."""
        db = self._require_reader()
        try:
            cursor = await db.execute(
                f"SELECT {_COLUMNS} FROM parts ORDER BY partNumber LIMIT ? OFFSET ?",
                (limit, offset),
            )
            rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise StorageFault(str(e)) from e
        return [_row_to_record(row) for row in rows]

    async def count_parts(self) -> int:
        db = self._require_reader()
        try:
            cursor = await db.execute("SELECT COUNT(*) FROM parts")
            row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StorageFault(str(e)) from e
        return row[0]

    # ─── Full replace ────────────────────────────────────────────────

    async def replace_all(self, records: Iterable[PartRecord]) -> int:
        """
        Clear the table and insert `records` as one transaction.

        Duplicate part numbers collapse (insert-or-replace, last one wins).
        Returns the number of rows stored. On failure the transaction is
        rolled back and StorageFault is raised; the previous content stays.
        """
        rows = [
            (r.part_number, r.description, r.location, r.quantity, r.new_reference)
            for r in records
        ]
        async with self._write_lock:
            db = self._writer
            if db is None:
                raise StorageFault("Part database is not open")
            try:
                await db.execute("DELETE FROM parts")
                await db.executemany(
                    f"INSERT OR REPLACE INTO parts ({_COLUMNS}) VALUES (?, ?, ?, ?, ?)",
                    rows,
                )
                cursor = await db.execute("SELECT COUNT(*) FROM parts")
                stored = (await cursor.fetchone())[0]
                await db.commit()
            except aiosqlite.Error as e:
                await db.rollback()
                logger.error(f"Part table replace rolled back: {e}")
                raise StorageFault(str(e)) from e
        logger.info(f"Part table replaced with {stored} records")
        return stored


async def _init_tables(db: aiosqlite.Connection):
    """Create the parts table, recreating it when the schema version changed."""
    cursor = await db.execute("PRAGMA user_version")
    version = (await cursor.fetchone())[0]
    if version != SCHEMA_VERSION:
        if version:
            logger.warning(f"Part schema version {version} != {SCHEMA_VERSION}, recreating parts table")
        await db.execute("DROP TABLE IF EXISTS parts")

    await db.executescript(f"""
        CREATE TABLE IF NOT EXISTS parts (
            partNumber TEXT PRIMARY KEY NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            location TEXT NOT NULL,
            quantity INTEGER NOT NULL DEFAULT 0,
            newReference TEXT
        );

        PRAGMA user_version = {SCHEMA_VERSION};
    """)
    await db.commit()


def _row_to_record(row) -> PartRecord:
    return PartRecord(
        part_number=row[0],
        description=row[1] or "",
        location=row[2],
        quantity=row[3] or 0,
        new_reference=row[4],
    )
