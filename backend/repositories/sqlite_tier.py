"""
SQLite implementation of PrimaryTier.
One database file per store, one table of (key, value) records.
No connection is kept between calls: each call opens, commits one
transaction and closes.
"""

import asyncio
import logging
import re
import sqlite3
from pathlib import Path
from typing import Optional

from .base import ConnectionFailure, StoreConfig, TierUnavailable, TransactionFailure

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class SQLiteTier:
    """Primary tier: async facade over short-lived sqlite3 connections."""

    def __init__(self, config: StoreConfig):
        if not _IDENTIFIER.match(config.table_name):
            raise ValueError(f"Invalid table name: {config.table_name!r}")
        self.path = Path(config.database_path)
        self.table = config.table_name
        self.enabled = config.primary_enabled

    def _connect(self) -> sqlite3.Connection:
        if not self.enabled:
            raise TierUnavailable("SQLite tier disabled")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            con = sqlite3.connect(self.path)
            con.execute(
                f"CREATE TABLE IF NOT EXISTS {self.table} "
                "(key TEXT PRIMARY KEY, value TEXT NOT NULL)"
            )
            con.commit()
        except (sqlite3.Error, OSError) as e:
            raise ConnectionFailure(f"Failed to open {self.path}: {e}") from e
        return con

    def _run(self, sql: str, params: tuple = (), fetch: str = ""):
        con = self._connect()
        try:
            with con:
                cur = con.execute(sql, params)
                if fetch == "one":
                    return cur.fetchone()
                if fetch == "all":
                    return cur.fetchall()
                return None
        except sqlite3.Error as e:
            raise TransactionFailure(f"{sql.split()[0]} on {self.table} failed: {e}") from e
        finally:
            con.close()

    async def ensure_open(self) -> None:
        """Create the database and table if missing. Safe to call repeatedly."""
        def _open():
            self._connect().close()
        await asyncio.to_thread(_open)

    async def get(self, key: str) -> Optional[str]:
        row = await asyncio.to_thread(
            self._run, f"SELECT value FROM {self.table} WHERE key = ?", (key,), "one"
        )
        return row[0] if row else None

    async def put(self, key: str, value: str) -> None:
        await asyncio.to_thread(
            self._run,
            f"INSERT INTO {self.table} (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
            (key, value),
        )

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._run, f"DELETE FROM {self.table} WHERE key = ?", (key,))

    async def all_keys(self) -> list[str]:
        rows = await asyncio.to_thread(self._run, f"SELECT key FROM {self.table}", (), "all")
        return [str(r[0]) for r in rows]
