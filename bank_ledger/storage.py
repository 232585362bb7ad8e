"""
Storage Backend Module

Snapshot storage for the ledger. A backend holds named tables of JSON
documents keyed by their "id" field. Writers replace whole tables in one
atomic step; readers fetch one document or a whole table in insertion order.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union
import json
import sqlite3
import threading
from pathlib import Path

from .logging_config import get_logger


logger = get_logger("bank_ledger.storage")

Record = Dict[str, Any]


class StorageInterface(ABC):
    """Abstract interface for storage backends"""

    @abstractmethod
    def replace_tables(self, tables: Mapping[str, Iterable[Record]]) -> None:
        """
        Replace the full contents of each named table

        All tables change together or not at all. Tables not named keep
        their records.

        Raises:
            KeyError: A record has no "id"
            TypeError: A record is not JSON serialisable
        """

    @abstractmethod
    def load(self, table: str, record_id: str) -> Optional[Record]:
        """Load one record, or None"""

    @abstractmethod
    def load_all(self, table: str) -> List[Record]:
        """Load every record of a table in insertion order"""

    def close(self) -> None:
        """Release backend resources"""


def _encode(records: Iterable[Record]) -> List[tuple]:
    return [(record["id"], json.dumps(record)) for record in records]


class InMemoryStorage(StorageInterface):
    """
    Dict-backed storage for tests and the default configuration

    Documents are kept as JSON text, so callers never share state with the
    store and the same records round-trip as through SQLite.
    """

    def __init__(self):
        self._tables: Dict[str, Dict[str, str]] = {}
        self._lock = threading.Lock()

    def replace_tables(self, tables: Mapping[str, Iterable[Record]]) -> None:
        # Encode everything first; a failure leaves the store untouched
        encoded = {name: dict(_encode(records)) for name, records in tables.items()}
        with self._lock:
            self._tables.update(encoded)

    def load(self, table: str, record_id: str) -> Optional[Record]:
        with self._lock:
            text = self._tables.get(table, {}).get(record_id)
        return None if text is None else json.loads(text)

    def load_all(self, table: str) -> List[Record]:
        with self._lock:
            texts = list(self._tables.get(table, {}).values())
        return [json.loads(text) for text in texts]


class SQLiteStorage(StorageInterface):
    """
    SQLite storage in a single records table

    Each row holds (table name, id, JSON document); rowid order is
    insertion order.
    """

    def __init__(self, db_path: Union[str, Path] = ":memory:"):
        self.db_path = str(db_path)
        self._connection: Optional[sqlite3.Connection] = sqlite3.connect(
            self.db_path, check_same_thread=False
        )
        self._lock = threading.Lock()
        with self._connection:
            self._connection.execute("""
                CREATE TABLE IF NOT EXISTS records (
                    table_name TEXT NOT NULL,
                    id TEXT NOT NULL,
                    data TEXT NOT NULL,
                    PRIMARY KEY (table_name, id)
                )
            """)
        logger.debug(f"SQLite storage opened at {self.db_path}")

    def replace_tables(self, tables: Mapping[str, Iterable[Record]]) -> None:
        with self._lock, self._connection:
            for name, records in tables.items():
                self._connection.execute(
                    "DELETE FROM records WHERE table_name = ?", (name,)
                )
                self._connection.executemany(
                    "INSERT INTO records (table_name, id, data) VALUES (?, ?, ?)",
                    [(name, record_id, data) for record_id, data in _encode(records)]
                )

    def load(self, table: str, record_id: str) -> Optional[Record]:
        with self._lock:
            row = self._connection.execute(
                "SELECT data FROM records WHERE table_name = ? AND id = ?",
                (table, record_id)
            ).fetchone()
        return None if row is None else json.loads(row[0])

    def load_all(self, table: str) -> List[Record]:
        with self._lock:
            rows = self._connection.execute(
                "SELECT data FROM records WHERE table_name = ? ORDER BY rowid",
                (table,)
            ).fetchall()
        return [json.loads(row[0]) for row in rows]

    def close(self) -> None:
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None


def create_storage(backend: str = "memory", sqlite_path: Union[str, Path] = ":memory:") -> StorageInterface:
    """Build the storage backend named in configuration"""
    if backend == "memory":
        return InMemoryStorage()
    if backend == "sqlite":
        return SQLiteStorage(sqlite_path)
    raise ValueError(f"Unknown storage backend: {backend}")
