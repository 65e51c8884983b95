"""
Storage Backend Module

Keyed JSON record store behind the loan account manager. Records live in named
tables and are addressed by string id; load_all and find return them in the
order they were first saved. Decimal fields travel as strings.

Backends:
    InMemoryStorage  process-local, used by tests and the "memory" backend
    SQLiteStorage    one row per record, JSON payload column
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Any, Union
from decimal import Decimal
from datetime import datetime, timezone
import sqlite3
import json
import threading
from dataclasses import dataclass, asdict
from pathlib import Path
from contextlib import contextmanager


Record = Dict[str, Any]


@dataclass
class StorageRecord:
    """Persisted entity with an id and audit timestamps"""
    id: str
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> Record:
        """Flatten to JSON-safe values: ISO timestamps, Decimal strings"""
        flat = {}
        for key, value in asdict(self).items():
            if isinstance(value, datetime):
                value = value.isoformat()
            elif isinstance(value, Decimal):
                value = str(value)
            flat[key] = value
        return flat

    @classmethod
    def from_dict(cls, data: Record) -> 'StorageRecord':
        """Rebuild a record from to_dict output"""
        data = dict(data)
        for key in ('created_at', 'updated_at'):
            if isinstance(data.get(key), str):
                data[key] = datetime.fromisoformat(data[key])
        return cls(**data)


class StorageInterface(ABC):
    """Keyed record store shared by all backends"""

    @abstractmethod
    def save(self, table: str, record_id: str, data: Record) -> None:
        """Insert or replace the record stored under record_id"""

    @abstractmethod
    def load(self, table: str, record_id: str) -> Optional[Record]:
        """Return a copy of the record, or None"""

    @abstractmethod
    def load_all(self, table: str) -> List[Record]:
        """Every record in the table, oldest first"""

    @abstractmethod
    def delete(self, table: str, record_id: str) -> bool:
        """Remove a record; False when there was nothing to remove"""

    @abstractmethod
    def exists(self, table: str, record_id: str) -> bool:
        pass

    @abstractmethod
    def count(self, table: str) -> int:
        pass

    @abstractmethod
    def clear_table(self, table: str) -> None:
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the backend's resources"""

    def find(self, table: str, filters: Dict[str, Any]) -> List[Record]:
        """Records whose top-level fields equal every filter value, oldest first"""
        return [
            record for record in self.load_all(table)
            if all(key in record and record[key] == value for key, value in filters.items())
        ]

    def begin_transaction(self) -> None:
        """Backends without transactions apply every write immediately"""

    def commit(self) -> None:
        pass

    def rollback(self) -> None:
        pass

    @contextmanager
    def atomic(self):
        """Group writes so that they all apply or none do"""
        self.begin_transaction()
        try:
            yield self
        except Exception:
            self.rollback()
            raise
        self.commit()


class InMemoryStorage(StorageInterface):
    """Dict-backed storage; records are deep-copied in and out"""

    def __init__(self):
        self._tables: Dict[str, Dict[str, str]] = {}
        self._lock = threading.RLock()

    def _rows(self, table: str) -> Dict[str, str]:
        return self._tables.setdefault(table, {})

    def save(self, table: str, record_id: str, data: Record) -> None:
        payload = json.dumps(data, default=str)
        with self._lock:
            self._rows(table)[record_id] = payload

    def load(self, table: str, record_id: str) -> Optional[Record]:
        with self._lock:
            payload = self._rows(table).get(record_id)
        return json.loads(payload) if payload is not None else None

    def load_all(self, table: str) -> List[Record]:
        with self._lock:
            payloads = list(self._rows(table).values())
        return [json.loads(payload) for payload in payloads]

    def delete(self, table: str, record_id: str) -> bool:
        with self._lock:
            return self._rows(table).pop(record_id, None) is not None

    def exists(self, table: str, record_id: str) -> bool:
        with self._lock:
            return record_id in self._rows(table)

    def count(self, table: str) -> int:
        with self._lock:
            return len(self._rows(table))

    def clear_table(self, table: str) -> None:
        with self._lock:
            self._tables.pop(table, None)

    def close(self) -> None:
        with self._lock:
            self._tables.clear()


class SQLiteStorage(StorageInterface):
    """
    SQLite-backed storage

    Each table has an autoincrement seq column so re-saving a record keeps
    its position in load_all. Writes commit immediately unless an atomic()
    block is open.
    """

    def __init__(self, db_path: Union[str, Path] = ":memory:"):
        self.db_path = str(db_path)
        self._connection = sqlite3.connect(self.db_path, check_same_thread=False)
        self._connection.row_factory = sqlite3.Row
        self._lock = threading.RLock()
        self._in_transaction = False

        if self.db_path != ":memory:":
            self._connection.execute("PRAGMA journal_mode = WAL")

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        return self._connection.execute(sql, params)

    def _ensure_table(self, table: str) -> None:
        self._execute(f"""
            CREATE TABLE IF NOT EXISTS {table} (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT NOT NULL UNIQUE,
                data TEXT NOT NULL,
                saved_at TEXT NOT NULL
            )
        """)

    def _write(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        cursor = self._execute(sql, params)
        if not self._in_transaction:
            self._connection.commit()
        return cursor

    def _select(self, table: str, sql: str, params: tuple = ()) -> List[sqlite3.Row]:
        with self._lock:
            self._ensure_table(table)
            return self._execute(sql, params).fetchall()

    def save(self, table: str, record_id: str, data: Record) -> None:
        with self._lock:
            self._ensure_table(table)
            self._write(f"""
                INSERT INTO {table} (id, data, saved_at) VALUES (?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET data = excluded.data, saved_at = excluded.saved_at
            """, (record_id, json.dumps(data, default=str), datetime.now(timezone.utc).isoformat()))

    def load(self, table: str, record_id: str) -> Optional[Record]:
        rows = self._select(table, f"SELECT data FROM {table} WHERE id = ?", (record_id,))
        return json.loads(rows[0]['data']) if rows else None

    def load_all(self, table: str) -> List[Record]:
        rows = self._select(table, f"SELECT data FROM {table} ORDER BY seq")
        return [json.loads(row['data']) for row in rows]

    def find(self, table: str, filters: Dict[str, Any]) -> List[Record]:
        """Filter inside SQLite with json_extract; filter values must be non-null scalars"""
        clauses = " AND ".join("json_extract(data, ?) = ?" for _ in filters)
        params = []
        for key, value in filters.items():
            params.extend([f"$.{key}", value])
        rows = self._select(
            table,
            f"SELECT data FROM {table} WHERE {clauses or '1'} ORDER BY seq",
            tuple(params)
        )
        return [json.loads(row['data']) for row in rows]

    def delete(self, table: str, record_id: str) -> bool:
        with self._lock:
            self._ensure_table(table)
            return self._write(f"DELETE FROM {table} WHERE id = ?", (record_id,)).rowcount > 0

    def exists(self, table: str, record_id: str) -> bool:
        return bool(self._select(table, f"SELECT 1 FROM {table} WHERE id = ?", (record_id,)))

    def count(self, table: str) -> int:
        return self._select(table, f"SELECT COUNT(*) AS n FROM {table}")[0]['n']

    def clear_table(self, table: str) -> None:
        with self._lock:
            self._ensure_table(table)
            self._write(f"DELETE FROM {table}")

    def begin_transaction(self) -> None:
        with self._lock:
            self._in_transaction = True

    def commit(self) -> None:
        with self._lock:
            if self._in_transaction:
                self._connection.commit()
                self._in_transaction = False

    def rollback(self) -> None:
        with self._lock:
            if self._in_transaction:
                self._connection.rollback()
                self._in_transaction = False

    def close(self) -> None:
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None
