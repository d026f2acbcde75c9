"""
Storage Backend Module

Provides the key-value store interface the bank persists through, with
implementations for in-memory (testing) and SQLite (persistence), plus the
persisted account number sequence.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional, Union
from datetime import datetime, timezone
import sqlite3
import threading
from pathlib import Path

from .logging_config import get_logger


logger = get_logger("bank.storage")


class StoreAdapter(ABC):
    """Abstract interface for key-value storage backends"""

    def __init__(self):
        self._lock = threading.RLock()

    @property
    def lock(self) -> threading.RLock:
        """Lock held for read-modify-write sequences"""
        return self._lock

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """Read the value stored under key, or None when absent"""
        pass

    @abstractmethod
    def write(self, key: str, value: str) -> bool:
        """Store value under key, returning False if the write failed"""
        pass

    def close(self) -> None:
        """Close storage connection (default no-op)"""
        pass


class InMemoryStore(StoreAdapter):
    """In-memory store implementation for testing"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        super().__init__()
        self._data: Dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def write(self, key: str, value: str) -> bool:
        with self._lock:
            self._data[key] = value
            return True

    def get_all_data(self) -> Dict[str, str]:
        """Get all data for debugging/inspection"""
        with self._lock:
            return dict(self._data)


class SQLiteStore(StoreAdapter):
    """SQLite store implementation for persistence"""

    def __init__(self, db_path: Union[str, Path] = ":memory:", table: str = "kv_store"):
        super().__init__()
        self.db_path = str(db_path)
        self.table = table
        self._connection = sqlite3.connect(self.db_path, check_same_thread=False)

        if self.db_path != ":memory:":
            with self._lock:
                self._connection.execute("PRAGMA journal_mode = WAL")
                self._connection.execute("PRAGMA synchronous = NORMAL")
                self._connection.commit()
        self._ensure_table()

    def _ensure_table(self) -> None:
        """Ensure table exists with proper schema"""
        with self._lock:
            self._connection.execute(f"""
                CREATE TABLE IF NOT EXISTS {self.table} (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            self._connection.commit()

    def read(self, key: str) -> Optional[str]:
        with self._lock:
            cursor = self._connection.execute(f"""
                SELECT value FROM {self.table} WHERE key = ?
            """, (key,))
            row = cursor.fetchone()
            if row:
                return row[0]
            return None

    def write(self, key: str, value: str) -> bool:
        now = datetime.now(timezone.utc).isoformat()
        with self._lock:
            try:
                self._connection.execute(f"""
                    INSERT OR REPLACE INTO {self.table} (key, value, updated_at)
                    VALUES (?, ?, ?)
                """, (key, value, now))
                self._connection.commit()
            except sqlite3.Error as e:
                self._connection.rollback()
                logger.error(f"SQLite write of {key!r} failed: {e}")
                return False
            return True

    def close(self) -> None:
        """Close SQLite connection"""
        with self._lock:
            if self._connection:
                self._connection.close()
                self._connection = None


class AccountNumberSequence:
    """
    Persisted, strictly increasing account number counter.

    The stored value is the next number to hand out. It lives under its own
    key so numbering survives reloads independently of the account map.
    """

    def __init__(self, store: StoreAdapter, key: str = "oopp_bank_next", seed: int = 1000):
        self.store = store
        self.key = key
        self.seed = seed

    def peek(self) -> int:
        """Number the next allocation would return"""
        raw = self.store.read(self.key)
        if raw is None:
            return self.seed
        try:
            return int(raw)
        except ValueError:
            logger.warning(f"Ignoring unreadable account sequence value {raw!r}, reseeding")
            return self.seed

    def allocate(self, floor: int = 0) -> int:
        """
        Read, increment and write the counter as one step.

        ``floor`` lets the caller skip numbers already in use when the stored
        counter was lost or damaged.
        """
        with self.store.lock:
            number = max(self.peek(), floor)
            if not self.store.write(self.key, str(number + 1)):
                logger.error(f"Could not persist account sequence after allocating {number}")
            return number
