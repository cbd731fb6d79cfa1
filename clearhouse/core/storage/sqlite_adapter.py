import sqlite3
import threading
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from clearhouse.utils.logger import get_logger

logger = get_logger("storage.sqlite")


class SQLiteAdapter:
    """
    SQLite backend for persistent storage.

    Provides:
    1. Bucketed key-value store with opaque binary keys and values.
    2. Metadata table for small string settings (round flag, counters).
    """

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._conn_local = threading.local()

        if not db_path.parent.exists():
            db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_schema()

    def _get_conn(self) -> sqlite3.Connection:
        """Get or create connection for current thread."""
        if not hasattr(self._conn_local, "conn"):
            self._conn_local.conn = sqlite3.connect(
                self.db_path,
                timeout=30.0,
                check_same_thread=False
            )
            self._conn_local.conn.row_factory = sqlite3.Row
            self._conn_local.conn.execute("PRAGMA journal_mode=WAL;")
            self._conn_local.conn.execute("PRAGMA synchronous=NORMAL;")
        return self._conn_local.conn

    def _init_schema(self):
        """Initialize database schema."""
        conn = self._get_conn()
        with conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    bucket TEXT NOT NULL,
                    key BLOB NOT NULL,
                    value BLOB NOT NULL,
                    PRIMARY KEY (bucket, key)
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS meta (
                    key TEXT PRIMARY KEY,
                    value TEXT
                )
            """)

    # =========================================================================
    # Key-Value Operations
    # =========================================================================

    def put(self, key: bytes, value: bytes, bucket: str = "default"):
        """Save a key-value pair."""
        conn = self._get_conn()
        with conn:
            conn.execute(
                "INSERT OR REPLACE INTO kv_store (bucket, key, value) VALUES (?, ?, ?)",
                (bucket, key, value)
            )

    def get(self, key: bytes, bucket: str = "default") -> Optional[bytes]:
        """Get value by key."""
        conn = self._get_conn()
        cursor = conn.execute(
            "SELECT value FROM kv_store WHERE bucket = ? AND key = ?", (bucket, key)
        )
        row = cursor.fetchone()
        return row['value'] if row else None

    def delete(self, key: bytes, bucket: str = "default") -> bool:
        """Remove a key. Returns whether it existed."""
        conn = self._get_conn()
        with conn:
            cursor = conn.execute(
                "DELETE FROM kv_store WHERE bucket = ? AND key = ?", (bucket, key)
            )
        return cursor.rowcount > 0

    def items(self, bucket: str = "default") -> List[Tuple[bytes, bytes]]:
        """All (key, value) pairs of a bucket, in insertion order."""
        conn = self._get_conn()
        cursor = conn.execute(
            "SELECT key, value FROM kv_store WHERE bucket = ? ORDER BY rowid ASC", (bucket,)
        )
        return [(bytes(row['key']), bytes(row['value'])) for row in cursor]

    def clear_bucket(self, bucket: str):
        conn = self._get_conn()
        with conn:
            conn.execute("DELETE FROM kv_store WHERE bucket = ?", (bucket,))

    def count(self, bucket: str = "default") -> int:
        conn = self._get_conn()
        cursor = conn.execute("SELECT COUNT(*) as cnt FROM kv_store WHERE bucket = ?", (bucket,))
        return cursor.fetchone()['cnt']

    # =========================================================================
    # Metadata
    # =========================================================================

    def set_meta(self, key: str, value: str):
        conn = self._get_conn()
        with conn:
            conn.execute("INSERT OR REPLACE INTO meta (key, value) VALUES (?, ?)", (key, value))

    def get_meta(self, key: str) -> Optional[str]:
        conn = self._get_conn()
        cursor = conn.execute("SELECT value FROM meta WHERE key = ?", (key,))
        row = cursor.fetchone()
        return row['value'] if row else None

    # =========================================================================
    # Atomic Rewrite
    # =========================================================================

    def replace_buckets(
        self,
        buckets: Dict[str, Iterable[Tuple[bytes, bytes]]],
        meta: Optional[Dict[str, str]] = None,
    ):
        """
        Atomically rewrite several buckets and metadata keys.

        Either every bucket is replaced or none is.

        Args:
            buckets: bucket name -> (key, value) pairs that become its content
            meta: metadata keys to set in the same transaction
        """
        conn = self._get_conn()
        with conn:
            for bucket, pairs in buckets.items():
                conn.execute("DELETE FROM kv_store WHERE bucket = ?", (bucket,))
                conn.executemany(
                    "INSERT INTO kv_store (bucket, key, value) VALUES (?, ?, ?)",
                    [(bucket, key, value) for key, value in pairs]
                )
            for key, value in (meta or {}).items():
                conn.execute("INSERT OR REPLACE INTO meta (key, value) VALUES (?, ?)", (key, value))

    def close(self):
        if hasattr(self._conn_local, "conn"):
            self._conn_local.conn.close()
            del self._conn_local.conn
