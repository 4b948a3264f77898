"""
SQLite response cache keyed by network, endpoint and request digest.

Entries record the tip (the epoch) they were computed at. A read under a
different tip deletes the entry and reports a miss. Entries stored without an
epoch are pinned to immutable data and never go stale.
"""
import asyncio
import hashlib
import json
import logging
import sqlite3
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..utils.metrics import cache_hits, cache_misses, cache_stale

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Epoch:
    """Tip height and hash a cached response belongs to."""
    index: int
    hash: str


def canonical_json(data: Any) -> str:
    return json.dumps(data, sort_keys=True, separators=(",", ":"))


def make_key(network: str, endpoint: str, request: Dict[str, Any]) -> str:
    """``{network}:{endpoint}:{sha256 of the canonical request}``"""
    digest = hashlib.sha256(canonical_json(request).encode("utf-8")).hexdigest()
    return f"{network}:{endpoint}:{digest}"


class ResponseCache:
    """
    SQLite cache with one connection per thread, WAL mode so readers never
    block each other. Cache failures are logged and treated as misses.
    """
    def __init__(self, db_path: str):
        self.db_path = db_path
        self._local = threading.local()
        self._connections: List[sqlite3.Connection] = []
        self._lock = threading.Lock()
        self._closed = False

    def _get_connection(self) -> sqlite3.Connection:
        """Get a thread-local connection to the database."""
        conn = getattr(self._local, "conn", None)
        if conn is None:
            if self._closed:
                raise sqlite3.ProgrammingError("Cache is closed")
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path, timeout=30.0, check_same_thread=False)
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA synchronous=NORMAL")
            conn.row_factory = sqlite3.Row
            self._create_tables(conn)
            self._local.conn = conn
            with self._lock:
                self._connections.append(conn)
            logger.debug(f"Created new SQLite connection in thread {threading.get_ident()}")
        return conn

    def _create_tables(self, conn: sqlite3.Connection):
        conn.execute('''
        CREATE TABLE IF NOT EXISTS responses (
            key TEXT PRIMARY KEY,
            endpoint TEXT,
            epoch_index INTEGER,
            epoch_hash TEXT,
            data TEXT,
            created_at TIMESTAMP
        )
        ''')
        conn.commit()

    def get_entry(self, key: str, endpoint: str, epoch: Optional[Epoch]) -> Optional[Dict[str, Any]]:
        """
        Return the cached response for ``key`` if it is pinned or was computed
        at ``epoch``. Entries from another epoch are deleted.
        """
        try:
            conn = self._get_connection()
            row = conn.execute(
                "SELECT data, epoch_index, epoch_hash FROM responses WHERE key = ?", (key,)
            ).fetchone()
            if row is None:
                cache_misses.labels(endpoint=endpoint).inc()
                logger.debug(f"Cache miss for {key}")
                return None
            if row['epoch_index'] is not None:
                if epoch is None or (row['epoch_index'], row['epoch_hash']) != (epoch.index, epoch.hash):
                    conn.execute("DELETE FROM responses WHERE key = ?", (key,))
                    conn.commit()
                    cache_stale.labels(endpoint=endpoint).inc()
                    cache_misses.labels(endpoint=endpoint).inc()
                    logger.debug(f"Discarded stale cache entry {key} from epoch {row['epoch_index']}")
                    return None
            cache_hits.labels(endpoint=endpoint).inc()
            logger.debug(f"Cache hit for {key}")
            return json.loads(row['data'])
        except (sqlite3.Error, ValueError) as e:
            logger.error(f"Error reading cache entry {key}: {e}")
            return None

    def put_entry(self, key: str, endpoint: str, data: Dict[str, Any], epoch: Optional[Epoch]) -> bool:
        """Store a response; the last writer wins."""
        try:
            conn = self._get_connection()
            conn.execute(
                "INSERT OR REPLACE INTO responses (key, endpoint, epoch_index, epoch_hash, data, created_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (
                    key,
                    endpoint,
                    epoch.index if epoch else None,
                    epoch.hash if epoch else None,
                    json.dumps(data),
                    datetime.now(timezone.utc).isoformat(),
                )
            )
            conn.commit()
            return True
        except (sqlite3.Error, TypeError, ValueError) as e:
            logger.error(f"Error caching {key}: {e}")
            return False

    def count(self) -> int:
        conn = self._get_connection()
        return conn.execute("SELECT COUNT(*) FROM responses").fetchone()[0]

    def clear(self):
        conn = self._get_connection()
        conn.execute("DELETE FROM responses")
        conn.commit()

    async def get(self, key: str, endpoint: str, epoch: Optional[Epoch]) -> Optional[Dict[str, Any]]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, lambda: self.get_entry(key, endpoint, epoch))

    async def set(self, key: str, endpoint: str, data: Dict[str, Any], epoch: Optional[Epoch]) -> bool:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, lambda: self.put_entry(key, endpoint, data, epoch))

    def close(self):
        """Close every connection opened by any thread."""
        with self._lock:
            self._closed = True
            connections, self._connections = self._connections, []
        for conn in connections:
            try:
                conn.close()
            except sqlite3.Error as e:
                logger.error(f"Error closing cache connection: {e}")
        self._local = threading.local()
        logger.info(f"Closed response cache at {self.db_path}")
