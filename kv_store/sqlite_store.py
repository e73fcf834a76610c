"""SQLite 键值存储

一张 (key TEXT PRIMARY KEY, value TEXT) 表，满足 KeyValueStore 契约。
每次操作独立建立连接，可在 FastAPI 的线程池中安全使用。
"""
import logging
import os
import sqlite3
from contextlib import closing
from typing import List, Optional, Tuple

from .base import KeyValueStore

logger = logging.getLogger(__name__)


class SqliteKeyValueStore(KeyValueStore):
    def __init__(self, db_path: str):
        self._db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self._db_path)

    def init_db(self) -> None:
        """建表 (已存在则跳过)"""
        directory = os.path.dirname(os.path.abspath(self._db_path))
        os.makedirs(directory, exist_ok=True)
        with closing(self._connect()) as conn, conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )
        logger.info(f"✅ [KV] SQLite 存储已就绪: {self._db_path}")

    def get(self, key: str) -> Optional[str]:
        with closing(self._connect()) as conn:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        with closing(self._connect()) as conn, conn:
            conn.execute(
                "INSERT INTO kv (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )

    def delete(self, key: str) -> bool:
        with closing(self._connect()) as conn, conn:
            cursor = conn.execute("DELETE FROM kv WHERE key = ?", (key,))
            return cursor.rowcount > 0

    def scan_prefix(self, prefix: str) -> List[Tuple[str, str]]:
        # substr 比较避免 LIKE 通配符 (%, _) 的转义问题
        with closing(self._connect()) as conn:
            rows = conn.execute(
                "SELECT key, value FROM kv WHERE substr(key, 1, ?) = ? ORDER BY key",
                (len(prefix), prefix),
            ).fetchall()
        return [(row[0], row[1]) for row in rows]

    def count_prefix(self, prefix: str) -> int:
        with closing(self._connect()) as conn:
            row = conn.execute(
                "SELECT COUNT(*) FROM kv WHERE substr(key, 1, ?) = ?",
                (len(prefix), prefix),
            ).fetchone()
        return int(row[0]) if row else 0
