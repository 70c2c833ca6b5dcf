"""Key-value persistence backends.

永続化層が前提とするのは `get` / `set` / `remove` だけを持つ素朴な KV ストア
（トランザクション無し）。本番は SQLite ファイル、テストや一時利用は
インメモリ実装を使う。
"""

from __future__ import annotations

import sqlite3
from datetime import UTC, datetime
from pathlib import Path
from threading import Lock
from typing import Mapping, Protocol


class KeyValueBackend(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class SQLiteKeyValueBackend:
    """SQLite-backed string key-value store.

    - 1 テーブル `kv(key, value, updated_at)` に全キーを保持
    - 呼び出し毎に接続を開閉する（長寿命接続を持たない）
    - `set` は単一の UPSERT 文で値全体を置き換える
    """

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self._ensure_dirs()
        self._init_db()

    # --- low-level helpers ---
    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=10.0, isolation_level=None, check_same_thread=False)
        with conn:
            conn.execute("PRAGMA journal_mode=WAL;")
        return conn

    def _ensure_dirs(self) -> None:
        p = Path(self.db_path)
        if p.parent and not p.parent.exists():
            p.parent.mkdir(parents=True, exist_ok=True)

    def _init_db(self) -> None:
        conn = self._connect()
        try:
            with conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS kv (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at TEXT NOT NULL
                    );
                    """
                )
        finally:
            conn.close()

    # --- public API ---
    def get(self, key: str) -> str | None:
        conn = self._connect()
        try:
            row = conn.execute("SELECT value FROM kv WHERE key = ?;", (key,)).fetchone()
            return None if row is None else str(row[0])
        finally:
            conn.close()

    def set(self, key: str, value: str) -> None:
        now = datetime.now(UTC).isoformat()
        conn = self._connect()
        try:
            with conn:
                conn.execute(
                    """
                    INSERT INTO kv(key, value, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at;
                    """,
                    (key, value, now),
                )
        finally:
            conn.close()

    def remove(self, key: str) -> None:
        conn = self._connect()
        try:
            with conn:
                conn.execute("DELETE FROM kv WHERE key = ?;", (key,))
        finally:
            conn.close()


class InMemoryKeyValueBackend:
    """Dict-backed backend used by tests and ephemeral runs."""

    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})
        self._lock = Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        with self._lock:
            return dict(self._data)
