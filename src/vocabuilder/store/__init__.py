from __future__ import annotations

from ..config import settings
from .backends import InMemoryKeyValueBackend, KeyValueBackend, SQLiteKeyValueBackend
from .durable import DurableStore, ReadResult
from .history import HISTORY_KEY, HistoryRepository
from .progress import PROGRESS_KEY, ProgressRepository


def create_backend() -> KeyValueBackend:
    """設定に従って KV バックエンドを構築する。

    - sqlite: `store_path` のファイルに永続化（既定）
    - memory: プロセス内のみ（再起動で消える）
    """

    backend_name = (settings.store_backend or "").strip().lower()
    if backend_name == "memory":
        return InMemoryKeyValueBackend()
    if backend_name != "sqlite":
        raise ValueError(f"unsupported store_backend: {settings.store_backend!r}")
    return SQLiteKeyValueBackend(db_path=settings.store_path)


def create_store(backend: KeyValueBackend | None = None) -> DurableStore:
    return DurableStore(backend or create_backend(), namespace=settings.storage_namespace)


__all__ = [
    "DurableStore",
    "HISTORY_KEY",
    "HistoryRepository",
    "InMemoryKeyValueBackend",
    "KeyValueBackend",
    "PROGRESS_KEY",
    "ProgressRepository",
    "ReadResult",
    "SQLiteKeyValueBackend",
    "create_backend",
    "create_store",
]
