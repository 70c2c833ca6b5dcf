"""Collection persistence with corruption detection.

各コレクションは KV ストアの 1 キーに JSON 配列として丸ごと保存する。
読込時に JSON の破損やスキーマ不一致を検出した場合は、元の文字列を
`<key>-corrupt-backup` へ退避（既存の退避は上書きしない）したうえで
「読めなかった」ことを呼び出し側へ伝える。空のコレクションとは区別されるため、
呼び出し側は破損データを新しい値で上書きしないよう判断できる。
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterable, TypeVar

from pydantic import BaseModel

from ..logging import logger
from ..metrics import registry
from ..models.common import ParseResult
from .backends import KeyValueBackend

T = TypeVar("T")

BACKUP_SUFFIX = "-corrupt-backup"


@dataclass(frozen=True)
class ReadResult(Generic[T]):
    """Outcome of reading a collection.

    readable=False は破損を意味し、items は常に空になる。
    """

    readable: bool
    items: list[T] = field(default_factory=list)


class DurableStore:
    """Namespaced collection store on top of a key-value backend."""

    def __init__(self, backend: KeyValueBackend, namespace: str = "vocabuilder") -> None:
        self._backend = backend
        self._namespace = namespace

    @property
    def backend(self) -> KeyValueBackend:
        return self._backend

    def storage_key(self, key: str) -> str:
        return f"{self._namespace}-{key}" if self._namespace else key

    def backup_key(self, key: str) -> str:
        return f"{self.storage_key(key)}{BACKUP_SUFFIX}"

    def read_collection(self, key: str, parser: Callable[[Any], ParseResult[T]]) -> ReadResult[T]:
        storage_key = self.storage_key(key)
        raw = self._backend.get(storage_key)
        if not raw:
            return ReadResult(readable=True, items=[])
        try:
            payload = json.loads(raw)
        except (ValueError, RecursionError) as exc:
            # 深くネストした配列は RecursionError になる。どちらも破損として扱う
            self._backup_corrupted(key, raw, repr(exc))
            return ReadResult(readable=False)
        parsed = parser(payload)
        if not parsed.ok:
            self._backup_corrupted(key, raw, parsed.error or "schema validation failed")
            return ReadResult(readable=False)
        return ReadResult(readable=True, items=parsed.items)

    def write_collection(self, key: str, items: Iterable[BaseModel]) -> None:
        """Serialize and overwrite the collection with a single backend write.

        呼び出し側は直前の read_collection が readable であることを確認してから呼ぶこと。
        """

        payload = [item.model_dump(mode="json", by_alias=True) for item in items]
        self._backend.set(self.storage_key(key), json.dumps(payload, ensure_ascii=False))

    def remove_key(self, key: str) -> None:
        self._backend.remove(self.storage_key(key))

    def read_backup(self, key: str) -> str | None:
        return self._backend.get(self.backup_key(key))

    def _backup_corrupted(self, key: str, raw: str, error: str) -> None:
        backup_key = self.backup_key(key)
        existing = self._backend.get(backup_key)
        # 最初の破損を保全する。既存の退避は上書きしない
        backup_written = not existing
        if backup_written:
            self._backend.set(backup_key, raw)
        registry.record_corruption(self.storage_key(key))
        logger.error(
            "storage_corrupted",
            key=self.storage_key(key),
            backup_key=backup_key,
            backup_written=backup_written,
            raw_chars=len(raw),
            error=error[:500],
        )
