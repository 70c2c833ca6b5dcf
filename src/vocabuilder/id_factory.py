"""ID 生成ユーティリティ。"""

from __future__ import annotations

import uuid


def generate_translation_id() -> str:
    """TranslationRecord の新規 ID を生成する。

    語の de-duplication は word で行うため、ID は語を含まない純粋な UUID とする。
    """

    return f"tr:{uuid.uuid4().hex}"
