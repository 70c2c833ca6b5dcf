"""入力語の正規化と検証。"""

from __future__ import annotations

import re
from typing import Any

MAX_WORD_LENGTH = 32

# 英字のみ、または "well-known" / "don't" のような単一の ' / - 連結を許可する
WORD_INPUT_RE = re.compile(r"^[A-Za-z]+(?:['-][A-Za-z]+)?$")


def normalize_word_input(raw: Any) -> str | None:
    """Trim and validate raw user text.

    前後の空白を除去し、空文字・32 文字超・パターン不一致の場合は None を返す。
    副作用はない。
    """

    if not isinstance(raw, str):
        return None
    word = raw.strip()
    if not word or len(word) > MAX_WORD_LENGTH:
        return None
    if WORD_INPUT_RE.fullmatch(word) is None:
        return None
    return word
