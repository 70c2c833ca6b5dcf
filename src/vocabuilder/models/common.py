from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """永続化形式（camelCase）と Python 側の snake_case を橋渡しする基底モデル。

    - 保存時は `model_dump(by_alias=True)` で camelCase に変換
    - コンストラクタは snake_case のフィールド名でも受け付ける
    - 永続化データの検証は camelCase のみ（`parse_collection` 参照）
    - frozen: 生成後の変更を禁止（更新は常に新しいインスタンスを返す）
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


@dataclass(frozen=True)
class ParseResult(Generic[T]):
    """Tagged result of validating a persisted collection."""

    ok: bool
    items: list[T] = field(default_factory=list)
    error: str | None = None


def parse_collection(adapter: TypeAdapter[list[T]], payload: Any) -> ParseResult[T]:
    """Validate a decoded JSON payload against a list schema.

    例外は送出せず、成功/失敗をタグ付きの ParseResult で返す。
    """

    try:
        # 保存形式はエイリアスのみ。snake_case のキーはスキーマ不一致として扱う
        items = adapter.validate_python(payload, by_alias=True, by_name=False)
    except ValidationError as exc:
        return ParseResult(ok=False, error=str(exc))
    return ParseResult(ok=True, items=list(items))
