"""DTO の基底クラスと日付ユーティリティ。"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import UTC, date, datetime
from typing import Any


@dataclass(slots=True)
class ValueObject:
    """不変に扱う値の基底クラス。"""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class DTO(ValueObject):
    """上流レスポンスや表示用データの受け渡しに使う基底クラス。"""


def utc_today() -> date:
    """UTC 基準の今日の日付。RAWG の `dates` 範囲計算に使う。"""

    return datetime.now(UTC).date()


__all__ = ["DTO", "ValueObject", "utc_today"]
