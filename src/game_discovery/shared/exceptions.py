"""アプリケーション共通の例外階層と結果型。

各例外は CLI の終了コードを `exit_code` として持つ。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar


class BaseAppError(Exception):
    """全レイヤで共有するベース例外。"""

    default_message = "An unexpected error occurred"
    exit_code = 1

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class ConfigurationError(BaseAppError):
    """`.env` や環境変数が不足・不正な場合のエラー。"""

    default_message = "Configuration is invalid or missing"
    exit_code = 4


class UpstreamError(BaseAppError):
    """外部 API 呼び出しの失敗。空の検索結果とは区別して扱う。"""

    default_message = "Upstream request failed"

    def __init__(
        self,
        message: str | None = None,
        *,
        status_code: int | None = None,
        endpoint: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.endpoint = endpoint


class DomainError(BaseAppError):
    """ドメイン層で利用する基底例外。"""

    default_message = "Domain layer error"


T = TypeVar("T")
E = TypeVar("E", bound=BaseAppError)


@dataclass(slots=True, frozen=True)
class Result(Generic[T, E]):
    """成功値かエラーのどちらか一方を持つ結果型。

    サービス層は上流の失敗を例外として漏らさず、この型で呼び出し側へ返す。
    部分的な失敗を許容する箇所では `value_or` で既定値に落とす。
    """

    value: T | None = None
    error: E | None = None

    def __post_init__(self) -> None:
        if self.error is not None and self.value is not None:
            msg = "Result cannot hold both value and error"
            raise ValueError(msg)
        if self.error is None and self.value is None:
            msg = "Ok result requires a value"
            raise ValueError(msg)

    @classmethod
    def ok(cls, value: T) -> Result[T, E]:
        return cls(value=value)

    @classmethod
    def err(cls, error: E) -> Result[T, E]:
        return cls(error=error)

    @property
    def is_ok(self) -> bool:
        return self.error is None

    @property
    def is_err(self) -> bool:
        return not self.is_ok

    def unwrap(self) -> T:
        if self.error is not None:
            msg = f"Cannot unwrap error result: {self.error}"
            raise RuntimeError(msg)
        return self.value  # type: ignore[return-value]

    def unwrap_err(self) -> E:
        if self.error is None:
            msg = "Cannot unwrap_err an ok result"
            raise RuntimeError(msg)
        return self.error

    def value_or(self, default: T) -> T:
        if self.error is not None:
            return default
        return self.value  # type: ignore[return-value]


__all__ = [
    "BaseAppError",
    "ConfigurationError",
    "DomainError",
    "Result",
    "UpstreamError",
]
