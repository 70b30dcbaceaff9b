"""アプリケーション全体で共有する設定ローダー。"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AnyHttpUrl, BaseModel, Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

EnvName = Literal["local", "test", "staging", "production"]


class RAWGSettings(BaseModel):
    """RAWG API 関連の資格情報と通信設定。"""

    api_key: SecretStr = Field(..., description="RAWG API key")
    base_url: AnyHttpUrl = Field("https://api.rawg.io/api", description="RAWG API のベース URL")
    timeout_seconds: float = Field(10.0, gt=0, description="HTTP リクエストのタイムアウト秒数")
    max_attempts: int = Field(
        1,
        ge=1,
        description="上流リクエストの試行回数。1 の場合は自動リトライしない",
    )


class DiscoverySettings(BaseModel):
    """絞り込み・ページ補充アルゴリズムの定数。"""

    base_page_size: int = Field(20, ge=1, description="ローカル絞り込み不要時のページサイズ")
    filtered_page_size: int = Field(
        100, ge=1, description="ローカル絞り込みで目減りする分を補うページサイズ"
    )
    min_display_threshold: int = Field(8, ge=0, description="自動追加取得を止める表示件数の下限")
    page_ceiling: int = Field(20, ge=1, description="自動追加取得で要求する総ページ数の上限")
    lucky_max_attempts: int = Field(10, ge=1, description="ランダムピックで試すページ数")
    lucky_page_stride: int = Field(7, ge=1, description="ランダムピックの試行ごとのページ送り幅")
    deep_pagination_limit: int = Field(500, ge=1, description="上流で辿れる最大ページ番号")
    default_platforms: str = Field("7,4,187,186", description="未指定時に絞り込むプラットフォーム")


class AppSettings(BaseSettings):
    """共有設定。`.env` 読み込みと環境変数バリデーションを担う。"""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: EnvName = Field("local", description="実行環境識別子")
    log_level: str = Field("INFO", description="ルートロガーのログレベル")
    log_json: bool = Field(False, description="True の場合ログを JSON で出力する")
    rawg: RAWGSettings
    discovery: DiscoverySettings = Field(default_factory=DiscoverySettings)


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """設定をロードし、再利用する。

    LRU キャッシュによりプロセス内での重複読み込みを防ぎ、
    `pytest` などから `get_settings.cache_clear()` を呼び出すことで再読込できる。
    """

    try:
        return AppSettings()
    except ValidationError as exc:  # pragma: no cover - ValidationError carries context
        raise ConfigurationError(str(exc)) from exc


__all__ = [
    "AppSettings",
    "DiscoverySettings",
    "RAWGSettings",
    "EnvName",
    "get_settings",
]
