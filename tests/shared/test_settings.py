"""shared.config の基本的な失敗ケースを確認するテスト。"""

from __future__ import annotations

import pytest

from game_discovery.shared.config import get_settings
from game_discovery.shared.exceptions import ConfigurationError, DomainError, Result


@pytest.fixture(autouse=True)
def _cleanup_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_settings_fail_when_api_key_missing(monkeypatch, tmp_path) -> None:
    """必須の API キーが欠けている場合 ConfigurationError が発生する。"""

    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("RAWG__API_KEY", raising=False)

    with pytest.raises(ConfigurationError):
        get_settings()


def test_settings_defaults(monkeypatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("RAWG__API_KEY", "rawg-key")

    settings = get_settings()

    assert settings.rawg.api_key.get_secret_value() == "rawg-key"
    assert str(settings.rawg.base_url).rstrip("/") == "https://api.rawg.io/api"
    assert settings.rawg.max_attempts == 1
    assert settings.discovery.min_display_threshold == 8
    assert settings.discovery.page_ceiling == 20
    assert settings.discovery.base_page_size == 20
    assert settings.discovery.filtered_page_size == 100
    assert settings.discovery.lucky_max_attempts == 10
    assert settings.discovery.deep_pagination_limit == 500


def test_settings_override_discovery_thresholds(monkeypatch, tmp_path) -> None:
    """閾値とページ上限を環境変数で上書きできる。"""

    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("RAWG__API_KEY", "rawg-key")
    monkeypatch.setenv("DISCOVERY__MIN_DISPLAY_THRESHOLD", "12")
    monkeypatch.setenv("DISCOVERY__PAGE_CEILING", "5")
    monkeypatch.setenv("RAWG__TIMEOUT_SECONDS", "3.5")

    settings = get_settings()

    assert settings.discovery.min_display_threshold == 12
    assert settings.discovery.page_ceiling == 5
    assert settings.rawg.timeout_seconds == 3.5


def test_result_value_or_falls_back_on_error() -> None:
    ok: Result[tuple[int, ...], DomainError] = Result.ok((1, 2))
    failed: Result[tuple[int, ...], DomainError] = Result.err(DomainError("boom"))

    assert ok.value_or(()) == (1, 2)
    assert failed.value_or(()) == ()
    assert failed.is_err
    with pytest.raises(RuntimeError):
        failed.unwrap()
