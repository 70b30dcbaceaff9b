"""RAWG API クライアント実装。"""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from typing import Any, Protocol

import httpx

from game_discovery.infra.rawg.dto import (
    RAWGGameDetailsDTO,
    RAWGGameDTO,
    RAWGGamesPage,
    RAWGNamedDTO,
    RAWGScreenshotDTO,
    RAWGStoreLinkDTO,
    RAWGTagDTO,
    parse_game_details,
    parse_game_list,
    parse_games_page,
    parse_named,
    parse_screenshots,
    parse_store_links,
    parse_tags,
)
from game_discovery.shared.config import AppSettings, get_settings
from game_discovery.shared.exceptions import UpstreamError
from game_discovery.shared.logging import get_logger

DEFAULT_PAGE_SIZE = 20


@dataclass(slots=True)
class RAWGRetryConfig:
    """リトライ設定。既定では 1 回のみ試行する。"""

    max_attempts: int = 1
    backoff_factor: float = 0.5
    retriable_statuses: tuple[int, ...] = (429, 500, 502, 503, 504)


@dataclass(slots=True, frozen=True)
class RAWGGamesQuery:
    """`GET /games` のクエリパラメータ。

    `tags` は RAWG 側で OR 条件として解釈される点に注意。
    """

    page: int | None = None
    page_size: int | None = None
    ordering: str | None = None
    genres: str | None = None
    platforms: str | None = None
    stores: str | None = None
    dates: str | None = None
    tags: str | None = None
    metacritic: str | None = None
    search: str | None = None
    search_exact: bool | None = None
    search_precise: bool | None = None

    def with_page(self, page: int, page_size: int) -> RAWGGamesQuery:
        return replace(self, page=page, page_size=page_size)

    def to_params(self) -> dict[str, str]:
        params: dict[str, str] = {}
        values: dict[str, Any] = {
            "page": self.page,
            "page_size": self.page_size or DEFAULT_PAGE_SIZE,
            "ordering": self.ordering,
            "genres": self.genres,
            "platforms": self.platforms,
            "stores": self.stores,
            "dates": self.dates,
            "tags": self.tags,
            "metacritic": self.metacritic,
            "search": self.search,
            "search_exact": self.search_exact,
            "search_precise": self.search_precise,
        }
        for key, value in values.items():
            if value is None or value == "":
                continue
            if isinstance(value, bool):
                if value:
                    params[key] = "true"
                continue
            params[key] = str(value)
        return params


class RAWGClientError(UpstreamError):
    """RAWG クライアント共通の例外。"""


class RAWGRateLimitError(RAWGClientError):
    """レート超過に起因するエラー。"""

    exit_code = 2


class RAWGTimeoutError(RAWGClientError):
    """上流がタイムアウトしたことを示すエラー。"""


class RAWGNotFoundError(RAWGClientError):
    """対象リソースが存在しないことを示すエラー。"""

    exit_code = 3


class RAWGRequestError(RAWGClientError):
    """リトライ不能な HTTP エラーやレスポンス不正。"""


class RAWGClientProtocol(Protocol):
    """core/CLI 層から利用するためのプロトコル。"""

    def fetch_games(self, query: RAWGGamesQuery) -> RAWGGamesPage:
        """ゲーム一覧エンドポイントへクエリを実行する。"""


class RAWGClient(RAWGClientProtocol):
    """RAWG API v1 を httpx で呼び出すクライアント。"""

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = "https://api.rawg.io/api",
        retry_config: RAWGRetryConfig | None = None,
        http_get: Callable[..., httpx.Response] = httpx.get,
        timeout: float = 10.0,
        logger=None,
        sleep_func: Callable[[float], None] = time.sleep,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._retry_config = retry_config or RAWGRetryConfig()
        self._http_get = http_get
        self._timeout = timeout
        self._sleep = sleep_func
        self._logger = logger or get_logger(__name__)

    def fetch_games(self, query: RAWGGamesQuery) -> RAWGGamesPage:
        payload = self._request("/games", query.to_params())
        return self._parse(parse_games_page, payload, "/games")

    def fetch_game(self, slug: str) -> RAWGGameDetailsDTO:
        endpoint = f"/games/{slug}"
        return self._parse(parse_game_details, self._request(endpoint), endpoint)

    def fetch_screenshots(self, slug: str) -> tuple[RAWGScreenshotDTO, ...]:
        endpoint = f"/games/{slug}/screenshots"
        return self._parse(parse_screenshots, self._request(endpoint), endpoint)

    def fetch_stores(self, slug: str) -> tuple[RAWGStoreLinkDTO, ...]:
        endpoint = f"/games/{slug}/stores"
        return self._parse(parse_store_links, self._request(endpoint), endpoint)

    def fetch_series(self, slug: str) -> tuple[RAWGGameDTO, ...]:
        endpoint = f"/games/{slug}/game-series"
        return self._parse(parse_game_list, self._request(endpoint), endpoint)

    def fetch_genres(self) -> tuple[RAWGNamedDTO, ...]:
        return self._parse(parse_named, self._request("/genres"), "/genres")

    def search_tags(self, term: str, *, page_size: int = 50) -> tuple[RAWGTagDTO, ...]:
        params = {"search": term, "page_size": str(page_size)}
        return self._parse(parse_tags, self._request("/tags", params), "/tags")

    def _parse(self, parser: Callable[[Any], Any], payload: Any, endpoint: str) -> Any:
        try:
            return parser(payload)
        except ValueError as exc:
            self._logger.error("rawg_parse_failed", endpoint=endpoint, message=str(exc))
            raise RAWGRequestError("Failed to parse RAWG response", endpoint=endpoint) from exc

    def _request(self, endpoint: str, params: Mapping[str, str] | None = None) -> Any:
        url = f"{self._base_url}{endpoint}"
        query = {"key": self._api_key, **(params or {})}
        attempt = 0
        while True:
            attempt += 1
            self._logger.debug(
                "rawg_request",
                endpoint=endpoint,
                attempt=attempt,
                page=query.get("page"),
                page_size=query.get("page_size"),
            )
            try:
                response = self._http_get(url, params=query, timeout=self._timeout)
                response.raise_for_status()
                return response.json()
            except httpx.TimeoutException as exc:
                if not self._should_retry(None, attempt):
                    self._logger.error("rawg_request_timeout", endpoint=endpoint, attempt=attempt)
                    msg = f"RAWG API request timed out ({endpoint})"
                    raise RAWGTimeoutError(msg, endpoint=endpoint) from exc
                self._backoff(endpoint, attempt, None)
            except httpx.HTTPStatusError as exc:
                status_code = exc.response.status_code if exc.response is not None else None
                if not self._should_retry(status_code, attempt):
                    raise self._status_error(endpoint, status_code) from exc
                self._backoff(endpoint, attempt, status_code)
            except httpx.RequestError as exc:
                if not self._should_retry(None, attempt):
                    self._logger.error(
                        "rawg_request_error",
                        endpoint=endpoint,
                        attempt=attempt,
                        message=str(exc),
                    )
                    msg = f"RAWG API request failed ({endpoint})"
                    raise RAWGRequestError(msg, endpoint=endpoint) from exc
                self._backoff(endpoint, attempt, None)
            except ValueError as exc:
                self._logger.error("rawg_invalid_json", endpoint=endpoint)
                raise RAWGRequestError("RAWG API returned invalid JSON", endpoint=endpoint) from exc

    def _status_error(self, endpoint: str, status_code: int | None) -> RAWGClientError:
        self._logger.error("rawg_request_failed", endpoint=endpoint, status_code=status_code)
        if status_code == 429:
            return RAWGRateLimitError(
                "RAWG API rate limit exceeded", status_code=status_code, endpoint=endpoint
            )
        if status_code == 404:
            return RAWGNotFoundError(
                f"RAWG resource not found ({endpoint})", status_code=status_code, endpoint=endpoint
            )
        msg = f"RAWG API error: {status_code}"
        return RAWGRequestError(msg, status_code=status_code, endpoint=endpoint)

    def _backoff(self, endpoint: str, attempt: int, status_code: int | None) -> None:
        self._logger.warning(
            "rawg_request_retry",
            endpoint=endpoint,
            attempt=attempt,
            status_code=status_code,
        )
        self._sleep(self._retry_config.backoff_factor * attempt)

    def _should_retry(self, status_code: int | None, attempt: int) -> bool:
        if attempt >= self._retry_config.max_attempts:
            return False
        if status_code is None:
            return True
        return status_code in self._retry_config.retriable_statuses


def build_rawg_client(
    *,
    settings: AppSettings | None = None,
    retry_config: RAWGRetryConfig | None = None,
    logger=None,
) -> RAWGClient:
    """共有設定から RAWG クライアントを構築するファクトリ。"""

    app_settings = settings or get_settings()
    rawg_settings = app_settings.rawg
    return RAWGClient(
        api_key=rawg_settings.api_key.get_secret_value(),
        base_url=str(rawg_settings.base_url),
        retry_config=retry_config or RAWGRetryConfig(max_attempts=rawg_settings.max_attempts),
        timeout=rawg_settings.timeout_seconds,
        logger=logger,
    )


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "RAWGClient",
    "RAWGClientError",
    "RAWGClientProtocol",
    "RAWGGamesQuery",
    "RAWGNotFoundError",
    "RAWGRateLimitError",
    "RAWGRequestError",
    "RAWGRetryConfig",
    "RAWGTimeoutError",
    "build_rawg_client",
]
