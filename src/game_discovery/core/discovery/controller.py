"""「もっと見る」方式の段階的取得コントローラー。

ローカル絞り込みで結果が目減りする場合、表示件数が閾値に届くまで
後続ページを自動で取得する。各ページの取得可否は直前ページの絞り込み結果に
依存するため、取得は常に逐次で行う。
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum

from structlog.stdlib import BoundLogger

from game_discovery.core.discovery.accumulator import FetchCursor, ResultAccumulator
from game_discovery.core.filtering.predicate import apply_filters
from game_discovery.core.filtering.resolver import FilterPlan
from game_discovery.infra.rawg.client import RAWGClientProtocol, RAWGGamesQuery
from game_discovery.infra.rawg.dto import RAWGGameDTO
from game_discovery.shared.config import DiscoverySettings
from game_discovery.shared.exceptions import DomainError, Result, UpstreamError
from game_discovery.shared.logging import get_logger
from game_discovery.shared.types import DTO


class DiscoveryFetchError(DomainError):
    """上流からの取得に失敗したことを示すエラー。空結果とは区別する。"""

    default_message = "ゲーム一覧の取得に失敗しました"

    def __init__(
        self,
        message: str | None = None,
        *,
        page: int | None = None,
        exit_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.page = page
        if exit_code is not None:
            self.exit_code = exit_code


class BrowseState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    EXHAUSTED = "exhausted"


@dataclass(slots=True)
class BrowseSnapshot(DTO):
    """表示層へ渡す現在の閲覧状態。"""

    games: tuple[RAWGGameDTO, ...]
    total_count: int
    has_more: bool
    filtered_out_count: int
    pages_requested: int
    state: BrowseState


def resolve_page_size(plan: FilterPlan, settings: DiscoverySettings) -> int:
    """ローカル絞り込みで捨てられる分を見越してページサイズを決める。"""

    if plan.needs_local_filtering:
        return settings.filtered_page_size
    return settings.base_page_size


class IncrementalBrowser:
    """蓄積・重複排除・自動継続を担う段階的取得コントローラー。"""

    def __init__(
        self,
        *,
        client: RAWGClientProtocol,
        query: RAWGGamesQuery,
        plan: FilterPlan,
        settings: DiscoverySettings | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        self._client = client
        self._settings = settings or DiscoverySettings()
        self._logger = logger or get_logger(__name__, component="discovery-browse")
        self._lock = threading.Lock()
        self._generation = 0
        self._accumulator = ResultAccumulator()
        self._query = query
        self._plan = plan
        self._cursor = FetchCursor(page_size=resolve_page_size(plan, self._settings))
        self._total_count = 0
        self._state = BrowseState.IDLE

    @property
    def state(self) -> BrowseState:
        return self._state

    @property
    def plan(self) -> FilterPlan:
        return self._plan

    def snapshot(self) -> BrowseSnapshot:
        with self._lock:
            return self._snapshot_locked()

    def reset(self, query: RAWGGamesQuery, plan: FilterPlan) -> None:
        """絞り込み条件の変更。進行中の取得結果は破棄され、1 ページ目からやり直す。"""

        with self._lock:
            self._generation += 1
            self._query = query
            self._plan = plan
            self._accumulator.clear()
            self._cursor = FetchCursor(page_size=resolve_page_size(plan, self._settings))
            self._total_count = 0
            self._state = BrowseState.IDLE
        self._logger.info("browse_reset", generation=self._generation)

    def load_more(self) -> Result[BrowseSnapshot, DiscoveryFetchError]:
        """次ページを取得し、必要なら閾値に届くまで自動で取得を続ける。

        失敗時はそれまでの蓄積を保持したまま `IDLE` に戻り、再試行できる。
        """

        with self._lock:
            if self._state is not BrowseState.IDLE:
                return Result.ok(self._snapshot_locked())
            generation = self._generation
            self._state = BrowseState.FETCHING

        try:
            return self._fetch_pages(generation)
        finally:
            # 想定外の例外で抜けた場合も FETCHING のまま残さない
            with self._lock:
                if generation == self._generation and self._state is BrowseState.FETCHING:
                    self._state = BrowseState.IDLE

    def _fetch_pages(self, generation: int) -> Result[BrowseSnapshot, DiscoveryFetchError]:
        while True:
            with self._lock:
                if generation != self._generation:
                    return Result.ok(self._snapshot_locked())
                page_number = self._cursor.next_page
                page_size = self._cursor.page_size
                query = self._query.with_page(page_number, page_size)
                self._cursor.pages_requested += 1

            try:
                page = self._client.fetch_games(query)
            except UpstreamError as exc:
                return self._fail(generation, page_number, exc)

            with self._lock:
                if generation != self._generation:
                    self._logger.info("browse_stale_page_discarded", page=page_number)
                    return Result.ok(self._snapshot_locked())

                added = self._accumulator.extend(page.results)
                self._total_count = page.count
                self._cursor.advance(has_next=page.has_next)
                visible = len(apply_filters(self._accumulator.games, self._plan))
                self._logger.info(
                    "browse_page_fetched",
                    page=page_number,
                    page_size=page_size,
                    added=added,
                    accumulated=len(self._accumulator),
                    visible=visible,
                    has_more=self._cursor.has_more,
                )

                if not self._cursor.has_more:
                    self._state = BrowseState.EXHAUSTED
                    return Result.ok(self._snapshot_locked())
                if not self._should_auto_continue(visible):
                    self._state = BrowseState.IDLE
                    return Result.ok(self._snapshot_locked())

    def _should_auto_continue(self, visible: int) -> bool:
        if not self._plan.needs_local_filtering:
            return False
        if visible >= self._settings.min_display_threshold:
            return False
        if self._cursor.pages_requested >= self._settings.page_ceiling:
            self._logger.info(
                "browse_page_ceiling_reached",
                pages_requested=self._cursor.pages_requested,
                visible=visible,
            )
            return False
        return True

    def _fail(
        self, generation: int, page: int, error: UpstreamError
    ) -> Result[BrowseSnapshot, DiscoveryFetchError]:
        with self._lock:
            if generation != self._generation:
                self._logger.info("browse_stale_failure_discarded", page=page)
                return Result.ok(self._snapshot_locked())
            self._state = BrowseState.IDLE
        self._logger.error(
            "browse_fetch_failed",
            page=page,
            error_type=error.__class__.__name__,
            message=str(error),
        )
        return Result.err(DiscoveryFetchError(str(error), page=page, exit_code=error.exit_code))

    def _snapshot_locked(self) -> BrowseSnapshot:
        games = self._accumulator.games
        visible = tuple(apply_filters(games, self._plan))
        return BrowseSnapshot(
            games=visible,
            total_count=self._total_count,
            has_more=self._cursor.has_more,
            filtered_out_count=len(games) - len(visible),
            pages_requested=self._cursor.pages_requested,
            state=self._state,
        )


__all__ = [
    "BrowseSnapshot",
    "BrowseState",
    "DiscoveryFetchError",
    "IncrementalBrowser",
    "resolve_page_size",
]
