"""「I'm Feeling Lucky」用の決定的ランダムピック。

上流のページを一様に選び、そのページ内の絞り込み結果から 1 件を選ぶ。
そのため絞り込み後の母集団に対して一様ではなく、条件に合うレコードが
少ない組み合わせほど見つかりにくい。これは許容済みの近似として扱う。
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from structlog.stdlib import BoundLogger

from game_discovery.core.discovery.controller import DiscoveryFetchError, resolve_page_size
from game_discovery.core.filtering.predicate import apply_filters
from game_discovery.core.filtering.resolver import FilterPlan
from game_discovery.core.filtering.sampler import hash_seed, lucky_page, pick_index
from game_discovery.infra.rawg.client import RAWGClientProtocol, RAWGGamesQuery
from game_discovery.infra.rawg.dto import RAWGGameDTO
from game_discovery.shared.config import DiscoverySettings
from game_discovery.shared.exceptions import UpstreamError
from game_discovery.shared.logging import get_logger
from game_discovery.shared.types import DTO


@dataclass(slots=True)
class LuckyPick(DTO):
    """ランダムピックの結果。`game` が None でも `error` が無ければ正常な空結果。"""

    seed: str
    total_count: int
    game: RAWGGameDTO | None = None
    pages_tried: tuple[int, ...] = field(default_factory=tuple)
    error: DiscoveryFetchError | None = None

    @property
    def found(self) -> bool:
        return self.game is not None


@dataclass(slots=True)
class LuckyPicker:
    """シードから決定的に 1 件を選ぶドメインサービス。"""

    client: RAWGClientProtocol
    settings: DiscoverySettings = field(default_factory=DiscoverySettings)
    logger: BoundLogger = field(
        default_factory=lambda: get_logger(__name__, component="discovery-lucky")
    )

    def max_page(self, count: int, page_size: int) -> int:
        return min(math.ceil(count / page_size), self.settings.deep_pagination_limit)

    def pick(self, query: RAWGGamesQuery, plan: FilterPlan, seed: str) -> LuckyPick:
        # 件数だけを知るための最小リクエスト
        try:
            count_page = self.client.fetch_games(query.with_page(1, 1))
        except UpstreamError as exc:
            return self._fail(seed, 0, (), exc)

        total = count_page.count
        page_size = resolve_page_size(plan, self.settings)
        max_page = self.max_page(total, page_size)
        if max_page <= 0:
            self.logger.info("lucky_no_candidates", seed=seed, total_count=total)
            return LuckyPick(seed=seed, total_count=total)

        seed_hash = hash_seed(seed)
        pages_tried: list[int] = []
        for attempt in range(self.settings.lucky_max_attempts):
            page_number = lucky_page(
                seed_hash, attempt, max_page, stride=self.settings.lucky_page_stride
            )
            pages_tried.append(page_number)
            try:
                page = self.client.fetch_games(query.with_page(page_number, page_size))
            except UpstreamError as exc:
                return self._fail(seed, total, tuple(pages_tried), exc)

            candidates = apply_filters(page.results, plan)
            if candidates:
                game = candidates[pick_index(seed_hash, len(candidates))]
                self.logger.info(
                    "lucky_pick_found",
                    seed=seed,
                    page=page_number,
                    attempts=attempt + 1,
                    candidates=len(candidates),
                    game_id=game.id,
                )
                return LuckyPick(
                    seed=seed, total_count=total, game=game, pages_tried=tuple(pages_tried)
                )

        self.logger.info("lucky_pick_exhausted", seed=seed, pages_tried=pages_tried)
        return LuckyPick(seed=seed, total_count=total, pages_tried=tuple(pages_tried))

    def _fail(
        self, seed: str, total: int, pages_tried: tuple[int, ...], error: UpstreamError
    ) -> LuckyPick:
        self.logger.error(
            "lucky_fetch_failed",
            seed=seed,
            error_type=error.__class__.__name__,
            message=str(error),
        )
        page = pages_tried[-1] if pages_tried else None
        return LuckyPick(
            seed=seed,
            total_count=total,
            pages_tried=pages_tried,
            error=DiscoveryFetchError(str(error), page=page, exit_code=error.exit_code),
        )


__all__ = ["LuckyPick", "LuckyPicker"]
