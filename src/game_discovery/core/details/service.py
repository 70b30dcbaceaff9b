"""ゲーム詳細ビューの組み立て。"""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Protocol, TypeVar

from structlog.stdlib import BoundLogger

from game_discovery.infra.rawg.client import RAWGNotFoundError
from game_discovery.infra.rawg.dto import (
    RAWGGameDetailsDTO,
    RAWGGameDTO,
    RAWGScreenshotDTO,
    RAWGStoreLinkDTO,
)
from game_discovery.shared.exceptions import DomainError, Result, UpstreamError
from game_discovery.shared.logging import get_logger
from game_discovery.shared.types import DTO

T = TypeVar("T")


class GameDetailsClientProtocol(Protocol):
    def fetch_game(self, slug: str) -> RAWGGameDetailsDTO: ...

    def fetch_screenshots(self, slug: str) -> tuple[RAWGScreenshotDTO, ...]: ...

    def fetch_stores(self, slug: str) -> tuple[RAWGStoreLinkDTO, ...]: ...

    def fetch_series(self, slug: str) -> tuple[RAWGGameDTO, ...]: ...


class GameNotFoundError(DomainError):
    default_message = "ゲームが見つかりませんでした"
    exit_code = 3


class GameDetailsError(DomainError):
    default_message = "ゲーム詳細の取得に失敗しました"


@dataclass(slots=True)
class GameDetailView(DTO):
    game: RAWGGameDetailsDTO
    screenshots: tuple[RAWGScreenshotDTO, ...] = ()
    stores: tuple[RAWGStoreLinkDTO, ...] = ()


@dataclass(slots=True)
class GameDetailsService:
    """ゲーム本体を取得した後、スクリーンショットとストアを並行取得する。

    付随情報の取得失敗は互いに独立で、それぞれ空として扱う。
    """

    client: GameDetailsClientProtocol
    max_workers: int = 2
    logger: BoundLogger = field(
        default_factory=lambda: get_logger(__name__, component="game-details")
    )

    def load(self, slug: str) -> GameDetailView:
        try:
            game = self.client.fetch_game(slug)
        except RAWGNotFoundError as exc:
            raise GameNotFoundError(f"ゲームが見つかりませんでした: {slug}") from exc
        except UpstreamError as exc:
            raise GameDetailsError(str(exc)) from exc

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            screenshots_future = executor.submit(
                self._fetch_optional, "screenshots", slug, self.client.fetch_screenshots
            )
            stores_future = executor.submit(
                self._fetch_optional, "stores", slug, self.client.fetch_stores
            )
            screenshots = screenshots_future.result().value_or(())
            stores = stores_future.result().value_or(())

        self.logger.info(
            "game_details_loaded",
            slug=slug,
            game_id=game.id,
            screenshots=len(screenshots),
            stores=len(stores),
        )
        return GameDetailView(game=game, screenshots=screenshots, stores=stores)

    def load_series(self, slug: str, current_game_id: int | None = None) -> tuple[RAWGGameDTO, ...]:
        """同シリーズのゲーム一覧。表示中のゲーム自身は除く。"""

        try:
            games = self.client.fetch_series(slug)
        except UpstreamError as exc:
            raise GameDetailsError(str(exc)) from exc
        return tuple(game for game in games if game.id != current_game_id)

    def _fetch_optional(
        self, kind: str, slug: str, fetcher: Callable[[str], tuple[T, ...]]
    ) -> Result[tuple[T, ...], UpstreamError]:
        try:
            return Result.ok(fetcher(slug))
        except UpstreamError as exc:
            self.logger.warning(
                "game_details_partial_failure",
                slug=slug,
                kind=kind,
                error_type=exc.__class__.__name__,
                message=str(exc),
            )
            return Result.err(exc)


__all__ = [
    "GameDetailView",
    "GameDetailsClientProtocol",
    "GameDetailsError",
    "GameDetailsService",
    "GameNotFoundError",
]
