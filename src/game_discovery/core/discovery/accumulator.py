"""複数ページにまたがる取得結果の蓄積とカーソル。"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from game_discovery.infra.rawg.dto import RAWGGameDTO


class ResultAccumulator:
    """ゲーム ID をキーに重複を除きつつ、初出順を保つ蓄積領域。"""

    def __init__(self) -> None:
        self._games: dict[int, RAWGGameDTO] = {}

    def extend(self, games: Iterable[RAWGGameDTO]) -> int:
        """未登録のレコードだけを追加し、追加件数を返す。"""

        added = 0
        for game in games:
            if game.id in self._games:
                continue
            self._games[game.id] = game
            added += 1
        return added

    def clear(self) -> None:
        self._games.clear()

    @property
    def games(self) -> tuple[RAWGGameDTO, ...]:
        return tuple(self._games.values())

    def __len__(self) -> int:
        return len(self._games)

    def __contains__(self, game_id: object) -> bool:
        return game_id in self._games


@dataclass(slots=True)
class FetchCursor:
    """次に要求するページ位置。`has_more` が偽になると終端。"""

    page_size: int
    page: int = 0
    has_more: bool = True
    pages_requested: int = 0

    @property
    def next_page(self) -> int:
        return self.page + 1

    def advance(self, *, has_next: bool) -> None:
        self.page += 1
        self.has_more = has_next


__all__ = ["FetchCursor", "ResultAccumulator"]
