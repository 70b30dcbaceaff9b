"""ナビゲーション状態から RAWG の基本クエリを組み立てる。"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta

from game_discovery.core.filtering.resolver import FilterPlan, FilterSelection
from game_discovery.infra.rawg.client import RAWGGamesQuery
from game_discovery.shared.types import utc_today

EPOCH_DATE = "1970-01-01"
DEFAULT_PLATFORMS = "7,4,187,186"
METACRITIC_ORDERING = "-metacritic"


@dataclass(slots=True, frozen=True)
class BrowseParams:
    """発見ページの絞り込み状態。ページ番号は含まない。"""

    selection: FilterSelection = field(default_factory=FilterSelection)
    genre: str | None = None
    platform: str | None = None
    store: str | None = None
    ordering: str | None = None
    metacritic: str | None = None
    date_from: str | None = None
    date_to: str | None = None
    unreleased: bool = False
    search: str | None = None
    search_exact: bool = False


def build_dates(params: BrowseParams, *, today: date | None = None) -> str:
    """RAWG の `dates` 形式 (`YYYY-MM-DD,YYYY-MM-DD`) を返す。"""

    current = today or utc_today()
    tomorrow = (current + timedelta(days=1)).isoformat()
    one_year_ahead = (current + timedelta(days=365)).isoformat()

    if params.unreleased:
        return f"{tomorrow},{one_year_ahead}"
    if params.date_from or params.date_to:
        return f"{params.date_from or EPOCH_DATE},{params.date_to or one_year_ahead}"
    return f"{EPOCH_DATE},{one_year_ahead}"


def build_games_query(
    params: BrowseParams,
    plan: FilterPlan,
    *,
    today: date | None = None,
    default_platforms: str = DEFAULT_PLATFORMS,
) -> RAWGGamesQuery:
    """ページ指定を除いた基本クエリを返す。"""

    ordering = params.ordering or None
    metacritic = params.metacritic or ("1,100" if ordering == METACRITIC_ORDERING else None)
    return RAWGGamesQuery(
        ordering=ordering,
        genres=params.genre or None,
        platforms=params.platform or default_platforms,
        stores=params.store or None,
        dates=build_dates(params, today=today),
        tags=plan.api_tags_param,
        metacritic=metacritic,
        search=params.search or None,
        search_exact=params.search_exact or None,
    )


__all__ = [
    "DEFAULT_PLATFORMS",
    "BrowseParams",
    "build_dates",
    "build_games_query",
]
