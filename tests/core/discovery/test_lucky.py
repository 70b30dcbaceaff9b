"""LuckyPicker の決定的ランダムピックのテスト。"""

from __future__ import annotations

from collections.abc import Callable

from game_discovery.core.discovery import LuckyPicker
from game_discovery.core.filtering import (
    FilterPlan,
    FilterSelection,
    MultiplayerMode,
    resolve_filters,
)
from game_discovery.infra.rawg import RAWGGamesQuery, RAWGTimeoutError
from game_discovery.infra.rawg.dto import RAWGGameDTO, RAWGGamesPage, RAWGTagDTO

COOP_WESTERN = resolve_filters(
    FilterSelection(tag_ids={152}, multiplayer_mode=MultiplayerMode.COOP)
)


def _game(game_id: int, tag_ids: tuple[int, ...] = (152,)) -> RAWGGameDTO:
    tags = tuple(RAWGTagDTO(id=tag_id, name=f"tag-{tag_id}") for tag_id in tag_ids)
    return RAWGGameDTO(id=game_id, name=f"Game {game_id}", tags=tags)


class StubGamesClient:
    def __init__(
        self,
        count: int,
        page_games: Callable[[int], list[RAWGGameDTO]] = lambda _page: [],
        errors: dict[int, Exception] | None = None,
    ) -> None:
        self._count = count
        self._page_games = page_games
        self._errors = errors or {}
        self.queries: list[RAWGGamesQuery] = []

    def fetch_games(self, query: RAWGGamesQuery) -> RAWGGamesPage:
        self.queries.append(query)
        page = query.page or 1
        if query.page_size == 1:
            if 0 in self._errors:
                raise self._errors[0]
            return RAWGGamesPage(count=self._count, results=(), next=None)
        if page in self._errors:
            raise self._errors[page]
        return RAWGGamesPage(count=self._count, results=tuple(self._page_games(page)))


def test_zero_count_returns_empty_without_page_requests() -> None:
    client = StubGamesClient(count=0)
    picker = LuckyPicker(client=client)

    pick = picker.pick(RAWGGamesQuery(), FilterPlan(), "abc")

    assert not pick.found
    assert pick.error is None
    assert pick.pages_tried == ()
    assert len(client.queries) == 1
    assert client.queries[0].page_size == 1


def test_pick_is_deterministic_for_seed() -> None:
    client = StubGamesClient(
        count=250, page_games=lambda page: [_game(page * 100 + i) for i in range(20)]
    )
    picker = LuckyPicker(client=client)

    first = picker.pick(RAWGGamesQuery(ordering="-rating"), FilterPlan(), "abc")
    second = picker.pick(RAWGGamesQuery(ordering="-rating"), FilterPlan(), "abc")

    # ceil(250 / 20) = 13 ページ、hash("abc") % 13 + 1 = 12
    assert first.pages_tried == (12,)
    assert first.game is not None
    assert first.game.id == 1214
    assert second.game == first.game
    assert client.queries[1].page == 12
    assert client.queries[1].page_size == 20
    assert client.queries[1].ordering == "-rating"


def test_pages_are_visited_with_stride_until_candidates_found() -> None:
    def page_games(page: int) -> list[RAWGGameDTO]:
        if page == 9:
            return [_game(901, (152, 18)), _game(902, (152, 411)), _game(903, (152, 9))]
        return [_game(page * 100)]

    client = StubGamesClient(count=1000, page_games=page_games)
    picker = LuckyPicker(client=client)

    pick = picker.pick(RAWGGamesQuery(tags="152"), COOP_WESTERN, "abc")

    assert pick.pages_tried == (5, 2, 9)
    assert pick.game is not None
    assert pick.game.id == 901
    assert all(query.page_size == 100 for query in client.queries[1:])


def test_no_survivors_after_all_attempts_is_empty_result() -> None:
    client = StubGamesClient(count=1000, page_games=lambda page: [_game(page)])
    picker = LuckyPicker(client=client)

    pick = picker.pick(RAWGGamesQuery(tags="152"), COOP_WESTERN, "abc")

    assert not pick.found
    assert pick.error is None
    assert pick.pages_tried == (5, 2, 9, 6, 3, 10, 7, 4, 1, 8)
    assert len(client.queries) == 11


def test_max_page_is_capped_by_deep_pagination_limit() -> None:
    picker = LuckyPicker(client=StubGamesClient(count=0))

    assert picker.max_page(1_000_000, 20) == 500
    assert picker.max_page(41, 20) == 3


def test_fetch_failure_is_reported_as_error() -> None:
    client = StubGamesClient(
        count=250,
        page_games=lambda page: [_game(page)],
        errors={12: RAWGTimeoutError("RAWG API request timed out (/games)")},
    )
    picker = LuckyPicker(client=client)

    pick = picker.pick(RAWGGamesQuery(), FilterPlan(), "abc")

    assert not pick.found
    assert pick.error is not None
    assert pick.error.page == 12
    assert pick.total_count == 250


def test_count_failure_is_reported_as_error() -> None:
    client = StubGamesClient(count=250, errors={0: RAWGTimeoutError("timeout")})
    picker = LuckyPicker(client=client)

    pick = picker.pick(RAWGGamesQuery(), FilterPlan(), "abc")

    assert pick.error is not None
    assert pick.error.page is None
    assert pick.pages_tried == ()
