"""IncrementalBrowser の自動継続・失敗・リセットのテスト。"""

from __future__ import annotations

from collections.abc import Callable

import pytest

from game_discovery.core.discovery import BrowseState, IncrementalBrowser
from game_discovery.core.filtering import (
    FilterPlan,
    FilterSelection,
    MultiplayerMode,
    resolve_filters,
)
from game_discovery.infra.rawg import RAWGGamesQuery, RAWGRequestError
from game_discovery.infra.rawg.dto import RAWGGameDTO, RAWGGamesPage, RAWGTagDTO
from game_discovery.shared.config import DiscoverySettings

COOP_WESTERN = resolve_filters(
    FilterSelection(tag_ids={152}, multiplayer_mode=MultiplayerMode.COOP)
)
UPSTREAM_ONLY = FilterPlan(api_tag_ids=(152,))


def _game(game_id: int, tag_ids: tuple[int, ...]) -> RAWGGameDTO:
    tags = tuple(RAWGTagDTO(id=tag_id, name=f"tag-{tag_id}") for tag_id in tag_ids)
    return RAWGGameDTO(id=game_id, name=f"Game {game_id}", tags=tags)


def _page(
    games: list[RAWGGameDTO], *, count: int = 10_000, has_next: bool = True
) -> RAWGGamesPage:
    return RAWGGamesPage(
        count=count,
        results=tuple(games),
        next="https://api.rawg.io/api/games?page=next" if has_next else None,
    )


class StubGamesClient:
    """ページ番号から応答を組み立てるスタブ。例外を返した場合は送出する。"""

    def __init__(
        self, respond: Callable[[RAWGGamesQuery], RAWGGamesPage | Exception]
    ) -> None:
        self._respond = respond
        self.queries: list[RAWGGamesQuery] = []

    def fetch_games(self, query: RAWGGamesQuery) -> RAWGGamesPage:
        self.queries.append(query)
        response = self._respond(query)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def pages(self) -> list[int | None]:
        return [query.page for query in self.queries]


def _browser(client: StubGamesClient, plan: FilterPlan, **settings: int) -> IncrementalBrowser:
    return IncrementalBrowser(
        client=client,
        query=RAWGGamesQuery(tags=plan.api_tags_param),
        plan=plan,
        settings=DiscoverySettings(**settings),
    )


def test_auto_continue_stops_at_page_ceiling() -> None:
    client = StubGamesClient(lambda q: _page([_game(q.page * 1000 + i, (152,)) for i in range(3)]))
    browser = _browser(client, COOP_WESTERN)

    result = browser.load_more()

    snapshot = result.unwrap()
    assert client.pages == list(range(1, 21))
    assert snapshot.pages_requested == 20
    assert snapshot.games == ()
    assert snapshot.filtered_out_count == 60
    assert snapshot.has_more
    assert browser.state is BrowseState.IDLE


def test_auto_continue_stops_once_threshold_met() -> None:
    client = StubGamesClient(
        lambda q: _page(
            [_game(q.page * 1000 + i, (152, 18)) for i in range(5)]
            + [_game(q.page * 1000 + 500, (152,))]
        )
    )
    browser = _browser(client, COOP_WESTERN)

    snapshot = browser.load_more().unwrap()

    assert client.pages == [1, 2]
    assert len(snapshot.games) == 10
    assert snapshot.filtered_out_count == 2
    assert all(query.page_size == 100 for query in client.queries)


def test_threshold_is_configurable() -> None:
    client = StubGamesClient(lambda q: _page([_game(q.page, (152, 18))]))
    browser = _browser(client, COOP_WESTERN, min_display_threshold=3, page_ceiling=50)

    browser.load_more()

    assert client.pages == [1, 2, 3]


def test_no_auto_continue_without_local_filtering() -> None:
    client = StubGamesClient(lambda q: _page([]))
    browser = _browser(client, UPSTREAM_ONLY)

    snapshot = browser.load_more().unwrap()

    assert client.pages == [1]
    assert client.queries[0].page_size == 20
    assert client.queries[0].tags == "152"
    assert snapshot.has_more


def test_explicit_load_more_fetches_next_page() -> None:
    client = StubGamesClient(lambda q: _page([_game(q.page, (152,))]))
    browser = _browser(client, UPSTREAM_ONLY)

    browser.load_more()
    snapshot = browser.load_more().unwrap()

    assert client.pages == [1, 2]
    assert [game.id for game in snapshot.games] == [1, 2]


def test_duplicates_across_pages_are_merged() -> None:
    client = StubGamesClient(lambda q: _page([_game(42, (152,)), _game(q.page, (152,))]))
    browser = _browser(client, UPSTREAM_ONLY)

    browser.load_more()
    snapshot = browser.load_more().unwrap()

    assert [game.id for game in snapshot.games] == [42, 1, 2]


def test_exhausted_when_upstream_has_no_next_page() -> None:
    client = StubGamesClient(lambda q: _page([_game(1, (152,))], count=1, has_next=False))
    browser = _browser(client, COOP_WESTERN)

    snapshot = browser.load_more().unwrap()
    again = browser.load_more().unwrap()

    assert client.pages == [1]
    assert snapshot.state is BrowseState.EXHAUSTED
    assert not snapshot.has_more
    assert snapshot.total_count == 1
    assert again.state is BrowseState.EXHAUSTED


def test_failure_keeps_accumulated_results_and_allows_retry() -> None:
    failures = {2: 1}

    def respond(query: RAWGGamesQuery) -> RAWGGamesPage | Exception:
        if failures.get(query.page):
            failures[query.page] -= 1
            return RAWGRequestError("RAWG API error: 503", status_code=503)
        return _page([_game(query.page * 10 + i, (152, 18)) for i in range(4)])

    client = StubGamesClient(respond)
    browser = _browser(client, COOP_WESTERN)

    failed = browser.load_more()

    assert failed.is_err
    assert failed.unwrap_err().page == 2
    assert browser.state is BrowseState.IDLE
    assert len(browser.snapshot().games) == 4

    retried = browser.load_more().unwrap()

    assert client.pages == [1, 2, 2]
    assert len(retried.games) == 8


def test_reset_discards_in_flight_page() -> None:
    new_query = RAWGGamesQuery(tags="18,9,411")
    browser: IncrementalBrowser | None = None

    def respond(query: RAWGGamesQuery) -> RAWGGamesPage:
        if query.tags == "152":
            assert browser is not None
            browser.reset(new_query, UPSTREAM_ONLY)
            return _page([_game(1, (152,))])
        return _page([_game(2, (18,))])

    client = StubGamesClient(respond)
    browser = _browser(client, COOP_WESTERN)

    stale = browser.load_more().unwrap()

    assert stale.games == ()
    assert stale.pages_requested == 0

    fresh = browser.load_more().unwrap()

    assert [game.id for game in fresh.games] == [2]
    assert client.queries[-1].tags == "18,9,411"
    assert client.queries[-1].page == 1


def test_unexpected_exception_does_not_leave_browser_fetching() -> None:
    calls = {"count": 0}

    def respond(query: RAWGGamesQuery) -> RAWGGamesPage:
        calls["count"] += 1
        if calls["count"] == 1:
            raise RuntimeError("client bug")
        return _page([_game(query.page, (152,))])

    client = StubGamesClient(respond)
    browser = _browser(client, UPSTREAM_ONLY)

    with pytest.raises(RuntimeError):
        browser.load_more()

    assert browser.state is BrowseState.IDLE

    snapshot = browser.load_more().unwrap()

    assert calls["count"] == 2
    assert [game.id for game in snapshot.games] == [1]


def test_failure_after_reset_is_not_reported_for_new_filters() -> None:
    new_query = RAWGGamesQuery(tags="18,9,411")
    browser: IncrementalBrowser | None = None

    def respond(query: RAWGGamesQuery) -> RAWGGamesPage | Exception:
        if query.tags == "152":
            assert browser is not None
            browser.reset(new_query, UPSTREAM_ONLY)
            return RAWGRequestError("RAWG API error: 503", status_code=503)
        return _page([_game(2, (18,))])

    client = StubGamesClient(respond)
    browser = _browser(client, COOP_WESTERN)

    result = browser.load_more()

    assert result.is_ok
    assert result.unwrap().games == ()
    assert browser.state is BrowseState.IDLE

    fresh = browser.load_more().unwrap()

    assert [game.id for game in fresh.games] == [2]
    assert client.queries[-1].tags == "18,9,411"
