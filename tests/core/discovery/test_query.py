from __future__ import annotations

from datetime import date

from game_discovery.core.discovery import BrowseParams, build_dates, build_games_query
from game_discovery.core.filtering import FilterPlan, FilterSelection, resolve_filters

TODAY = date(2024, 1, 1)


def test_default_dates_span_epoch_to_one_year_ahead() -> None:
    assert build_dates(BrowseParams(), today=TODAY) == "1970-01-01,2024-12-31"


def test_unreleased_starts_tomorrow() -> None:
    params = BrowseParams(unreleased=True, date_from="2000-01-01")

    assert build_dates(params, today=TODAY) == "2024-01-02,2024-12-31"


def test_partial_explicit_range_is_completed() -> None:
    assert build_dates(BrowseParams(date_from="2000-01-01"), today=TODAY) == "2000-01-01,2024-12-31"
    assert build_dates(BrowseParams(date_to="2010-12-31"), today=TODAY) == "1970-01-01,2010-12-31"


def test_build_games_query_uses_plan_tags_and_defaults() -> None:
    selection = FilterSelection(tag_ids={468, 24})
    params = BrowseParams(selection=selection, genre="action", search="witcher")

    query = build_games_query(params, resolve_filters(selection), today=TODAY)

    assert query.tags == "24,468"
    assert query.genres == "action"
    assert query.platforms == "7,4,187,186"
    assert query.search == "witcher"
    assert query.search_exact is None
    assert query.metacritic is None
    assert query.page is None


def test_metacritic_ordering_requires_scored_games() -> None:
    query = build_games_query(BrowseParams(ordering="-metacritic"), FilterPlan(), today=TODAY)

    assert query.metacritic == "1,100"

    explicit = build_games_query(
        BrowseParams(ordering="-metacritic", metacritic="80,100"), FilterPlan(), today=TODAY
    )
    assert explicit.metacritic == "80,100"


def test_explicit_platform_overrides_default() -> None:
    query = build_games_query(BrowseParams(platform="4"), FilterPlan(), default_platforms="1,2")

    assert query.platforms == "4"
    fallback = build_games_query(BrowseParams(), FilterPlan(), default_platforms="1,2")
    assert fallback.platforms == "1,2"
