from __future__ import annotations

import pytest

from game_discovery.infra.rawg.dto import (
    parse_game_details,
    parse_games_page,
    parse_screenshots,
)


def test_missing_tags_are_distinguished_from_empty_tags() -> None:
    page = parse_games_page(
        {
            "count": 3,
            "next": None,
            "results": [
                {"id": 1, "name": "No tag field"},
                {"id": 2, "name": "Null tags", "tags": None},
                {"id": 3, "name": "Empty tags", "tags": []},
            ],
        }
    )

    assert page.results[0].tags is None
    assert page.results[0].tag_ids is None
    assert page.results[1].tag_ids is None
    assert page.results[2].tag_ids == frozenset()
    assert not page.has_next


def test_malformed_tag_entries_are_skipped() -> None:
    page = parse_games_page(
        {
            "count": 1,
            "results": [
                {
                    "id": 10,
                    "name": "Messy",
                    "tags": [
                        {"id": "152"},
                        "co-op",
                        {"name": "no id"},
                        {"id": 18, "name": "Co-op"},
                    ],
                }
            ],
        }
    )

    assert page.results[0].tag_ids == frozenset({18})


def test_page_without_count_is_rejected() -> None:
    with pytest.raises(ValueError):
        parse_games_page({"results": []})


def test_parse_game_details_extracts_people() -> None:
    details = parse_game_details(
        {
            "id": 3498,
            "slug": "grand-theft-auto-v",
            "name": "Grand Theft Auto V",
            "description_raw": "Los Santos.",
            "playtime": 74,
            "developers": [{"id": 1, "name": "Rockstar North", "slug": "rockstar-north"}],
            "publishers": [{"id": 2, "name": "Rockstar Games"}],
            "website": "",
            "metacritic_url": "https://www.metacritic.com/game/gta-v",
        }
    )

    assert details.description_raw == "Los Santos."
    assert [item.name for item in details.developers] == ["Rockstar North"]
    assert [item.name for item in details.publishers] == ["Rockstar Games"]
    assert details.website is None
    assert details.metacritic_url == "https://www.metacritic.com/game/gta-v"
    assert details.playtime == 74


def test_parse_screenshots_ignores_invalid_entries() -> None:
    shots = parse_screenshots(
        {"results": [{"id": 1, "image": "https://img/1.jpg"}, {"id": 2}, {"image": "x"}]}
    )

    assert [shot.id for shot in shots] == [1]


def test_malformed_game_records_are_skipped_individually() -> None:
    page = parse_games_page(
        {
            "count": 40,
            "next": "https://api.rawg.io/api/games?page=2",
            "results": [
                {"id": 1, "name": "ok"},
                {"id": 2, "name": None},
                {"name": "no id"},
                "not-an-object",
                {"id": 5, "name": "also ok"},
            ],
        }
    )

    assert [game.id for game in page.results] == [1, 5]
    assert page.count == 40
    assert page.has_next
