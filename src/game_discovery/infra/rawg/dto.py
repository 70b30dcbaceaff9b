"""RAWG API 向け DTO およびレスポンス整形ユーティリティ。"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from game_discovery.shared.types import DTO

# /games/{slug}/stores は store_id しか返さないため、表示名をここで補う
STORE_CATALOGUE: dict[int, tuple[str, str]] = {
    1: ("Steam", "steam"),
    2: ("Xbox Store", "xbox-store"),
    3: ("PlayStation Store", "playstation-store"),
    4: ("App Store", "apple-appstore"),
    5: ("GOG", "gog"),
    6: ("Nintendo Store", "nintendo"),
    7: ("Xbox 360 Store", "xbox360"),
    8: ("Google Play", "google-play"),
    9: ("itch.io", "itch"),
    11: ("Epic Games", "epic"),
}


@dataclass(slots=True)
class RAWGTagDTO(DTO):
    """ゲームに付与されたタグ。"""

    id: int
    name: str
    slug: str | None = None
    games_count: int | None = None


@dataclass(slots=True)
class RAWGNamedDTO(DTO):
    """ジャンル・開発元など id/name/slug だけを持つ参照データ。"""

    id: int
    name: str
    slug: str | None = None


@dataclass(slots=True)
class RAWGGameDTO(DTO):
    """一覧 API が返すゲームの主要フィールドのみを保持する DTO。

    `tags` はタグ一覧が欠落・不正だった場合に `None` となり、
    空タプル (タグなし) とは区別される。
    """

    id: int
    name: str
    slug: str | None = None
    released: str | None = None
    background_image: str | None = None
    rating: float = 0.0
    ratings_count: int = 0
    metacritic: int | None = None
    playtime: int = 0
    platforms: tuple[str, ...] = ()
    genres: tuple[str, ...] = ()
    tags: tuple[RAWGTagDTO, ...] | None = None

    @property
    def tag_ids(self) -> frozenset[int] | None:
        if self.tags is None:
            return None
        return frozenset(tag.id for tag in self.tags)


@dataclass(slots=True)
class RAWGGameDetailsDTO(RAWGGameDTO):
    """詳細 API のみが返す項目を加えた DTO。"""

    description_raw: str | None = None
    developers: tuple[RAWGNamedDTO, ...] = ()
    publishers: tuple[RAWGNamedDTO, ...] = ()
    website: str | None = None
    metacritic_url: str | None = None


@dataclass(slots=True)
class RAWGGamesPage(DTO):
    """ページ単位のゲーム一覧レスポンス。"""

    count: int
    results: tuple[RAWGGameDTO, ...]
    next: str | None = None
    previous: str | None = None

    @property
    def has_next(self) -> bool:
        return self.next is not None


@dataclass(slots=True)
class RAWGScreenshotDTO(DTO):
    id: int
    image: str


@dataclass(slots=True)
class RAWGStoreLinkDTO(DTO):
    """ストア ID を表示名へ正規化したストアリンク。"""

    id: int
    url: str
    store_id: int
    store_name: str
    store_slug: str


def parse_games_page(payload: Any) -> RAWGGamesPage:
    """`/games` 形式のレスポンスを DTO に変換する。"""

    if not isinstance(payload, Mapping):
        raise ValueError("RAWG games payload must be an object")

    count = payload.get("count")
    if not isinstance(count, int):
        raise ValueError("RAWG games payload must contain integer `count`")

    return RAWGGamesPage(
        count=count,
        results=_map_games(_results_of(payload)),
        next=_optional_str(payload.get("next")),
        previous=_optional_str(payload.get("previous")),
    )


def parse_game_list(payload: Any) -> tuple[RAWGGameDTO, ...]:
    """`results` 配列のみを持つレスポンス (シリーズ等) を変換する。"""

    if not isinstance(payload, Mapping):
        raise ValueError("RAWG payload must be an object")
    return _map_games(_results_of(payload))


def parse_game_details(payload: Any) -> RAWGGameDetailsDTO:
    if not isinstance(payload, Mapping):
        raise ValueError("RAWG game payload must be an object")

    base = _map_game(payload)
    return RAWGGameDetailsDTO(
        id=base.id,
        name=base.name,
        slug=base.slug,
        released=base.released,
        background_image=base.background_image,
        rating=base.rating,
        ratings_count=base.ratings_count,
        metacritic=base.metacritic,
        playtime=base.playtime,
        platforms=base.platforms,
        genres=base.genres,
        tags=base.tags,
        description_raw=_optional_str(payload.get("description_raw")),
        developers=_map_named(payload.get("developers")),
        publishers=_map_named(payload.get("publishers")),
        website=_optional_str(payload.get("website")) or None,
        metacritic_url=_optional_str(payload.get("metacritic_url")) or None,
    )


def parse_screenshots(payload: Any) -> tuple[RAWGScreenshotDTO, ...]:
    if not isinstance(payload, Mapping):
        raise ValueError("RAWG screenshots payload must be an object")

    screenshots: list[RAWGScreenshotDTO] = []
    for item in _results_of(payload):
        shot_id = item.get("id")
        image = item.get("image")
        if isinstance(shot_id, int) and isinstance(image, str):
            screenshots.append(RAWGScreenshotDTO(id=shot_id, image=image))
    return tuple(screenshots)


def parse_store_links(payload: Any) -> tuple[RAWGStoreLinkDTO, ...]:
    """ストアリンクを変換し、URL の無いものと未知のストアは除外する。"""

    if not isinstance(payload, Mapping):
        raise ValueError("RAWG stores payload must be an object")

    links: list[RAWGStoreLinkDTO] = []
    for item in _results_of(payload):
        link_id = item.get("id")
        url = item.get("url")
        store_id = item.get("store_id")
        if not isinstance(link_id, int) or not url or not isinstance(url, str):
            continue
        if store_id not in STORE_CATALOGUE:
            continue
        name, slug = STORE_CATALOGUE[store_id]
        links.append(
            RAWGStoreLinkDTO(
                id=link_id, url=url, store_id=store_id, store_name=name, store_slug=slug
            )
        )
    return tuple(links)


def parse_tags(payload: Any) -> tuple[RAWGTagDTO, ...]:
    if not isinstance(payload, Mapping):
        raise ValueError("RAWG tags payload must be an object")

    tags: list[RAWGTagDTO] = []
    for item in _results_of(payload):
        tag = _map_tag(item)
        if tag is not None:
            tags.append(tag)
    return tuple(tags)


def parse_named(payload: Any) -> tuple[RAWGNamedDTO, ...]:
    """ジャンル一覧など `results` 配下の参照データを変換する。"""

    if not isinstance(payload, Mapping):
        raise ValueError("RAWG payload must be an object")
    return _map_named(payload.get("results"))


def _results_of(payload: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    results = payload.get("results")
    if results is None:
        return []
    if not isinstance(results, list):
        raise ValueError("RAWG `results` must be an array")

    # オブジェクトでない要素はページ全体を失敗させずに読み飛ばす
    return [item for item in results if isinstance(item, Mapping)]


def _is_game_record(data: Mapping[str, Any]) -> bool:
    game_id = data.get("id")
    return (
        isinstance(game_id, int)
        and not isinstance(game_id, bool)
        and isinstance(data.get("name"), str)
    )


def _map_games(records: list[Mapping[str, Any]]) -> tuple[RAWGGameDTO, ...]:
    # id / name を欠くレコードは 1 件単位で除外する
    return tuple(_map_game(item) for item in records if _is_game_record(item))


def _map_game(data: Mapping[str, Any]) -> RAWGGameDTO:
    game_id = data.get("id")
    name = data.get("name")
    if not isinstance(game_id, int) or not isinstance(name, str):
        msg = "Game record must contain `id` (int) and `name` (str)"
        raise ValueError(msg)

    rating = data.get("rating")
    return RAWGGameDTO(
        id=game_id,
        name=name,
        slug=_optional_str(data.get("slug")),
        released=_optional_str(data.get("released")),
        background_image=_optional_str(data.get("background_image")),
        rating=float(rating) if isinstance(rating, (int, float)) else 0.0,
        ratings_count=_int_or(data.get("ratings_count"), 0),
        metacritic=data.get("metacritic") if isinstance(data.get("metacritic"), int) else None,
        playtime=_int_or(data.get("playtime"), 0),
        platforms=_platform_names(data.get("platforms")),
        genres=tuple(item.name for item in _map_named(data.get("genres"))),
        tags=_map_game_tags(data.get("tags")),
    )


def _map_game_tags(raw: Any) -> tuple[RAWGTagDTO, ...] | None:
    # 配列でない場合は「タグ情報なし」として扱う
    if not isinstance(raw, list):
        return None

    tags: list[RAWGTagDTO] = []
    for item in raw:
        tag = _map_tag(item)
        if tag is not None:
            tags.append(tag)
    return tuple(tags)


def _map_tag(raw: Any) -> RAWGTagDTO | None:
    if not isinstance(raw, Mapping):
        return None
    tag_id = raw.get("id")
    if not isinstance(tag_id, int) or isinstance(tag_id, bool):
        return None
    name = raw.get("name")
    games_count = raw.get("games_count")
    return RAWGTagDTO(
        id=tag_id,
        name=name if isinstance(name, str) else str(tag_id),
        slug=_optional_str(raw.get("slug")),
        games_count=games_count if isinstance(games_count, int) else None,
    )


def _map_named(raw: Any) -> tuple[RAWGNamedDTO, ...]:
    if not isinstance(raw, Iterable) or isinstance(raw, (str, bytes, Mapping)):
        return ()

    items: list[RAWGNamedDTO] = []
    for item in raw:
        if not isinstance(item, Mapping):
            continue
        item_id = item.get("id")
        name = item.get("name")
        if isinstance(item_id, int) and isinstance(name, str):
            items.append(RAWGNamedDTO(id=item_id, name=name, slug=_optional_str(item.get("slug"))))
    return tuple(items)


def _platform_names(raw: Any) -> tuple[str, ...]:
    if not isinstance(raw, list):
        return ()

    names: list[str] = []
    for wrapper in raw:
        platform = wrapper.get("platform") if isinstance(wrapper, Mapping) else None
        name = platform.get("name") if isinstance(platform, Mapping) else None
        if isinstance(name, str):
            names.append(name)
    return tuple(names)


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _int_or(value: Any, default: int) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return default


__all__ = [
    "STORE_CATALOGUE",
    "RAWGGameDTO",
    "RAWGGameDetailsDTO",
    "RAWGGamesPage",
    "RAWGNamedDTO",
    "RAWGScreenshotDTO",
    "RAWGStoreLinkDTO",
    "RAWGTagDTO",
    "parse_game_details",
    "parse_game_list",
    "parse_games_page",
    "parse_named",
    "parse_screenshots",
    "parse_store_links",
    "parse_tags",
]
