"""タグプリセットやマルチプレイ区分など、絞り込み用の静的参照データ。

タグ ID は RAWG の `/tags` エンドポイントで確認できる値。
同じ概念を表す複数のタグ (例: "rpg" と "role-playing") は 1 つのプリセットにまとめ、
プリセット内の ID は OR 条件として扱う。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class MultiplayerMode(str, Enum):
    """マルチプレイ区分。"""

    SINGLEPLAYER = "singleplayer"
    COOP = "coop"
    LOCAL = "local"

    @property
    def tag_ids(self) -> tuple[int, ...]:
        return MULTIPLAYER_TAGS[self]

    @property
    def label(self) -> str:
        return _MULTIPLAYER_LABELS[self]


MULTIPLAYER_TAGS: dict[MultiplayerMode, tuple[int, ...]] = {
    MultiplayerMode.SINGLEPLAYER: (31,),
    # co-op + online-co-op + cooperative
    MultiplayerMode.COOP: (18, 9, 411),
    # local-multiplayer + local-co-op + split-screen
    MultiplayerMode.LOCAL: (72, 75, 198),
}

_MULTIPLAYER_LABELS: dict[MultiplayerMode, str] = {
    MultiplayerMode.SINGLEPLAYER: "Singleplayer",
    MultiplayerMode.COOP: "Co-op",
    MultiplayerMode.LOCAL: "Local Multiplayer",
}


@dataclass(slots=True, frozen=True)
class TagPreset:
    """同義タグをまとめたプリセット。"""

    ids: tuple[int, ...]
    label: str
    category: str

    @property
    def ids_param(self) -> str:
        return ",".join(str(tag_id) for tag_id in self.ids)


TAG_PRESETS: tuple[TagPreset, ...] = (
    # Genre
    TagPreset((24, 468), "RPG", "Genre"),
    TagPreset((97,), "Action RPG", "Genre"),
    TagPreset((80, 230), "Tactical", "Genre"),
    TagPreset((639,), "Roguelike", "Genre"),
    TagPreset((259,), "Metroidvania", "Genre"),
    TagPreset((213, 180, 49967), "City Builder", "Genre"),
    TagPreset((1,), "Survival", "Genre"),
    TagPreset((37,), "Sandbox", "Genre"),
    TagPreset((107,), "Family Friendly", "Genre"),
    TagPreset((16, 17), "Horror", "Genre"),
    # Gameplay
    TagPreset((36,), "Open World", "Gameplay"),
    TagPreset((102, 175, 101), "Turn-Based", "Gameplay"),
    TagPreset((99, 61), "Isometric", "Gameplay"),
    TagPreset((6,), "Exploration", "Gameplay"),
    TagPreset((125,), "Crafting", "Gameplay"),
    TagPreset((49,), "Difficult", "Gameplay"),
    TagPreset((115, 336, 29716, 6670), "Controller Support", "Gameplay"),
    # Setting
    TagPreset((64, 40), "Fantasy", "Setting"),
    TagPreset((32, 226), "Sci-fi", "Setting"),
    TagPreset((43,), "Post-apocalyptic", "Setting"),
    TagPreset((152,), "Western", "Setting"),
    # Narrative
    TagPreset((118, 583), "Story Rich", "Narrative"),
    TagPreset((13,), "Atmospheric", "Narrative"),
    TagPreset((145,), "Choices Matter", "Narrative"),
)

# 露骨な成人向けタグ (NSFW, hentai, erotic, porn)。"adult" 単体は一般作も含むため対象外
NSFW_TAG_IDS: frozenset[int] = frozenset({312, 786, 785, 1402})


@dataclass(slots=True, frozen=True)
class PlatformOption:
    id: int
    name: str
    slug: str


PLATFORMS: tuple[PlatformOption, ...] = (
    PlatformOption(7, "Nintendo Switch", "nintendo-switch"),
    PlatformOption(4, "PC", "pc"),
    PlatformOption(187, "PlayStation 5", "playstation5"),
    PlatformOption(186, "Xbox Series S/X", "xbox-series-x"),
)

ORDERINGS: dict[str, str] = {
    "-rating": "Top Rated",
    "-metacritic": "Metacritic",
    "-released": "Release Date",
    "-added": "Popularity",
    "name": "Name (A-Z)",
}


def find_preset(label: str) -> TagPreset | None:
    """ラベル (大文字小文字は無視) からプリセットを探す。"""

    normalized = label.strip().lower()
    for preset in TAG_PRESETS:
        if preset.label.lower() == normalized:
            return preset
    return None


def presets_by_category() -> dict[str, tuple[TagPreset, ...]]:
    grouped: dict[str, list[TagPreset]] = {}
    for preset in TAG_PRESETS:
        grouped.setdefault(preset.category, []).append(preset)
    return {category: tuple(items) for category, items in grouped.items()}


__all__ = [
    "MULTIPLAYER_TAGS",
    "NSFW_TAG_IDS",
    "ORDERINGS",
    "PLATFORMS",
    "TAG_PRESETS",
    "MultiplayerMode",
    "PlatformOption",
    "TagPreset",
    "find_preset",
    "presets_by_category",
]
