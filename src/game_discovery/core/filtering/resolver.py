"""ユーザーの絞り込み条件を「上流へ送る条件」と「ローカルで評価する条件」に振り分ける。

RAWG の `tags` パラメータは OR 条件しか表現できない。独立した 2 つの条件群を
AND で組み合わせたい場合、上流へ委譲できるのは高々 1 つで、残りはローカルで評価する。
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from game_discovery.core.filtering.presets import TAG_PRESETS, MultiplayerMode, TagPreset
from game_discovery.shared.exceptions import DomainError

TagGroup = frozenset[int]


class FilterSelectionError(DomainError):
    """絞り込み条件の値が解釈できない場合のエラー。"""

    default_message = "絞り込み条件が不正です"


@dataclass(slots=True, frozen=True)
class FilterSelection:
    """1 リクエスト分の絞り込み条件。永続化されず、毎回ナビゲーション状態から作る。"""

    tag_ids: frozenset[int] = field(default_factory=frozenset)
    multiplayer_mode: MultiplayerMode | None = None
    match_all_tags: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "tag_ids", frozenset(self.tag_ids))

    @classmethod
    def from_query_values(
        cls,
        *,
        tags: str | None = None,
        multiplayer: str | None = None,
        match_all_tags: bool | str | None = None,
    ) -> FilterSelection:
        """`tags=24,468&multiplayer=coop&matchAllTags=true` 形式の値から生成する。"""

        return cls(
            tag_ids=parse_tag_ids(tags),
            multiplayer_mode=parse_multiplayer_mode(multiplayer),
            match_all_tags=match_all_tags is True or match_all_tags == "true",
        )

    @property
    def has_tags(self) -> bool:
        return bool(self.tag_ids)


@dataclass(slots=True, frozen=True)
class FilterPlan:
    """上流クエリ用のタグとローカル述語の組。"""

    api_tag_ids: tuple[int, ...] | None = None
    tag_groups: tuple[TagGroup, ...] = ()
    multiplayer_mode: MultiplayerMode | None = None

    @property
    def needs_local_filtering(self) -> bool:
        return bool(self.tag_groups) or self.multiplayer_mode is not None

    @property
    def api_tags_param(self) -> str | None:
        if not self.api_tag_ids:
            return None
        return ",".join(str(tag_id) for tag_id in self.api_tag_ids)


def parse_tag_ids(raw: str | Iterable[int | str] | None) -> frozenset[int]:
    if raw is None:
        return frozenset()
    items = raw.split(",") if isinstance(raw, str) else raw

    ids: set[int] = set()
    for item in items:
        text = str(item).strip()
        if not text:
            continue
        try:
            ids.add(int(text))
        except ValueError as exc:
            msg = f"タグ ID は整数で指定してください: {text}"
            raise FilterSelectionError(msg) from exc
    return frozenset(ids)


def parse_multiplayer_mode(raw: str | MultiplayerMode | None) -> MultiplayerMode | None:
    if raw is None or raw == "":
        return None
    if isinstance(raw, MultiplayerMode):
        return raw
    try:
        return MultiplayerMode(raw.strip().lower())
    except ValueError as exc:
        msg = f"未知のマルチプレイ区分です: {raw}"
        raise FilterSelectionError(msg) from exc


def get_tag_groups(
    tag_ids: Iterable[int], presets: Iterable[TagPreset] = TAG_PRESETS
) -> tuple[TagGroup, ...]:
    """選択タグで完全に覆われたプリセットを、カタログ順に OR グループとして返す。"""

    selected = frozenset(tag_ids)
    return tuple(
        frozenset(preset.ids) for preset in presets if all(i in selected for i in preset.ids)
    )


def resolve_filters(
    selection: FilterSelection, presets: Iterable[TagPreset] = TAG_PRESETS
) -> FilterPlan:
    """選択内容から上流クエリとローカル述語を決定する。"""

    mode = selection.multiplayer_mode

    if not selection.has_tags:
        if mode is None:
            return FilterPlan()
        # マルチプレイのみ: 同義タグの OR は上流でも正しく、並び順も上流に任せられる
        return FilterPlan(api_tag_ids=mode.tag_ids)

    api_tag_ids = tuple(sorted(selection.tag_ids))
    tag_groups = get_tag_groups(selection.tag_ids, presets) if selection.match_all_tags else ()
    return FilterPlan(api_tag_ids=api_tag_ids, tag_groups=tag_groups, multiplayer_mode=mode)


__all__ = [
    "FilterPlan",
    "FilterSelection",
    "FilterSelectionError",
    "TagGroup",
    "get_tag_groups",
    "parse_multiplayer_mode",
    "parse_tag_ids",
    "resolve_filters",
]
