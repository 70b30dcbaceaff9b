"""ローカル述語の評価。

グループ間は AND、グループ内は OR。タグ一覧を持たないレコードは
ワイルドカード扱いせず、常に不一致とする。
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from game_discovery.core.filtering.presets import MultiplayerMode
from game_discovery.core.filtering.resolver import FilterPlan, TagGroup
from game_discovery.infra.rawg.dto import RAWGGameDTO


def matches_tag_groups(tag_ids: frozenset[int], tag_groups: Sequence[TagGroup]) -> bool:
    return all(not group.isdisjoint(tag_ids) for group in tag_groups)


def matches_multiplayer(tag_ids: frozenset[int], mode: MultiplayerMode) -> bool:
    return any(tag_id in tag_ids for tag_id in mode.tag_ids)


def matches(
    game: RAWGGameDTO,
    tag_groups: Sequence[TagGroup] = (),
    multiplayer_mode: MultiplayerMode | None = None,
) -> bool:
    """レコードがタググループとマルチプレイ区分の両方を満たすか判定する。"""

    if not tag_groups and multiplayer_mode is None:
        return True

    tag_ids = game.tag_ids
    if tag_ids is None:
        return False
    if multiplayer_mode is not None and not matches_multiplayer(tag_ids, multiplayer_mode):
        return False
    return matches_tag_groups(tag_ids, tag_groups)


def apply_filters(games: Iterable[RAWGGameDTO], plan: FilterPlan) -> list[RAWGGameDTO]:
    """順序を保ったまま、プランのローカル述語を満たすレコードだけを返す。"""

    if not plan.needs_local_filtering:
        return list(games)
    return [game for game in games if matches(game, plan.tag_groups, plan.multiplayer_mode)]


__all__ = [
    "apply_filters",
    "matches",
    "matches_multiplayer",
    "matches_tag_groups",
]
