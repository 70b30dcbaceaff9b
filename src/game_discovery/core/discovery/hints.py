"""空結果や絞り込み件数を利用者へ説明するメッセージ。"""

from __future__ import annotations

from game_discovery.core.discovery.query import METACRITIC_ORDERING, BrowseParams
from game_discovery.core.filtering.resolver import FilterPlan


def browse_empty_hint(params: BrowseParams) -> str | None:
    if params.ordering == METACRITIC_ORDERING and (params.date_from or params.unreleased):
        return "最近のゲームは Metacritic スコアの反映が遅れがちです。Rating 順で並べ替えてみてください。"
    return None


def lucky_empty_hint(params: BrowseParams, plan: FilterPlan) -> str:
    if params.ordering == METACRITIC_ORDERING:
        return "Metacritic スコアの無いゲームが多くあります。Rating 順で並べ替えてみてください。"
    if plan.needs_local_filtering:
        return "絞り込み条件の組み合わせが限定的すぎます。条件をいくつか外してみてください。"
    return "条件に合うゲームが見つかりませんでした。絞り込み条件を調整してみてください。"


def filtered_out_message(count: int, plan: FilterPlan) -> str | None:
    """ローカル絞り込みで非表示にした件数の説明。該当なしなら None。"""

    if count <= 0 or not plan.needs_local_filtering:
        return None

    reasons: list[str] = []
    if plan.multiplayer_mode is not None:
        reasons.append(f"マルチプレイ区分 ({plan.multiplayer_mode.label})")
    if plan.tag_groups:
        reasons.append("すべてのタグに一致")
    return f"{count} 件のゲームを {' / '.join(reasons)} の条件で除外しました"


__all__ = ["browse_empty_hint", "filtered_out_message", "lucky_empty_hint"]
