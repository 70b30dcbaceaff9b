"""タグ/マルチプレイ条件の解決とローカル絞り込み。"""

from .predicate import apply_filters, matches
from .presets import MULTIPLAYER_TAGS, TAG_PRESETS, MultiplayerMode, TagPreset, find_preset
from .resolver import (
    FilterPlan,
    FilterSelection,
    FilterSelectionError,
    TagGroup,
    get_tag_groups,
    resolve_filters,
)
from .sampler import generate_seed, hash_seed, lucky_page, pick_index

__all__ = [
    "MULTIPLAYER_TAGS",
    "TAG_PRESETS",
    "FilterPlan",
    "FilterSelection",
    "FilterSelectionError",
    "MultiplayerMode",
    "TagGroup",
    "TagPreset",
    "apply_filters",
    "find_preset",
    "generate_seed",
    "get_tag_groups",
    "hash_seed",
    "lucky_page",
    "matches",
    "pick_index",
    "resolve_filters",
]
