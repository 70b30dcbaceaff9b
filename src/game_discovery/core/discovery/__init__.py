"""発見ページの段階的取得・ランダムピック。"""

from .accumulator import FetchCursor, ResultAccumulator
from .controller import (
    BrowseSnapshot,
    BrowseState,
    DiscoveryFetchError,
    IncrementalBrowser,
    resolve_page_size,
)
from .hints import browse_empty_hint, filtered_out_message, lucky_empty_hint
from .lucky import LuckyPick, LuckyPicker
from .query import BrowseParams, build_dates, build_games_query

__all__ = [
    "BrowseParams",
    "BrowseSnapshot",
    "BrowseState",
    "DiscoveryFetchError",
    "FetchCursor",
    "IncrementalBrowser",
    "LuckyPick",
    "LuckyPicker",
    "ResultAccumulator",
    "browse_empty_hint",
    "build_dates",
    "build_games_query",
    "filtered_out_message",
    "lucky_empty_hint",
    "resolve_page_size",
]
