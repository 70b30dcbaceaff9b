"""シード文字列から再現可能な擬似乱数インデックスを導く。

暗号学的な性質は持たない。同じシードからは常に同じ結果が得られることだけを保証する。
"""

from __future__ import annotations

import secrets
import string

DEFAULT_SEED = "default"
SEED_ALPHABET = string.digits + string.ascii_lowercase

_INT32_SPAN = 1 << 32
_INT32_MIN = -(1 << 31)


def _wrap_int32(value: int) -> int:
    return (value - _INT32_MIN) % _INT32_SPAN + _INT32_MIN


def hash_seed(seed: str | None) -> int:
    """`acc = acc * 31 + ord(ch)` を符号付き 32bit で折り返し、絶対値を返す。"""

    acc = 0
    for char in seed or DEFAULT_SEED:
        acc = _wrap_int32(acc * 31 + ord(char))
    return abs(acc)


def lucky_page(seed_hash: int, attempt: int, max_page: int, *, stride: int = 7) -> int:
    """試行番号 `attempt` (0 始まり) で要求する 1 始まりのページ番号。"""

    if max_page <= 0:
        msg = "max_page must be positive"
        raise ValueError(msg)
    return ((seed_hash + attempt * stride) % max_page) + 1


def pick_index(seed_hash: int, candidate_count: int) -> int:
    if candidate_count <= 0:
        msg = "candidate_count must be positive"
        raise ValueError(msg)
    return seed_hash % candidate_count


def generate_seed(length: int = 6) -> str:
    """「もう一度」操作ごとに新しい結果を得るためのシードを発行する。"""

    return "".join(secrets.choice(SEED_ALPHABET) for _ in range(length))


__all__ = [
    "DEFAULT_SEED",
    "generate_seed",
    "hash_seed",
    "lucky_page",
    "pick_index",
]
