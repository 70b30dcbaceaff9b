"""ゲーム詳細ページ向けのサービス。"""

from .service import (
    GameDetailsClientProtocol,
    GameDetailsError,
    GameDetailsService,
    GameDetailView,
    GameNotFoundError,
)

__all__ = [
    "GameDetailView",
    "GameDetailsClientProtocol",
    "GameDetailsError",
    "GameDetailsService",
    "GameNotFoundError",
]
