"""RAWG API 向け infra 層パッケージ。"""

from .client import (
    DEFAULT_PAGE_SIZE,
    RAWGClient,
    RAWGClientError,
    RAWGClientProtocol,
    RAWGGamesQuery,
    RAWGNotFoundError,
    RAWGRateLimitError,
    RAWGRequestError,
    RAWGRetryConfig,
    RAWGTimeoutError,
    build_rawg_client,
)
from .dto import (
    STORE_CATALOGUE,
    RAWGGameDetailsDTO,
    RAWGGameDTO,
    RAWGGamesPage,
    RAWGNamedDTO,
    RAWGScreenshotDTO,
    RAWGStoreLinkDTO,
    RAWGTagDTO,
)

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "STORE_CATALOGUE",
    "RAWGClient",
    "RAWGClientError",
    "RAWGClientProtocol",
    "RAWGGameDTO",
    "RAWGGameDetailsDTO",
    "RAWGGamesPage",
    "RAWGGamesQuery",
    "RAWGNamedDTO",
    "RAWGNotFoundError",
    "RAWGRateLimitError",
    "RAWGRequestError",
    "RAWGRetryConfig",
    "RAWGScreenshotDTO",
    "RAWGStoreLinkDTO",
    "RAWGTagDTO",
    "RAWGTimeoutError",
    "build_rawg_client",
]
