"""共有レイヤの公開インターフェース。"""

from .config import AppSettings, DiscoverySettings, RAWGSettings, get_settings
from .exceptions import BaseAppError, ConfigurationError, DomainError, Result, UpstreamError
from .logging import configure_logging, get_logger, redact_api_key
from .types import DTO, ValueObject, utc_today

__all__ = [
    "AppSettings",
    "DiscoverySettings",
    "RAWGSettings",
    "get_settings",
    "configure_logging",
    "get_logger",
    "redact_api_key",
    "BaseAppError",
    "ConfigurationError",
    "DomainError",
    "Result",
    "UpstreamError",
    "DTO",
    "ValueObject",
    "utc_today",
]
