from __future__ import annotations

import logging

from game_discovery.shared.logging import ApiKeyRedactingFilter, redact_api_key


def test_redact_api_key_masks_query_value() -> None:
    url = "https://api.rawg.io/api/games?key=abc123&page=2&page_size=100"

    assert redact_api_key(url) == "https://api.rawg.io/api/games?key=***&page=2&page_size=100"
    assert redact_api_key("https://api.rawg.io/api/games?page=1&key=abc123") == (
        "https://api.rawg.io/api/games?page=1&key=***"
    )
    assert redact_api_key("no secrets here") == "no secrets here"


def test_filter_rewrites_formatted_record() -> None:
    record = logging.LogRecord(
        name="httpx",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg='HTTP Request: %s %s "%s"',
        args=("GET", "https://api.rawg.io/api/tags?key=secret&search=co-op", "HTTP/1.1 200 OK"),
        exc_info=None,
    )

    assert ApiKeyRedactingFilter().filter(record)
    assert "secret" not in record.getMessage()
    assert "key=***&search=co-op" in record.getMessage()
