from __future__ import annotations

import typer

from game_discovery.cli.commands import discover, game, tags
from game_discovery.shared.config import get_settings
from game_discovery.shared.exceptions import ConfigurationError
from game_discovery.shared.logging import configure_logging

app = typer.Typer(help="RAWG を使ったゲーム発見ツールの CLI")

app.add_typer(discover.app, name="discover", help="絞り込み・もっと見る・ランダムピック")
app.add_typer(game.app, name="game", help="ゲーム詳細とシリーズ")
app.add_typer(tags.app, name="tags", help="タグプリセットと RAWG タグ検索")


def _configure_logging_from_settings() -> None:
    # API キー未設定でも `tags presets` は動かしたいので、ここでは既定値で続行する
    try:
        settings = get_settings()
    except ConfigurationError:
        configure_logging()
        return
    configure_logging(settings.log_level, json_output=settings.log_json)


def main() -> None:
    """エントリポイント。"""

    _configure_logging_from_settings()
    try:
        app()
    except ConfigurationError as exc:
        typer.echo(f"設定を読み込めませんでした (RAWG__API_KEY を確認してください): {exc}", err=True)
        raise SystemExit(exc.exit_code) from exc


if __name__ == "__main__":  # pragma: no cover - CLI エントリ
    main()
