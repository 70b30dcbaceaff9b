from __future__ import annotations

import json
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from game_discovery.cli.commands.discover import OutputFormat, _game_to_dict, _render_table
from game_discovery.core.details import (
    GameDetailsError,
    GameDetailsService,
    GameDetailView,
    GameNotFoundError,
)
from game_discovery.infra.rawg import build_rawg_client
from game_discovery.shared.logging import get_logger

app = typer.Typer(help="ゲーム詳細の表示")

OutputOption = Annotated[
    OutputFormat,
    typer.Option("--output", "-f", case_sensitive=False, help="出力形式(table/json)"),
]


def _view_to_dict(view: GameDetailView) -> dict[str, object]:
    game = view.game
    payload = _game_to_dict(game)
    payload.update(
        {
            "description": game.description_raw,
            "developers": [item.name for item in game.developers],
            "publishers": [item.name for item in game.publishers],
            "website": game.website,
            "metacritic_url": game.metacritic_url,
            "rawg_url": f"https://rawg.io/games/{game.slug}" if game.slug else None,
            "screenshots": [shot.to_dict() for shot in view.screenshots],
            "stores": [{"name": link.store_name, "url": link.url} for link in view.stores],
        }
    )
    return payload


def _render_view(view: GameDetailView) -> None:
    game = view.game
    console = Console(force_terminal=False, color_system=None)
    table = Table(title=game.name, show_header=False)
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value")

    table.add_row("Released", game.released or "-")
    table.add_row("Rating", f"{game.rating:.2f} ({game.ratings_count} ratings)")
    table.add_row("Metacritic", str(game.metacritic) if game.metacritic is not None else "-")
    table.add_row("Platforms", ", ".join(game.platforms) or "Unknown")
    if game.genres:
        table.add_row("Genres", ", ".join(game.genres))
    if game.developers:
        table.add_row("Developer", ", ".join(item.name for item in game.developers))
    if game.publishers:
        table.add_row("Publisher", ", ".join(item.name for item in game.publishers))
    if game.playtime > 0:
        table.add_row("Average Playtime", f"{game.playtime} hours")
    if game.website:
        table.add_row("Website", game.website)
    for link in view.stores:
        table.add_row(link.store_name, link.url)
    table.add_row("Screenshots", str(len(view.screenshots)))
    if game.tags:
        table.add_row("Tags", ", ".join(tag.name for tag in game.tags))

    console.print(table)
    typer.echo(game.description_raw or "No description available.")


@app.command()
def show(
    slug: Annotated[str, typer.Argument(help="ゲームの slug")],
    output: OutputOption = OutputFormat.TABLE,
) -> None:
    """ゲーム詳細とスクリーンショット・ストアリンクを表示する。"""

    logger = get_logger("cli.game.show", slug=slug)
    service = GameDetailsService(client=build_rawg_client(logger=logger), logger=logger)

    try:
        view = service.load(slug)
    except GameNotFoundError as exc:
        logger.warning("ゲームが見つからない", error=str(exc))
        typer.echo(f"ゲームが見つかりませんでした: {slug}")
        raise typer.Exit(code=exc.exit_code) from exc
    except GameDetailsError as exc:
        logger.error("ゲーム詳細の取得に失敗", error=str(exc))
        typer.echo(f"ゲーム詳細の取得に失敗しました: {exc}")
        raise typer.Exit(code=exc.exit_code) from exc

    if output is OutputFormat.JSON:
        typer.echo(json.dumps(_view_to_dict(view), ensure_ascii=False, indent=2))
    else:
        _render_view(view)


@app.command()
def series(
    slug: Annotated[str, typer.Argument(help="ゲームの slug")],
    exclude_id: Annotated[
        int | None, typer.Option("--exclude-id", help="一覧から除外するゲーム ID")
    ] = None,
    output: OutputOption = OutputFormat.TABLE,
) -> None:
    """同じシリーズのゲームを一覧表示する。"""

    logger = get_logger("cli.game.series", slug=slug)
    service = GameDetailsService(client=build_rawg_client(logger=logger), logger=logger)

    try:
        games = service.load_series(slug, exclude_id)
    except GameDetailsError as exc:
        logger.error("シリーズの取得に失敗", error=str(exc))
        typer.echo(f"シリーズの取得に失敗しました: {exc}")
        raise typer.Exit(code=exc.exit_code) from exc

    if output is OutputFormat.JSON:
        payload = [_game_to_dict(game) for game in games]
        typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))
    elif games:
        _render_table("More in this Series", games)
    else:
        typer.echo("同じシリーズのゲームはありません")
