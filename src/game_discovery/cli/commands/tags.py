from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from game_discovery.core.filtering.presets import MULTIPLAYER_TAGS, presets_by_category
from game_discovery.infra.rawg import RAWGClientError, RAWGRateLimitError, build_rawg_client
from game_discovery.shared.logging import get_logger

app = typer.Typer(help="タグプリセットと RAWG タグの確認")


@app.command()
def presets() -> None:
    """組み込みのタグプリセットとマルチプレイ区分を表示する。"""

    console = Console(force_terminal=False, color_system=None)
    table = Table(title="Tag Presets")
    table.add_column("Category", style="cyan")
    table.add_column("Label", style="bold")
    table.add_column("Tag IDs")

    for category, items in presets_by_category().items():
        for preset in items:
            table.add_row(category, preset.label, preset.ids_param)
    for mode, tag_ids in MULTIPLAYER_TAGS.items():
        table.add_row("Multiplayer", mode.value, ",".join(str(tag_id) for tag_id in tag_ids))

    console.print(table)


@app.command()
def search(
    terms: Annotated[list[str], typer.Argument(help="検索するタグ名 (複数指定可)")],
    limit: Annotated[int, typer.Option("--limit", "-l", min=1, max=50, help="表示件数")] = 10,
) -> None:
    """RAWG のタグを名前で検索し、プリセット用の ID を確認する。"""

    logger = get_logger("cli.tags.search")
    client = build_rawg_client(logger=logger)
    console = Console(force_terminal=False, color_system=None)

    for term in terms:
        try:
            found = client.search_tags(term)
        except RAWGRateLimitError as exc:
            logger.warning("RAWG API rate limited", error=str(exc))
            typer.echo("RAWG API のレート制限に到達しました。時間をおいて再実行してください。")
            raise typer.Exit(code=exc.exit_code) from exc
        except RAWGClientError as exc:
            logger.error("タグ検索に失敗", term=term, error=str(exc))
            typer.echo(f"タグ検索に失敗しました: {exc}")
            raise typer.Exit(code=exc.exit_code) from exc

        if not found:
            typer.echo(f'"{term}" に一致するタグはありません')
            continue

        table = Table(title=f'Search: "{term}"')
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Slug")
        table.add_column("Name", style="bold")
        table.add_column("Games")
        for tag in found[:limit]:
            games = str(tag.games_count) if tag.games_count is not None else "-"
            table.add_row(str(tag.id), tag.slug or "-", tag.name, games)
        console.print(table)
