from __future__ import annotations

import json
from collections.abc import Iterable
from enum import Enum
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from game_discovery.core.discovery import (
    BrowseParams,
    BrowseSnapshot,
    IncrementalBrowser,
    LuckyPick,
    LuckyPicker,
    browse_empty_hint,
    build_games_query,
    filtered_out_message,
    lucky_empty_hint,
)
from game_discovery.core.filtering import (
    FilterSelection,
    FilterSelectionError,
    MultiplayerMode,
    find_preset,
    generate_seed,
    resolve_filters,
)
from game_discovery.core.filtering.presets import NSFW_TAG_IDS
from game_discovery.infra.rawg import RAWGGameDTO, build_rawg_client
from game_discovery.shared.config import get_settings
from game_discovery.shared.logging import get_logger


class OutputFormat(str, Enum):
    """出力形式。"""

    TABLE = "table"
    JSON = "json"


app = typer.Typer(help="ゲーム一覧の閲覧とランダムピック")

TagsOption = Annotated[
    str | None, typer.Option("--tags", "-t", help="カンマ区切りのタグ ID (例: 24,468)")
]
PresetOption = Annotated[
    list[str] | None,
    typer.Option("--preset", "-p", help="タグプリセット名 (複数指定可, 例: Western)"),
]
MultiplayerOption = Annotated[
    MultiplayerMode | None,
    typer.Option("--multiplayer", "-m", case_sensitive=False, help="singleplayer/coop/local"),
]
MatchAllOption = Annotated[
    bool, typer.Option("--match-all", help="選択したタグをすべて含むゲームに限定する")
]
GenreOption = Annotated[str | None, typer.Option("--genre", help="ジャンルの slug")]
PlatformOption = Annotated[str | None, typer.Option("--platform", help="プラットフォーム ID")]
StoreOption = Annotated[str | None, typer.Option("--store", help="ストア ID")]
OrderingOption = Annotated[
    str | None, typer.Option("--ordering", "-o", help="並び順 (-rating, -metacritic 等)")
]
MetacriticOption = Annotated[
    str | None, typer.Option("--metacritic", help="Metacritic スコア範囲 (例: 80,100)")
]
DateFromOption = Annotated[str | None, typer.Option("--date-from", help="YYYY-MM-DD")]
DateToOption = Annotated[str | None, typer.Option("--date-to", help="YYYY-MM-DD")]
UnreleasedOption = Annotated[bool, typer.Option("--unreleased", help="未発売タイトルのみ")]
SearchOption = Annotated[str | None, typer.Option("--search", "-s", help="タイトル検索語")]
SearchExactOption = Annotated[bool, typer.Option("--search-exact", help="完全一致で検索する")]
OutputOption = Annotated[
    OutputFormat,
    typer.Option("--output", "-f", case_sensitive=False, help="出力形式(table/json)"),
]


def _build_selection(
    tags: str | None,
    presets: Iterable[str] | None,
    multiplayer: MultiplayerMode | None,
    match_all: bool,
) -> FilterSelection:
    try:
        selection = FilterSelection.from_query_values(
            tags=tags, multiplayer=multiplayer, match_all_tags=match_all
        )
    except FilterSelectionError as exc:
        raise typer.BadParameter(str(exc), param_hint="--tags") from exc

    tag_ids = set(selection.tag_ids)
    for label in presets or ():
        preset = find_preset(label)
        if preset is None:
            msg = f"未知のタグプリセットです: {label}"
            raise typer.BadParameter(msg, param_hint="--preset")
        tag_ids.update(preset.ids)

    return FilterSelection(
        tag_ids=frozenset(tag_ids),
        multiplayer_mode=selection.multiplayer_mode,
        match_all_tags=selection.match_all_tags,
    )


def _format_tags(game: RAWGGameDTO, limit: int = 4) -> str:
    if game.tags is None:
        return "-"
    names = [tag.name for tag in game.tags[:limit]]
    if len(game.tags) > limit:
        names.append("…")
    return ", ".join(names) if names else "-"


def _is_nsfw(game: RAWGGameDTO) -> bool:
    tag_ids = game.tag_ids
    return bool(tag_ids and not tag_ids.isdisjoint(NSFW_TAG_IDS))


def _game_to_dict(game: RAWGGameDTO) -> dict[str, object]:
    return {
        "id": game.id,
        "slug": game.slug,
        "name": game.name,
        "released": game.released,
        "rating": game.rating,
        "metacritic": game.metacritic,
        "platforms": list(game.platforms),
        "genres": list(game.genres),
        "tags": [tag.id for tag in game.tags] if game.tags is not None else None,
        "nsfw": _is_nsfw(game),
    }


def _render_table(title: str, games: Iterable[RAWGGameDTO]) -> None:
    console = Console(force_terminal=False, color_system=None)
    table = Table(title=title)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Title", style="bold")
    table.add_column("Released")
    table.add_column("Rating")
    table.add_column("Metacritic")
    table.add_column("Platforms")
    table.add_column("Tags")

    for game in games:
        name = f"{game.name} [NSFW]" if _is_nsfw(game) else game.name
        table.add_row(
            str(game.id),
            name,
            game.released or "-",
            f"{game.rating:.2f}",
            str(game.metacritic) if game.metacritic is not None else "-",
            ", ".join(game.platforms) or "-",
            _format_tags(game),
        )

    console.print(table)


def _pluralize(count: int) -> str:
    return f"{count:,} game" if count == 1 else f"{count:,} games"


def _render_snapshot(
    snapshot: BrowseSnapshot,
    *,
    output: OutputFormat,
    params: BrowseParams,
    filtered_note: str | None,
) -> None:
    if output is OutputFormat.JSON:
        payload = {
            "count": snapshot.total_count,
            "has_more": snapshot.has_more,
            "filtered_out": snapshot.filtered_out_count,
            "pages_requested": snapshot.pages_requested,
            "games": [_game_to_dict(game) for game in snapshot.games],
        }
        typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))
        return

    typer.echo(f"{_pluralize(snapshot.total_count)} found")
    if snapshot.games:
        _render_table("Discover Games", snapshot.games)
    else:
        typer.echo("ゲームが見つかりませんでした")
        hint = browse_empty_hint(params)
        if hint:
            typer.echo(hint)
    if filtered_note:
        typer.echo(filtered_note)
    if snapshot.has_more:
        typer.echo("さらに結果があります (--pages で追加取得できます)")


@app.command()
def browse(  # noqa: PLR0913 - CLI のため引数が多い
    tags: TagsOption = None,
    preset: PresetOption = None,
    multiplayer: MultiplayerOption = None,
    match_all: MatchAllOption = False,
    genre: GenreOption = None,
    platform: PlatformOption = None,
    store: StoreOption = None,
    ordering: OrderingOption = None,
    metacritic: MetacriticOption = None,
    date_from: DateFromOption = None,
    date_to: DateToOption = None,
    unreleased: UnreleasedOption = False,
    search: SearchOption = None,
    search_exact: SearchExactOption = False,
    pages: Annotated[
        int, typer.Option("--pages", "-n", min=1, max=50, help="「もっと見る」を実行する回数")
    ] = 1,
    output: OutputOption = OutputFormat.TABLE,
) -> None:
    """絞り込み条件でゲーム一覧を取得する。"""

    selection = _build_selection(tags, preset, multiplayer, match_all)
    params = BrowseParams(
        selection=selection,
        genre=genre,
        platform=platform,
        store=store,
        ordering=ordering,
        metacritic=metacritic,
        date_from=date_from,
        date_to=date_to,
        unreleased=unreleased,
        search=search,
        search_exact=search_exact,
    )
    settings = get_settings().discovery
    plan = resolve_filters(selection)
    query = build_games_query(params, plan, default_platforms=settings.default_platforms)

    logger = get_logger("cli.discover.browse", tags=plan.api_tags_param)
    browser = IncrementalBrowser(
        client=build_rawg_client(logger=logger),
        query=query,
        plan=plan,
        settings=settings,
        logger=logger,
    )

    failure = None
    for _ in range(pages):
        result = browser.load_more()
        if result.is_err:
            failure = result.unwrap_err()
            break
        if not result.unwrap().has_more:
            break

    snapshot = browser.snapshot()
    _render_snapshot(
        snapshot,
        output=output,
        params=params,
        filtered_note=filtered_out_message(snapshot.filtered_out_count, plan),
    )

    if failure is not None:
        logger.error("ゲーム一覧の取得に失敗", error=str(failure), page=failure.page)
        typer.echo(f"ゲーム一覧の取得に失敗しました: {failure} (再実行してください)")
        raise typer.Exit(code=failure.exit_code)


def _render_pick(pick: LuckyPick, *, output: OutputFormat, hint: str) -> None:
    if output is OutputFormat.JSON:
        payload = {
            "seed": pick.seed,
            "count": pick.total_count,
            "pages_tried": list(pick.pages_tried),
            "game": _game_to_dict(pick.game) if pick.game else None,
        }
        typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))
        return

    typer.echo(f"Random pick from {_pluralize(pick.total_count)} (seed: {pick.seed})")
    if pick.game is not None:
        _render_table("I'm Feeling Lucky", (pick.game,))
    else:
        typer.echo("ゲームが見つかりませんでした")
        typer.echo(hint)


@app.command()
def lucky(  # noqa: PLR0913 - CLI のため引数が多い
    seed: Annotated[
        str | None, typer.Option("--seed", help="同じ結果を再現するためのシード")
    ] = None,
    tags: TagsOption = None,
    preset: PresetOption = None,
    multiplayer: MultiplayerOption = None,
    match_all: MatchAllOption = False,
    genre: GenreOption = None,
    platform: PlatformOption = None,
    store: StoreOption = None,
    ordering: OrderingOption = None,
    metacritic: MetacriticOption = None,
    date_from: DateFromOption = None,
    date_to: DateToOption = None,
    unreleased: UnreleasedOption = False,
    search: SearchOption = None,
    search_exact: SearchExactOption = False,
    output: OutputOption = OutputFormat.TABLE,
) -> None:
    """条件に合うゲームを決定的にランダムで 1 件選ぶ。"""

    selection = _build_selection(tags, preset, multiplayer, match_all)
    params = BrowseParams(
        selection=selection,
        genre=genre,
        platform=platform,
        store=store,
        ordering=ordering,
        metacritic=metacritic,
        date_from=date_from,
        date_to=date_to,
        unreleased=unreleased,
        search=search,
        search_exact=search_exact,
    )
    settings = get_settings().discovery
    plan = resolve_filters(selection)
    query = build_games_query(params, plan, default_platforms=settings.default_platforms)
    effective_seed = seed or generate_seed()

    logger = get_logger("cli.discover.lucky", seed=effective_seed)
    picker = LuckyPicker(client=build_rawg_client(logger=logger), settings=settings, logger=logger)
    pick = picker.pick(query, plan, effective_seed)

    if pick.error is not None:
        logger.error("ランダムピックに失敗", error=str(pick.error), page=pick.error.page)
        typer.echo(f"ランダムピックに失敗しました: {pick.error}")
        raise typer.Exit(code=pick.error.exit_code)

    _render_pick(pick, output=output, hint=lucky_empty_hint(params, plan))
