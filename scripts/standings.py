#!/usr/bin/env python3
"""Score parsed battle-royale matches and print official tournament standings."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Annotated

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from db import DEFAULT_DB_URL, create_db_engine, create_session_factory
from logging_setup import setup_logging
from repositories import MATCH_SCORE_REPOSITORY
from standings.common import MatchResult, MergedTeamRecord
from standings.config import DEFAULT_CONFIG_DIR, get_scoring_system, load_scoring_system_configs
from standings.decimal_utils import format_decimal
from standings.pipeline import run_standings, score_match
from standings.ranking import RankedTeam
from standings.serialization import (
    match_result_from_dict,
    match_result_to_dict,
    read_json,
    standings_to_list,
    write_json,
)

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Battle-royale match scoring and standings commands.",
)


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log engine details at DEBUG level."),
    ] = False,
) -> None:
    setup_logging("standings", logging.DEBUG if verbose else logging.WARNING)


def _member_label(entry: RankedTeam) -> str:
    names = [name for name in entry.team.member_names if name]
    return ", ".join(names) if names else ", ".join(entry.summary.identity_key)


def _render_row(entry: RankedTeam) -> str:
    summary = entry.summary
    line = (
        f"{entry.rank:3d}. {_member_label(entry):<40} "
        f"points={format_decimal(summary.total_score):>4} "
        f"wins={summary.victory_count:2d} "
        f"avg_kills={format_decimal(summary.average_kills)} "
        f"avg_place={format_decimal(summary.average_placement)} "
        f"alive={format_decimal(summary.total_alive_time)}"
    )
    if isinstance(entry.team, MergedTeamRecord):
        line += f" matches={summary.match_count}"
    else:
        line += f" team={entry.team.team_id}"
    return line


def _print_standings(results: list[MatchResult], system_name: str | None, output: Path | None) -> None:
    ranked, _ = run_standings(results, system_name=system_name, echo=typer.echo)
    for entry in ranked:
        typer.echo(_render_row(entry))
    if output is not None:
        write_json(output, standings_to_list(ranked))
        typer.echo(f"wrote standings={output}")


@app.command()
def score(
    parsed_json: Annotated[
        Path,
        typer.Argument(help="Replay parser output (JSON with a PlayerData array)."),
    ],
    config_dir: Annotated[
        Path,
        typer.Option("--config-dir", help="Directory of scoring TOML files."),
    ] = DEFAULT_CONFIG_DIR,
    config_name: Annotated[
        str | None,
        typer.Option("--config-name", help="Scoring system name (defaults to 'default')."),
    ] = None,
    match_name: Annotated[
        str | None,
        typer.Option("--match-name", help="Label for this match (defaults to the file stem)."),
    ] = None,
    block_name: Annotated[
        str | None,
        typer.Option("--block-name", help="Optional tournament block/group label."),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", help="Write the per-match result JSON to this path."),
    ] = None,
    db_url: Annotated[
        str | None,
        typer.Option("--db-url", help=f"Also store the match in this database (e.g. {DEFAULT_DB_URL})."),
    ] = None,
) -> None:
    """Score one parsed match and print its ranked teams."""
    try:
        system = get_scoring_system(config_dir, config_name)
        result = score_match(
            read_json(parsed_json),
            system.parameters,
            match_name=match_name or parsed_json.stem,
            block_name=block_name,
        )
    except (OSError, ValueError) as exc:
        raise typer.BadParameter(str(exc)) from exc

    if output is not None:
        write_json(output, match_result_to_dict(result))
        typer.echo(f"wrote match_result={output}")

    if db_url is not None:
        engine = create_db_engine(db_url)
        MATCH_SCORE_REPOSITORY.ensure_schema(engine)
        session_factory = create_session_factory(engine)
        with session_factory() as session:
            try:
                db_system = MATCH_SCORE_REPOSITORY.upsert_system(
                    session,
                    name=system.name,
                    description=system.description,
                    config_json=system.as_config_json(),
                )
                match_order = MATCH_SCORE_REPOSITORY.replace_match(
                    session, result, scoring_system_id=db_system.id
                )
                session.commit()
            except Exception:
                session.rollback()
                raise
        typer.echo(f"stored match={result.match_name} order={match_order} system={system.name}")

    _print_standings([result], system.name, None)


@app.command()
def merge(
    result_files: Annotated[
        list[Path],
        typer.Argument(help="Per-match result JSON files, in chronological order."),
    ],
    output: Annotated[
        Path | None,
        typer.Option("--output", help="Write the ranked standings JSON to this path."),
    ] = None,
) -> None:
    """Merge stored match results by roster and print cumulative standings."""
    try:
        results = []
        for path in result_files:
            result = match_result_from_dict(read_json(path))
            if result.match_name is None:
                result = MatchResult(scores=result.scores, match_name=path.stem, block_name=result.block_name)
            results.append(result)
        _print_standings(results, None, output)
    except (OSError, ValueError) as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.command()
def show(
    system_name: Annotated[
        str,
        typer.Option("--system-name", help="Scoring system whose stored matches to rank."),
    ] = "default",
    db_url: Annotated[
        str,
        typer.Option("--db-url", help="Database URL."),
    ] = DEFAULT_DB_URL,
    output: Annotated[
        Path | None,
        typer.Option("--output", help="Write the ranked standings JSON to this path."),
    ] = None,
) -> None:
    """Print cumulative standings for every match stored under one scoring system."""
    engine = create_db_engine(db_url)
    MATCH_SCORE_REPOSITORY.ensure_schema(engine)
    session_factory = create_session_factory(engine)
    with session_factory() as session:
        db_system = MATCH_SCORE_REPOSITORY.get_system(session, system_name)
        if db_system is None:
            typer.echo(f"No stored matches for system='{system_name}'.")
            return
        results = MATCH_SCORE_REPOSITORY.fetch_match_results(session, scoring_system_id=db_system.id)

    if not results:
        typer.echo(f"No stored matches for system='{system_name}'.")
        return
    _print_standings(results, system_name, output)


@app.command()
def list_systems(
    config_dir: Annotated[
        Path,
        typer.Option("--config-dir", help="Directory of scoring TOML files."),
    ] = DEFAULT_CONFIG_DIR,
) -> None:
    """Print every scoring system defined in the config directory."""
    try:
        systems = load_scoring_system_configs(config_dir)
    except (FileNotFoundError, ValueError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--config-dir") from exc

    for system in systems:
        params = system.parameters
        cap = "none" if params.kill_cap is None else str(params.kill_cap)
        typer.echo(
            f"{system.name} config={system.file_path.name} "
            f"placements={len(params.points)} kill_cap={cap} "
            f"kill_multiplier={params.kill_point_multiplier} "
            f"include_bots={params.include_bots}"
        )


if __name__ == "__main__":
    app()
