"""End-to-end scoring: parser output to match results to ranked standings."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from standings.aggregator import ScoringParameters, aggregate_match, validate_parameters
from standings.common import MatchResult
from standings.merger import merge_match_results
from standings.normalizer import normalize_players, parse_player_rows
from standings.ranking import RankedTeam, rank_teams

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StandingsSummary:
    """Outcome of one standings build."""

    system_name: str | None
    match_count: int
    team_count: int
    leader: tuple[str, ...] | None


def score_match(
    payload: Mapping[str, Any] | Sequence[Mapping[str, Any]],
    params: ScoringParameters,
    *,
    match_name: str | None = None,
    block_name: str | None = None,
) -> MatchResult:
    """Score one parsed match.

    Configuration is checked before the payload is read, so a bad points table
    never produces partial output. A malformed payload raises ``ShapeError`` for
    this match only.
    """
    validate_parameters(params)
    rows = parse_player_rows(payload)
    players = normalize_players(
        rows,
        include_bots=params.include_bots,
        sort_by_placement=params.sort_by_placement,
    )
    scores = aggregate_match(players, params)
    logger.debug("scored match=%s players=%d teams=%d", match_name, len(players), len(scores))
    return MatchResult(scores=tuple(scores), match_name=match_name, block_name=block_name)


def build_standings(results: Sequence[MatchResult]) -> list[RankedTeam]:
    """Rank a single match directly, or merge several matches by roster first."""
    if not results:
        return []
    if len(results) == 1:
        return rank_teams(results[0].scores)
    return rank_teams(merge_match_results(results))


def run_standings(
    results: Sequence[MatchResult],
    *,
    system_name: str | None = None,
    echo: Callable[[str], None] | None = None,
) -> tuple[list[RankedTeam], StandingsSummary]:
    """Build standings and report a one-line summary through ``echo``."""
    ranked = build_standings(results)
    leader = ranked[0].summary.identity_key if ranked else None
    summary = StandingsSummary(
        system_name=system_name,
        match_count=len(results),
        team_count=len(ranked),
        leader=leader,
    )
    if echo is not None:
        echo(
            f"system={system_name} "
            f"matches={summary.match_count} "
            f"teams={summary.team_count} "
            f"leader={','.join(leader) if leader else '-'}"
        )
    return ranked, summary


__all__ = ["StandingsSummary", "build_standings", "run_standings", "score_match"]
