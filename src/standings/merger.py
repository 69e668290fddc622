"""Cross-match merging of team scores keyed by roster."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from standings.common import MatchContribution, MatchResult, MergedTeamRecord, TeamMatchScore
from standings.decimal_utils import add, to_decimal
from standings.errors import ShapeError

logger = logging.getLogger(__name__)


def default_match_name(position: int) -> str:
    return f"match-{position}"


def resolve_match_names(results: Sequence[MatchResult]) -> list[str]:
    """Return one unique label per match, filling unlabelled matches by position."""
    names = [
        result.match_name or default_match_name(position)
        for position, result in enumerate(results, start=1)
    ]
    seen: set[str] = set()
    for name in names:
        if name in seen:
            raise ShapeError(f"Duplicate match name {name!r} in merge input")
        seen.add(name)
    return names


def _contribution(score: TeamMatchScore, match_name: str) -> MatchContribution:
    return MatchContribution(
        match_name=match_name,
        team_id=score.team_id,
        placement=score.placement,
        total_score=to_decimal(score.total_score),
        survival_times=score.individual_survival_times,
    )


def merge_match_results(results: Sequence[MatchResult]) -> list[MergedTeamRecord]:
    """Combine per-match team scores into one cumulative record per roster.

    Two teams are the same team iff their member-id sets are identical; the
    in-match team index plays no part in identity. Results must be given in
    chronological order, which fixes the order of each record's contributions.
    """
    match_names = resolve_match_names(results)
    records: dict[tuple[str, ...], MergedTeamRecord] = {}

    for result, match_name in zip(results, match_names):
        for score in result.scores:
            key = score.identity_key
            record = records.get(key)
            if record is None:
                record = MergedTeamRecord(identity_key=key, member_names=score.member_names)
                records[key] = record

            record.total_score = add(record.total_score, score.total_score)
            record.placement_points = add(record.placement_points, score.placement_points)
            record.kills_for_scoring += score.kills_for_scoring
            record.kills_uncapped += score.kills_uncapped
            record.kill_points = add(record.kill_points, score.kill_points)
            if score.is_victory:
                record.victory_count += 1
            record.contributions.append(_contribution(score, match_name))
            if result.block_name and result.block_name not in record.block_names:
                record.block_names.append(result.block_name)

    logger.debug("merged matches=%d rosters=%d", len(results), len(records))
    return list(records.values())


__all__ = ["default_match_name", "merge_match_results", "resolve_match_names"]
