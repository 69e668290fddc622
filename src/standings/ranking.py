"""Official tournament ordering over team records."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from functools import cmp_to_key

from standings.common import MergedTeamRecord, TeamMatchScore
from standings.decimal_utils import compare, decimal_max, decimal_sum, divide, to_decimal

TeamRecord = TeamMatchScore | MergedTeamRecord


@dataclass(frozen=True)
class RankingSummary:
    """Derived values the comparator orders by; computed once per record."""

    total_score: Decimal
    victory_count: int
    match_count: int
    average_kills: Decimal
    average_placement: Decimal
    total_alive_time: Decimal
    first_team_id: int
    identity_key: tuple[str, ...]


@dataclass(frozen=True)
class RankedTeam:
    rank: int
    team: TeamRecord
    summary: RankingSummary


def summarize(record: TeamRecord) -> RankingSummary:
    """Build the comparison summary for a single-match score or a merged record.

    A team is alive in a match for as long as its last surviving member, so the
    alive time is the per-match maximum summed over contributing matches.
    """
    if isinstance(record, TeamMatchScore):
        return RankingSummary(
            total_score=to_decimal(record.total_score),
            victory_count=1 if record.is_victory else 0,
            match_count=1,
            average_kills=to_decimal(record.kills_for_scoring),
            average_placement=to_decimal(record.placement),
            total_alive_time=decimal_max(record.individual_survival_times),
            first_team_id=record.team_id,
            identity_key=record.identity_key,
        )

    match_count = record.match_count
    if match_count == 0:
        raise ValueError(f"Merged record {record.identity_key} has no match contributions")

    return RankingSummary(
        total_score=to_decimal(record.total_score),
        victory_count=record.victory_count,
        match_count=match_count,
        average_kills=divide(record.kills_for_scoring, match_count),
        average_placement=divide(sum(record.placements), match_count),
        total_alive_time=decimal_sum(
            decimal_max(contribution.survival_times) for contribution in record.contributions
        ),
        first_team_id=record.first_team_id,
        identity_key=record.identity_key,
    )


def _int_compare(left: int, right: int) -> int:
    return (left > right) - (left < right)


def compare_summaries(left: RankingSummary, right: RankingSummary) -> int:
    """Negative when ``left`` ranks above ``right``.

    Each criterion is consulted only when every earlier one is exactly equal.
    """
    # 1. cumulative points
    result = compare(right.total_score, left.total_score)
    if result:
        return result
    # 2. victory royales
    result = _int_compare(right.victory_count, left.victory_count)
    if result:
        return result
    # 3. average eliminations
    result = compare(right.average_kills, left.average_kills)
    if result:
        return result
    # 4. average placement, lower is better
    result = compare(left.average_placement, right.average_placement)
    if result:
        return result
    # 5. total alive time
    result = compare(right.total_alive_time, left.total_alive_time)
    if result:
        return result
    # 6. team index in the earliest contributing match
    result = _int_compare(left.first_team_id, right.first_team_id)
    if result:
        return result
    # Keeps the order independent of input order when two rosters share an index.
    return (left.identity_key > right.identity_key) - (left.identity_key < right.identity_key)


def rank_teams(records: Sequence[TeamRecord]) -> list[RankedTeam]:
    """Return records in official order, rank 1 first, without mutating the input."""
    summarized = [(record, summarize(record)) for record in records]
    summarized.sort(key=cmp_to_key(lambda left, right: compare_summaries(left[1], right[1])))
    return [
        RankedTeam(rank=rank, team=record, summary=summary)
        for rank, (record, summary) in enumerate(summarized, start=1)
    ]


__all__ = ["RankedTeam", "RankingSummary", "TeamRecord", "compare_summaries", "rank_teams", "summarize"]
