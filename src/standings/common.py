"""Shared types for match scoring, roster merging and ranking."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from standings.decimal_utils import ZERO


@dataclass(frozen=True)
class RawPlayerRow:
    """One player row as delivered by the replay parser, before normalization."""

    team_index: int
    placement: int
    kills: int
    team_kills: int
    death_time: Decimal | None
    player_id: str
    player_name: str
    platform: str | None = None
    is_bot: bool = False


@dataclass(frozen=True)
class PlayerRecord:
    """Canonical per-player payload used by the team aggregator."""

    team_id: int
    placement: int
    kills: int
    team_kills: int
    survival_time: Decimal
    player_id: str
    player_name: str
    platform: str | None = None
    is_bot: bool = False


@dataclass(frozen=True)
class TeamMatchScore:
    """Score of one team in one match."""

    placement: int
    team_id: int
    kills_for_scoring: int
    kills_uncapped: int
    kill_points: Decimal
    placement_points: Decimal
    total_score: Decimal
    is_victory: bool
    member_names: tuple[str, ...] = ()
    member_ids: tuple[str, ...] = ()
    individual_kills: tuple[int, ...] = ()
    individual_survival_times: tuple[Decimal, ...] = ()

    @property
    def identity_key(self) -> tuple[str, ...]:
        """Roster identity across matches: the sorted member ids."""
        return tuple(sorted(self.member_ids))


@dataclass(frozen=True)
class MatchResult:
    """All team scores of one match, labelled for cross-match merging."""

    scores: tuple[TeamMatchScore, ...]
    match_name: str | None = None
    block_name: str | None = None


@dataclass(frozen=True)
class MatchContribution:
    """One match's slice of a merged team record."""

    match_name: str
    team_id: int
    placement: int
    total_score: Decimal
    survival_times: tuple[Decimal, ...]


@dataclass
class MergedTeamRecord:
    """Cumulative record of one roster across every match it played."""

    identity_key: tuple[str, ...]
    total_score: Decimal = ZERO
    placement_points: Decimal = ZERO
    kills_for_scoring: int = 0
    kills_uncapped: int = 0
    kill_points: Decimal = ZERO
    victory_count: int = 0
    member_names: tuple[str, ...] = ()
    block_names: list[str] = field(default_factory=list)
    contributions: list[MatchContribution] = field(default_factory=list)

    @property
    def match_count(self) -> int:
        return len(self.contributions)

    @property
    def match_names(self) -> list[str]:
        return [contribution.match_name for contribution in self.contributions]

    @property
    def placements(self) -> list[int]:
        return [contribution.placement for contribution in self.contributions]

    @property
    def first_team_id(self) -> int:
        if not self.contributions:
            raise ValueError(f"Merged record {self.identity_key} has no match contributions")
        return self.contributions[0].team_id


__all__ = [
    "MatchContribution",
    "MatchResult",
    "MergedTeamRecord",
    "PlayerRecord",
    "RawPlayerRow",
    "TeamMatchScore",
]
