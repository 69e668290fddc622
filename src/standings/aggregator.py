"""Single-match team scoring."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal

from standings.common import PlayerRecord, TeamMatchScore
from standings.decimal_utils import ZERO, DecimalLike, add, multiply, to_decimal
from standings.errors import ConfigurationError, IdentityError, ShapeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoringParameters:
    """Points table and kill settings.

    Point values and the multiplier may be fractional; they are read as exact
    decimals, so every score below is exact too.
    """

    points: Mapping[int, DecimalLike] = field(default_factory=dict)
    kill_cap: int | None = None
    kill_point_multiplier: DecimalLike = 1
    include_bots: bool = True
    sort_by_placement: bool = True

    def placement_points(self, placement: int) -> Decimal:
        return to_decimal(self.points.get(placement, 0))

    def scoring_kills(self, team_kills: int) -> int:
        if self.kill_cap is None:
            return team_kills
        return min(team_kills, self.kill_cap)

    def kill_points(self, kills_for_scoring: int) -> Decimal:
        return multiply(kills_for_scoring, self.kill_point_multiplier)


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _non_negative_decimal(value: object, label: str) -> Decimal:
    try:
        result = to_decimal(value)  # type: ignore[arg-type]
    except ShapeError as exc:
        raise ConfigurationError(f"{label} must be a number >= 0, got {value!r}") from exc
    if result < ZERO:
        raise ConfigurationError(f"{label} must be a number >= 0, got {value!r}")
    return result


def validate_parameters(params: ScoringParameters) -> None:
    """Reject unusable scoring configuration before anything is aggregated."""
    if not params.points:
        raise ConfigurationError("points table is required and must not be empty")
    for placement, points in params.points.items():
        if not _is_int(placement) or placement < 1:
            raise ConfigurationError(f"points table placement must be an integer >= 1, got {placement!r}")
        _non_negative_decimal(points, f"points for placement {placement}")
    if params.kill_cap is not None and (not _is_int(params.kill_cap) or params.kill_cap < 0):
        raise ConfigurationError(f"kill_cap must be an integer >= 0, got {params.kill_cap!r}")
    _non_negative_decimal(params.kill_point_multiplier, "kill_point_multiplier")


@dataclass
class _TeamAccumulator:
    first: PlayerRecord
    member_names: list[str] = field(default_factory=list)
    member_ids: list[str] = field(default_factory=list)
    individual_kills: list[int] = field(default_factory=list)
    individual_survival_times: list[Decimal] = field(default_factory=list)

    def add(self, player: PlayerRecord) -> None:
        if player.placement != self.first.placement:
            raise ShapeError(
                f"team {player.team_id} has conflicting placements "
                f"({self.first.placement} vs {player.placement})"
            )
        if player.team_kills != self.first.team_kills:
            raise ShapeError(
                f"team {player.team_id} has conflicting team kills "
                f"({self.first.team_kills} vs {player.team_kills})"
            )
        if player.player_id in self.member_ids:
            raise IdentityError(f"team {player.team_id} lists player {player.player_id!r} twice")

        self.member_names.append(player.player_name)
        self.member_ids.append(player.player_id)
        self.individual_kills.append(player.kills)
        self.individual_survival_times.append(player.survival_time)

    def to_score(self, params: ScoringParameters) -> TeamMatchScore:
        placement = self.first.placement
        kills_for_scoring = params.scoring_kills(self.first.team_kills)
        kill_points = params.kill_points(kills_for_scoring)
        placement_points = params.placement_points(placement)
        return TeamMatchScore(
            placement=placement,
            team_id=self.first.team_id,
            kills_for_scoring=kills_for_scoring,
            kills_uncapped=self.first.team_kills,
            kill_points=kill_points,
            placement_points=placement_points,
            total_score=add(placement_points, kill_points),
            is_victory=placement == 1,
            member_names=tuple(self.member_names),
            member_ids=tuple(self.member_ids),
            individual_kills=tuple(self.individual_kills),
            individual_survival_times=tuple(self.individual_survival_times),
        )


def aggregate_match(players: Sequence[PlayerRecord], params: ScoringParameters) -> list[TeamMatchScore]:
    """Group one match's players by team id and score each team.

    Teams come back in first-seen order; ordering is left to the ranking step.
    """
    validate_parameters(params)

    teams: dict[int, _TeamAccumulator] = {}
    team_of_player: dict[str, int] = {}
    for player in players:
        previous_team = team_of_player.setdefault(player.player_id, player.team_id)
        if previous_team != player.team_id:
            raise IdentityError(
                f"player {player.player_id!r} appears in teams {previous_team} and {player.team_id}"
            )

        accumulator = teams.get(player.team_id)
        if accumulator is None:
            accumulator = _TeamAccumulator(first=player)
            teams[player.team_id] = accumulator
        accumulator.add(player)

    scores = [accumulator.to_score(params) for accumulator in teams.values()]
    logger.debug("aggregated players=%d teams=%d", len(players), len(scores))
    return scores


__all__ = ["ScoringParameters", "aggregate_match", "validate_parameters"]
