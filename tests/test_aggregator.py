"""Tests for single-match team scoring."""

from __future__ import annotations

from decimal import Decimal

import pytest

from standings.aggregator import ScoringParameters, aggregate_match, validate_parameters
from standings.common import PlayerRecord
from standings.errors import ConfigurationError, IdentityError, ShapeError


def _player(
    player_id: str,
    *,
    team: int,
    placement: int,
    team_kills: int,
    kills: int = 0,
    survival: str = "100",
) -> PlayerRecord:
    return PlayerRecord(
        team_id=team,
        placement=placement,
        kills=kills,
        team_kills=team_kills,
        survival_time=Decimal(survival),
        player_id=player_id,
        player_name=f"name-{player_id}",
    )


def test_two_team_match_scores() -> None:
    params = ScoringParameters(points={1: 10, 2: 5})
    scores = aggregate_match(
        [
            _player("a1", team=1, placement=1, team_kills=3, kills=2),
            _player("a2", team=1, placement=1, team_kills=3, kills=1),
            _player("b1", team=2, placement=2, team_kills=1, kills=1),
        ],
        params,
    )
    by_team = {score.team_id: score for score in scores}

    team_a = by_team[1]
    assert team_a.placement_points == 10
    assert team_a.kill_points == 3
    assert team_a.total_score == 13
    assert team_a.is_victory is True
    assert team_a.member_ids == ("a1", "a2")
    assert team_a.member_names == ("name-a1", "name-a2")
    assert team_a.individual_kills == (2, 1)

    team_b = by_team[2]
    assert team_b.total_score == 6
    assert team_b.is_victory is False


def test_teams_are_returned_in_first_seen_order() -> None:
    params = ScoringParameters(points={1: 1})
    scores = aggregate_match(
        [
            _player("c", team=9, placement=3, team_kills=0),
            _player("a", team=4, placement=1, team_kills=0),
            _player("c2", team=9, placement=3, team_kills=0),
        ],
        params,
    )
    assert [score.team_id for score in scores] == [9, 4]
    assert scores[0].member_ids == ("c", "c2")


def test_kill_cap_limits_scoring_kills_only() -> None:
    params = ScoringParameters(points={1: 10}, kill_cap=5, kill_point_multiplier=2)
    (score,) = aggregate_match([_player("a", team=1, placement=1, team_kills=8)], params)
    assert score.kills_for_scoring == 5
    assert score.kills_uncapped == 8
    assert score.kill_points == 10
    assert score.total_score == 20


def test_zero_kill_cap_is_allowed() -> None:
    params = ScoringParameters(points={1: 10}, kill_cap=0)
    (score,) = aggregate_match([_player("a", team=1, placement=1, team_kills=8)], params)
    assert score.kill_points == 0
    assert score.total_score == 10


def test_missing_placement_points_default_to_zero() -> None:
    params = ScoringParameters(points={1: 10})
    (score,) = aggregate_match([_player("z", team=5, placement=40, team_kills=0)], params)
    assert score.placement_points == 0
    assert score.total_score == 0


def test_total_score_identity_holds_for_every_team() -> None:
    params = ScoringParameters(points={1: 12, 2: 9, 3: 7}, kill_cap=4, kill_point_multiplier=3)
    players = [
        _player(f"p{team}", team=team, placement=team, team_kills=team * 2)
        for team in range(1, 8)
    ]
    for score in aggregate_match(players, params):
        assert score.total_score == score.placement_points + score.kill_points
        assert score.total_score >= 0


def test_survival_times_stay_exact() -> None:
    params = ScoringParameters(points={1: 1})
    (score,) = aggregate_match(
        [
            _player("a", team=1, placement=1, team_kills=0, survival="120.500000001"),
            _player("b", team=1, placement=1, team_kills=0, survival="99.1"),
        ],
        params,
    )
    assert score.individual_survival_times == (Decimal("120.500000001"), Decimal("99.1"))


def test_conflicting_placement_within_team_raises() -> None:
    params = ScoringParameters(points={1: 10})
    with pytest.raises(ShapeError, match="conflicting placements"):
        aggregate_match(
            [
                _player("a", team=1, placement=1, team_kills=0),
                _player("b", team=1, placement=2, team_kills=0),
            ],
            params,
        )


def test_conflicting_team_kills_within_team_raises() -> None:
    params = ScoringParameters(points={1: 10})
    with pytest.raises(ShapeError, match="conflicting team kills"):
        aggregate_match(
            [
                _player("a", team=1, placement=1, team_kills=3),
                _player("b", team=1, placement=1, team_kills=4),
            ],
            params,
        )


def test_player_in_two_teams_raises_identity_error() -> None:
    params = ScoringParameters(points={1: 10})
    with pytest.raises(IdentityError, match="appears in teams"):
        aggregate_match(
            [
                _player("a", team=1, placement=1, team_kills=0),
                _player("a", team=2, placement=2, team_kills=0),
            ],
            params,
        )


def test_duplicate_player_within_team_raises_identity_error() -> None:
    params = ScoringParameters(points={1: 10})
    with pytest.raises(IdentityError, match="twice"):
        aggregate_match(
            [
                _player("a", team=1, placement=1, team_kills=0),
                _player("a", team=1, placement=1, team_kills=0),
            ],
            params,
        )


@pytest.mark.parametrize(
    ("params", "message"),
    [
        (ScoringParameters(points={}), "points table is required"),
        (ScoringParameters(points={1: 10}, kill_cap=-1), "kill_cap must be an integer >= 0"),
        (ScoringParameters(points={1: 10}, kill_point_multiplier=-2), "kill_point_multiplier"),
        (ScoringParameters(points={1: 10}, kill_point_multiplier="half"), "kill_point_multiplier"),
        (ScoringParameters(points={1: 10}, kill_point_multiplier=True), "kill_point_multiplier"),
        (ScoringParameters(points={0: 10}), "placement must be an integer >= 1"),
        (ScoringParameters(points={1: -3}), "must be a number >= 0"),
        (ScoringParameters(points={1: None}), "must be a number >= 0"),  # type: ignore[dict-item]
    ],
)
def test_invalid_configuration_raises_before_aggregation(params: ScoringParameters, message: str) -> None:
    with pytest.raises(ConfigurationError, match=message):
        validate_parameters(params)
    with pytest.raises(ConfigurationError, match=message):
        aggregate_match([_player("a", team=1, placement=1, team_kills=0)], params)


def test_configuration_error_wins_over_shape_error() -> None:
    bad_rows = [
        _player("a", team=1, placement=1, team_kills=0),
        _player("b", team=1, placement=2, team_kills=0),
    ]
    with pytest.raises(ConfigurationError):
        aggregate_match(bad_rows, ScoringParameters(points={}))


def test_fractional_multiplier_scores_exactly() -> None:
    params = ScoringParameters(points={1: 10, 2: 6.5}, kill_point_multiplier=0.5)
    scores = aggregate_match(
        [
            _player("a", team=1, placement=1, team_kills=3),
            _player("b", team=2, placement=2, team_kills=1),
        ],
        params,
    )
    by_team = {score.team_id: score for score in scores}

    assert by_team[1].kill_points == Decimal("1.5")
    assert by_team[1].total_score == Decimal("11.5")
    assert by_team[2].placement_points == Decimal("6.5")
    assert by_team[2].kill_points == Decimal("0.5")
    assert by_team[2].total_score == Decimal("7.0")


def test_repeating_fraction_multiplier_keeps_total_identity() -> None:
    params = ScoringParameters(points={1: Decimal("0.1")}, kill_point_multiplier=Decimal("0.2"))
    (score,) = aggregate_match([_player("a", team=1, placement=1, team_kills=7)], params)

    assert score.kill_points == Decimal("1.4")
    assert score.total_score == Decimal("1.5")
    assert score.total_score == score.placement_points + score.kill_points
