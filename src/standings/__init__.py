"""Battle-royale tournament scoring, roster merging and official ranking."""

from standings.aggregator import ScoringParameters, aggregate_match, validate_parameters
from standings.common import (
    MatchContribution,
    MatchResult,
    MergedTeamRecord,
    PlayerRecord,
    RawPlayerRow,
    TeamMatchScore,
)
from standings.errors import ConfigurationError, IdentityError, ShapeError, StandingsError
from standings.merger import merge_match_results
from standings.normalizer import normalize_players, parse_player_rows
from standings.pipeline import build_standings, score_match
from standings.ranking import RankedTeam, RankingSummary, rank_teams, summarize

__all__ = [
    "ConfigurationError",
    "IdentityError",
    "MatchContribution",
    "MatchResult",
    "MergedTeamRecord",
    "PlayerRecord",
    "RankedTeam",
    "RankingSummary",
    "RawPlayerRow",
    "ScoringParameters",
    "ShapeError",
    "StandingsError",
    "TeamMatchScore",
    "aggregate_match",
    "build_standings",
    "merge_match_results",
    "normalize_players",
    "parse_player_rows",
    "rank_teams",
    "score_match",
    "summarize",
    "validate_parameters",
]
