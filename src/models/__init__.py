"""ORM models."""

from models.base import Base
from models.scoring_system import ScoringSystem
from models.team_match_score import TeamMatchScoreRow

__all__ = ["Base", "ScoringSystem", "TeamMatchScoreRow"]
