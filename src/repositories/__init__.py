"""Database repository helpers."""

from repositories.match_scores import (
    MATCH_SCORE_REPOSITORY,
    MatchScoreRepository,
    ensure_match_score_schema,
)

__all__ = ["MATCH_SCORE_REPOSITORY", "MatchScoreRepository", "ensure_match_score_schema"]
