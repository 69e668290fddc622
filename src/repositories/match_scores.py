"""Persistence of per-match team scores, grouped by scoring system."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import delete, func, insert, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from models import Base, ScoringSystem, TeamMatchScoreRow
from standings.common import MatchResult, TeamMatchScore
from standings.decimal_utils import format_decimal, to_decimal
from standings.errors import ShapeError
from standings.serialization import team_score_from_dict


def _score_to_row(
    score: TeamMatchScore,
    *,
    scoring_system_id: int,
    match_name: str,
    match_order: int,
    block_name: str | None,
) -> dict[str, Any]:
    return {
        "scoring_system_id": scoring_system_id,
        "match_name": match_name,
        "match_order": match_order,
        "block_name": block_name,
        "team_id": score.team_id,
        "placement": score.placement,
        "kills_for_scoring": score.kills_for_scoring,
        "kills_uncapped": score.kills_uncapped,
        "kill_points": format_decimal(to_decimal(score.kill_points)),
        "placement_points": format_decimal(to_decimal(score.placement_points)),
        "total_score": format_decimal(to_decimal(score.total_score)),
        "is_victory": score.is_victory,
        "members_json": {
            "names": list(score.member_names),
            "ids": list(score.member_ids),
            "kills": list(score.individual_kills),
            "survival_times": [format_decimal(value) for value in score.individual_survival_times],
        },
    }


def _row_to_score(row: TeamMatchScoreRow) -> TeamMatchScore:
    members = row.members_json if isinstance(row.members_json, dict) else {}
    return team_score_from_dict(
        {
            "placement": row.placement,
            "teamId": row.team_id,
            "killsForScoring": row.kills_for_scoring,
            "killsUncapped": row.kills_uncapped,
            "killPoints": row.kill_points,
            "placementPoints": row.placement_points,
            "totalScore": row.total_score,
            "isVictory": row.is_victory,
            "memberNames": members.get("names"),
            "memberIds": members.get("ids"),
            "individualKills": members.get("kills"),
            "individualSurvivalTimes": members.get("survival_times"),
        }
    )


class MatchScoreRepository:
    """Store and reload match results so standings can be rebuilt across sessions."""

    def ensure_schema(self, engine: Engine) -> None:
        """Create required tables and indexes when missing."""
        Base.metadata.create_all(
            engine,
            tables=[ScoringSystem.__table__, TeamMatchScoreRow.__table__],
            checkfirst=True,
        )

    def upsert_system(
        self,
        session: Session,
        *,
        name: str,
        description: str | None,
        config_json: dict[str, Any],
    ) -> ScoringSystem:
        """Create or update the scoring-system metadata row."""
        system = session.execute(
            select(ScoringSystem).where(ScoringSystem.name == name)
        ).scalar_one_or_none()
        if system is None:
            system = ScoringSystem(name=name, description=description, config_json=config_json)
            session.add(system)
        else:
            system.description = description
            system.config_json = config_json
            system.updated_at = datetime.now(UTC).replace(tzinfo=None)
        session.flush()
        return system

    def get_system(self, session: Session, name: str) -> ScoringSystem | None:
        return session.execute(
            select(ScoringSystem).where(ScoringSystem.name == name)
        ).scalar_one_or_none()

    def replace_match(self, session: Session, result: MatchResult, *, scoring_system_id: int) -> int:
        """Store one match, replacing any earlier rows under the same match name.

        A new match is appended after every stored match; a replaced match keeps
        its original position. Returns the match order used.
        """
        if not result.match_name:
            raise ShapeError("A stored match needs a match name")

        existing_order = session.scalar(
            select(func.min(TeamMatchScoreRow.match_order)).where(
                TeamMatchScoreRow.scoring_system_id == scoring_system_id,
                TeamMatchScoreRow.match_name == result.match_name,
            )
        )
        if existing_order is None:
            last_order = session.scalar(
                select(func.max(TeamMatchScoreRow.match_order)).where(
                    TeamMatchScoreRow.scoring_system_id == scoring_system_id
                )
            )
            match_order = 1 if last_order is None else int(last_order) + 1
        else:
            match_order = int(existing_order)

        session.execute(
            delete(TeamMatchScoreRow).where(
                TeamMatchScoreRow.scoring_system_id == scoring_system_id,
                TeamMatchScoreRow.match_name == result.match_name,
            )
        )
        if result.scores:
            payload = [
                _score_to_row(
                    score,
                    scoring_system_id=scoring_system_id,
                    match_name=result.match_name,
                    match_order=match_order,
                    block_name=result.block_name,
                )
                for score in result.scores
            ]
            session.execute(insert(TeamMatchScoreRow), payload)
        return match_order

    def fetch_match_results(self, session: Session, *, scoring_system_id: int) -> list[MatchResult]:
        """Reload stored matches in the order they were first stored."""
        rows: Sequence[TeamMatchScoreRow] = session.execute(
            select(TeamMatchScoreRow)
            .where(TeamMatchScoreRow.scoring_system_id == scoring_system_id)
            .order_by(TeamMatchScoreRow.match_order, TeamMatchScoreRow.id)
        ).scalars().all()

        grouped: dict[str, list[TeamMatchScoreRow]] = {}
        for row in rows:
            grouped.setdefault(row.match_name, []).append(row)

        return [
            MatchResult(
                scores=tuple(_row_to_score(row) for row in match_rows),
                match_name=match_name,
                block_name=match_rows[0].block_name,
            )
            for match_name, match_rows in grouped.items()
        ]

    def count_matches(self, session: Session, *, scoring_system_id: int) -> int:
        result = session.scalar(
            select(func.count(func.distinct(TeamMatchScoreRow.match_name))).where(
                TeamMatchScoreRow.scoring_system_id == scoring_system_id
            )
        )
        return int(result or 0)


MATCH_SCORE_REPOSITORY = MatchScoreRepository()
ensure_match_score_schema = MATCH_SCORE_REPOSITORY.ensure_schema


__all__ = ["MATCH_SCORE_REPOSITORY", "MatchScoreRepository", "ensure_match_score_schema"]
