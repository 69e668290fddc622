"""team_match_scores table model."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, JSONType


class TeamMatchScoreRow(Base):
    """One team's score in one stored match.

    Member lists live in ``members_json``. Points and survival times are kept as
    decimal strings so they read back exactly.
    """

    __tablename__ = "team_match_scores"
    __table_args__ = (
        UniqueConstraint(
            "scoring_system_id",
            "match_name",
            "team_id",
            name="uq_team_match_scores_system_match_team",
        ),
        CheckConstraint("placement >= 1", name="ck_team_match_scores_placement"),
        Index("idx_team_match_scores_system_order", "scoring_system_id", "match_order"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    scoring_system_id: Mapped[int] = mapped_column(ForeignKey("scoring_systems.id"), nullable=False)
    match_name: Mapped[str] = mapped_column(String(128), nullable=False)
    match_order: Mapped[int] = mapped_column(Integer, nullable=False)
    block_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    team_id: Mapped[int] = mapped_column(Integer, nullable=False)
    placement: Mapped[int] = mapped_column(Integer, nullable=False)
    kills_for_scoring: Mapped[int] = mapped_column(Integer, nullable=False)
    kills_uncapped: Mapped[int] = mapped_column(Integer, nullable=False)
    kill_points: Mapped[str] = mapped_column(String(64), nullable=False)
    placement_points: Mapped[str] = mapped_column(String(64), nullable=False)
    total_score: Mapped[str] = mapped_column(String(64), nullable=False)
    is_victory: Mapped[bool] = mapped_column(Boolean, nullable=False)
    members_json: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )
