"""Map one match's parser rows onto canonical player records."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from standings.common import PlayerRecord, RawPlayerRow
from standings.decimal_utils import SURVIVAL_EPSILON, ZERO, add, decimal_max, to_decimal
from standings.errors import IdentityError, ShapeError

logger = logging.getLogger(__name__)

PLAYER_DATA_KEY = "PlayerData"


def parse_player_rows(payload: Mapping[str, Any] | Sequence[Mapping[str, Any]]) -> list[RawPlayerRow]:
    """Read the replay parser's ``PlayerData`` rows into ``RawPlayerRow`` objects.

    Accepts either the full parser document or the bare player list.
    """
    if isinstance(payload, Mapping):
        if PLAYER_DATA_KEY not in payload:
            raise ShapeError(f"Parser document has no '{PLAYER_DATA_KEY}' entry")
        rows = payload[PLAYER_DATA_KEY]
    else:
        rows = payload

    if isinstance(rows, (str, bytes)) or not isinstance(rows, Sequence):
        raise ShapeError(f"Expected a list of player rows, got {type(rows).__name__}")

    return [_parse_row(row, index) for index, row in enumerate(rows)]


def _parse_row(row: Any, index: int) -> RawPlayerRow:
    if not isinstance(row, Mapping):
        raise ShapeError(f"row {index}: expected an object, got {type(row).__name__}")

    player_id = require_player_id(row.get("EpicId"), f"row {index}: EpicId")

    death_value = row.get("DeathTimeDouble")
    death_time = None if death_value is None else to_decimal(death_value)
    if death_time is not None and death_time < ZERO:
        raise ShapeError(f"row {index}: DeathTimeDouble must be >= 0, got {death_value!r}")

    player_name = row.get("PlayerName")
    platform = row.get("Platform")

    return RawPlayerRow(
        team_index=_required_int(row, "TeamIndex", index),
        placement=_required_int(row, "Placement", index, minimum=1),
        kills=_count(row, "Kills", index),
        team_kills=_count(row, "TeamKills", index),
        death_time=death_time,
        player_id=player_id,
        player_name="" if player_name is None else str(player_name),
        platform=None if platform is None else str(platform),
        is_bot=_required_bool(row, "IsBot", index),
    )


def require_player_id(value: Any, label: str) -> str:
    """Return a usable player identity, rejecting null, blank and non-scalar ids."""
    if value is None or isinstance(value, (bool, list, dict)) or not str(value).strip():
        raise IdentityError(f"{label} is missing or empty")
    return str(value)


def _required_int(row: Mapping[str, Any], key: str, index: int, *, minimum: int | None = None) -> int:
    if key not in row or row[key] is None:
        raise ShapeError(f"row {index}: {key} is required")
    value = row[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ShapeError(f"row {index}: {key} must be an integer, got {value!r}")
    if minimum is not None and value < minimum:
        raise ShapeError(f"row {index}: {key} must be >= {minimum}, got {value}")
    return value


def _required_bool(row: Mapping[str, Any], key: str, index: int) -> bool:
    value = row.get(key)
    if not isinstance(value, bool):
        raise ShapeError(f"row {index}: {key} must be true or false, got {value!r}")
    return value


def _count(row: Mapping[str, Any], key: str, index: int) -> int:
    # The parser emits null kill counts for players without eliminations.
    if row.get(key) is None:
        return 0
    return _required_int(row, key, index, minimum=0)


def normalize_players(
    rows: Sequence[RawPlayerRow],
    *,
    include_bots: bool = True,
    sort_by_placement: bool = True,
) -> list[PlayerRecord]:
    """Resolve survival times and rename parser rows into ``PlayerRecord`` form.

    Players without a death time survived to the end of the match. They get the
    longest non-winner death time plus ``1e-9``, so they outlast every eliminated
    non-winner while remaining comparable. The baseline is taken over the whole
    match, bots included, before any filtering.
    """
    baseline = decimal_max(
        row.death_time for row in rows if row.placement != 1 and row.death_time is not None
    )
    alive_time = add(baseline, SURVIVAL_EPSILON)
    logger.debug("survival baseline=%s alive_time=%s players=%d", baseline, alive_time, len(rows))

    players = [
        PlayerRecord(
            team_id=row.team_index,
            placement=row.placement,
            kills=row.kills,
            team_kills=row.team_kills,
            survival_time=alive_time if row.death_time is None else row.death_time,
            player_id=row.player_id,
            player_name=row.player_name,
            platform=row.platform,
            is_bot=row.is_bot,
        )
        for row in rows
    ]

    if not include_bots:
        humans = [player for player in players if not player.is_bot]
        if len(humans) != len(players):
            logger.info("dropped %d bot players", len(players) - len(humans))
        players = humans

    if sort_by_placement:
        players = sorted(players, key=lambda player: player.placement)

    return players


__all__ = ["PLAYER_DATA_KEY", "normalize_players", "parse_player_rows", "require_player_id"]
