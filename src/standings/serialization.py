"""JSON-ready encoding of players, match results and standings.

Field names follow the canonical camelCase vocabulary shared with the
replay-analysis tooling. Decimals are written as plain strings so survival
times and averages survive a round trip exactly.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from decimal import Decimal
from pathlib import Path
from typing import Any

from standings.common import MatchResult, MergedTeamRecord, PlayerRecord, TeamMatchScore
from standings.decimal_utils import add, compare, format_decimal, parse_decimal, to_decimal
from standings.errors import IdentityError, ShapeError
from standings.normalizer import require_player_id
from standings.ranking import RankedTeam


def _field(payload: Mapping[str, Any], key: str, label: str) -> Any:
    if key not in payload:
        raise ShapeError(f"Malformed {label}: missing '{key}'")
    return payload[key]


def _exact_int(payload: Mapping[str, Any], key: str, label: str, *, minimum: int | None = None) -> int:
    return _check_int(_field(payload, key, label), key, label, minimum=minimum)


def _check_int(value: Any, key: str, label: str, *, minimum: int | None = None) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ShapeError(f"Malformed {label}: '{key}' must be an integer, got {value!r}")
    if minimum is not None and value < minimum:
        raise ShapeError(f"Malformed {label}: '{key}' must be >= {minimum}, got {value}")
    return value


def _exact_bool(payload: Mapping[str, Any], key: str, label: str) -> bool:
    value = _field(payload, key, label)
    if not isinstance(value, bool):
        raise ShapeError(f"Malformed {label}: '{key}' must be true or false, got {value!r}")
    return value


def _exact_decimal(payload: Mapping[str, Any], key: str, label: str) -> Decimal:
    return _check_decimal(_field(payload, key, label), key, label)


def _check_decimal(value: Any, key: str, label: str) -> Decimal:
    try:
        return parse_decimal(value)
    except ShapeError as exc:
        raise ShapeError(f"Malformed {label}: '{key}' {exc}") from exc


def _list_field(payload: Mapping[str, Any], key: str, label: str) -> list[Any]:
    value = _field(payload, key, label)
    if not isinstance(value, list):
        raise ShapeError(f"Malformed {label}: '{key}' must be a list, got {type(value).__name__}")
    return value


def player_to_dict(player: PlayerRecord) -> dict[str, Any]:
    return {
        "teamId": player.team_id,
        "placement": player.placement,
        "kills": player.kills,
        "teamKills": player.team_kills,
        "survivalTime": format_decimal(player.survival_time),
        "playerId": player.player_id,
        "playerName": player.player_name,
        "platform": player.platform,
        "isBot": player.is_bot,
    }


def player_from_dict(payload: Mapping[str, Any]) -> PlayerRecord:
    label = "player record"
    player_name = _field(payload, "playerName", label)
    platform = payload.get("platform")
    return PlayerRecord(
        team_id=_exact_int(payload, "teamId", label),
        placement=_exact_int(payload, "placement", label, minimum=1),
        kills=_exact_int(payload, "kills", label, minimum=0),
        team_kills=_exact_int(payload, "teamKills", label, minimum=0),
        survival_time=_exact_decimal(payload, "survivalTime", label),
        player_id=require_player_id(payload.get("playerId"), f"{label}: playerId"),
        player_name="" if player_name is None else str(player_name),
        platform=None if platform is None else str(platform),
        is_bot=_exact_bool(payload, "isBot", label),
    )


def team_score_to_dict(score: TeamMatchScore) -> dict[str, Any]:
    return {
        "placement": score.placement,
        "teamId": score.team_id,
        "killsForScoring": score.kills_for_scoring,
        "killsUncapped": score.kills_uncapped,
        "killPoints": format_decimal(to_decimal(score.kill_points)),
        "placementPoints": format_decimal(to_decimal(score.placement_points)),
        "totalScore": format_decimal(to_decimal(score.total_score)),
        "isVictory": score.is_victory,
        "memberNames": list(score.member_names),
        "memberIds": list(score.member_ids),
        "individualKills": list(score.individual_kills),
        "individualSurvivalTimes": [format_decimal(value) for value in score.individual_survival_times],
    }


def team_score_from_dict(payload: Mapping[str, Any]) -> TeamMatchScore:
    """Read one stored team score, applying the same checks live scoring guarantees.

    Ids must be present, non-blank and unique within the team; the four member
    lists must line up; ``isVictory`` must agree with the placement and the total
    must equal placement points plus kill points.
    """
    if not isinstance(payload, Mapping):
        raise ShapeError(f"Malformed team score: expected an object, got {type(payload).__name__}")

    label = "team score"
    team_id = _exact_int(payload, "teamId", label)
    label = f"team score {team_id}"
    placement = _exact_int(payload, "placement", label, minimum=1)
    is_victory = _exact_bool(payload, "isVictory", label)
    if is_victory != (placement == 1):
        raise ShapeError(f"team {team_id}: isVictory {is_victory} does not match placement {placement}")

    names = _list_field(payload, "memberNames", label)
    ids = _list_field(payload, "memberIds", label)
    kills = _list_field(payload, "individualKills", label)
    times = _list_field(payload, "individualSurvivalTimes", label)
    if not len(names) == len(ids) == len(kills) == len(times):
        raise ShapeError(
            f"team {team_id}: member lists differ in length "
            f"(names={len(names)} ids={len(ids)} kills={len(kills)} times={len(times)})"
        )

    member_ids: list[str] = []
    for position, value in enumerate(ids):
        player_id = require_player_id(value, f"team {team_id}: memberIds[{position}]")
        if player_id in member_ids:
            raise IdentityError(f"team {team_id} lists player {player_id!r} twice")
        member_ids.append(player_id)

    for position, name in enumerate(names):
        if not isinstance(name, str):
            raise ShapeError(f"team {team_id}: memberNames[{position}] must be a string, got {name!r}")

    score = TeamMatchScore(
        placement=placement,
        team_id=team_id,
        kills_for_scoring=_exact_int(payload, "killsForScoring", label, minimum=0),
        kills_uncapped=_exact_int(payload, "killsUncapped", label, minimum=0),
        kill_points=_exact_decimal(payload, "killPoints", label),
        placement_points=_exact_decimal(payload, "placementPoints", label),
        total_score=_exact_decimal(payload, "totalScore", label),
        is_victory=is_victory,
        member_names=tuple(names),
        member_ids=tuple(member_ids),
        individual_kills=tuple(_check_int(value, "individualKills", label, minimum=0) for value in kills),
        individual_survival_times=tuple(
            _check_decimal(value, "individualSurvivalTimes", label) for value in times
        ),
    )

    if compare(score.total_score, add(score.placement_points, score.kill_points)) != 0:
        raise ShapeError(
            f"team {team_id}: totalScore {format_decimal(score.total_score)} does not equal "
            f"placementPoints + killPoints ({format_decimal(score.placement_points)} + "
            f"{format_decimal(score.kill_points)})"
        )
    return score


def _check_rosters(scores: Sequence[TeamMatchScore]) -> None:
    team_of_player: dict[str, int] = {}
    for score in scores:
        for player_id in score.member_ids:
            previous_team = team_of_player.setdefault(player_id, score.team_id)
            if previous_team != score.team_id:
                raise IdentityError(
                    f"player {player_id!r} appears in teams {previous_team} and {score.team_id}"
                )


def match_result_to_dict(result: MatchResult) -> dict[str, Any]:
    return {
        "matchName": result.match_name,
        "blockName": result.block_name,
        "teams": [team_score_to_dict(score) for score in result.scores],
    }


def match_result_from_dict(payload: Mapping[str, Any] | Sequence[Mapping[str, Any]]) -> MatchResult:
    """Read a stored match result; a bare list of team scores is accepted too."""
    if isinstance(payload, Mapping):
        teams = payload.get("teams")
        if not isinstance(teams, list):
            raise ShapeError("Match result has no 'teams' list")
        match_name = payload.get("matchName")
        block_name = payload.get("blockName")
    elif isinstance(payload, list):
        teams = payload
        match_name = block_name = None
    else:
        raise ShapeError(f"Unsupported match result payload: {type(payload).__name__}")

    scores = tuple(team_score_from_dict(team) for team in teams)
    _check_rosters(scores)
    return MatchResult(scores=scores, match_name=match_name, block_name=block_name)


def merged_record_to_dict(record: MergedTeamRecord) -> dict[str, Any]:
    return {
        "memberIds": list(record.identity_key),
        "memberNames": list(record.member_names),
        "totalScore": format_decimal(to_decimal(record.total_score)),
        "placementPoints": format_decimal(to_decimal(record.placement_points)),
        "killsForScoring": record.kills_for_scoring,
        "killsUncapped": record.kills_uncapped,
        "killPoints": format_decimal(to_decimal(record.kill_points)),
        "victoryCount": record.victory_count,
        "matchNames": record.match_names,
        "placements": record.placements,
        "blockNames": list(record.block_names),
        "aliveTimeByMatch": [
            {
                "matchName": contribution.match_name,
                "teamId": contribution.team_id,
                "times": [format_decimal(value) for value in contribution.survival_times],
            }
            for contribution in record.contributions
        ],
    }


def ranked_team_to_dict(ranked: RankedTeam) -> dict[str, Any]:
    if isinstance(ranked.team, MergedTeamRecord):
        payload = merged_record_to_dict(ranked.team)
    else:
        payload = team_score_to_dict(ranked.team)

    summary = ranked.summary
    payload["rank"] = ranked.rank
    payload["summary"] = {
        "point": format_decimal(summary.total_score),
        "victoryCount": summary.victory_count,
        "matchCount": summary.match_count,
        "averageKills": format_decimal(summary.average_kills),
        "averagePlacement": format_decimal(summary.average_placement),
        "totalAliveTime": format_decimal(summary.total_alive_time),
        "firstTeamId": summary.first_team_id,
    }
    return payload


def standings_to_list(ranked: Sequence[RankedTeam]) -> list[dict[str, Any]]:
    return [ranked_team_to_dict(entry) for entry in ranked]


def read_json(path: Path) -> Any:
    with path.open(encoding="utf-8") as file:
        try:
            return json.load(file)
        except json.JSONDecodeError as exc:
            raise ShapeError(f"{path}: invalid JSON ({exc})") from exc


def write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=4, ensure_ascii=False) + "\n", encoding="utf-8")


__all__ = [
    "match_result_from_dict",
    "match_result_to_dict",
    "merged_record_to_dict",
    "player_from_dict",
    "player_to_dict",
    "ranked_team_to_dict",
    "read_json",
    "standings_to_list",
    "team_score_from_dict",
    "team_score_to_dict",
    "write_json",
]
