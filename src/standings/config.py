"""Load scoring-system definitions from TOML files."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any
import tomllib

from standings.aggregator import ScoringParameters, validate_parameters
from standings.decimal_utils import format_decimal, to_decimal
from standings.errors import ConfigurationError

ROOT_DIR = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG_DIR = ROOT_DIR / "configs" / "scoring"


@dataclass(frozen=True)
class ScoringSystemConfig:
    """One named points table plus its kill and player-filter settings."""

    name: str
    description: str | None
    file_path: Path
    parameters: ScoringParameters

    def as_config_json(self) -> dict[str, Any]:
        return {
            "points": {
                str(placement): format_decimal(self.parameters.placement_points(placement))
                for placement in sorted(self.parameters.points)
            },
            "kill_cap": self.parameters.kill_cap,
            "kill_point_multiplier": format_decimal(to_decimal(self.parameters.kill_point_multiplier)),
            "include_bots": self.parameters.include_bots,
            "sort_by_placement": self.parameters.sort_by_placement,
        }


def load_scoring_system_configs(config_dir: Path) -> list[ScoringSystemConfig]:
    """Load and validate every scoring TOML file in a directory, sorted by filename."""
    if not config_dir.exists():
        raise FileNotFoundError(f"Config directory not found: {config_dir}")
    if not config_dir.is_dir():
        raise NotADirectoryError(f"Config path is not a directory: {config_dir}")

    config_files = sorted(config_dir.glob("*.toml"))
    if not config_files:
        raise ValueError(f"No .toml config files found in: {config_dir}")

    systems = [load_scoring_system_config(file_path) for file_path in config_files]

    names = [system.name for system in systems]
    if len(names) != len(set(names)):
        raise ConfigurationError(f"Duplicate scoring system names found in {config_dir}: {names}")

    return systems


def load_scoring_system_config(file_path: Path) -> ScoringSystemConfig:
    with file_path.open("rb") as file:
        try:
            raw = tomllib.load(file)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigurationError(f"{file_path}: invalid TOML ({exc})") from exc
    return _parse_scoring_system_config(raw, file_path)


def get_scoring_system(config_dir: Path, name: str | None = None) -> ScoringSystemConfig:
    """Pick one system by name; with no name the directory must hold exactly one, or a 'default'."""
    systems = load_scoring_system_configs(config_dir)
    by_name = {system.name: system for system in systems}

    if name is None:
        if len(systems) == 1:
            return systems[0]
        name = "default"

    try:
        return by_name[name]
    except KeyError as exc:
        available = ", ".join(sorted(by_name))
        raise ConfigurationError(
            f"No scoring system named '{name}' in {config_dir}. Available: {available}"
        ) from exc


def _parse_scoring_system_config(raw: dict[str, Any], file_path: Path) -> ScoringSystemConfig:
    system_raw = raw.get("system", {})
    points_raw = raw.get("points", {})
    scoring_raw = raw.get("scoring", {})

    name = str(system_raw.get("name", "")).strip()
    if not name:
        raise ConfigurationError(f"{file_path}: [system].name is required")

    description_value = system_raw.get("description")
    description = None if description_value is None else str(description_value)

    if not isinstance(points_raw, dict) or not points_raw:
        raise ConfigurationError(f"{file_path}: [points] table is required and must not be empty")

    points: dict[int, Any] = {}
    for placement_text, value in points_raw.items():
        try:
            placement = int(placement_text)
        except ValueError as exc:
            raise ConfigurationError(
                f"{file_path}: [points] keys must be placements, got '{placement_text}'"
            ) from exc
        points[placement] = value

    parameters = ScoringParameters(
        points=points,
        kill_cap=scoring_raw.get("kill_cap"),
        kill_point_multiplier=scoring_raw.get("kill_point_multiplier", 1),
        include_bots=_flag(scoring_raw, "include_bots", True, file_path),
        sort_by_placement=_flag(scoring_raw, "sort_by_placement", True, file_path),
    )
    try:
        validate_parameters(parameters)
    except ConfigurationError as exc:
        raise ConfigurationError(f"{file_path}: {exc}") from exc

    return ScoringSystemConfig(
        name=name,
        description=description,
        file_path=file_path,
        parameters=parameters,
    )


def _flag(scoring_raw: dict[str, Any], key: str, default: bool, file_path: Path) -> bool:
    value = scoring_raw.get(key, default)
    if not isinstance(value, bool):
        raise ConfigurationError(f"{file_path}: [scoring].{key} must be true or false")
    return value


__all__ = [
    "DEFAULT_CONFIG_DIR",
    "ScoringSystemConfig",
    "get_scoring_system",
    "load_scoring_system_config",
    "load_scoring_system_configs",
]
