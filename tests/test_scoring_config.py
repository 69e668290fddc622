"""Tests for TOML-based scoring system config loading."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

import pytest

from standings.config import (
    DEFAULT_CONFIG_DIR,
    get_scoring_system,
    load_scoring_system_configs,
)
from standings.errors import ConfigurationError


def test_load_scoring_system_configs_from_directory(tmp_path: Path) -> None:
    config_path = tmp_path / "league.toml"
    config_path.write_text(
        """
[system]
name = "league"
description = "A test system"

[points]
1 = 25
2 = 18
3 = 15

[scoring]
kill_cap = 8
kill_point_multiplier = 2
include_bots = false
sort_by_placement = false
""".strip()
    )

    configs = load_scoring_system_configs(tmp_path)
    assert len(configs) == 1

    system = configs[0]
    assert system.name == "league"
    assert system.description == "A test system"
    assert system.file_path == config_path
    assert dict(system.parameters.points) == {1: 25, 2: 18, 3: 15}
    assert system.parameters.kill_cap == 8
    assert system.parameters.kill_point_multiplier == 2
    assert system.parameters.include_bots is False
    assert system.parameters.sort_by_placement is False
    assert system.as_config_json() == {
        "points": {"1": "25", "2": "18", "3": "15"},
        "kill_cap": 8,
        "kill_point_multiplier": "2",
        "include_bots": False,
        "sort_by_placement": False,
    }


def test_scoring_defaults_when_omitted(tmp_path: Path) -> None:
    (tmp_path / "minimal.toml").write_text(
        """
[system]
name = "minimal"

[points]
1 = 10
""".strip()
    )

    system = load_scoring_system_configs(tmp_path)[0]
    assert system.description is None
    assert system.parameters.kill_cap is None
    assert system.parameters.kill_point_multiplier == 1
    assert system.parameters.include_bots is True
    assert system.parameters.sort_by_placement is True


def test_duplicate_names_raise_error(tmp_path: Path) -> None:
    template = """
[system]
name = "dup"

[points]
1 = 10
""".strip()
    (tmp_path / "a.toml").write_text(template)
    (tmp_path / "b.toml").write_text(template)

    with pytest.raises(ConfigurationError, match="Duplicate scoring system names"):
        load_scoring_system_configs(tmp_path)


def test_missing_points_table_raises(tmp_path: Path) -> None:
    (tmp_path / "empty.toml").write_text('[system]\nname = "empty"\n')

    with pytest.raises(ConfigurationError, match=r"\[points\] table is required"):
        load_scoring_system_configs(tmp_path)


def test_negative_kill_cap_raises_with_file_path(tmp_path: Path) -> None:
    config_path = tmp_path / "negative.toml"
    config_path.write_text(
        """
[system]
name = "negative"

[points]
1 = 10

[scoring]
kill_cap = -1
""".strip()
    )

    with pytest.raises(ConfigurationError, match=r"negative\.toml: kill_cap must be an integer >= 0"):
        load_scoring_system_configs(tmp_path)


def test_fractional_multiplier_is_loaded_exactly(tmp_path: Path) -> None:
    (tmp_path / "fraction.toml").write_text(
        """
[system]
name = "fraction"

[points]
1 = 10
2 = 7.5

[scoring]
kill_point_multiplier = 0.5
""".strip()
    )

    system = load_scoring_system_configs(tmp_path)[0]
    assert system.parameters.kill_points(3) == Decimal("1.5")
    assert system.parameters.placement_points(2) == Decimal("7.5")
    assert system.as_config_json()["points"] == {"1": "10", "2": "7.5"}
    assert system.as_config_json()["kill_point_multiplier"] == "0.5"


def test_non_numeric_multiplier_raises(tmp_path: Path) -> None:
    (tmp_path / "word.toml").write_text(
        """
[system]
name = "word"

[points]
1 = 10

[scoring]
kill_point_multiplier = "double"
""".strip()
    )

    with pytest.raises(ConfigurationError, match=r"word\.toml: kill_point_multiplier must be a number"):
        load_scoring_system_configs(tmp_path)


def test_non_numeric_placement_key_raises(tmp_path: Path) -> None:
    (tmp_path / "keys.toml").write_text(
        """
[system]
name = "keys"

[points]
first = 10
""".strip()
    )

    with pytest.raises(ConfigurationError, match="keys must be placements"):
        load_scoring_system_configs(tmp_path)


def test_missing_name_raises(tmp_path: Path) -> None:
    (tmp_path / "anon.toml").write_text("[points]\n1 = 10\n")

    with pytest.raises(ConfigurationError, match=r"\[system\]\.name is required"):
        load_scoring_system_configs(tmp_path)


def test_missing_directory_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_scoring_system_configs(tmp_path / "missing")


def test_empty_directory_raises(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="No .toml config files"):
        load_scoring_system_configs(tmp_path)


def test_get_scoring_system_by_name(tmp_path: Path) -> None:
    for name in ("default", "finals"):
        (tmp_path / f"{name}.toml").write_text(f'[system]\nname = "{name}"\n\n[points]\n1 = 10\n')

    assert get_scoring_system(tmp_path).name == "default"
    assert get_scoring_system(tmp_path, "finals").name == "finals"
    with pytest.raises(ConfigurationError, match="Available: default, finals"):
        get_scoring_system(tmp_path, "missing")


def test_bundled_configs_load() -> None:
    systems = {system.name: system for system in load_scoring_system_configs(DEFAULT_CONFIG_DIR)}
    assert {"default", "capped"} <= systems.keys()
    assert systems["capped"].parameters.kill_cap == 10
