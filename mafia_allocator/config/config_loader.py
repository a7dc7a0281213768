"""
Load allocator settings from YAML, checking each value before it reaches a session.
"""

import yaml
from dataclasses import fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

from .game_config import GameConfig, default_config


_FIELD_TYPES = {f.name: f.type for f in fields(GameConfig)}


def _type_matches(value: Any, expected: Any) -> bool:
    if expected == Optional[int]:
        return value is None or _type_matches(value, int)
    if expected is int:
        # YAML `true` loads as bool, which is an int subclass
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, expected)


def _type_name(expected: Any) -> str:
    if expected == Optional[int]:
        return "an integer or null"
    return {int: "an integer", bool: "true or false", str: "a string"}.get(expected, str(expected))


def check_config(config: GameConfig) -> GameConfig:
    """
    Check that the player limits and warning thresholds are consistent.

    Raises:
        ValueError: If a limit is out of range
    """
    if config.min_players < 0:
        raise ValueError(f"min_players cannot be negative (got {config.min_players})")
    if config.max_players < config.min_players:
        raise ValueError(
            f"max_players ({config.max_players}) cannot be below min_players ({config.min_players})"
        )
    if not config.min_players <= config.default_player_count <= config.max_players:
        raise ValueError(
            f"default_player_count ({config.default_player_count}) must be between "
            f"{config.min_players} and {config.max_players}"
        )
    if not 0 <= config.default_mafia_count <= config.default_player_count:
        raise ValueError(
            f"default_mafia_count ({config.default_mafia_count}) must be between 0 and "
            f"default_player_count ({config.default_player_count})"
        )
    if config.small_group_size > config.large_group_size:
        raise ValueError(
            f"small_group_size ({config.small_group_size}) cannot exceed "
            f"large_group_size ({config.large_group_size})"
        )
    if not 0 < config.web_port < 65536:
        raise ValueError(f"web_port must be between 1 and 65535 (got {config.web_port})")
    return config


def config_from_dict(settings: Dict[str, Any]) -> GameConfig:
    """
    Build a config from a mapping of setting names to values.
    Unknown keys are reported and skipped; missing keys keep their defaults.

    Raises:
        ValueError: If a value has the wrong type or the limits are inconsistent
    """
    overrides = {}
    for key, value in settings.items():
        expected = _FIELD_TYPES.get(key)
        if expected is None:
            print(f"Warning: Unknown config key '{key}' in YAML file")
            continue
        if not _type_matches(value, expected):
            raise ValueError(f"Config key '{key}' must be {_type_name(expected)} (got {value!r})")
        overrides[key] = value

    return check_config(replace(default_config, **overrides))


def load_config_from_yaml(config_path: str) -> GameConfig:
    """
    Load allocator configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file

    Returns:
        GameConfig with the file's values over the defaults

    Raises:
        FileNotFoundError: If the config file doesn't exist
        yaml.YAMLError: If the YAML file is invalid
        ValueError: If the document is not a mapping or a value is rejected
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_file, 'r') as f:
        settings = yaml.safe_load(f)

    if settings is None:
        return replace(default_config)
    if not isinstance(settings, dict):
        raise ValueError(
            f"Config file {config_path} must contain a mapping of settings, "
            f"not {type(settings).__name__}"
        )

    return config_from_dict(settings)


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """Load configuration from a YAML file, or return a copy of the defaults."""
    if config_path is None:
        return replace(default_config)

    return load_config_from_yaml(config_path)
