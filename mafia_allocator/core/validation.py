"""
Game configuration validation and edge case detection.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Sequence

from .exceptions import InvalidConfiguration
from ..config.game_config import GameConfig, default_config


class Severity(Enum):
    """Validation severity levels."""
    ERROR = "error"  # Blocks allocation
    WARNING = "warning"  # Requires host confirmation
    INFO = "info"


class EdgeCase(Enum):
    """Unusual but allowed configurations."""
    NO_MAFIA = "no_mafia"
    ALL_MAFIA = "all_mafia"
    ALMOST_ALL_MAFIA = "almost_all_mafia"
    LARGE_GROUP = "large_group"
    SMALL_GROUP = "small_group"


@dataclass
class ValidationResult:
    """Outcome of validating a player list and Mafia count."""
    is_valid: bool
    severity: Severity
    message: str
    edge_case: Optional[EdgeCase] = None
    explanation: str = ""

    @property
    def requires_confirmation(self) -> bool:
        return self.is_valid and self.severity == Severity.WARNING

    def raise_for_error(self) -> None:
        """Raise InvalidConfiguration if the configuration is invalid."""
        if not self.is_valid:
            raise InvalidConfiguration(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "severity": self.severity.value,
            "message": self.message,
            "edge_case": self.edge_case.value if self.edge_case else None,
            "explanation": self.explanation,
            "requires_confirmation": self.requires_confirmation,
        }


def _error(message: str) -> ValidationResult:
    return ValidationResult(is_valid=False, severity=Severity.ERROR, message=message)


def _warning(edge_case: EdgeCase, message: str, explanation: str) -> ValidationResult:
    return ValidationResult(
        is_valid=True,
        severity=Severity.WARNING,
        message=message,
        edge_case=edge_case,
        explanation=explanation,
    )


def detect_edge_case(mafia_count: int, total_players: int,
                     config: GameConfig = default_config) -> Optional[ValidationResult]:
    """Return a warning for unusual configurations, or None for a standard one."""
    if mafia_count == 0:
        return _warning(
            EdgeCase.NO_MAFIA,
            "No Mafia players (all Villagers)",
            "Every player will be a Villager. There is no elimination or deduction gameplay.",
        )

    if mafia_count == total_players:
        return _warning(
            EdgeCase.ALL_MAFIA,
            "All players are Mafia",
            "Every player will receive the Mafia role. There are no Villagers to deceive.",
        )

    if mafia_count == total_players - 1 and total_players > 2:
        return _warning(
            EdgeCase.ALMOST_ALL_MAFIA,
            "Only one Villager player",
            "A single Villager faces every other player. The game heavily favors the Mafia.",
        )

    if total_players > config.large_group_size:
        return _warning(
            EdgeCase.LARGE_GROUP,
            "Large group size",
            f"With {total_players} players the reveal round will take a while on one device.",
        )

    if total_players < config.small_group_size:
        return _warning(
            EdgeCase.SMALL_GROUP,
            "Very small group size",
            f"With only {total_players} players the game may lack the usual social dynamics.",
        )

    return None


def validate_game_configuration(player_names: Sequence[str], mafia_count: Any,
                                config: GameConfig = default_config) -> ValidationResult:
    """
    Validate a complete configuration before allocation.

    Errors block allocation. Warnings are valid configurations that the
    host must confirm (see `ValidationResult.requires_confirmation`).
    """
    blank = [i for i, name in enumerate(player_names) if not isinstance(name, str) or not name.strip()]
    if blank:
        count = len(blank)
        return _error(f"{count} player name{'s' if count > 1 else ''} required")

    if isinstance(mafia_count, bool) or not isinstance(mafia_count, int):
        return _error("Mafia count must be a whole number")

    if mafia_count < 0:
        return _error("Mafia count cannot be negative")

    total_players = len(player_names)
    if total_players < config.min_players:
        plural = "s" if config.min_players != 1 else ""
        return _error(f"Need at least {config.min_players} player{plural} to play")

    if total_players > config.max_players:
        return _error(f"Maximum {config.max_players} players supported")

    if mafia_count > total_players:
        return _error(f"Mafia count ({mafia_count}) cannot exceed total players ({total_players})")

    edge_case = detect_edge_case(mafia_count, total_players, config)
    if edge_case:
        return edge_case

    return ValidationResult(is_valid=True, severity=Severity.INFO, message="Valid game configuration")


def format_warning(result: ValidationResult) -> str:
    """Host-facing confirmation prompt for an edge case warning."""
    if not result.requires_confirmation:
        return ""
    lines = [f"Warning: {result.message}"]
    if result.explanation:
        lines.append(result.explanation)
    return "\n".join(lines)
