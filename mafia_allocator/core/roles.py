"""
Role definitions and the pre-shuffle role vector.
"""

from enum import Enum
from typing import List

from .exceptions import InvalidConfiguration


class Role(Enum):
    """Secret role held by a player."""
    MAFIA = "mafia"
    VILLAGER = "villager"

    def __str__(self) -> str:
        return self.value.title()


def role_for(is_mafia: bool) -> Role:
    """Map a role vector entry to its role."""
    return Role.MAFIA if is_mafia else Role.VILLAGER


def build_role_vector(total_players: int, mafia_count: int) -> List[bool]:
    """
    Build the deterministic pre-shuffle role vector.
    Returns: `total_players` entries, the first `mafia_count` True (Mafia),
    the remainder False (Villager).
    """
    if total_players < 0:
        raise InvalidConfiguration(f"Total players cannot be negative (got {total_players})")
    if mafia_count < 0:
        raise InvalidConfiguration(f"Mafia count cannot be negative (got {mafia_count})")
    if mafia_count > total_players:
        raise InvalidConfiguration(
            f"Mafia count ({mafia_count}) cannot exceed total players ({total_players})"
        )

    return [True] * mafia_count + [False] * (total_players - mafia_count)
