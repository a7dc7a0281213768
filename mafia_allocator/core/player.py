"""
Player card representing one seat in an allocation.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict

from .roles import Role, role_for


@dataclass(frozen=True)
class PlayerCard:
    """A player bound to a secret role."""
    index: int
    name: str
    is_mafia: bool
    revealed: bool = False

    def __str__(self) -> str:
        return f"Player {self.index + 1} ({self.name})"

    @property
    def role(self) -> Role:
        """The player's role."""
        return role_for(self.is_mafia)

    @property
    def is_villager(self) -> bool:
        return not self.is_mafia

    def mark_revealed(self) -> 'PlayerCard':
        """Return a copy of this card with its role revealed."""
        if self.revealed:
            return self
        return replace(self, revealed=True)

    def to_public_dict(self, current_index: int) -> Dict[str, Any]:
        """
        Read-only projection for card list rendering.
        The role is only included once the player has revealed it.
        """
        view: Dict[str, Any] = {
            "index": self.index,
            "name": self.name,
            "revealed": self.revealed,
            "is_current": self.index == current_index,
        }
        if self.revealed:
            view["is_mafia"] = self.is_mafia
        return view
