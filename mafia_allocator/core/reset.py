"""
Reset support: hand the name list back to the input stage.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple


@dataclass(frozen=True)
class PlayerPlaceholder:
    """An input-stage seat with a name but no role."""
    index: int
    name: str


@dataclass(frozen=True)
class ResetResult:
    """Names carried forward to the pre-allocation input stage."""
    players: Tuple[PlayerPlaceholder, ...]

    @property
    def names(self) -> List[str]:
        return [p.name for p in self.players]


def reset_to_input(current_player_names: Sequence[str]) -> ResetResult:
    """Build empty-role placeholders carrying the names forward verbatim."""
    return ResetResult(players=tuple(
        PlayerPlaceholder(index=index, name=name)
        for index, name in enumerate(current_player_names)
    ))
