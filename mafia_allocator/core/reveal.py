"""
Reveal order controller: lets exactly one player view their role at a time, in order.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional, Set

from .exceptions import OutOfOrderAccess


class RevealPhase(Enum):
    """Reveal sequence phase."""
    AWAITING_REVEAL = "awaiting_reveal"
    ALL_REVEALED = "all_revealed"


@dataclass
class RevealState:
    """Progress through the reveal sequence."""
    total_players: int
    current_index: int = 0
    revealed_indices: Set[int] = field(default_factory=set)

    @property
    def is_complete(self) -> bool:
        return self.current_index >= self.total_players


class RevealOrderController:
    """
    Finite-state machine over RevealState.

    `request_reveal` opens the dialog for the current player only.
    `complete_reveal` closes it and advances to the next player.
    Indices advance strictly by one, so revealed indices are always
    exactly {0, ..., current_index - 1}.
    """

    def __init__(self, total_players: int):
        if total_players < 0:
            raise ValueError(f"total_players cannot be negative (got {total_players})")
        self._state = RevealState(total_players=total_players)
        self._active_dialog: Optional[int] = None

    @property
    def total_players(self) -> int:
        return self._state.total_players

    @property
    def current_index(self) -> int:
        return self._state.current_index

    @property
    def revealed_indices(self) -> FrozenSet[int]:
        return frozenset(self._state.revealed_indices)

    @property
    def active_dialog(self) -> Optional[int]:
        """Index of the player whose reveal dialog is open, if any."""
        return self._active_dialog

    @property
    def is_complete(self) -> bool:
        return self._state.is_complete

    @property
    def phase(self) -> RevealPhase:
        return RevealPhase.ALL_REVEALED if self.is_complete else RevealPhase.AWAITING_REVEAL

    @property
    def remaining(self) -> int:
        """Number of players still to reveal."""
        return self._state.total_players - self._state.current_index

    def is_eligible(self, index: int) -> bool:
        """Check if `index` may request a reveal right now."""
        return not self.is_complete and index == self._state.current_index

    def snapshot(self) -> RevealState:
        """Copy of the current state, safe to hand to renderers."""
        return RevealState(
            total_players=self._state.total_players,
            current_index=self._state.current_index,
            revealed_indices=set(self._state.revealed_indices),
        )

    def request_reveal(self, index: int) -> int:
        """
        Open the reveal dialog for `index`.

        Returns the index whose dialog is now open. Requesting the
        already-open dialog again is a no-op.

        Raises:
            OutOfOrderAccess: If `index` is not the current player or the
                sequence is complete. State is left untouched.
        """
        if not self.is_eligible(index):
            raise OutOfOrderAccess(index, self._state.current_index)

        if self._active_dialog == index:
            return index

        # Never leave two dialogs open
        if self._active_dialog is not None:
            self.close_dialog()

        self._active_dialog = index
        return index

    def complete_reveal(self, index: int) -> bool:
        """
        Close the dialog for `index` and advance to the next player.
        Returns True if the sequence advanced, False for a redundant call.
        """
        if self.is_complete or index != self._state.current_index:
            return False
        if self._active_dialog != index:
            return False

        self._state.revealed_indices.add(index)
        self._active_dialog = None
        self._state.current_index = index + 1
        return True

    def close_dialog(self) -> Optional[int]:
        """Force-close any open dialog without advancing. Returns the closed index."""
        closed = self._active_dialog
        self._active_dialog = None
        return closed
