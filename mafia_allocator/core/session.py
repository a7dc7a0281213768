"""
Game session owning the allocation, reveal progress, and reset flow.
"""

import random
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, TYPE_CHECKING

from .assignment import AssignmentEngine, RoleAssignment
from .exceptions import InvalidConfiguration, OutOfOrderAccess
from .player import PlayerCard
from .reset import ResetResult, reset_to_input
from .reveal import RevealOrderController, RevealState
from .shuffle import RandomSource, default_random_source
from ..config.game_config import GameConfig, default_config

if TYPE_CHECKING:
    from ..web.event_emitter import EventEmitter


class SessionStage(Enum):
    """Which screen the session is on."""
    INPUT = "input"
    REVEALING = "revealing"


def random_source_for(config: GameConfig) -> RandomSource:
    """Seeded generator when the config pins a seed, system entropy otherwise."""
    if config.random_seed is not None:
        return random.Random(config.random_seed)
    return default_random_source()


class GameSession:
    """
    Owned session state for one shared device.

    All mutation goes through `allocate`, `reallocate`, `request_reveal`,
    `complete_reveal` and `reset`. Renderers get read-only projections.
    """

    def __init__(self, config: GameConfig = default_config, engine: Optional[AssignmentEngine] = None,
                 event_emitter: Optional['EventEmitter'] = None):
        self.config = config
        self.engine = engine or AssignmentEngine(random_source_for(config))
        self.event_emitter = event_emitter

        self.player_names: List[str] = []
        self.mafia_count: Optional[int] = None
        self.assignment: Optional[RoleAssignment] = None
        self._controller: Optional[RevealOrderController] = None

        self.action_log: List[Dict[str, Any]] = []
        self.announcements: List[str] = []

    @property
    def stage(self) -> SessionStage:
        return SessionStage.REVEALING if self.assignment is not None else SessionStage.INPUT

    @property
    def reveal_state(self) -> Optional[RevealState]:
        """Copy of the reveal progress, or None before allocation."""
        if self._controller is None:
            return None
        return self._controller.snapshot()

    @property
    def active_dialog(self) -> Optional[int]:
        if self._controller is None:
            return None
        return self._controller.active_dialog

    @property
    def current_index(self) -> Optional[int]:
        if self._controller is None:
            return None
        return self._controller.current_index

    @property
    def is_complete(self) -> bool:
        return self._controller is not None and self._controller.is_complete

    def announce(self, message: str) -> None:
        """Make a host announcement."""
        if self.config.use_announcements:
            self.announcements.append(message)
            print(f"[HOST] {message}")
            if self.event_emitter:
                self.event_emitter.emit_announcement(message, self.stage.value)

    def allocate(self, player_names: Sequence[str], mafia_count: int, confirmed: bool = False) -> RoleAssignment:
        """
        Allocate roles and start a fresh reveal sequence.

        Any previous allocation and reveal progress is discarded. `confirmed`
        records whether the host acknowledged an edge case warning; it does
        not change the allocation.

        Raises:
            InvalidConfiguration: If a name is blank or the count is out of range
        """
        return self._allocate(player_names, mafia_count, confirmed, reallocation=False)

    def reallocate(self, player_names: Optional[Sequence[str]] = None, mafia_count: Optional[int] = None,
                   confirmed: bool = False) -> RoleAssignment:
        """Reshuffle roles, reusing the session's names and count unless given new ones."""
        names = list(player_names) if player_names is not None else list(self.player_names)
        count = mafia_count if mafia_count is not None else self.mafia_count
        if not names or count is None:
            raise InvalidConfiguration("No players to reallocate; enter player names first")
        return self._allocate(names, count, confirmed, reallocation=True)

    def _allocate(self, player_names: Sequence[str], mafia_count: int, confirmed: bool,
                  reallocation: bool) -> RoleAssignment:
        # Engine validates before anything is replaced
        assignment = self.engine.reallocate(player_names, mafia_count) if reallocation \
            else self.engine.allocate(player_names, mafia_count)

        self.player_names = list(player_names)
        self.mafia_count = mafia_count
        self.assignment, self._controller = assignment, RevealOrderController(len(assignment))

        metadata = assignment.metadata
        self._log_action("reallocation" if reallocation else "allocation", {
            "assignment_id": metadata.assignment_id,
            "total_players": metadata.total_players,
            "mafia_count": metadata.mafia_count,
            "confirmed": confirmed,
        })
        if self.event_emitter:
            self.event_emitter.emit_allocation(
                metadata.assignment_id,
                metadata.total_players,
                metadata.mafia_count,
                reallocation,
                confirmed
            )

        if reallocation:
            self.announce("Roles have been reshuffled. Everyone must check their role again.")
        else:
            self.announce(f"Roles allocated for {metadata.total_players} players.")
        self._announce_next_player()
        self._emit_session_state()
        return assignment

    def request_reveal(self, index: int) -> PlayerCard:
        """
        Open the reveal dialog for `index` and return that player's card.

        Raises:
            OutOfOrderAccess: If `index` is not the current player. State is unchanged.
        """
        if self._controller is None or self.assignment is None:
            self._reject(index, None)

        try:
            self._controller.request_reveal(index)
        except OutOfOrderAccess:
            self._reject(index, self._controller.current_index)

        already_revealed = self.assignment.players[index].revealed
        self.assignment = self.assignment.with_revealed(index)
        if not already_revealed:
            self._log_action("reveal_opened", {"index": index})
            if self.event_emitter:
                self.event_emitter.emit_reveal_opened(index)
            self._emit_session_state()
        return self.assignment.players[index]

    def _reject(self, index: int, current_index: Optional[int]) -> None:
        if self.event_emitter:
            self.event_emitter.emit_reveal_rejected(index, current_index)
        raise OutOfOrderAccess(index, current_index)

    def complete_reveal(self, index: int) -> bool:
        """
        Close the dialog for `index` and move to the next player.
        Returns False, changing nothing, for redundant calls.
        """
        if self._controller is None:
            return False
        if not self._controller.complete_reveal(index):
            return False

        next_index = self._controller.current_index
        self._log_action("reveal_completed", {"index": index, "next_index": next_index})
        if self.event_emitter:
            self.event_emitter.emit_reveal_completed(index, next_index)

        if self._controller.is_complete:
            self._log_action("all_revealed", {"total_players": self._controller.total_players})
            if self.event_emitter:
                self.event_emitter.emit_all_revealed(self._controller.total_players)
            self.announce("All roles have been revealed. Ready to start playing.")
        else:
            self._announce_next_player()
        self._emit_session_state()
        return True

    def reset(self, current_player_names: Optional[Sequence[str]] = None) -> ResetResult:
        """
        Return to the input stage, keeping only the player names.

        Discards the allocation, the reveal progress and any open dialog in
        one step. Safe mid-dialog, before allocation, and when repeated.
        """
        names = list(current_player_names) if current_player_names is not None else list(self.player_names)

        had_assignment = self.assignment is not None
        closed_dialog = self._controller.close_dialog() if self._controller else None

        self.assignment, self._controller = None, None
        self.player_names = names

        if had_assignment:
            self._log_action("reset", {"player_count": len(names), "closed_dialog": closed_dialog})
            if self.event_emitter:
                self.event_emitter.emit_reset(len(names), had_assignment, closed_dialog)
            self.announce("Session reset. Player names kept for the next allocation.")
            self._emit_session_state()

        return reset_to_input(names)

    def get_player(self, index: int) -> Optional[PlayerCard]:
        if self.assignment is None:
            return None
        return self.assignment.get_player(index)

    def player_views(self) -> List[Dict[str, Any]]:
        """Per-player card projections; roles appear only once revealed."""
        if self.assignment is None:
            return [{"index": i, "name": name, "revealed": False, "is_current": False}
                    for i, name in enumerate(self.player_names)]
        current_index = self._controller.current_index
        return [player.to_public_dict(current_index) for player in self.assignment.players]

    def dialog_view(self) -> Optional[Dict[str, Any]]:
        """The open reveal dialog's contents, or None when no dialog is open."""
        index = self.active_dialog
        if index is None:
            return None
        player = self.assignment.players[index]
        return {
            "index": player.index,
            "name": player.name,
            "role": player.role.value,
            "is_mafia": player.is_mafia,
        }

    def progress(self) -> Dict[str, Any]:
        """Global reveal progress for rendering."""
        if self._controller is None:
            return {
                "stage": self.stage.value,
                "current_index": None,
                "is_complete": False,
                "revealed_count": 0,
                "total_players": len(self.player_names),
                "active_dialog": None,
            }
        return {
            "stage": self.stage.value,
            "current_index": self._controller.current_index,
            "is_complete": self._controller.is_complete,
            "revealed_count": len(self._controller.revealed_indices),
            "total_players": self._controller.total_players,
            "active_dialog": self._controller.active_dialog,
        }

    def public_state(self) -> Dict[str, Any]:
        """Progress and player list with every role withheld."""
        players = []
        for view in self.player_views():
            view = dict(view)
            view.pop("is_mafia", None)
            players.append(view)
        return {"progress": self.progress(), "players": players}

    def get_session_summary(self) -> Dict[str, Any]:
        """Get a summary of the current session."""
        metadata = self.assignment.metadata if self.assignment else None
        return {
            "stage": self.stage.value,
            "player_names": list(self.player_names),
            "mafia_count": self.mafia_count,
            "assignment": metadata.to_dict() if metadata else None,
            "progress": self.progress(),
        }

    def _announce_next_player(self) -> None:
        if self._controller is None or self._controller.is_complete:
            return
        player = self.assignment.players[self._controller.current_index]
        self.announce(f"Pass the device to {player.name} (player {player.index + 1} of {len(self.assignment)}).")

    def _emit_session_state(self) -> None:
        if self.event_emitter:
            self.event_emitter.emit_session_state(self.public_state())

    def _log_action(self, action_type: str, data: Dict[str, Any]) -> None:
        """Log a session action."""
        self.action_log.append({
            "type": action_type,
            "stage": self.stage.value,
            "data": data
        })
