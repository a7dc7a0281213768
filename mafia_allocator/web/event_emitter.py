"""
Event emitter for broadcasting and recording session events.

Events describe counts and indices only. They never say which player
holds which role, so listeners and recorded runs cannot leak secrets.
"""

from typing import Callable, Dict, Any, Optional, List
from threading import Lock

from .run_recorder import RunRecorder

Listener = Callable[[str, Dict[str, Any]], None]


class EventEmitter:
    """Event emitter that fans session events out to listeners and a recorder."""

    def __init__(self, run_recorder: Optional[RunRecorder] = None):
        self.run_recorder = run_recorder
        self._listeners: List[Listener] = []
        self._lock = Lock()

    def register_listener(self, listener: Listener) -> None:
        """Register a callback invoked as listener(event_type, data)."""
        with self._lock:
            self._listeners.append(listener)

    def unregister_listener(self, listener: Listener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _emit(self, event_type: str, data: Dict[str, Any]) -> None:
        """Emit an event to the recorder and every listener."""
        if self.run_recorder:
            try:
                self.run_recorder.record_event(event_type, data)
            except OSError as e:
                # Don't let recording errors break the session
                print(f"Error recording event: {e}")

        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(event_type, data)

    def emit_allocation(self, assignment_id: str, total_players: int, mafia_count: int,
                        reallocation: bool, confirmed: bool) -> None:
        """Emit allocation event."""
        self._emit("allocation", {
            "assignment_id": assignment_id,
            "total_players": total_players,
            "mafia_count": mafia_count,
            "villager_count": total_players - mafia_count,
            "reallocation": reallocation,
            "confirmed": confirmed
        })

    def emit_reveal_opened(self, index: int) -> None:
        """Emit reveal dialog opened event."""
        self._emit("reveal_opened", {
            "index": index
        })

    def emit_reveal_rejected(self, requested_index: int, current_index: Optional[int]) -> None:
        """Emit out-of-order reveal rejection event."""
        self._emit("reveal_rejected", {
            "requested_index": requested_index,
            "current_index": current_index
        })

    def emit_reveal_completed(self, index: int, next_index: int) -> None:
        """Emit reveal completed event."""
        self._emit("reveal_completed", {
            "index": index,
            "next_index": next_index
        })

    def emit_all_revealed(self, total_players: int) -> None:
        """Emit reveal sequence completion event."""
        self._emit("all_revealed", {
            "total_players": total_players
        })

    def emit_reset(self, player_count: int, had_assignment: bool, closed_dialog: Optional[int]) -> None:
        """Emit session reset event."""
        self._emit("reset", {
            "player_count": player_count,
            "had_assignment": had_assignment,
            "closed_dialog": closed_dialog
        })

    def emit_announcement(self, message: str, stage: str) -> None:
        """Emit host announcement event."""
        self._emit("announcement", {
            "message": message,
            "stage": stage
        })

    def emit_session_state(self, session_state: Dict[str, Any]) -> None:
        """Emit session state update event."""
        self._emit("session_state", {
            "session_state": session_state
        })
