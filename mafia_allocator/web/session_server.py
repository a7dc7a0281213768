"""
Web server exposing a game session to the browser on the shared device.
"""

import threading
from typing import Optional, Dict, Any
from flask import Flask, jsonify, request
from flask_socketio import SocketIO, emit

from .event_emitter import EventEmitter
from ..config.game_config import GameConfig, default_config
from ..core import GameSession, InvalidConfiguration, OutOfOrderAccess, validate_game_configuration


class SessionServer:
    """JSON API over a GameSession, broadcasting state changes to Socket.IO clients."""

    def __init__(self, config: GameConfig = default_config, session: Optional[GameSession] = None,
                 event_emitter: Optional[EventEmitter] = None):
        self.config = config
        self.port = config.web_port
        self.host = config.web_host

        self.app = Flask(__name__)
        self.socketio = SocketIO(self.app, cors_allowed_origins="*", async_mode='threading')

        if session is None:
            session = GameSession(config, event_emitter=event_emitter or EventEmitter())
        elif session.event_emitter is None:
            session.event_emitter = event_emitter or EventEmitter()
        self.session = session
        self.event_emitter = session.event_emitter

        # One operation at a time, in arrival order
        self._lock = threading.Lock()
        self.clients_connected = 0

        self.event_emitter.register_listener(self._broadcast_event)

        self._setup_routes()
        self._setup_socketio()

    def _state(self) -> Dict[str, Any]:
        """Full render state for the device's own browser."""
        return {
            "progress": self.session.progress(),
            "players": self.session.player_views(),
            "dialog": self.session.dialog_view(),
        }

    def _setup_routes(self):
        """Setup Flask routes."""
        @self.app.route('/api/state')
        def get_state():
            with self._lock:
                return jsonify(self._state())

        @self.app.route('/api/validate', methods=['POST'])
        def validate():
            body = request.get_json(silent=True) or {}
            result = validate_game_configuration(
                body.get("player_names") or [],
                body.get("mafia_count"),
                self.config
            )
            return jsonify(result.to_dict())

        @self.app.route('/api/allocate', methods=['POST'])
        def allocate():
            body = request.get_json(silent=True) or {}
            return self._allocate(body, reallocation=False)

        @self.app.route('/api/reallocate', methods=['POST'])
        def reallocate():
            body = request.get_json(silent=True) or {}
            return self._allocate(body, reallocation=True)

        @self.app.route('/api/players/<int:index>/reveal', methods=['POST'])
        def reveal(index: int):
            with self._lock:
                try:
                    self.session.request_reveal(index)
                except OutOfOrderAccess as e:
                    return jsonify({
                        "error": "out_of_order",
                        "message": e.message,
                        "requested_index": e.requested_index,
                        "current_index": e.current_index
                    }), 409
                return jsonify(self._state())

        @self.app.route('/api/players/<int:index>/close', methods=['POST'])
        def close(index: int):
            with self._lock:
                advanced = self.session.complete_reveal(index)
                state = self._state()
                state["advanced"] = advanced
                return jsonify(state)

        @self.app.route('/api/reset', methods=['POST'])
        def reset():
            body = request.get_json(silent=True) or {}
            with self._lock:
                result = self.session.reset(body.get("player_names"))
                state = self._state()
                state["player_names"] = result.names
                return jsonify(state)

    def _allocate(self, body: Dict[str, Any], reallocation: bool):
        with self._lock:
            names = body.get("player_names")
            mafia_count = body.get("mafia_count")
            if reallocation:
                names = names if names is not None else self.session.player_names
                mafia_count = mafia_count if mafia_count is not None else self.session.mafia_count

            validation = validate_game_configuration(names or [], mafia_count, self.config)
            if not validation.is_valid:
                return jsonify({"error": "invalid_configuration", "validation": validation.to_dict()}), 400
            confirmed = bool(body.get("confirmed", False))
            if validation.requires_confirmation and not confirmed:
                return jsonify({"requires_confirmation": True, "validation": validation.to_dict()}), 409

            try:
                if reallocation:
                    self.session.reallocate(names, mafia_count, confirmed=confirmed)
                else:
                    self.session.allocate(names, mafia_count, confirmed=confirmed)
            except InvalidConfiguration as e:
                return jsonify({"error": "invalid_configuration", "message": e.message}), 400
            return jsonify(self._state())

    def _setup_socketio(self):
        """Setup SocketIO event handlers."""
        @self.socketio.on('connect')
        def handle_connect():
            self.clients_connected += 1
            print(f"Client connected. Total clients: {self.clients_connected}")
            with self._lock:
                state = self.session.public_state()
            emit('session_state', {'session_state': state})

        @self.socketio.on('disconnect')
        def handle_disconnect():
            self.clients_connected -= 1
            print(f"Client disconnected. Total clients: {self.clients_connected}")

    def _broadcast_event(self, event_type: str, data: Dict[str, Any]) -> None:
        """Broadcast session state changes to all connected clients."""
        if event_type == "session_state" and self.clients_connected > 0:
            self.socketio.emit(event_type, data)

    def start(self) -> None:
        """Start the web server."""
        print(f"\n{'='*60}")
        print(f"Starting session server on http://{self.host}:{self.port}")
        print(f"{'='*60}\n")
        self.socketio.run(self.app, host=self.host, port=self.port, debug=False, allow_unsafe_werkzeug=True)
