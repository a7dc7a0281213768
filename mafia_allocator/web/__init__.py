"""
Web interface module: session events, run recording, and the session server.
"""

from .event_emitter import EventEmitter
from .run_recorder import RunRecorder
from .session_server import SessionServer

__all__ = ['EventEmitter', 'RunRecorder', 'SessionServer']
