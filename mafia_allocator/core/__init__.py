"""
Core allocator components: shuffle, role assignment, reveal ordering, and reset.
"""

from .exceptions import AllocatorError, InvalidConfiguration, OutOfOrderAccess
from .roles import Role, build_role_vector, role_for
from .shuffle import fisher_yates_shuffle, draw_index
from .player import PlayerCard
from .assignment import (
    AssignmentEngine, AssignmentMetadata, RoleAssignment,
    validate_assignment, measure_distribution
)
from .reveal import RevealOrderController, RevealPhase, RevealState
from .reset import PlayerPlaceholder, ResetResult, reset_to_input
from .validation import (
    EdgeCase, Severity, ValidationResult,
    validate_game_configuration, detect_edge_case, format_warning
)
from .session import GameSession, SessionStage

__all__ = [
    'AllocatorError',
    'InvalidConfiguration',
    'OutOfOrderAccess',
    'Role',
    'build_role_vector',
    'role_for',
    'fisher_yates_shuffle',
    'draw_index',
    'PlayerCard',
    'AssignmentEngine',
    'AssignmentMetadata',
    'RoleAssignment',
    'validate_assignment',
    'measure_distribution',
    'RevealOrderController',
    'RevealPhase',
    'RevealState',
    'PlayerPlaceholder',
    'ResetResult',
    'reset_to_input',
    'EdgeCase',
    'Severity',
    'ValidationResult',
    'validate_game_configuration',
    'detect_edge_case',
    'format_warning',
    'GameSession',
    'SessionStage',
]
