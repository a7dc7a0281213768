"""
Exceptions for role allocation and reveal errors.
"""

from typing import Optional


class AllocatorError(Exception):
    """Base class for errors raised by the allocator core."""


class InvalidConfiguration(AllocatorError, ValueError):
    """Raised when allocation inputs break the caller contract."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class OutOfOrderAccess(AllocatorError):
    """Raised when a reveal is requested for a player who is not current."""

    def __init__(self, requested_index: int, current_index: Optional[int], message: str = ""):
        self.requested_index = requested_index
        self.current_index = current_index
        if not message:
            if current_index is None:
                message = f"Player {requested_index} cannot reveal: no roles have been allocated"
            else:
                message = f"Player {requested_index} cannot reveal now (current player: {current_index})"
        self.message = message
        super().__init__(self.message)
