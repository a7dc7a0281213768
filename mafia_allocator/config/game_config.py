"""
Allocator configuration and constants.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class GameConfig:
    """Configuration for allocation sessions."""

    # Player limits
    min_players: int = 1
    max_players: int = 30
    default_player_count: int = 5
    default_mafia_count: int = 1

    # Group size warnings (require host confirmation)
    small_group_size: int = 3  # Warn below this many players
    large_group_size: int = 20  # Warn above this many players

    # Randomness
    random_seed: Optional[int] = None  # Seed for reproducible allocations (testing only)

    # Output
    use_announcements: bool = True
    record_runs: bool = False
    runs_dir: str = "runs"

    # Web server
    web_host: str = "127.0.0.1"
    web_port: int = 5000


# Default configuration instance
default_config = GameConfig()
