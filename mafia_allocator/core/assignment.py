"""
Assignment engine binding player names to shuffled roles.
"""

import time
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .exceptions import InvalidConfiguration
from .player import PlayerCard
from .roles import build_role_vector
from .shuffle import RandomSource, default_random_source, draw_index, fisher_yates_shuffle


@dataclass(frozen=True)
class AssignmentMetadata:
    """Summary of one allocation run."""
    mafia_count: int
    villager_count: int
    total_players: int
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    assignment_id: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mafia_count": self.mafia_count,
            "villager_count": self.villager_count,
            "total_players": self.total_players,
            "created_at": self.created_at.isoformat(),
            "assignment_id": self.assignment_id,
        }


@dataclass(frozen=True)
class RoleAssignment:
    """Immutable snapshot of an allocation."""
    players: Tuple[PlayerCard, ...]
    metadata: AssignmentMetadata

    def __len__(self) -> int:
        return len(self.players)

    @property
    def names(self) -> List[str]:
        return [p.name for p in self.players]

    @property
    def mafia_players(self) -> List[PlayerCard]:
        """All players holding the Mafia role."""
        return [p for p in self.players if p.is_mafia]

    @property
    def villager_players(self) -> List[PlayerCard]:
        """All players holding the Villager role."""
        return [p for p in self.players if p.is_villager]

    @property
    def revealed_count(self) -> int:
        return sum(1 for p in self.players if p.revealed)

    def get_player(self, index: int) -> Optional[PlayerCard]:
        """Get player by index."""
        if 0 <= index < len(self.players):
            return self.players[index]
        return None

    def with_revealed(self, index: int) -> 'RoleAssignment':
        """Return a new snapshot with the player at `index` marked revealed."""
        player = self.get_player(index)
        if player is None:
            raise IndexError(f"No player at index {index}")
        if player.revealed:
            return self
        players = list(self.players)
        players[index] = player.mark_revealed()
        return replace(self, players=tuple(players))


@dataclass
class AssignmentCheck:
    """Result of an assignment integrity check."""
    valid: bool
    message: str
    details: Optional[Dict[str, int]] = None


def _validate_inputs(player_names: Sequence[str], mafia_count: int) -> None:
    """Defend the engine boundary against inputs upstream validation should have rejected."""
    if isinstance(player_names, str):
        raise InvalidConfiguration("Player names must be a sequence of strings, not a single string")
    for position, name in enumerate(player_names):
        if not isinstance(name, str):
            raise InvalidConfiguration(f"Player name at position {position} is not a string")
        if not name.strip():
            raise InvalidConfiguration(f"Player name at position {position} is blank")

    # bool is an int subclass but never a valid count
    if isinstance(mafia_count, bool) or not isinstance(mafia_count, int):
        raise InvalidConfiguration(f"Mafia count must be an integer (got {mafia_count!r})")
    if mafia_count < 0:
        raise InvalidConfiguration(f"Mafia count cannot be negative (got {mafia_count})")
    if mafia_count > len(player_names):
        raise InvalidConfiguration(
            f"Mafia count ({mafia_count}) cannot exceed total players ({len(player_names)})"
        )


def _generate_assignment_id(random_source: RandomSource) -> str:
    timestamp = int(time.time() * 1000)
    return f"assign_{timestamp}_{draw_index(random_source, 999999)}"


class AssignmentEngine:
    """Produces role assignments from player names and a Mafia count."""

    def __init__(self, random_source: Optional[RandomSource] = None):
        self.random_source = random_source

    def _resolve_source(self, random_source: Optional[RandomSource]) -> RandomSource:
        if random_source is not None:
            return random_source
        if self.random_source is not None:
            return self.random_source
        # Fresh entropy per call
        return default_random_source()

    def allocate(self, player_names: Sequence[str], mafia_count: int,
                 random_source: Optional[RandomSource] = None) -> RoleAssignment:
        """
        Allocate roles to players.

        Args:
            player_names: Ordered player names; position becomes the player index
            mafia_count: Number of Mafia roles, 0 <= mafia_count <= len(player_names)
            random_source: Optional override of the engine's random source

        Returns:
            A new RoleAssignment with every player unrevealed

        Raises:
            InvalidConfiguration: If a name is blank or the count is out of range
        """
        _validate_inputs(player_names, mafia_count)
        source = self._resolve_source(random_source)

        total_players = len(player_names)
        roles = fisher_yates_shuffle(build_role_vector(total_players, mafia_count), source)

        # Players keep their entry order; only the roles move
        players = tuple(
            PlayerCard(index=index, name=name.strip(), is_mafia=is_mafia)
            for index, (name, is_mafia) in enumerate(zip(player_names, roles))
        )
        metadata = AssignmentMetadata(
            mafia_count=mafia_count,
            villager_count=total_players - mafia_count,
            total_players=total_players,
            assignment_id=_generate_assignment_id(source),
        )
        return RoleAssignment(players=players, metadata=metadata)

    def reallocate(self, player_names: Sequence[str], mafia_count: int,
                   random_source: Optional[RandomSource] = None) -> RoleAssignment:
        """Discard-and-reshuffle. The engine keeps no history between calls."""
        return self.allocate(player_names, mafia_count, random_source)


def validate_assignment(assignment: RoleAssignment) -> AssignmentCheck:
    """Check an assignment's role counts and indices against its metadata."""
    players = assignment.players
    metadata = assignment.metadata

    mafia_count = sum(1 for p in players if p.is_mafia)
    villager_count = len(players) - mafia_count

    if mafia_count != metadata.mafia_count:
        return AssignmentCheck(False, "Metadata mismatch: Mafia count")
    if villager_count != metadata.villager_count:
        return AssignmentCheck(False, "Metadata mismatch: Villager count")
    if len(players) != metadata.total_players:
        return AssignmentCheck(False, "Metadata mismatch: Total players")
    if [p.index for p in players] != list(range(len(players))):
        return AssignmentCheck(False, "Player indices are not contiguous")

    return AssignmentCheck(
        True,
        "Assignment is valid",
        {"total_players": len(players), "mafia_count": mafia_count, "villager_count": villager_count},
    )


def measure_distribution(player_names: Sequence[str], mafia_count: int, iterations: int = 1000,
                         random_source: Optional[RandomSource] = None) -> Dict[str, Any]:
    """
    Run repeated allocations and report how often each player drew Mafia.
    Duplicate names are counted together.
    """
    engine = AssignmentEngine(random_source)
    counts: Dict[str, Dict[str, int]] = {name.strip(): {"mafia": 0, "villager": 0} for name in player_names}

    for _ in range(iterations):
        assignment = engine.allocate(player_names, mafia_count)
        for player in assignment.players:
            counts[player.name]["mafia" if player.is_mafia else "villager"] += 1

    expected_rate = mafia_count / len(player_names) if player_names else 0.0
    stats = {}
    for name, tally in counts.items():
        rate = tally["mafia"] / iterations if iterations else 0.0
        stats[name] = {
            "mafia_assignments": tally["mafia"],
            "villager_assignments": tally["villager"],
            "mafia_rate": rate,
            "expected_mafia_rate": expected_rate,
            "deviation": abs(rate - expected_rate),
        }

    return {
        "iterations": iterations,
        "total_players": len(player_names),
        "mafia_count": mafia_count,
        "distribution": stats,
    }
