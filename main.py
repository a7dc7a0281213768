"""
Console host for allocating and revealing Mafia roles on one shared device.
"""

import argparse
from typing import Callable, List, Optional

from mafia_allocator.core import (
    GameSession, InvalidConfiguration, OutOfOrderAccess,
    validate_game_configuration, format_warning
)
from mafia_allocator.config.game_config import GameConfig
from mafia_allocator.config.config_loader import check_config, load_config
from mafia_allocator.web import EventEmitter, RunRecorder, SessionServer


class QuitSession(Exception):
    """Raised when the host quits from any prompt."""


class ConsoleHost:
    """Runs the input, allocation, reveal and reset flow in a terminal."""

    def __init__(self, config: Optional[GameConfig] = None, input_func: Callable[[str], str] = input,
                 event_emitter: Optional[EventEmitter] = None, auto_confirm: bool = False):
        self.config = config or load_config()
        self.input_func = input_func
        self.auto_confirm = auto_confirm
        self.event_emitter = event_emitter
        self.session = GameSession(self.config, event_emitter=event_emitter)

    def _ask(self, prompt: str) -> str:
        answer = self.input_func(prompt).strip()
        if answer.lower() in ("q", "quit"):
            raise QuitSession()
        return answer

    def _clear_screen(self) -> None:
        # Push the previous player's role out of view
        print("\n" * 50)

    def prompt_player_names(self, carried_names: Optional[List[str]] = None) -> List[str]:
        """Ask for player names, offering to keep names carried over from a reset."""
        if carried_names:
            answer = self._ask(f"Players [{', '.join(carried_names)}] (Enter to keep, or comma-separated names): ")
            if not answer:
                return list(carried_names)
            return [name.strip() for name in answer.split(",")]

        while True:
            answer = self._ask(f"Number of players [{self.config.default_player_count}]: ")
            if not answer:
                count = self.config.default_player_count
            elif answer.isdigit():
                count = int(answer)
            else:
                print("Please enter a whole number.")
                continue
            if self.config.min_players <= count <= self.config.max_players:
                break
            print(f"Player count must be between {self.config.min_players} and {self.config.max_players}.")

        names = []
        for number in range(1, count + 1):
            name = ""
            while not name:
                name = self._ask(f"Name of player {number}: ")
                if not name:
                    print("Player name is required.")
            names.append(name)
        return names

    def prompt_mafia_count(self, default: Optional[int] = None) -> Optional[int]:
        default = self.config.default_mafia_count if default is None else default
        answer = self._ask(f"Number of Mafia [{default}]: ")
        if not answer:
            return default
        try:
            return int(answer)
        except ValueError:
            print("Please enter a whole number.")
            return None

    def confirm(self, message: str) -> bool:
        if self.auto_confirm:
            return True
        print(message)
        return self._ask("Proceed anyway? [y/N]: ").lower() in ("y", "yes")

    def setup(self, player_names: Optional[List[str]] = None, mafia_count: Optional[int] = None) -> None:
        """Collect a valid configuration and allocate roles."""
        carried = player_names
        names = player_names
        count = mafia_count
        while True:
            if names is None:
                names = self.prompt_player_names(carried)
            if count is None:
                count = self.prompt_mafia_count(self.session.mafia_count)
                if count is None:
                    continue

            validation = validate_game_configuration(names, count, self.config)
            if not validation.is_valid:
                print(f"Invalid configuration: {validation.message}")
                carried, names, count = names, None, None
                continue
            if validation.requires_confirmation and not self.confirm(format_warning(validation)):
                carried, names, count = names, None, None
                continue

            try:
                self.session.allocate(names, count, confirmed=validation.requires_confirmation)
            except InvalidConfiguration as e:
                print(f"Invalid configuration: {e.message}")
                carried, names, count = names, None, None
                continue
            return

    def reveal_player(self, index: int) -> None:
        """Show one player's role, then hide it and advance."""
        try:
            player = self.session.request_reveal(index)
        except OutOfOrderAccess:
            current = self.session.get_player(self.session.current_index)
            if current is None:
                print("Not yet: every role has already been revealed.")
            else:
                print(f"Not yet: it is {current.name}'s turn.")
            return

        self._clear_screen()
        print(f"{player.name}, your role is: {str(player.role).upper()}")
        self._ask("Press Enter to hide your role and pass the device on...")
        self.session.complete_reveal(index)
        self._clear_screen()

    def reveal_round(self) -> str:
        """
        Drive the reveal sequence until the host resets or quits.
        Returns "reset" when the host asked to start over.
        """
        while True:
            progress = self.session.progress()
            total = progress["total_players"]
            if progress["is_complete"]:
                answer = self._ask("All roles revealed. [r]eset, re[s]huffle or [q]uit: ").lower()
            else:
                current = self.session.get_player(progress["current_index"])
                answer = self._ask(
                    f"Next: {current.name} ({current.index + 1} of {total}). "
                    f"Enter to reveal, a player number, [s] reshuffle, [r] reset or [q]uit: "
                ).lower()

            if answer == "r":
                return "reset"
            if answer == "s":
                self.session.reallocate(confirmed=True)
                continue
            if not answer and not progress["is_complete"]:
                self.reveal_player(progress["current_index"])
            elif answer.isdigit():
                self.reveal_player(int(answer) - 1)
            else:
                print("Unrecognised choice.")

    def run(self, player_names: Optional[List[str]] = None, mafia_count: Optional[int] = None) -> None:
        """Run sessions until the host quits."""
        try:
            self.setup(player_names, mafia_count)
            while self.reveal_round() == "reset":
                result = self.session.reset()
                names = self.prompt_player_names(result.names) if result.names else None
                self.setup(names, None)
        except (QuitSession, EOFError):
            self.session.reset()
            print("Goodbye.")


def _create_event_emitter(config: GameConfig, record: bool, run_name: Optional[str]) -> EventEmitter:
    if not (record or config.record_runs):
        return EventEmitter()

    run_recorder = RunRecorder(config.runs_dir)
    run_name = run_recorder.create_run(run_name)
    run_recorder.save_metadata({
        "config": {
            "min_players": config.min_players,
            "max_players": config.max_players,
            "random_seed": config.random_seed
        }
    })
    print(f"Recording session to: {run_recorder.get_run_path()}/")
    return EventEmitter(run_recorder)


def main():
    """Entry point for running an allocation session."""
    parser = argparse.ArgumentParser(
        description="Allocate and reveal Mafia roles on one shared device",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                                    # Prompt for players and Mafia count
  python main.py --players Ann,Bob,Cat,Dan,Eve -m 2 # Skip the setup prompts
  python main.py --config configs/party.yaml        # Use a YAML config
  python main.py --web --port 8080                  # Serve the session to a browser
        """
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to YAML configuration file (default: use default config)"
    )
    parser.add_argument(
        "--seed",
        "-s",
        type=int,
        default=None,
        help="Random seed for reproducible allocations (testing only)"
    )
    parser.add_argument(
        "--players",
        "-p",
        type=str,
        default=None,
        help="Comma-separated player names"
    )
    parser.add_argument(
        "--mafia",
        "-m",
        type=int,
        default=None,
        help="Number of Mafia players"
    )
    parser.add_argument(
        "--yes",
        "-y",
        action="store_true",
        help="Accept edge case warnings (no Mafia, all Mafia, ...) without asking"
    )
    parser.add_argument(
        "--web",
        action="store_true",
        help="Serve the session over HTTP instead of running in the terminal"
    )
    parser.add_argument("--host", type=str, default=None, help="Host for the web server")
    parser.add_argument("--port", type=int, default=None, help="Port for the web server")
    parser.add_argument(
        "--record",
        action="store_true",
        help="Record session events to the runs directory"
    )
    parser.add_argument(
        "--run-name",
        "-r",
        type=str,
        default=None,
        help="Custom name for the recorded run (default: auto-generated timestamp)"
    )

    args = parser.parse_args()

    config = load_config(args.config)
    if args.seed is not None:
        config.random_seed = args.seed
    if args.host is not None:
        config.web_host = args.host
    if args.port is not None:
        config.web_port = args.port
    check_config(config)

    event_emitter = _create_event_emitter(config, args.record, args.run_name)

    if args.web:
        server = SessionServer(config, event_emitter=event_emitter)
        server.start()
        return

    print("Mafia Role Allocator")
    print("=" * 60)
    if args.config:
        print(f"Using config: {args.config}")
    print("Type 'q' at any prompt to quit.")
    print("=" * 60)

    player_names = [name.strip() for name in args.players.split(",")] if args.players else None
    host = ConsoleHost(config, event_emitter=event_emitter, auto_confirm=args.yes)
    host.run(player_names, args.mafia)


if __name__ == "__main__":
    main()
