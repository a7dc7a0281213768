"""
Tests for the game session: allocation, reveal flow, projections and reset.
"""

import pytest
from mafia_allocator.core import GameSession, SessionStage, InvalidConfiguration, OutOfOrderAccess
from mafia_allocator.config.game_config import GameConfig

from conftest import FIVE_PLAYERS


def _reveal(session, index):
    session.request_reveal(index)
    assert session.complete_reveal(index)


def test_session_starts_in_input_stage(session):
    assert session.stage == SessionStage.INPUT
    assert session.assignment is None
    assert session.reveal_state is None
    assert session.active_dialog is None
    assert session.current_index is None


def test_five_players_two_mafia_scenario(allocated_session):
    session = allocated_session
    assert len(session.assignment.mafia_players) == 2
    assert session.stage == SessionStage.REVEALING

    session.request_reveal(0)
    with pytest.raises(OutOfOrderAccess):
        session.request_reveal(1)

    assert session.complete_reveal(0)
    assert session.current_index == 1


def test_request_reveal_returns_card_and_marks_revealed(allocated_session):
    card = allocated_session.request_reveal(0)

    assert card.index == 0
    assert card.revealed
    assert allocated_session.assignment.players[0].revealed
    assert allocated_session.active_dialog == 0


def test_out_of_order_reveal_leaves_state_untouched(allocated_session, recorded_events):
    session = allocated_session
    _reveal(session, 0)
    assignment_before = session.assignment
    state_before = session.reveal_state

    with pytest.raises(OutOfOrderAccess) as exc_info:
        session.request_reveal(3)

    assert exc_info.value.current_index == 1
    assert session.assignment is assignment_before
    assert session.reveal_state == state_before
    assert session.active_dialog is None
    assert recorded_events[-1] == ("reveal_rejected", {"requested_index": 3, "current_index": 1})


def test_revealed_role_stays_revealed_after_close(allocated_session):
    _reveal(allocated_session, 0)
    views = allocated_session.player_views()

    assert views[0]["revealed"]
    assert views[0]["is_mafia"] == allocated_session.assignment.players[0].is_mafia
    assert allocated_session.active_dialog is None


def test_player_views_hide_unrevealed_roles(allocated_session):
    views = allocated_session.player_views()

    assert [v["index"] for v in views] == list(range(5))
    assert all("is_mafia" not in v for v in views)
    assert [v["is_current"] for v in views] == [True, False, False, False, False]


def test_dialog_view_only_while_open(allocated_session):
    assert allocated_session.dialog_view() is None

    allocated_session.request_reveal(0)
    dialog = allocated_session.dialog_view()
    player = allocated_session.assignment.players[0]
    assert dialog == {
        "index": 0,
        "name": player.name,
        "role": "mafia" if player.is_mafia else "villager",
        "is_mafia": player.is_mafia,
    }

    allocated_session.complete_reveal(0)
    assert allocated_session.dialog_view() is None


def test_revealed_indices_track_current_index(allocated_session):
    for index in range(5):
        _reveal(allocated_session, index)
        state = allocated_session.reveal_state
        assert state.revealed_indices == set(range(state.current_index))

    assert allocated_session.is_complete
    assert allocated_session.progress()["is_complete"]
    assert allocated_session.progress()["revealed_count"] == 5


def test_double_tap_close_is_noop(allocated_session):
    allocated_session.request_reveal(0)
    assert allocated_session.complete_reveal(0)
    assert not allocated_session.complete_reveal(0)
    assert allocated_session.current_index == 1


def test_reveal_before_allocation(session):
    with pytest.raises(OutOfOrderAccess) as exc_info:
        session.request_reveal(0)
    assert exc_info.value.current_index is None
    assert not session.complete_reveal(0)


def test_edge_case_allocations(session):
    session.allocate(["A", "B", "C"], 0, confirmed=True)
    assert not session.assignment.mafia_players

    session.allocate(["A", "B", "C"], 3, confirmed=True)
    assert len(session.assignment.mafia_players) == 3
    assert session.action_log[-1]["data"]["confirmed"] is True


def test_invalid_allocation_keeps_previous_state(allocated_session):
    _reveal(allocated_session, 0)
    assignment = allocated_session.assignment

    with pytest.raises(InvalidConfiguration):
        allocated_session.allocate(["A", ""], 1)

    assert allocated_session.assignment is assignment
    assert allocated_session.current_index == 1
    assert allocated_session.player_names == FIVE_PLAYERS


def test_reallocate_discards_reveal_progress(allocated_session):
    _reveal(allocated_session, 0)
    first = allocated_session.assignment

    second = allocated_session.reallocate()

    assert second is not first
    assert allocated_session.current_index == 0
    assert allocated_session.reveal_state.revealed_indices == set()
    assert all(not p.revealed for p in second.players)
    assert second.names == FIVE_PLAYERS
    assert len(second.mafia_players) == 2


def test_reallocate_with_new_inputs(allocated_session):
    allocated_session.reallocate(["X", "Y", "Z"], 1)
    assert allocated_session.assignment.names == ["X", "Y", "Z"]
    assert allocated_session.mafia_count == 1


def test_reallocate_without_players_raises(session):
    with pytest.raises(InvalidConfiguration):
        session.reallocate()


def test_reset_during_open_dialog(allocated_session):
    session = allocated_session
    _reveal(session, 0)
    _reveal(session, 1)
    session.request_reveal(2)
    assignment = session.assignment
    open_dialog = session.active_dialog

    result = session.reset()

    assert session.assignment is None
    assert session.reveal_state is None
    assert session.active_dialog is None
    assert session.stage == SessionStage.INPUT
    assert result.names == FIVE_PLAYERS
    assert all(result.names[k] == assignment.players[k].name for k in range(5))
    assert result.players[2].name == assignment.players[open_dialog].name
    assert [p.index for p in result.players] == list(range(5))


def test_reset_carries_names_verbatim(allocated_session):
    names = ["  Ann ", "Bob", "Bob", "Cat", "Dee"]
    result = allocated_session.reset(names)
    assert result.names == names
    assert allocated_session.player_names == names


def test_reset_is_idempotent(allocated_session, recorded_events):
    allocated_session.request_reveal(0)
    first = allocated_session.reset()
    events_after_first = len(recorded_events)
    second = allocated_session.reset()

    assert first == second
    assert allocated_session.assignment is None
    assert len(recorded_events) == events_after_first


def test_reset_before_allocation(session):
    result = session.reset(["A", "B"])
    assert result.names == ["A", "B"]
    assert session.stage == SessionStage.INPUT
    assert session.action_log == []


def test_full_reveal_then_reset(session):
    session.allocate(["A", "B", "C"], 1)
    for index in range(3):
        _reveal(session, index)
    assert session.is_complete

    result = session.reset(["A", "B", "C"])

    assert session.assignment is None
    assert session.reveal_state is None
    assert result.names == ["A", "B", "C"]


def test_progress_before_allocation(session):
    session.reset(["A", "B"])
    assert session.progress() == {
        "stage": "input",
        "current_index": None,
        "is_complete": False,
        "revealed_count": 0,
        "total_players": 2,
        "active_dialog": None,
    }
    assert session.player_views()[1] == {"index": 1, "name": "B", "revealed": False, "is_current": False}


def test_events_never_carry_roles(allocated_session, recorded_events):
    for index in range(5):
        _reveal(allocated_session, index)
    allocated_session.reset()

    event_types = [event_type for event_type, _ in recorded_events]
    assert event_types[0] == "allocation"
    assert "all_revealed" in event_types
    assert "reset" in event_types

    for event_type, data in recorded_events:
        assert "is_mafia" not in str(data)
        assert "role" not in data


def test_public_state_withholds_roles(allocated_session):
    _reveal(allocated_session, 0)
    state = allocated_session.public_state()
    assert state["players"][0]["revealed"]
    assert all("is_mafia" not in p for p in state["players"])


def test_announcements(engine, capsys):
    session = GameSession(GameConfig(use_announcements=True), engine=engine)
    session.allocate(["A", "B"], 1)

    output = capsys.readouterr().out
    assert "[HOST] Roles allocated for 2 players." in output
    assert "[HOST] Pass the device to" in output
    assert "Mafia" not in output


def test_session_summary(allocated_session):
    summary = allocated_session.get_session_summary()
    assert summary["stage"] == "revealing"
    assert summary["mafia_count"] == 2
    assert summary["assignment"]["total_players"] == 5
    assert summary["progress"]["current_index"] == 0


def test_seeded_config_reproduces_allocation():
    config = GameConfig(random_seed=42, use_announcements=False)
    first = GameSession(config).allocate(FIVE_PLAYERS, 2)
    second = GameSession(config).allocate(FIVE_PLAYERS, 2)
    assert [(p.name, p.is_mafia) for p in first.players] == [(p.name, p.is_mafia) for p in second.players]
