"""Unit tests for src/game/controller.py"""

import time
from unittest.mock import Mock

import pytest

from src.board.fen import side_to_move
from src.core.exceptions import ConfigurationError
from src.core.shared_types import Color, Status
from src.engine.boundary import ExecutorComputeBoundary
from src.engine.rules import PythonChessRules
from src.engine.search import negamax_search
from src.game.controller import MoveController
from src.game.orchestrator import ComputerMoveOrchestrator
from src.game.selection import SelectionState
from src.game.session import GameSession
from tests.conftest import AFTER_E4_FEN, STARTING_FEN, RecordingBoundary

AFTER_E4_E5_FEN = "rnbqkbnr/pppp1ppp/8/4p3/4P3/8/PPPP1PPP/RNBQKBNR w KQkq - 0 2"
FOOLS_MATE_FEN = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"


def play(controller: MoveController, *coordinates: str) -> list[bool]:
    return [controller.activate(coordinate) for coordinate in coordinates]


# --- HUMAN MOVES ---
def test_player_move_hands_turn_to_computer(
    controller: MoveController, boundary: RecordingBoundary
) -> None:
    """Activate e2 then e4: move committed, black to move, search requested with depth 5 (difficulty 3)."""
    assert play(controller, "e2", "e4") == [False, True]

    assert controller.session.position == AFTER_E4_FEN
    assert controller.session.side_to_move == Color.BLACK
    assert controller.session.status == Status.IN_PROGRESS
    assert controller.selection.state == SelectionState.IDLE

    assert len(boundary.requests) == 1
    assert boundary.last_request.fen == AFTER_E4_FEN
    assert boundary.last_request.depth == 5
    assert controller.computer_thinking


def test_computer_reply_is_played(
    controller: MoveController, boundary: RecordingBoundary
) -> None:
    play(controller, "e2", "e4")
    boundary.reply("e7e5")

    assert controller.session.position == AFTER_E4_E5_FEN
    assert controller.session.is_players_turn
    assert not controller.computer_thinking
    # the turn went back to the player: no new request
    assert len(boundary.requests) == 1


def test_reclick_deselects(controller: MoveController, boundary: RecordingBoundary) -> None:
    play(controller, "e2")
    assert controller.selection.armed == "e2"

    assert not controller.activate("e2")
    assert controller.selection.state == SelectionState.IDLE
    assert controller.session.position == STARTING_FEN
    assert boundary.requests == []


def test_click_on_opponent_piece_clears(
    controller: MoveController, boundary: RecordingBoundary
) -> None:
    play(controller, "e2")

    assert not controller.activate("e7")
    assert controller.selection.state == SelectionState.IDLE
    assert controller.session.position == STARTING_FEN
    assert boundary.requests == []


def test_click_on_own_piece_retargets(controller: MoveController) -> None:
    play(controller, "e2", "g1")
    assert controller.selection.armed == "g1"

    assert controller.activate("f3")
    assert controller.session.side_to_move == Color.BLACK


def test_click_on_empty_square_without_selection(controller: MoveController) -> None:
    assert not controller.activate("e4")
    assert controller.selection.state == SelectionState.IDLE


def test_unreachable_empty_square_clears(controller: MoveController) -> None:
    play(controller, "e2")
    assert not controller.activate("e5")
    assert controller.selection.state == SelectionState.IDLE
    assert controller.session.position == STARTING_FEN


def test_capture(controller: MoveController, boundary: RecordingBoundary) -> None:
    play(controller, "e2", "e4")
    boundary.reply("d7d5")

    assert play(controller, "e4", "d5") == [False, True]
    assert controller.session.position.startswith("rnbqkbnr/ppp1pppp/8/3P4/")


# --- TURN GUARD ---
def test_activations_ignored_during_computer_turn(
    controller: MoveController, boundary: RecordingBoundary
) -> None:
    play(controller, "e2", "e4")

    assert play(controller, "e7", "e5") == [False, False]
    assert controller.selection.state == SelectionState.IDLE
    assert controller.session.position == AFTER_E4_FEN
    assert len(boundary.requests) == 1


def test_activations_ignored_after_game_over(boundary: RecordingBoundary) -> None:
    """Engine reports checkmate after the computer's move: nothing the player clicks has any effect anymore."""
    rules = Mock(wraps=PythonChessRules())
    rules.game_over.side_effect = [Status.IN_PROGRESS, Status.CHECKMATE]
    controller = MoveController(GameSession(), rules, ComputerMoveOrchestrator(boundary))

    play(controller, "e2", "e4")
    boundary.reply("e7e5")
    assert controller.session.status == Status.CHECKMATE
    assert controller.session.is_players_turn

    for coordinate in ["d2", "d4", "g1", "f3", "e1"]:
        assert not controller.activate(coordinate)
        assert controller.selection.state == SelectionState.IDLE
    assert controller.session.position == AFTER_E4_E5_FEN
    assert not controller.attempt("d2", "d4")
    assert len(boundary.requests) == 1


def test_no_computer_request_when_move_ends_the_game(boundary: RecordingBoundary) -> None:
    rules = Mock(wraps=PythonChessRules())
    rules.game_over.return_value = Status.STALEMATE
    controller = MoveController(GameSession(), rules, ComputerMoveOrchestrator(boundary))

    assert play(controller, "e2", "e4") == [False, True]
    assert controller.session.status == Status.STALEMATE
    assert boundary.requests == []
    assert not controller.computer_stalled


# --- MOVE ISSUANCE ---
@pytest.mark.parametrize(
    "origin, destination", [("e2", "e5"), ("e7", "e5"), ("e4", "e5"), ("a1", "a3")]
)
def test_rejected_attempt_leaves_session_alone(
    controller: MoveController, boundary: RecordingBoundary, origin: str, destination: str
) -> None:
    assert not controller.attempt(origin, destination)
    assert controller.session.position == STARTING_FEN
    assert controller.session.status == Status.IN_PROGRESS
    assert boundary.requests == []


def test_unchanged_placement_means_rejected(boundary: RecordingBoundary) -> None:
    """Only the piece placement is compared: an engine that only bumps the clocks did not accept the move."""
    rules = Mock()
    rules.apply.return_value = STARTING_FEN.replace(" 0 1", " 1 1")
    controller = MoveController(GameSession(), rules, ComputerMoveOrchestrator(boundary))

    assert not controller.attempt("e2", "e4")
    assert controller.session.position == STARTING_FEN
    rules.game_over.assert_not_called()


def test_attempt_uses_fresh_fen_every_time(controller: MoveController) -> None:
    rules = Mock(wraps=PythonChessRules())
    controller.rules = rules

    controller.attempt("e2", "e4")
    rules.apply.assert_called_once_with(STARTING_FEN, "e2e4")
    rules.game_over.assert_called_once_with(AFTER_E4_FEN)


def test_commit_clears_selection(controller: MoveController) -> None:
    controller.selection.armed = "b1"
    assert controller.attempt("e2", "e4")
    assert controller.selection.armed is None


# --- COMPUTER REPLIES ---
def test_empty_reply_stalls_the_computer(
    controller: MoveController, boundary: RecordingBoundary
) -> None:
    play(controller, "e2", "e4")
    boundary.reply(None)

    assert controller.session.position == AFTER_E4_FEN
    assert controller.computer_stalled
    assert not controller.computer_thinking

    # retry
    assert controller.request_computer_move()
    assert len(boundary.requests) == 2
    assert not controller.computer_stalled
    assert not controller.request_computer_move()

    boundary.reply("e7e5")
    assert controller.session.position == AFTER_E4_E5_FEN


def test_retry_refused_on_player_turn(
    controller: MoveController, boundary: RecordingBoundary
) -> None:
    assert not controller.computer_stalled
    assert not controller.request_computer_move()
    assert boundary.requests == []


def test_illegal_computer_move_is_rejected(
    controller: MoveController, boundary: RecordingBoundary
) -> None:
    play(controller, "e2", "e4")
    boundary.reply("e7e4")

    assert controller.session.position == AFTER_E4_FEN
    assert controller.computer_stalled


def test_computer_promotion_move(boundary: RecordingBoundary) -> None:
    session = GameSession(position="8/8/8/8/8/K7/4p3/7k w - - 0 1")
    controller = MoveController(session, PythonChessRules(), ComputerMoveOrchestrator(boundary))

    assert play(controller, "a3", "a4") == [False, True]
    boundary.reply("e2e1n")

    assert controller.session.position.startswith("8/8/8/8/K7/8/8/4n2k")


def test_computer_move_on_player_turn_is_dropped(controller: MoveController) -> None:
    assert not controller._on_computer_move(0, "e2e4")
    assert controller.session.position == STARTING_FEN


# --- SETTINGS ---
def test_playing_black_starts_with_computer_move(
    controller: MoveController, boundary: RecordingBoundary
) -> None:
    controller.apply_settings(player_colour=Color.BLACK, difficulty=5)

    assert boundary.last_request.fen == STARTING_FEN
    assert boundary.last_request.depth == 10

    boundary.reply("e2e4")
    assert controller.session.position == AFTER_E4_FEN
    assert controller.session.is_players_turn

    assert play(controller, "e7", "e5") == [False, True]
    assert boundary.last_request.fen == AFTER_E4_E5_FEN


def test_playing_white_waits_for_player(
    controller: MoveController, boundary: RecordingBoundary
) -> None:
    controller.apply_settings(player_colour=Color.WHITE, difficulty=1)
    assert boundary.requests == []
    assert controller.session.difficulty == 1


def test_settings_with_computer_to_move_in_fen(
    controller: MoveController, boundary: RecordingBoundary
) -> None:
    """Player is white but the given position has black to move: the computer starts."""
    controller.apply_settings(fen=AFTER_E4_FEN)
    assert boundary.last_request.fen == AFTER_E4_FEN


def test_settings_with_finished_position(
    controller: MoveController, boundary: RecordingBoundary
) -> None:
    controller.apply_settings(player_colour=Color.BLACK, fen=FOOLS_MATE_FEN)

    assert controller.session.status == Status.CHECKMATE
    assert boundary.requests == []
    assert not controller.activate("e2")


def test_settings_restart_finished_game(boundary: RecordingBoundary) -> None:
    session = GameSession(status=Status.CHECKMATE)
    controller = MoveController(session, PythonChessRules(), ComputerMoveOrchestrator(boundary))

    controller.apply_settings(fen=STARTING_FEN)
    assert controller.session.status == Status.IN_PROGRESS
    assert play(controller, "d2", "d4") == [False, True]


@pytest.mark.parametrize("difficulty", [0, 6])
def test_invalid_difficulty(controller: MoveController, difficulty: int) -> None:
    with pytest.raises(ConfigurationError):
        controller.apply_settings(player_colour=Color.BLACK, difficulty=difficulty)
    assert controller.session.player_colour == Color.WHITE
    assert controller.session.difficulty == 3


def test_settings_abandon_outstanding_search(
    controller: MoveController, boundary: RecordingBoundary
) -> None:
    play(controller, "e2", "e4")
    controller.apply_settings(fen=STARTING_FEN)
    assert not controller.computer_thinking

    # the old search still answers: ignored
    boundary.reply("e7e5", index=0)
    assert controller.session.position == STARTING_FEN


def test_settings_clear_selection(controller: MoveController) -> None:
    play(controller, "e2")
    controller.apply_settings(difficulty=2)
    assert controller.selection.state == SelectionState.IDLE


# --- THREADED SEARCH ---
def test_game_against_threaded_search() -> None:
    """Real worker thread: the computer's reply arrives asynchronously and hands the turn back."""
    boundary = ExecutorComputeBoundary(negamax_search)
    controller = MoveController(
        GameSession(difficulty=1), PythonChessRules(), ComputerMoveOrchestrator(boundary)
    )
    try:
        assert play(controller, "e2", "e4") == [False, True]

        deadline = time.monotonic() + 30
        while controller.session.is_computers_turn and time.monotonic() < deadline:
            time.sleep(0.01)

        assert side_to_move(controller.session.position) == Color.WHITE
        assert controller.session.position.endswith(" 2")
        assert not controller.computer_thinking
    finally:
        boundary.shutdown()


@pytest.mark.parametrize("coordinate", ["z9", "", "e22", "e0", "e02"])
def test_unknown_square_is_ignored(controller: MoveController, coordinate: str) -> None:
    play(controller, "e2")
    assert not controller.activate(coordinate)
    assert controller.selection.armed == "e2"


def test_padded_rank_does_not_arm(controller: MoveController) -> None:
    """'e02' is not another name for e2."""
    assert not controller.activate("e02")
    assert controller.selection.state == SelectionState.IDLE


def test_reply_from_previous_game_is_dropped_after_restart(
    controller: MoveController, boundary: RecordingBoundary
) -> None:
    """
    The reply to the first game's search is released from the mailbox, then the game is restarted before
    the move gets applied. The late move must not land in the new game.
    """
    controller.apply_settings(player_colour=Color.BLACK)
    first_request = boundary.last_request
    late_handler = controller.orchestrator._release(first_request)
    assert late_handler is not None

    controller.apply_settings(player_colour=Color.BLACK, fen=STARTING_FEN)
    second_request = boundary.last_request
    assert second_request.request_id != first_request.request_id

    assert not late_handler("g1f3")
    assert controller.session.position == STARTING_FEN
    assert controller.orchestrator.pending == second_request

    # the new game carries on normally
    boundary.reply("e2e4")
    assert controller.session.position == AFTER_E4_FEN
    assert play(controller, "e7", "e5") == [False, True]
    assert len(boundary.requests) == 3
    assert boundary.last_request.fen == AFTER_E4_E5_FEN
