"""
The MoveController is the entrypoint into the game for the service layer.

It owns the selection, issues moves against the rules engine, and keeps the turns going by asking the
orchestrator for a computer move whenever a committed move hands the turn to the computer.

Thread safety: all state changes go through one re-entrant lock. Computer replies arrive on the search worker's thread
and take the same lock, so the session and selection only ever see one writer at a time. Every (re)start of the game
bumps the game number, and a reply is only applied if it was requested during the current game.
"""

import functools
import logging
import threading
from typing import Optional

from src.board.fen import piece_at, placement
from src.board.moves import MoveDescriptor
from src.board.square import is_valid_square
from src.core.shared_types import Color, Status
from src.engine.rules import RulesEngine
from src.game.orchestrator import ComputerMoveOrchestrator, depth_for
from src.game.selection import Selection, Transition
from src.game.session import GameSession

logger = logging.getLogger(__name__)


class MoveController:
    def __init__(
        self,
        session: GameSession,
        rules: RulesEngine,
        orchestrator: ComputerMoveOrchestrator,
    ) -> None:
        self.session = session
        self.rules = rules
        self.orchestrator = orchestrator
        self.selection = Selection()
        self._game_number = 0
        self._lock = threading.RLock()

    # --- PUBLIC API CALLED BY SERVICE ---
    @property
    def computer_thinking(self) -> bool:
        with self._lock:
            return self.orchestrator.pending is not None

    @property
    def computer_stalled(self) -> bool:
        """Computer to move, but nobody is searching (e.g. the last search came back empty)."""
        with self._lock:
            return self._computer_may_move() and not self.computer_thinking

    def activate(self, coordinate: str) -> bool:
        """
        The user clicked a square.
        ---

        Ignored entirely unless it is the player's turn and the game is still going.
        Returns True if the activation completed a committed move.
        """
        if not is_valid_square(coordinate):
            logger.debug("Ignoring activation on unknown square %r", coordinate)
            return False

        with self._lock:
            if self.session.is_over or not self.session.is_players_turn:
                logger.debug("Ignoring activation on %s: not the player's turn", coordinate)
                return False

            transition = self.selection.activate(
                coordinate=coordinate,
                piece=piece_at(self.session.position, coordinate),
                side_to_move=self.session.side_to_move,
                try_move=self._attempt,
            )
            return transition == Transition.COMMITTED

    def attempt(self, origin: str, destination: str) -> bool:
        """Move issuance: try the move and commit it if the rules engine changes the position."""
        with self._lock:
            return self._attempt(origin, destination)

    def apply_settings(
        self,
        player_colour: Optional[Color] = None,
        difficulty: Optional[int] = None,
        fen: Optional[str] = None,
        piece_set: Optional[str] = None,
        board_theme: Optional[str] = None,
    ) -> None:
        """
        (Re)start the game with the given settings. Anything left out keeps its previous value.
        ---

        1. validate the difficulty (raises ConfigurationError)
        2. forget about any outstanding search and the current selection
        3. update the session (status is classified again if a new position was given)
        4. computer to move? ask for its move right away (e.g. the player chose black)
        """
        if difficulty is not None:
            depth_for(difficulty)

        with self._lock:
            self.orchestrator.abandon()
            self.selection.clear()
            self._game_number += 1

            status: Optional[Status] = self.rules.game_over(fen) if fen else None
            self.session.configure(
                player_colour=player_colour,
                difficulty=difficulty,
                position=fen,
                status=status,
                piece_set=piece_set,
                board_theme=board_theme,
            )
            logger.info(
                "Settings applied: player=%s difficulty=%d fen=%s",
                self.session.player_colour,
                self.session.difficulty,
                self.session.position,
            )

            if self._computer_may_move():
                self._request_computer_move()

    def request_computer_move(self) -> bool:
        """Ask for the computer's move again. Only does something when the computer is stalled."""
        with self._lock:
            if not self._computer_may_move() or self.computer_thinking:
                return False
            return self._request_computer_move()

    # -- PRIVATE HELPERS ---
    def _attempt(self, origin: str, destination: str) -> bool:
        return self._issue(MoveDescriptor(origin, destination))

    def _issue(self, move: MoveDescriptor) -> bool:
        """
        Legality proxy
        ----

        The rules engine plays the move on a scratch copy of the position (it only ever gets the FEN).
        If the piece placement did not change, the move was not accepted. Otherwise:

        1. replace the session's position and status
        2. clear the selection
        3. hand the turn over (request the computer's move if needed)
        """
        if self.session.is_over:
            return False

        before = self.session.position
        after = self.rules.apply(before, move.to_uci())
        if placement(after) == placement(before):
            logger.debug("Move %s rejected by rules engine", move.to_uci())
            return False

        self.session.commit(after, self.rules.game_over(after))
        self.selection.clear()
        logger.info(
            "Committed %s, status: %s, fen: %s", move.to_uci(), self.session.status, after
        )

        if self._computer_may_move():
            self._request_computer_move()
        return True

    def _computer_may_move(self) -> bool:
        return not self.session.is_over and self.session.is_computers_turn

    def _request_computer_move(self) -> bool:
        on_move = functools.partial(self._on_computer_move, self._game_number)
        return self.orchestrator.request_move(
            self.session.position, self.session.difficulty, on_move
        )

    def _on_computer_move(self, game_number: int, notation: str) -> bool:
        """Reply from the search worker. Applied like a human move, as long as it is still the computer's turn."""
        with self._lock:
            if game_number != self._game_number:
                logger.warning(
                    "Dropping computer move %s: requested in game %d, now playing game %d",
                    notation,
                    game_number,
                    self._game_number,
                )
                return False
            if not self._computer_may_move():
                logger.warning("Dropping computer move %s: not the computer's turn", notation)
                return False
            return self._issue(MoveDescriptor.from_uci(notation))
