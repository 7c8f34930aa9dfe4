"""Orchestration of communication from the board view / settings form to the game controller (and the reverse direction)."""

import logging
from typing import Optional

from src.api.models import (
    BoardResponse,
    SettingsRequest,
    SquareActivationRequest,
    SquareView,
)
from src.board.fen import parse_position
from src.board.pieces import EMPTY, piece_color
from src.board.square import BOARD_DIMENSIONS, Square
from src.core.config import EngineConfig, load_engine_config
from src.core.shared_types import Color, Status
from src.engine.boundary import build_compute_boundary
from src.engine.rules import PythonChessRules
from src.game.controller import MoveController
from src.game.orchestrator import ComputerMoveOrchestrator
from src.game.session import GameSession

logger = logging.getLogger(__name__)

DRAW_MESSAGES: dict[Status, str] = {
    Status.STALEMATE: "DRAW (stalemate)",
    Status.DRAW_FIFTY_MOVE_RULE: "DRAW (50-move rule)",
}


class GameService:
    """Orchestration of layers for a game against the computer."""

    def __init__(self, controller: MoveController) -> None:
        self.controller = controller

    # -- Board view / settings form logic ---
    def apply_settings(self, request: SettingsRequest) -> BoardResponse:
        """Settings form got submitted: (re)start the game."""
        self.controller.apply_settings(
            player_colour=request.player_colour,
            difficulty=request.difficulty,
            fen=request.fen,
            piece_set=request.piece_set,
            board_theme=request.board_theme,
        )
        return self.board()

    def activate_square(self, request: SquareActivationRequest) -> BoardResponse:
        """The user clicked a square."""
        self.controller.activate(request.coordinate)
        return self.board()

    def request_computer_move(self) -> BoardResponse:
        """Retry button: only has an effect when the computer is stuck without a move."""
        if not self.controller.request_computer_move():
            logger.debug("Computer move not requested: nothing to retry")
        return self.board()

    def board(self) -> BoardResponse:
        """Current state of the game, as the board view needs it."""
        session = self.controller.session
        flipped = session.player_colour == Color.BLACK
        selected = self.controller.selection.armed
        return BoardResponse(
            fen=session.position,
            turn=session.side_to_move,
            player_colour=session.player_colour,
            difficulty=session.difficulty,
            status=session.status,
            selected_square=selected,
            flipped=flipped,
            ranks=self._build_ranks(session.position, selected, flipped),
            computer_thinking=self.controller.computer_thinking,
            message=self._game_over_message(session),
            piece_set=session.piece_set,
            board_theme=session.board_theme,
        )

    # -- Internal helpers --
    def _build_ranks(
        self, fen: str, selected: Optional[str], flipped: bool
    ) -> list[list[SquareView]]:
        """
        Rows as they are displayed: 8th rank on top, a-file on the left.
        Black plays from the other side, so the whole board is turned around.
        """
        grid = parse_position(fen)
        num_files, num_ranks = BOARD_DIMENSIONS
        rank_order = range(1, num_ranks + 1) if flipped else range(num_ranks, 0, -1)
        file_order = range(num_files, 0, -1) if flipped else range(1, num_files + 1)

        ranks: list[list[SquareView]] = []
        for rank in rank_order:
            row: list[SquareView] = []
            for file in file_order:
                square = Square(file, rank)
                cell = grid[rank - 1][file - 1]
                piece = None if cell == EMPTY else cell
                row.append(
                    SquareView(
                        coordinate=square.to_algebraic(),
                        light=square.is_light,
                        piece=piece,
                        piece_colour=piece_color(piece) if piece else None,
                        selected=square.to_algebraic() == selected,
                    )
                )
            ranks.append(row)
        return ranks

    def _game_over_message(self, session: GameSession) -> Optional[str]:
        if session.winner is not None:
            return f"{session.winner.upper()} WINS (checkmate)"
        return DRAW_MESSAGES.get(session.status)


def create_game_service(config: Optional[EngineConfig] = None) -> GameService:
    """Wire up a fresh game: default session, python-chess rules and the configured search worker."""
    config = config or load_engine_config()
    orchestrator = ComputerMoveOrchestrator(build_compute_boundary(config))
    controller = MoveController(GameSession(), PythonChessRules(), orchestrator)
    return GameService(controller)
