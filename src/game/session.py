"""
The GameSession is the single source of truth of a game in progress.

Only two things ever change it:
* committing a move (position replaced wholesale, status recomputed from the rules engine)
* applying settings (which (re)starts the game)
"""

from dataclasses import dataclass
from typing import Optional

from src.board.fen import STARTING_FEN, side_to_move
from src.core.shared_types import Color, Status

DEFAULT_DIFFICULTY = 3
DEFAULT_PIECE_SET = "open-chess-font"
DEFAULT_BOARD_THEME = "dark"


@dataclass
class GameSession:
    position: str = STARTING_FEN
    player_colour: Color = Color.WHITE
    difficulty: int = DEFAULT_DIFFICULTY
    status: Status = Status.IN_PROGRESS
    # cosmetic, only carried for the board view
    piece_set: str = DEFAULT_PIECE_SET
    board_theme: str = DEFAULT_BOARD_THEME

    @property
    def side_to_move(self) -> Color:
        return side_to_move(self.position)

    @property
    def computer_colour(self) -> Color:
        return self.player_colour.opponent

    @property
    def is_players_turn(self) -> bool:
        return self.side_to_move == self.player_colour

    @property
    def is_computers_turn(self) -> bool:
        return self.side_to_move == self.computer_colour

    @property
    def is_over(self) -> bool:
        return self.status.is_terminal

    @property
    def winner(self) -> Optional[Color]:
        """Only checkmate has a winner: the side to move got mated, so the other side won."""
        if self.status != Status.CHECKMATE:
            return None
        return self.side_to_move.opponent

    def commit(self, position: str, status: Status) -> None:
        """Record the outcome of a committed move."""
        self.position = position
        self.status = status

    def configure(
        self,
        player_colour: Optional[Color] = None,
        difficulty: Optional[int] = None,
        position: Optional[str] = None,
        status: Optional[Status] = None,
        piece_set: Optional[str] = None,
        board_theme: Optional[str] = None,
    ) -> None:
        """Apply settings. Anything left out keeps its previous value."""
        if player_colour is not None:
            self.player_colour = player_colour
        if difficulty is not None:
            self.difficulty = difficulty
        if position is not None:
            self.position = position
        if status is not None:
            self.status = status
        if piece_set:
            self.piece_set = piece_set
        if board_theme:
            self.board_theme = board_theme
