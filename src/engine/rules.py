"""
Rules engine collaborator.

The controller has no chess knowledge of its own. Everything it needs to know about the rules
goes through the two functions of RulesEngine, both of which work on a FEN string only (no engine state survives between calls).
"""

from typing import Protocol

import chess

from src.board.moves import MoveDescriptor
from src.core.shared_types import Status


class RulesEngine(Protocol):
    """Just the parts of a chess rules engine the controller needs"""

    def apply(self, fen: str, move: str) -> str:
        """FEN after playing the move (UCI notation). An illegal move leaves the position unchanged."""
        ...

    def game_over(self, fen: str) -> Status:
        """Has the game ended in this position?"""
        ...


class PythonChessRules:
    """RulesEngine backed by python-chess. A fresh chess.Board is created for every call."""

    def apply(self, fen: str, move: str) -> str:
        board = chess.Board(fen)
        candidate = self._to_engine_move(board, move)
        if candidate is None or not board.is_legal(candidate):
            return fen
        board.push(candidate)
        return board.fen()

    def game_over(self, fen: str) -> Status:
        board = chess.Board(fen)
        if board.is_checkmate():
            return Status.CHECKMATE
        if board.is_stalemate():
            return Status.STALEMATE
        if board.is_fifty_moves():
            return Status.DRAW_FIFTY_MOVE_RULE
        return Status.IN_PROGRESS

    def _to_engine_move(self, board: chess.Board, move: str) -> chess.Move | None:
        """
        Parse the notation. Human moves never carry a promotion piece,
        so a pawn reaching the last rank without one gets promoted to a queen.
        """
        descriptor = MoveDescriptor.from_uci(move)
        if not descriptor.is_well_formed():
            return None

        try:
            candidate = chess.Move.from_uci(descriptor.to_uci())
        except ValueError:
            return None
        if candidate.promotion is None and self._is_pawn_to_last_rank(board, candidate):
            return chess.Move(candidate.from_square, candidate.to_square, chess.QUEEN)
        return candidate

    def _is_pawn_to_last_rank(self, board: chess.Board, move: chess.Move) -> bool:
        if board.piece_type_at(move.from_square) != chess.PAWN:
            return False
        return chess.square_rank(move.to_square) in (0, 7)
