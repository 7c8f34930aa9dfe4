"""
Search functions that run on the far side of the compute boundary.

Every search takes (fen, depth) and returns the best move in UCI notation, or None if the position has no move to make.
They never touch the game session: the only thing they see is the FEN in the request.

Two flavours:
- negamax_search: small built-in alpha-beta search over python-chess. A plain module-level
  function, so it can be shipped to a ProcessPoolExecutor.
- UciEngineSearch: hands the position to an external UCI engine (e.g. Stockfish) with a depth limit.
"""

import logging
import threading
from typing import Iterable, Optional

import chess
import chess.engine

from src.core.exceptions import SearchError

logger = logging.getLogger(__name__)

PIECE_VALUES: dict[chess.PieceType, int] = {
    chess.PAWN: 100,
    chess.KNIGHT: 320,
    chess.BISHOP: 330,
    chess.ROOK: 500,
    chess.QUEEN: 900,
    chess.KING: 0,
}
MATE_SCORE = 100_000


# --- BUILT-IN SEARCH ---
def evaluate(board: chess.Board) -> int:
    """
    Material balance in centipawns from the side-to-move's perspective.

    Positive = side to move is ahead (negamax convention, the caller negates when recursing).
    """
    score = 0
    for piece_type, value in PIECE_VALUES.items():
        score += value * len(board.pieces(piece_type, chess.WHITE))
        score -= value * len(board.pieces(piece_type, chess.BLACK))
    return score if board.turn == chess.WHITE else -score


def order_moves(board: chess.Board, moves: Iterable[chess.Move]) -> list[chess.Move]:
    """Captures and promotions first, so alpha-beta gets to cut off early."""

    def _priority(move: chess.Move) -> int:
        priority = 0
        if board.is_capture(move):
            victim = board.piece_type_at(move.to_square) or chess.PAWN
            priority += PIECE_VALUES[victim]
        if move.promotion:
            priority += PIECE_VALUES[move.promotion]
        return priority

    return sorted(moves, key=_priority, reverse=True)


def negamax(board: chess.Board, depth: int, alpha: int, beta: int, ply: int = 0) -> int:
    """
    Alpha-beta negamax.

    Args:
        board: Position to search. Moves are pushed and popped, so it is left as it was.
        depth: Remaining depth in plies.
        alpha, beta: Search window.
        ply: Distance from the root, used to prefer faster mates.

    Returns:
        Score from the side-to-move's perspective.
    """
    if board.is_checkmate():
        return -MATE_SCORE + ply
    if board.is_stalemate() or board.is_insufficient_material() or board.is_fifty_moves():
        return 0
    if depth == 0:
        return evaluate(board)

    best = -MATE_SCORE
    for move in order_moves(board, board.legal_moves):
        board.push(move)
        score = -negamax(board, depth - 1, -beta, -alpha, ply + 1)
        board.pop()

        best = max(best, score)
        alpha = max(alpha, score)
        if alpha >= beta:
            break
    return best


def negamax_search(fen: str, depth: int) -> Optional[str]:
    """Best move for the side to move in the given position (None if the game is over)."""
    if depth < 1:
        raise SearchError(f"Search depth must be positive, got {depth}")

    board = chess.Board(fen)
    best_move: Optional[chess.Move] = None
    alpha, beta = -MATE_SCORE - 1, MATE_SCORE + 1
    for move in order_moves(board, board.legal_moves):
        board.push(move)
        score = -negamax(board, depth - 1, -beta, -alpha, ply=1)
        board.pop()

        if best_move is None or score > alpha:
            best_move = move
            alpha = max(alpha, score)

    if best_move is None:
        return None
    logger.debug("negamax depth=%d best=%s score=%d", depth, best_move.uci(), alpha)
    return best_move.uci()


# --- EXTERNAL ENGINE ---
class UciEngineSearch:
    """
    Search by an external UCI engine.

    The engine process is started lazily on the first search and reused afterwards.
    Not picklable: run it in a thread, not in a process pool.
    """

    def __init__(self, path: str = "stockfish") -> None:
        self.path = path
        self._engine: Optional[chess.engine.SimpleEngine] = None
        self._lock = threading.Lock()

    def __call__(self, fen: str, depth: int) -> Optional[str]:
        board = chess.Board(fen)
        with self._lock:
            engine = self._ensure_engine()
            result = engine.play(board, chess.engine.Limit(depth=depth))
        if result.move is None:
            return None
        return result.move.uci()

    def close(self) -> None:
        """Terminate the engine process (if it was ever started)."""
        with self._lock:
            if self._engine is not None:
                self._engine.quit()
                self._engine = None

    def _ensure_engine(self) -> chess.engine.SimpleEngine:
        if self._engine is None:
            try:
                self._engine = chess.engine.SimpleEngine.popen_uci(self.path)
            except (OSError, chess.engine.EngineError) as e:
                raise SearchError(f"Cannot start UCI engine at {self.path!r}: {e}") from e
            logger.info("Started UCI engine %s", self.path)
        return self._engine
