"""
Computer move orchestration.

When it is the computer's turn, the position is sent across the compute boundary together with a search depth
(derived from the difficulty). The reply is handed to the move handler registered with the request, which applies it
exactly like a human move.

At most one request is outstanding at any time: the mailbox has a single slot and a new request is refused while it is filled.
"""

import itertools
import logging
import threading
from typing import Callable, Optional

from src.core.exceptions import ConfigurationError
from src.core.models import SearchReply, SearchRequest
from src.engine.boundary import ComputeBoundary

logger = logging.getLogger(__name__)

# Difficulty (as chosen in the settings) -> search depth in plies
DIFFICULTY_TO_DEPTH: dict[int, int] = {
    1: 2,
    2: 4,
    3: 5,
    4: 7,
    5: 10,
}

# Receives the move (UCI notation), returns True if it got committed
MoveHandler = Callable[[str], bool]


def depth_for(difficulty: int) -> int:
    if difficulty not in DIFFICULTY_TO_DEPTH:
        raise ConfigurationError(
            f"Difficulty must be one of {', '.join(map(str, DIFFICULTY_TO_DEPTH))}, got {difficulty!r}"
        )
    return DIFFICULTY_TO_DEPTH[difficulty]


class ComputerMoveOrchestrator:
    """Single-slot mailbox in front of the compute boundary."""

    def __init__(self, boundary: ComputeBoundary) -> None:
        self.boundary = boundary
        self._pending: Optional[SearchRequest] = None
        self._handler: Optional[MoveHandler] = None
        self._request_ids = itertools.count(1)
        self._lock = threading.Lock()

    @property
    def pending(self) -> Optional[SearchRequest]:
        """The outstanding request, if any."""
        return self._pending

    def request_move(self, position: str, difficulty: int, on_move: MoveHandler) -> bool:
        """
        Fire-and-forget request for a computer move.
        ---

        Returns False (and sends nothing) if a request is already outstanding or the boundary refuses it.
        """
        depth = depth_for(difficulty)
        with self._lock:
            if self._pending is not None:
                logger.warning(
                    "Search request %d still outstanding, not sending another one",
                    self._pending.request_id,
                )
                return False
            request = SearchRequest(
                fen=position, depth=depth, request_id=next(self._request_ids)
            )
            self._pending = request
            self._handler = on_move

        logger.info(
            "Requesting computer move %d: depth=%d fen=%s",
            request.request_id,
            depth,
            position,
        )
        try:
            self.boundary.submit(request, self._receive)
        except RuntimeError:
            # executor already shut down
            logger.exception("Compute boundary refused request %d", request.request_id)
            self._release(request)
            return False
        return True

    def abandon(self) -> Optional[SearchRequest]:
        """
        Empty the mailbox (the game got reconfigured).
        The search itself keeps running, its reply is dropped when it arrives.
        """
        with self._lock:
            request = self._pending
            self._pending = None
            self._handler = None
        if request is not None:
            logger.info("Abandoned search request %d", request.request_id)
        return request

    def _receive(self, reply: SearchReply) -> None:
        """One-shot reply handler. Empties the slot before forwarding, so the forwarded move may trigger the next request."""
        handler = self._release(reply.request)
        if handler is None:
            logger.warning(
                "Dropping reply to abandoned search request %d", reply.request.request_id
            )
            return

        if not reply.move:
            logger.warning(
                "No move found for search request %d (fen=%s)",
                reply.request.request_id,
                reply.request.fen,
            )
            return

        logger.info("Computer replied %s to request %d", reply.move, reply.request.request_id)
        handler(reply.move)

    def _release(self, request: SearchRequest) -> Optional[MoveHandler]:
        """Empty the slot if it holds this request and hand back its handler"""
        with self._lock:
            if self._pending is None or self._pending.request_id != request.request_id:
                return None
            handler = self._handler
            self._pending = None
            self._handler = None
        return handler
