"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

from typing import Generator, Optional

import pytest

from src.core.models import SearchReply, SearchRequest
from src.engine.boundary import ReplyHandler
from src.engine.rules import PythonChessRules
from src.game.controller import MoveController
from src.game.orchestrator import ComputerMoveOrchestrator
from src.game.session import GameSession

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
AFTER_E4_FEN = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"


class RecordingBoundary:
    """Mock the compute boundary: keeps every request, the test decides when (and what) to reply."""

    def __init__(self) -> None:
        self.requests: list[tuple[SearchRequest, ReplyHandler]] = []

    def submit(self, request: SearchRequest, on_reply: ReplyHandler) -> None:
        self.requests.append((request, on_reply))

    @property
    def last_request(self) -> SearchRequest:
        return self.requests[-1][0]

    def reply(self, move: Optional[str], index: int = -1) -> None:
        """Answer one of the recorded requests (the most recent by default)."""
        request, on_reply = self.requests[index]
        on_reply(SearchReply(request=request, move=move))


@pytest.fixture
def boundary() -> Generator[RecordingBoundary, None, None]:
    recording = RecordingBoundary()
    try:
        yield recording
    finally:
        recording.requests.clear()


@pytest.fixture
def orchestrator(boundary: RecordingBoundary) -> ComputerMoveOrchestrator:
    return ComputerMoveOrchestrator(boundary)


@pytest.fixture
def controller(orchestrator: ComputerMoveOrchestrator) -> MoveController:
    """Player is white in the starting position, difficulty 3."""
    return MoveController(GameSession(), PythonChessRules(), orchestrator)
