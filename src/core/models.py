"""
Boundary layer data model(s).

Objects sent across the compute boundary: the game side only ever talks to the
search worker through these (a FEN + depth on the way out, a move in UCI notation on the way back).
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SearchRequest:
    """Ask the search worker for a move in the given position."""

    fen: str
    depth: int
    request_id: int

    def to_message(self) -> dict[str, str | int]:
        """Serialized form sent over the boundary (same field names as the worker expects)."""
        return {"fen": self.fen, "depth": self.depth}


@dataclass(frozen=True)
class SearchReply:
    """Answer to exactly one SearchRequest. move is None (or empty) if no move was found."""

    request: SearchRequest
    move: Optional[str]
