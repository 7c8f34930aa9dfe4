"""
Type definitions used across layers
"""

from enum import StrEnum


class Status(StrEnum):
    IN_PROGRESS = "in progress"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    DRAW_FIFTY_MOVE_RULE = "draw by 50-move rule"

    @property
    def is_terminal(self) -> bool:
        return self != Status.IN_PROGRESS


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"

    @classmethod
    def from_fen(cls, code: str) -> "Color":
        """FEN (and the settings form) use 'w' and 'b' for the active color."""
        return cls.WHITE if code == "w" else cls.BLACK

    @property
    def opponent(self) -> "Color":
        return Color.BLACK if self == Color.WHITE else Color.WHITE
