"""Piece codes as they appear in a FEN string"""

from typing import Optional

from src.core.shared_types import Color

# Marker for an empty cell in a parsed position grid
EMPTY = "0"

PIECE_CODES = frozenset("pnbrqkPNBRQK")


def is_piece(cell: Optional[str]) -> bool:
    return cell is not None and cell in PIECE_CODES


def piece_color(code: str) -> Color:
    """upper case: White pieces, lower case: Black pieces"""
    return Color.WHITE if code.isupper() else Color.BLACK
