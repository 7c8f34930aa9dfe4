"""
A square on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass
from string import ascii_lowercase

# Chess board is always 8x8.
BOARD_DIMENSIONS = (8, 8)
FILES = ascii_lowercase[: BOARD_DIMENSIONS[0]]


@dataclass(frozen=True)
class Square:
    file: int
    rank: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a1' - 'h8' get converted to (1,1) - (8,8)"""
        file = ord(sq[0]) - ord("a") + 1
        rank = int(sq[1:])
        return cls(file, rank)

    def to_algebraic(self) -> str:
        return f"{chr(self.file + ord('a') - 1)}{self.rank}"

    def is_within_bounds(self) -> bool:
        return (1 <= self.file <= BOARD_DIMENSIONS[0]) and (
            1 <= self.rank <= BOARD_DIMENSIONS[1]
        )

    @property
    def is_light(self) -> bool:
        """a1 is a dark square, so light squares have an odd file + rank sum"""
        return (self.file + self.rank) % 2 == 1


def is_valid_square(square: str) -> bool:
    """Valid square is exactly one letter for the file + one digit for the rank, e.g. 'e2' (not 'e02')"""
    if len(square) != 2:
        return False

    file_char, rank_char = square
    if file_char not in FILES or not rank_char.isdigit():
        return False

    return Square.from_algebraic(square).is_within_bounds()
