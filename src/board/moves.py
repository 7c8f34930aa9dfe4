"""The move descriptor that crosses every boundary: origin + destination in UCI notation, e.g. 'e2e4'"""

from dataclasses import dataclass
from typing import Self

from src.board.square import is_valid_square

PROMOTION_PIECES = "qrbn"


@dataclass(frozen=True)
class MoveDescriptor:
    """
    Transient description of a move attempt.
    ----

    Constructed when the user completes a pair of square activations (or when the search worker replies),
    validated against the engine, and then either committed or discarded.
    """

    origin: str
    destination: str
    promote_to: str = ""

    @classmethod
    def from_uci(cls, uci: str) -> Self:
        """
        Universal Chess Interface:
        ---
        * "e2e4": move the piece on e2 to e4
        * "e7e8q": (pawn) moves from e7 to e8 and promotes to a queen (the q). Only the search worker sends these.
        """
        return cls(uci[:2], uci[2:4], uci[4:5])

    def to_uci(self) -> str:
        return f"{self.origin}{self.destination}{self.promote_to}"

    def is_well_formed(self) -> bool:
        return (
            is_valid_square(self.origin)
            and is_valid_square(self.destination)
            and self.origin != self.destination
            and (self.promote_to == "" or self.promote_to in PROMOTION_PIECES)
        )
