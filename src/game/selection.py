"""
Selection state machine
----

Tracks which square (if any) the user has armed as the origin of a move.

States:
* IDLE: nothing armed
* ARMED: exactly one square armed

Every square activation is one event. What happens depends on the current state, the square clicked,
and whether the pair (armed square, clicked square) is a move the rules engine accepts.
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Optional

from src.board.pieces import is_piece, piece_color
from src.core.shared_types import Color

logger = logging.getLogger(__name__)

# Called with (origin, destination), returns True if the move got committed
TryMoveFn = Callable[[str, str], bool]


class SelectionState(Enum):
    IDLE = auto()
    ARMED = auto()


class Transition(Enum):
    """What an activation did"""

    IGNORED = auto()
    ARMED = auto()
    DESELECTED = auto()
    COMMITTED = auto()
    RETARGETED = auto()
    CLEARED = auto()


@dataclass
class Selection:
    armed: Optional[str] = None

    @property
    def state(self) -> SelectionState:
        return SelectionState.IDLE if self.armed is None else SelectionState.ARMED

    def clear(self) -> None:
        self.armed = None

    def activate(
        self,
        coordinate: str,
        piece: Optional[str],
        side_to_move: Color,
        try_move: TryMoveFn,
    ) -> Transition:
        """
        Process a single square activation.
        ----

        1. IDLE: arm the square if it holds a piece (of any colour, the move attempt sorts out the rest)
        2. ARMED, same square again: toggle off
        3. ARMED, pair is an accepted move: it has been committed, back to IDLE
        4. ARMED, own piece (colour of the side to move): re-arm on the new square
        5. ARMED, anything else: drop the selection
        """
        transition = self._transition(coordinate, piece, side_to_move, try_move)
        logger.debug("activation %s -> %s (armed: %s)", coordinate, transition.name, self.armed)
        return transition

    def _transition(
        self,
        coordinate: str,
        piece: Optional[str],
        side_to_move: Color,
        try_move: TryMoveFn,
    ) -> Transition:
        origin = self.armed
        if origin is None:
            if not is_piece(piece):
                return Transition.IGNORED
            self.armed = coordinate
            return Transition.ARMED

        if origin == coordinate:
            self.clear()
            return Transition.DESELECTED

        if try_move(origin, coordinate):
            self.clear()
            return Transition.COMMITTED

        if is_piece(piece) and piece_color(piece) == side_to_move:
            self.armed = coordinate
            return Transition.RETARGETED

        self.clear()
        return Transition.CLEARED
