"""Requests and Response models"""

from typing import Any, Optional

from pydantic import BaseModel, field_validator

from src.board.fen import is_valid_fen
from src.board.square import is_valid_square
from src.core.exceptions import InvalidRequestError
from src.core.shared_types import Color, Status
from src.game.orchestrator import DIFFICULTY_TO_DEPTH


# --- REQUEST MODELS ---
class SettingsRequest(BaseModel):
    """Settings form. Every field is optional: whatever is left out keeps its previous value."""

    player_colour: Optional[Color] = None
    difficulty: Optional[int] = None
    fen: Optional[str] = None
    piece_set: Optional[str] = None
    board_theme: Optional[str] = None

    @field_validator("player_colour", mode="before")
    @classmethod
    def accept_fen_colour_codes(cls, value: Any) -> Any:
        """The form sends 'w' / 'b' like the active color in a FEN."""
        if value is None or isinstance(value, Color):
            return value
        if value in ("w", "b"):
            return Color.from_fen(value)
        if value not in {color.value for color in Color}:
            raise InvalidRequestError(f"Cannot interpret {value!r} as a colour. Use w or b.")
        return value

    @field_validator("difficulty")
    @classmethod
    def validate_difficulty(cls, value: Optional[int]) -> Optional[int]:
        if value is None:
            return value

        if value not in DIFFICULTY_TO_DEPTH:
            raise InvalidRequestError(
                f"Difficulty must be between {min(DIFFICULTY_TO_DEPTH)} and {max(DIFFICULTY_TO_DEPTH)}, got {value}."
            )
        return value

    @field_validator("fen")
    @classmethod
    def validate_fen(cls, value: Optional[str]) -> Optional[str]:
        if not value:
            return None

        value = value.strip()
        if not is_valid_fen(value):
            raise InvalidRequestError(f"Cannot interpret supplied string as FEN: {value}")
        return value


class SquareActivationRequest(BaseModel):
    coordinate: str

    @field_validator("coordinate")
    @classmethod
    def validate_square(cls, value: str) -> str:
        if not is_valid_square(value):
            raise InvalidRequestError(
                f"Cannot interpret coordinate: {value!r} as a valid square name."
            )
        return value


# --- RESPONSE MODELS ---
class SquareView(BaseModel):
    coordinate: str
    light: bool
    piece: Optional[str]
    piece_colour: Optional[Color]
    selected: bool


class BoardResponse(BaseModel):
    fen: str
    turn: Color
    player_colour: Color
    difficulty: int
    status: Status
    selected_square: Optional[str]
    flipped: bool
    ranks: list[list[SquareView]]
    computer_thinking: bool
    message: Optional[str]
    piece_set: str
    board_theme: str
