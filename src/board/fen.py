"""
FEN codec: read a board position string into a grid the rest of the application can index.
----

FEN, or Forsyth-Edwards Notation, is a standard notation for describing a particular board position of a chess game.

<board position string><active color><castling rights><en passant square><# half move clock><number turns played>

ex) The standard starting position has a FEN
rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1

NOTE: Writing a FEN after a move is the job of the rules engine. This module only reads them.
"""

from typing import Optional

from src.board.pieces import EMPTY, PIECE_CODES
from src.board.square import BOARD_DIMENSIONS, Square, is_valid_square
from src.core.shared_types import Color

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
VALID_CASTLING_ENCODINGS = [
    "-",
    "K",
    "Q",
    "k",
    "q",
    "KQ",
    "Kk",
    "Kq",
    "Qk",
    "Qq",
    "kq",
    "KQk",
    "KQq",
    "Kkq",
    "Qkq",
    "KQkq",
]

Grid = list[list[str]]


# --- FIELD ACCESS ---
def placement(fen: str) -> str:
    """The piece placement field (the first space separated part)."""
    return fen.split(" ")[0]


def side_to_move(fen: str) -> Color:
    return Color.from_fen(fen.split(" ")[1])


# --- CODEC ---
def parse_position(fen: str) -> Grid:
    """
    Expand the placement field into an 8x8 grid.
    ---

    * every digit d becomes d consecutive EMPTY markers, letters are kept as they are
    * FEN lists the ranks from the 8th down to the 1st. The grid is reversed, so grid[0] is the 1st rank and grid[7] the 8th.
      Within a rank the first cell is the a-file, so grid[rank - 1][file - 1] is the square (file, rank).

    NOTE: no validation. FEN comes from the rules engine or the settings form (which validates it).
    """
    rows: Grid = []
    for fen_one_rank in placement(fen).split("/"):
        row: list[str] = []
        for character in fen_one_rank:
            if character.isdigit():
                row.extend([EMPTY] * int(character))
            else:
                row.append(character)
        rows.append(row)
    rows.reverse()
    return rows


def collapse_position(grid: Grid) -> str:
    """Reverse operation: placement field from a grid (1st rank first)."""
    return "/".join(_collapse_rank(row) for row in reversed(grid))


def _collapse_rank(row: list[str]) -> str:
    fen_characters: list[str] = []
    empty_count = 0
    for cell in row:
        if cell == EMPTY:
            empty_count += 1
            continue
        if empty_count > 0:
            fen_characters.append(str(empty_count))
            empty_count = 0
        fen_characters.append(cell)

    # if the entire rank is empty, then we still place this number in the string
    if empty_count > 0:
        fen_characters.append(str(empty_count))
    return "".join(fen_characters)


def piece_at(fen: str, coordinate: str) -> Optional[str]:
    """Piece code on the square with the given algebraic coordinate, None if the square is empty."""
    square = Square.from_algebraic(coordinate)
    cell = parse_position(fen)[square.rank - 1][square.file - 1]
    return None if cell == EMPTY else cell


# --- VALIDATION (only used at the configuration edge) ---
def is_valid_fen(fen: str) -> bool:
    """
    Check if given string follows proper FEN notation.
    """

    # there should be 6 parts to the string
    parts = fen.split(" ")
    if len(parts) != 6:
        return False

    position, color, castling, en_passant, half_move_counter, full_move_counter = (
        parts
    )
    return (
        is_valid_position(position)
        and is_valid_color_code(color)
        and is_valid_castling_rights(castling)
        and is_valid_en_passant(en_passant)
        and is_valid_move_counter(half_move_counter)
        and is_valid_move_counter(full_move_counter)
    )


def is_valid_position(position: str) -> bool:
    """Only check the part of the FEN encoding for the board position."""
    num_files, num_ranks = BOARD_DIMENSIONS
    rank_fens = position.split("/")
    if len(rank_fens) != num_ranks:
        return False

    for rank_fen in rank_fens:
        file_count = 0
        for character in rank_fen:
            # make sure every character is valid
            if character.isdigit():
                file_count += int(character)
            elif character in PIECE_CODES:
                file_count += 1
            else:
                # immediately invalidate if the character is anything else
                return False

        # make sure you are creating a correctly sized board
        if file_count != num_files:
            return False
    return True


def is_valid_color_code(color: str) -> bool:
    return color in {"w", "b"}


def is_valid_castling_rights(castling: str) -> bool:
    """A valid castling encoding has either KQkq, KQk, etc. or a '-' if all rights have been revoked."""
    return castling in VALID_CASTLING_ENCODINGS


def is_valid_en_passant(en_passant: str) -> bool:
    """Valid en passant square encoding should be a square that exists on the board or a '-'"""
    return (en_passant == "-") or is_valid_square(en_passant)


def is_valid_move_counter(counter: str) -> bool:
    return counter.isdigit()
