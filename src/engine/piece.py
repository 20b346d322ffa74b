from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .square import Square


class Color(Enum):
    WHITE = "w"
    BLACK = "b"

    @property
    def opposite(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE

    @property
    def pawn_direction(self) -> int:
        """Rank step of a forward pawn move: +1 for white, -1 for black."""
        return 1 if self is Color.WHITE else -1

    @property
    def pawn_rank(self) -> int:
        return 1 if self is Color.WHITE else 6

    @property
    def promotion_rank(self) -> int:
        return 7 if self is Color.WHITE else 0


class PieceType(Enum):
    KING = "k"
    QUEEN = "q"
    BISHOP = "b"
    KNIGHT = "n"
    ROOK = "r"
    PAWN = "p"

    @classmethod
    def from_symbol(cls, ch: str) -> "PieceType":
        """Map a piece letter (either case) to its type.

        Raises:
            ValueError: If ``ch`` is not one of ``kqbnrp``.
        """
        return cls(ch.lower())


PROMOTION_TYPES = (PieceType.QUEEN, PieceType.ROOK, PieceType.BISHOP, PieceType.KNIGHT)


class GameResult(Enum):
    ONGOING = "ongoing"
    WHITE_WON = "white_won"
    BLACK_WON = "black_won"
    DRAW = "draw"

    @classmethod
    def win_for(cls, color: Color) -> "GameResult":
        return cls.WHITE_WON if color is Color.WHITE else cls.BLACK_WON


@dataclass
class Piece:
    """A piece on the board.

    ``square`` always equals the key the piece is stored under in the board's
    piece map. ``has_moved`` gates castling and the pawn double step.
    """

    piece_type: PieceType
    color: Color
    square: Square
    has_moved: bool = False

    @property
    def symbol(self) -> str:
        """FEN letter: uppercase for white, lowercase for black."""
        ch = self.piece_type.value
        return ch.upper() if self.color is Color.WHITE else ch

    @classmethod
    def from_symbol(cls, ch: str, square: Square, has_moved: bool = False) -> "Piece":
        color = Color.WHITE if ch.isupper() else Color.BLACK
        return cls(PieceType.from_symbol(ch), color, square, has_moved)
