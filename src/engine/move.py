from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .piece import PROMOTION_TYPES, PieceType
from .square import Square


PROMOTION_PIECES = {t.value for t in PROMOTION_TYPES}


@dataclass(frozen=True)
class Move:
    """Coordinate move as exchanged with transports.

    Attributes:
        from_sq (Square): Origin square.
        to_sq (Square): Destination square.
        promotion (Optional[PieceType]): Piece chosen for a promoting pawn.
    """

    from_sq: Square
    to_sq: Square
    promotion: Optional[PieceType] = None

    def to_uci(self) -> str:
        """Serialize the move into long algebraic form.

        Returns:
            str: Move encoded like ``"e2e4"`` or ``"e7e8q"``.
        """
        promo = self.promotion.value if self.promotion else ""
        return (self.from_sq.to_algebraic() + self.to_sq.to_algebraic()).lower() + promo


def parse_uci(uci: str) -> Move:
    """Parse a long algebraic move string (case-insensitive squares).

    Args:
        uci (str): Move such as ``"e2e4"`` or ``"a7a8q"``.

    Returns:
        Move: Parsed move.

    Raises:
        ValueError: If the string has an invalid length, squares, or promotion
            piece.
    """
    if len(uci) not in (4, 5):
        raise ValueError(f"invalid move length: {uci!r}")
    from_sq = Square.from_algebraic(uci[0:2])
    to_sq = Square.from_algebraic(uci[2:4])
    promo: Optional[PieceType] = None
    if len(uci) == 5:
        ch = uci[4].lower()
        if ch not in PROMOTION_PIECES:
            raise ValueError(f"invalid promotion piece: {ch!r}")
        promo = PieceType(ch)
    return Move(from_sq, to_sq, promo)
