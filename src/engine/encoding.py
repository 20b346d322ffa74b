from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .board import KINGSIDE, QUEENSIDE, Board
from .piece import Color, PieceType
from .square import Square


# Flag layout per color (black shifted by 3): kingside, queenside, en passant
FLAG_KINGSIDE = 1 << 0
FLAG_QUEENSIDE = 1 << 1
FLAG_EN_PASSANT = 1 << 2
BLACK_SHIFT = 3

TYPE_ORDER = (
    PieceType.KING,
    PieceType.QUEEN,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
    PieceType.PAWN,
)


@dataclass(frozen=True)
class PositionKey:
    """Canonical snapshot of a position used as a repetition key.

    Attributes:
        colors (Tuple[int, int]): White and black occupancy.
        types (Tuple[int, ...]): Occupancy per piece type in ``TYPE_ORDER``.
        flags (int): 8-bit field, per side castling rights and en passant
            availability.

    Two keys compare equal iff every mask and the flag field match exactly.
    """

    colors: Tuple[int, int]
    types: Tuple[int, ...]
    flags: int


def castling_rights(board: Board, color: Color) -> Tuple[bool, bool]:
    """Return (kingside, queenside) rights derived from has-moved flags."""
    king = board.king(color)
    if king is None or king.has_moved:
        return False, False
    rights = []
    for rook_file, _step in (KINGSIDE, QUEENSIDE):
        rook = board.piece_at(Square(rook_file, king.square.y))
        rights.append(
            rook is not None
            and rook.piece_type is PieceType.ROOK
            and rook.color is color
            and not rook.has_moved
        )
    return rights[0], rights[1]


def en_passant_capturer(board: Board) -> Optional[Color]:
    """Return the color that may capture en passant this ply, if any."""
    pawn = board.double_step_pawn()
    if pawn is None:
        return None
    for dx in (-1, 1):
        p = board.piece_at(pawn.square.moved(dx, 0))
        if p is not None and p.piece_type is PieceType.PAWN and p.color is not pawn.color:
            return p.color
    return None


def encode_position(board: Board) -> PositionKey:
    flags = 0
    for color, shift in ((Color.WHITE, 0), (Color.BLACK, BLACK_SHIFT)):
        kingside, queenside = castling_rights(board, color)
        if kingside:
            flags |= FLAG_KINGSIDE << shift
        if queenside:
            flags |= FLAG_QUEENSIDE << shift
    capturer = en_passant_capturer(board)
    if capturer is not None:
        flags |= FLAG_EN_PASSANT << (0 if capturer is Color.WHITE else BLACK_SHIFT)
    return PositionKey(
        colors=(board.white, board.black),
        types=tuple(board.type_mask(t) for t in TYPE_ORDER),
        flags=flags,
    )
