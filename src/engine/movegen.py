from __future__ import annotations

from typing import Optional, Tuple

from .piece import Piece, PieceType
from .square import Square


Direction = Tuple[int, int]

KING_OFFSETS: Tuple[Direction, ...] = (
    (1, 0),
    (1, 1),
    (0, 1),
    (-1, 1),
    (-1, 0),
    (-1, -1),
    (0, -1),
    (1, -1),
)
KNIGHT_OFFSETS: Tuple[Direction, ...] = (
    (2, 1),
    (1, 2),
    (-1, 2),
    (-2, 1),
    (-2, -1),
    (-1, -2),
    (1, -2),
    (2, -1),
)
ROOK_DIRECTIONS: Tuple[Direction, ...] = ((1, 0), (0, 1), (-1, 0), (0, -1))
BISHOP_DIRECTIONS: Tuple[Direction, ...] = ((1, 1), (-1, 1), (-1, -1), (1, -1))
QUEEN_DIRECTIONS: Tuple[Direction, ...] = ROOK_DIRECTIONS + BISHOP_DIRECTIONS

SLIDER_DIRECTIONS = {
    PieceType.ROOK: ROOK_DIRECTIONS,
    PieceType.BISHOP: BISHOP_DIRECTIONS,
    PieceType.QUEEN: QUEEN_DIRECTIONS,
}


def ray(start: Square, dx: int, dy: int, own: int, other: int) -> int:
    """Return the squares reached by stepping from ``start`` in one direction.

    The start square is excluded. The ray stops before the board edge or an
    own-occupied square, and stops after (including) an opponent-occupied one.
    """
    moves = 0
    sq = start
    while True:
        sq = sq.moved(dx, dy)
        bit = sq.to_bitmap()
        if bit == 0 or bit & own:
            return moves
        moves |= bit
        if bit & other:
            return moves


def _step_targets(start: Square, offsets: Tuple[Direction, ...]) -> int:
    mask = 0
    for dx, dy in offsets:
        mask |= start.moved(dx, dy).to_bitmap()
    return mask


def pawn_moves(piece: Piece, own: int, other: int, double_step: Optional[Piece] = None) -> int:
    """Pawn pushes, diagonal captures and en passant.

    Args:
        piece (Piece): The pawn.
        own (int): Occupancy of the pawn's color.
        other (int): Occupancy of the opposing color.
        double_step (Optional[Piece]): The pawn that made a two-square advance
            on the previous ply, if any. En passant is only produced when it
            belongs to the other side and stands file-adjacent on this pawn's
            rank.
    """
    direction = piece.color.pawn_direction
    empty = ~(own | other)
    pos = piece.square

    moves = pos.moved(0, direction).to_bitmap() & empty
    if moves and not piece.has_moved:
        moves |= pos.moved(0, 2 * direction).to_bitmap() & empty

    moves |= (pos.moved(1, direction).to_bitmap() | pos.moved(-1, direction).to_bitmap()) & other

    if (
        double_step is not None
        and double_step.piece_type is PieceType.PAWN
        and double_step.color is not piece.color
        and double_step.square.y == pos.y
        and abs(double_step.square.x - pos.x) == 1
    ):
        moves |= double_step.square.moved(0, direction).to_bitmap() & empty
    return moves


def pseudo_legal_moves(
    piece: Piece, own: int, other: int, double_step: Optional[Piece] = None
) -> int:
    """Return the destination mask of ``piece`` ignoring checks on its own king.

    Castling is not produced here; it depends on check state and is added by
    the legality filter.
    """
    kind = piece.piece_type
    if kind is PieceType.PAWN:
        return pawn_moves(piece, own, other, double_step)
    if kind is PieceType.KING:
        return _step_targets(piece.square, KING_OFFSETS) & ~own
    if kind is PieceType.KNIGHT:
        return _step_targets(piece.square, KNIGHT_OFFSETS) & ~own
    moves = 0
    for dx, dy in SLIDER_DIRECTIONS[kind]:
        moves |= ray(piece.square, dx, dy, own, other)
    return moves

