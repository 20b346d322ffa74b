from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from .board import Board
from .encoding import castling_rights
from .piece import Color, Piece, PieceType
from .square import Square


logger = logging.getLogger(__name__)

STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
DEFAULT_FIELDS = STARTPOS_FEN.split()

CASTLING_SYMBOLS = {
    "K": (Color.WHITE, 7),
    "Q": (Color.WHITE, 0),
    "k": (Color.BLACK, 7),
    "q": (Color.BLACK, 0),
}


@dataclass
class FenFields:
    """Decoded FEN fields, already applied to a board."""

    board: Board
    side_to_move: Color
    halfmove_clock: int
    fullmove_number: int


def parse_fen(text: str) -> FenFields:
    """Decode up to six FEN fields; never raises.

    Missing trailing fields take the starting-position values and any field
    that cannot be parsed falls back to its default on its own.

    Notes:
        Castling rights are applied by clearing king/rook has-moved flags and
        the en passant target is applied by recording the two-square pawn
        advance that would have produced it.
    """
    parts = text.split() if isinstance(text, str) else []
    if len(parts) > 6:
        logger.debug("ignoring extra FEN fields: %r", parts[6:])
    fields = parts[:6] + DEFAULT_FIELDS[len(parts[:6]):]
    placement, stm, castling, ep, halfmove, fullmove = fields

    try:
        board = parse_placement(placement)
    except ValueError as e:
        logger.debug("invalid FEN placement %r (%s); using start placement", placement, e)
        board = parse_placement(DEFAULT_FIELDS[0])

    if stm not in ("w", "b"):
        logger.debug("invalid FEN side to move %r; using white", stm)
        stm = "w"
    side = Color(stm)

    _apply_castling(board, castling)
    if ep != "-":
        _apply_en_passant(board, ep)

    halfmove_clock = _parse_counter(halfmove, default=0, minimum=0)
    fullmove_number = _parse_counter(fullmove, default=1, minimum=1)
    return FenFields(board, side, halfmove_clock, fullmove_number)


def parse_placement(placement: str) -> Board:
    """Parse the piece placement field.

    Pawns on their starting rank are unmoved; every other piece starts out
    moved until the castling field says otherwise.

    Raises:
        ValueError: On a wrong rank count, bad piece letter or bad rank width.
    """
    ranks = placement.split("/")
    if len(ranks) != 8:
        raise ValueError("FEN board must have 8 ranks")
    board = Board()
    for rank_idx, rank in enumerate(ranks[::-1]):  # start from rank 1 (bottom)
        file_idx = 0
        for ch in rank:
            if ch.isdigit():
                n = int(ch)
                if n < 1 or n > 8:
                    raise ValueError("invalid empty count in FEN rank")
                file_idx += n
                continue
            if file_idx >= 8:
                raise ValueError("too many squares in FEN rank")
            try:
                piece = Piece.from_symbol(ch, Square(file_idx, rank_idx))
            except ValueError as e:
                raise ValueError(f"invalid piece in FEN: {ch!r}") from e
            piece.has_moved = not (
                piece.piece_type is PieceType.PAWN and rank_idx == piece.color.pawn_rank
            )
            board.place(piece)
            file_idx += 1
        if file_idx != 8:
            raise ValueError("rank does not sum to 8 squares in FEN")
    return board


def _apply_castling(board: Board, castling: str) -> None:
    if castling == "-":
        return
    for ch in castling:
        if ch not in CASTLING_SYMBOLS:
            logger.debug("ignoring castling symbol %r", ch)
            continue
        color, rook_file = CASTLING_SYMBOLS[ch]
        king = board.king(color)
        if king is None:
            continue
        rook = board.piece_at(Square(rook_file, king.square.y))
        if rook is None or rook.piece_type is not PieceType.ROOK or rook.color is not color:
            logger.debug("castling symbol %r has no matching rook", ch)
            continue
        king.has_moved = False
        rook.has_moved = False


def _apply_en_passant(board: Board, ep: str) -> None:
    try:
        target = Square.from_algebraic(ep)
    except ValueError:
        logger.debug("invalid FEN en passant square %r", ep)
        return
    if target.y == 2:
        color = Color.WHITE
    elif target.y == 5:
        color = Color.BLACK
    else:
        logger.debug("en passant square %r is not on rank 3 or 6", ep)
        return
    direction = color.pawn_direction
    pawn_sq = target.moved(0, direction)
    pawn = board.piece_at(pawn_sq)
    if pawn is None or pawn.piece_type is not PieceType.PAWN or pawn.color is not color:
        logger.debug("en passant square %r has no pawn in front of it", ep)
        return
    board.last_moved_from = target.moved(0, -direction)
    board.last_moved_to = pawn_sq


def _parse_counter(value: str, *, default: int, minimum: int) -> int:
    try:
        n = int(value)
    except ValueError:
        logger.debug("invalid FEN counter %r; using %d", value, default)
        return default
    if n < minimum:
        logger.debug("FEN counter %d below %d; using %d", n, minimum, default)
        return default
    return n


def format_fen(board: Board, side_to_move: Color, halfmove_clock: int, fullmove_number: int) -> str:
    """Serialize a position into a FEN string.

    Castling rights and the en passant target are recomputed from has-moved
    flags and the last move, not stored.
    """
    ranks_str: List[str] = []
    for rank_idx in range(7, -1, -1):  # 7..0 maps to ranks 8..1
        run = 0
        row = []
        for file_idx in range(8):
            piece = board.piece_at(Square(file_idx, rank_idx))
            if piece is None:
                run += 1
                continue
            if run > 0:
                row.append(str(run))
                run = 0
            row.append(piece.symbol)
        if run > 0:
            row.append(str(run))
        ranks_str.append("".join(row))
    placement = "/".join(ranks_str)

    castling = ""
    for color, symbols in ((Color.WHITE, "KQ"), (Color.BLACK, "kq")):
        kingside, queenside = castling_rights(board, color)
        if kingside:
            castling += symbols[0]
        if queenside:
            castling += symbols[1]

    ep = "-"
    target = en_passant_target(board)
    if target is not None:
        ep = target.to_algebraic().lower()
    return (
        f"{placement} {side_to_move.value} {castling or '-'} {ep} "
        f"{halfmove_clock} {fullmove_number}"
    )


def en_passant_target(board: Board) -> Optional[Square]:
    """Return the square skipped by the previous two-square pawn advance."""
    pawn = board.double_step_pawn()
    if pawn is None:
        return None
    return pawn.square.moved(0, -pawn.color.pawn_direction)
