from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Union

from .board import Board
from .encoding import PositionKey, encode_position
from .fen import STARTPOS_FEN, format_fen, parse_fen
from .move import Move
from .piece import Color, GameResult, Piece, PieceType
from .square import NO_SQUARE, Square, squares_in


logger = logging.getLogger(__name__)

FIFTY_MOVE_LIMIT = 100  # half-moves
REPETITION_LIMIT = 3
INSUFFICIENT_MATERIAL_LIMIT = 3  # pieces on board, kings included
MINOR_OR_KING = (PieceType.KING, PieceType.BISHOP, PieceType.KNIGHT)

SquareLike = Union[Square, str]


def _new_captured() -> Dict[Color, List[PieceType]]:
    return {Color.WHITE: [], Color.BLACK: []}


@dataclass
class Game:
    """A chess position plus the state needed to enforce the rules.

    Responsibility: legal move queries, move application (castling, en
    passant, promotion), check/draw/mate detection and turn order.

    Notes:
    - Public operations never raise; rejected requests return ``False``.
    - ``captured[color]`` lists the piece types ``color`` has captured.
    - A pending promotion blocks every move until ``resolve_promotion``.
    - Not thread-safe; callers serialize access per instance.
    """

    board: Board
    turn: Color = Color.WHITE
    result: GameResult = GameResult.ONGOING
    capture: bool = False
    check: bool = False
    promotion_pending: bool = False
    captured: Dict[Color, List[PieceType]] = field(default_factory=_new_captured)
    halfmove_clock: int = 0
    fullmove_number: int = 1
    repetition: Dict[PositionKey, int] = field(default_factory=dict)

    @classmethod
    def new(cls) -> "Game":
        return cls.from_fen(STARTPOS_FEN)

    @classmethod
    def from_fen(cls, fen: str) -> "Game":
        """Build a game from a 1-6 field FEN string; missing fields default.

        The position is seeded as if the opposite side had just moved, then
        post-move bookkeeping runs once to derive check, terminal state and
        the first repetition entry.
        """
        fields = parse_fen(fen)
        mover = fields.side_to_move.opposite
        # Bookkeeping bumps the counter when black was the mover
        fullmove = fields.fullmove_number - (1 if mover is Color.BLACK else 0)
        game = cls(
            board=fields.board,
            turn=mover,
            halfmove_clock=fields.halfmove_clock,
            fullmove_number=fullmove,
        )
        game._after_move()
        return game

    def to_fen(self) -> str:
        return format_fen(self.board, self.turn, self.halfmove_clock, self.fullmove_number)

    # --- Observable state ---
    @property
    def last_moved_from(self) -> Square:
        return self.board.last_moved_from

    @property
    def last_moved_to(self) -> Square:
        return self.board.last_moved_to

    def board_state(self) -> Mapping[Square, Piece]:
        """Return a read-only snapshot of square -> piece (pieces are copies)."""
        return MappingProxyType({sq: replace(p) for sq, p in self.board.pieces.items()})

    def legal_moves_mask(self, square: SquareLike) -> int:
        """Return the legal destinations of the piece on ``square`` as a bitmask.

        Zero when the square is empty, unparseable, holds a piece of the side
        not to move, while a promotion is pending, or once the game is over.
        """
        if self.promotion_pending or self.result is not GameResult.ONGOING:
            return 0
        sq = _coerce(square)
        piece = self.board.piece_at(sq) if sq is not None else None
        if piece is None or piece.color is not self.turn:
            return 0
        return self.board.legal_moves(piece, self.check)

    def legal_moves(self, square: SquareLike) -> List[Square]:
        return list(squares_in(self.legal_moves_mask(square)))

    def all_legal_moves(self) -> Dict[Square, List[Square]]:
        """Map every movable piece of the side to move to its destinations."""
        moves: Dict[Square, List[Square]] = {}
        for sq in list(self.board.pieces):
            dests = self.legal_moves(sq)
            if dests:
                moves[sq] = dests
        return moves

    # --- Moves ---
    def attempt_move(self, from_sq: SquareLike, to_sq: SquareLike) -> bool:
        """Validate and apply a move; return whether it was applied."""
        src = _coerce(from_sq)
        dst = _coerce(to_sq)
        if src is None or dst is None:
            logger.debug("rejected move %r -> %r: bad square", from_sq, to_sq)
            return False
        if self.result is not GameResult.ONGOING:
            logger.debug("rejected move %s -> %s: game is over", src, dst)
            return False
        if self.promotion_pending:
            logger.debug("rejected move %s -> %s: promotion pending", src, dst)
            return False
        piece = self.board.piece_at(src)
        if piece is None or piece.color is not self.turn:
            logger.debug("rejected move %s -> %s: no piece of the side to move", src, dst)
            return False
        if not (self.board.legal_moves(piece, self.check) & dst.to_bitmap()):
            logger.debug("rejected move %s -> %s: illegal", src, dst)
            return False
        return self.force_apply(piece, dst)

    def play(self, move: Move) -> bool:
        """Apply a coordinate move, resolving its promotion piece if given.

        A promoting move without a piece leaves the promotion pending.
        """
        if not self.attempt_move(move.from_sq, move.to_sq):
            return False
        if self.promotion_pending and move.promotion is not None:
            return self.resolve_promotion(move.promotion)
        return True

    def force_apply(self, piece: Piece, to: Square) -> bool:
        """Move ``piece`` to ``to`` without a legality check.

        Handles captures, en passant, castling rook relocation and marks a
        pending promotion when a pawn reaches its last rank.
        """
        if self.result is not GameResult.ONGOING:
            logger.debug("rejected forced move to %s: game is over", to)
            return False
        if not to.in_bounds() or self.promotion_pending:
            return False
        board = self.board
        src = piece.square

        self.halfmove_clock += 1
        self.capture = False

        target = board.piece_at(to)
        if target is not None:
            board.remove(to)
            self._record_capture(piece.color, target)

        if piece.piece_type is PieceType.PAWN:
            self.halfmove_clock = 0
            if to.x != src.x and not self.capture:
                victim = board.remove(to.moved(0, -piece.color.pawn_direction))
                if victim is not None:
                    self._record_capture(piece.color, victim)
            if to.y == piece.color.promotion_rank:
                self.promotion_pending = True

        if piece.piece_type is PieceType.KING and not piece.has_moved and abs(to.x - src.x) == 2:
            step = 1 if to.x > src.x else -1
            rook = board.piece_at(Square(7 if step > 0 else 0, src.y))
            if rook is not None:
                board.relocate(rook, to.moved(-step, 0))
                rook.has_moved = True

        board.relocate(piece, to)
        board.last_moved_from = src
        board.last_moved_to = to
        piece.has_moved = True

        if not self.promotion_pending:
            self._after_move()
        return True

    def resolve_promotion(self, piece_type: PieceType) -> bool:
        """Turn the pawn that reached the last rank into ``piece_type``."""
        if not self.promotion_pending or piece_type in (PieceType.KING, PieceType.PAWN):
            return False
        pawn = self.board.piece_at(self.board.last_moved_to)
        if pawn is None:
            return False
        pawn.piece_type = piece_type
        self.promotion_pending = False
        self._after_move()
        return True

    def declare_draw(self) -> bool:
        return self._finish(GameResult.DRAW, "draw declared")

    def declare_win(self, color: Color) -> bool:
        return self._finish(GameResult.win_for(color), "win declared")

    # --- Bookkeeping ---
    def _record_capture(self, by: Color, victim: Piece) -> None:
        self.captured[by].append(victim.piece_type)
        self.capture = True
        self.halfmove_clock = 0
        # A position with more material can never recur
        self.repetition.clear()

    def _finish(self, result: GameResult, reason: str) -> bool:
        if self.result is not GameResult.ONGOING:
            return False
        self.result = result
        logger.info("game over: %s (%s)", result.value, reason)
        return True

    def _after_move(self) -> None:
        # A finished game keeps its result; only the position state advances
        finished = self.result is not GameResult.ONGOING
        mover = self.turn
        opponent = mover.opposite
        self.check = self.board.in_check(opponent)

        if self.halfmove_clock >= FIFTY_MOVE_LIMIT:
            self._finish(GameResult.DRAW, "fifty-move rule")

        key = encode_position(self.board)
        self.repetition[key] = self.repetition.get(key, 0) + 1
        if any(count >= REPETITION_LIMIT for count in self.repetition.values()):
            self._finish(GameResult.DRAW, "threefold repetition")

        if self._insufficient_material():
            self._finish(GameResult.DRAW, "insufficient material")

        if mover is Color.BLACK:
            self.fullmove_number += 1
        self.turn = opponent

        if finished:
            return
        if not self.board.has_legal_moves(opponent, self.check):
            if self.check:
                # Checkmate overrides any draw found above
                self.result = GameResult.win_for(mover)
                logger.info("game over: %s (checkmate)", self.result.value)
            else:
                self._finish(GameResult.DRAW, "stalemate")

    def _insufficient_material(self) -> bool:
        pieces = self.board.pieces.values()
        if len(pieces) > INSUFFICIENT_MATERIAL_LIMIT:
            return False
        return all(p.piece_type in MINOR_OR_KING for p in pieces)


def _coerce(square: SquareLike) -> Optional[Square]:
    if isinstance(square, Square):
        return square
    try:
        return Square.from_algebraic(square)
    except ValueError:
        return None
