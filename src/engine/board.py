from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .movegen import pseudo_legal_moves, ray
from .piece import Color, Piece, PieceType
from .square import NO_SQUARE, Square, squares_in


# (rook file, king step) per castling side
KINGSIDE = (7, 1)
QUEENSIDE = (0, -1)
CASTLING_SIDES = (KINGSIDE, QUEENSIDE)


@dataclass
class Board:
    """Piece placement with per-color occupancy bitboards.

    Notes:
    - Bit ``rank * 8 + file`` marks a square (A1 = 0 .. H8 = 63).
    - ``pieces`` is keyed by square; a piece changes key only through
      ``relocate`` so the map and both masks stay in sync.
    - ``last_moved_from``/``last_moved_to`` describe the previous ply and feed
      the en passant rule.
    """

    pieces: Dict[Square, Piece] = field(default_factory=dict)
    white: int = 0
    black: int = 0
    last_moved_from: Square = NO_SQUARE
    last_moved_to: Square = NO_SQUARE

    # --- Placement primitives ---
    def color_mask(self, color: Color) -> int:
        return self.white if color is Color.WHITE else self.black

    def occupied(self) -> int:
        return self.white | self.black

    def piece_at(self, sq: Square) -> Optional[Piece]:
        return self.pieces.get(sq)

    def place(self, piece: Piece) -> None:
        """Insert ``piece`` at its own square, replacing nothing."""
        self.pieces[piece.square] = piece
        self._set_bit(piece.color, piece.square.to_bitmap())

    def remove(self, sq: Square) -> Optional[Piece]:
        piece = self.pieces.pop(sq, None)
        if piece is not None:
            self._clear_bit(piece.color, sq.to_bitmap())
        return piece

    def relocate(self, piece: Piece, to: Square) -> None:
        """Move ``piece`` to ``to`` as a remove-old-key / insert-new-key step.

        The destination must be empty; captures are removed beforehand.
        """
        del self.pieces[piece.square]
        self._clear_bit(piece.color, piece.square.to_bitmap())
        piece.square = to
        self.pieces[to] = piece
        self._set_bit(piece.color, to.to_bitmap())

    def _set_bit(self, color: Color, bit: int) -> None:
        if color is Color.WHITE:
            self.white |= bit
        else:
            self.black |= bit

    def _clear_bit(self, color: Color, bit: int) -> None:
        if color is Color.WHITE:
            self.white &= ~bit
        else:
            self.black &= ~bit

    # --- Queries ---
    def pieces_of(self, color: Color) -> List[Piece]:
        return [p for p in self.pieces.values() if p.color is color]

    def king(self, color: Color) -> Optional[Piece]:
        for p in self.pieces.values():
            if p.color is color and p.piece_type is PieceType.KING:
                return p
        return None

    def type_mask(self, piece_type: PieceType, color: Optional[Color] = None) -> int:
        mask = 0
        for p in self.pieces.values():
            if p.piece_type is piece_type and (color is None or p.color is color):
                mask |= p.square.to_bitmap()
        return mask

    def double_step_pawn(self) -> Optional[Piece]:
        """Return the pawn that advanced two squares on the previous ply, if any."""
        p = self.pieces.get(self.last_moved_to)
        if p is None or p.piece_type is not PieceType.PAWN:
            return None
        if self.last_moved_from.x != self.last_moved_to.x:
            return None
        if abs(self.last_moved_to.y - self.last_moved_from.y) != 2:
            return None
        return p

    # --- Attack detection ---
    @staticmethod
    def _attacked(target: int, attackers: Iterable[Piece], their_occ: int, our_occ: int) -> bool:
        """Return True if any attacker still on ``their_occ`` reaches ``target``."""
        if target == 0:
            return False
        for p in attackers:
            if not (p.square.to_bitmap() & their_occ):
                continue  # captured in the hypothetical
            if pseudo_legal_moves(p, their_occ, our_occ) & target:
                return True
        return False

    def in_check(self, color: Color) -> bool:
        """Return True if ``color``'s king is reachable by an opposing piece."""
        king = self.king(color)
        if king is None:
            return False
        them = color.opposite
        return self._attacked(
            king.square.to_bitmap(),
            self.pieces_of(them),
            self.color_mask(them),
            self.color_mask(color),
        )

    # --- Legality filter ---
    def _castling_candidates(self, king: Piece, own: int, other: int) -> int:
        """Two-square king destinations whose rook is unmoved and path empty."""
        mask = 0
        for rook_file, step in CASTLING_SIDES:
            rook = self.pieces.get(Square(rook_file, king.square.y))
            if (
                rook is None
                or rook.piece_type is not PieceType.ROOK
                or rook.color is not king.color
                or rook.has_moved
            ):
                continue
            between = 0
            for x in range(min(king.square.x, rook_file) + 1, max(king.square.x, rook_file)):
                between |= Square(x, king.square.y).to_bitmap()
            # The ray from the king ends just before its own rook iff the path is clear
            if between and not (between & other) and ray(king.square, step, 0, own, other) == between:
                mask |= king.square.moved(2 * step, 0).to_bitmap()
        return mask

    def legal_moves(self, piece: Piece, in_check: bool = False) -> int:
        """Return the destinations of ``piece`` that keep its own king safe.

        Args:
            piece (Piece): A piece of the side to move.
            in_check (bool): Whether that side is currently in check; an
                unmoved king may only castle when it is not.

        Returns:
            int: Destination bitmask, castling included as the king's
                two-square move.

        Notes:
            Every candidate is simulated on hypothetical occupancy masks and
            each surviving opposing piece is asked whether it reaches the
            king square afterwards.
        """
        color = piece.color
        own = self.color_mask(color)
        other = self.color_mask(color.opposite)
        src_bit = piece.square.to_bitmap()
        is_king = piece.piece_type is PieceType.KING

        candidates = pseudo_legal_moves(piece, own, other, self.double_step_pawn())
        castling = 0
        if is_king and not piece.has_moved and not in_check:
            castling = self._castling_candidates(piece, own, other)
            candidates |= castling

        king = piece if is_king else self.king(color)
        opponents = self.pieces_of(color.opposite)

        legal = 0
        for to in squares_in(candidates):
            to_bit = to.to_bitmap()
            hyp_own = (own & ~src_bit) | to_bit
            hyp_other = other & ~to_bit
            if piece.piece_type is PieceType.PAWN and to.x != piece.square.x and not (other & to_bit):
                # En passant removes the pawn behind the destination
                hyp_other &= ~to.moved(0, -color.pawn_direction).to_bitmap()
            if is_king:
                king_bit = to_bit
            else:
                king_bit = king.square.to_bitmap() if king is not None else 0
            if not self._attacked(king_bit, opponents, hyp_other, hyp_own):
                legal |= to_bit

        # The king may not castle through an attacked square
        for sq in squares_in(castling):
            step = 1 if sq.x > piece.square.x else -1
            if not (legal & piece.square.moved(step, 0).to_bitmap()):
                legal &= ~sq.to_bitmap()
        return legal

    def has_legal_moves(self, color: Color, in_check: bool = False) -> bool:
        return any(self.legal_moves(p, in_check) for p in self.pieces_of(color))
