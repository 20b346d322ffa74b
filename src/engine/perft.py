from __future__ import annotations

import copy
from typing import Iterator

from .game import Game
from .piece import PROMOTION_TYPES, PieceType
from .square import Square, squares_in


def perft(game: Game, depth: int) -> int:
    """Count leaf nodes of the legal move tree of ``game`` at ``depth``.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    Promotions count once per promotion piece. Children are played on deep
    copies so ``game`` is left unchanged. Positions that ended by a draw rule
    have no children.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1

    nodes = 0
    for piece_sq, to in _legal_pairs(game):
        promotes = _is_promotion(game, piece_sq, to)
        if depth == 1:
            nodes += len(PROMOTION_TYPES) if promotes else 1
            continue
        child = copy.deepcopy(game)
        child.attempt_move(piece_sq, to)
        if not child.promotion_pending:
            nodes += perft(child, depth - 1)
            continue
        for promo in PROMOTION_TYPES:
            grandchild = copy.deepcopy(child)
            grandchild.resolve_promotion(promo)
            nodes += perft(grandchild, depth - 1)
    return nodes


def _legal_pairs(game: Game) -> Iterator[tuple[Square, Square]]:
    for sq in list(game.board.pieces):
        for to in squares_in(game.legal_moves_mask(sq)):
            yield sq, to


def _is_promotion(game: Game, from_sq: Square, to: Square) -> bool:
    piece = game.board.piece_at(from_sq)
    return (
        piece is not None
        and piece.piece_type is PieceType.PAWN
        and to.y == piece.color.promotion_rank
    )
