from __future__ import annotations

from src.engine.movegen import pseudo_legal_moves, ray
from src.engine.piece import Color, Piece, PieceType
from src.engine.square import Square, squares_in


def sq(name: str) -> Square:
    return Square.from_algebraic(name)


def mask(*names: str) -> int:
    m = 0
    for n in names:
        m |= sq(n).to_bitmap()
    return m


def names(m: int) -> set[str]:
    return {s.to_algebraic() for s in squares_in(m)}


def test_ray_stops_before_own_piece_and_on_capture() -> None:
    own = mask("A5")
    other = mask("D1")
    assert names(ray(sq("A1"), 0, 1, own, other)) == {"A2", "A3", "A4"}
    assert names(ray(sq("A1"), 1, 0, own, other)) == {"B1", "C1", "D1"}


def test_ray_stops_at_board_edge() -> None:
    assert names(ray(sq("H1"), 1, 0, 0, 0)) == set()
    assert names(ray(sq("A1"), 1, 1, 0, 0)) == {"B2", "C3", "D4", "E5", "F6", "G7", "H8"}


def test_rook_moves_on_open_board() -> None:
    rook = Piece(PieceType.ROOK, Color.WHITE, sq("D4"))
    moves = pseudo_legal_moves(rook, rook.square.to_bitmap(), 0)
    assert len(names(moves)) == 14
    assert "D4" not in names(moves)


def test_bishop_captures_but_not_through() -> None:
    bishop = Piece(PieceType.BISHOP, Color.WHITE, sq("C1"))
    moves = pseudo_legal_moves(bishop, mask("C1", "B2"), mask("E3"))
    assert names(moves) == {"D2", "E3"}


def test_queen_combines_rook_and_bishop() -> None:
    queen = Piece(PieceType.QUEEN, Color.BLACK, sq("A1"))
    moves = pseudo_legal_moves(queen, mask("A1", "A2", "B1"), 0)
    assert names(moves) == {"B2", "C3", "D4", "E5", "F6", "G7", "H8"}


def test_knight_from_corner_and_own_pieces_excluded() -> None:
    knight = Piece(PieceType.KNIGHT, Color.WHITE, sq("A1"))
    assert names(pseudo_legal_moves(knight, mask("A1"), 0)) == {"B3", "C2"}
    assert names(pseudo_legal_moves(knight, mask("A1", "C2"), 0)) == {"B3"}


def test_king_has_no_castling_in_pseudo_moves() -> None:
    king = Piece(PieceType.KING, Color.WHITE, sq("E1"))
    own = mask("E1", "A1", "H1")
    assert names(pseudo_legal_moves(king, own, 0)) == {"D1", "D2", "E2", "F2", "F1"}


def test_pawn_single_and_double_push() -> None:
    pawn = Piece(PieceType.PAWN, Color.WHITE, sq("E2"))
    assert names(pseudo_legal_moves(pawn, mask("E2"), 0)) == {"E3", "E4"}
    pawn.has_moved = True
    assert names(pseudo_legal_moves(pawn, mask("E2"), 0)) == {"E3"}


def test_pawn_double_push_needs_both_squares_empty() -> None:
    pawn = Piece(PieceType.PAWN, Color.BLACK, sq("D7"))
    assert names(pseudo_legal_moves(pawn, mask("D7"), mask("D6"))) == set()
    assert names(pseudo_legal_moves(pawn, mask("D7"), mask("D5"))) == {"D6"}


def test_pawn_captures_diagonally_only_onto_opponents() -> None:
    pawn = Piece(PieceType.PAWN, Color.WHITE, sq("E4"), has_moved=True)
    moves = pseudo_legal_moves(pawn, mask("E4", "F5"), mask("D5", "E5"))
    assert names(moves) == {"D5"}


def test_pawn_en_passant_only_next_to_double_stepped_enemy() -> None:
    pawn = Piece(PieceType.PAWN, Color.WHITE, sq("E5"), has_moved=True)
    enemy = Piece(PieceType.PAWN, Color.BLACK, sq("D5"), has_moved=True)
    own, other = mask("E5"), mask("D5")
    assert "D6" in names(pseudo_legal_moves(pawn, own, other, enemy))
    assert "D6" not in names(pseudo_legal_moves(pawn, own, other, None))
    friend = Piece(PieceType.PAWN, Color.WHITE, sq("D5"), has_moved=True)
    assert "D6" not in names(pseudo_legal_moves(pawn, mask("E5", "D5"), 0, friend))
