from __future__ import annotations

import pytest

from src.engine.piece import Color
from src.engine.square import Square, squares_in


def test_bitmap_uses_rank_major_index() -> None:
    assert Square(0, 0).to_bitmap() == 1
    assert Square(7, 0).to_bitmap() == 1 << 7
    assert Square(4, 4).to_bitmap() == 1 << 36
    assert Square(7, 7).to_bitmap() == 1 << 63


@pytest.mark.parametrize("x,y", [(-1, 0), (8, 0), (0, -1), (0, 8), (-5, 12)])
def test_off_board_square_is_empty_mask(x: int, y: int) -> None:
    assert Square(x, y).to_bitmap() == 0


def test_offsets_may_leave_the_board() -> None:
    sq = Square(0, 0)
    assert sq.moved(-1, -1) == Square(-1, -1)
    assert sq.left(3).to_bitmap() == 0
    assert sq.right(2) == Square(2, 0)
    assert sq.up(7) == Square(0, 7)
    assert sq.up(7).down(2) == Square(0, 5)


@pytest.mark.parametrize("name,expected", [("E4", Square(4, 3)), ("e4", Square(4, 3)), ("a1", Square(0, 0)), ("H8", Square(7, 7))])
def test_from_algebraic(name: str, expected: Square) -> None:
    assert Square.from_algebraic(name) == expected


@pytest.mark.parametrize("name", ["", "e", "i1", "a0", "a9", "e44", "4e"])
def test_from_algebraic_rejects_bad_names(name: str) -> None:
    with pytest.raises(ValueError):
        Square.from_algebraic(name)


def test_to_algebraic_uses_uppercase_file() -> None:
    assert Square(4, 3).to_algebraic() == "E4"
    assert str(Square(2, 7)) == "C8"


def test_squares_in_yields_set_bits() -> None:
    mask = Square(1, 0).to_bitmap() | Square(3, 5).to_bitmap()
    assert list(squares_in(mask)) == [Square(1, 0), Square(3, 5)]
    assert list(squares_in(0)) == []


def test_pawn_direction_by_color() -> None:
    assert Color.WHITE.pawn_direction == 1
    assert Color.BLACK.pawn_direction == -1
    assert Color.WHITE.opposite is Color.BLACK
