from __future__ import annotations

from src.engine.encoding import (
    FLAG_EN_PASSANT,
    FLAG_KINGSIDE,
    FLAG_QUEENSIDE,
    BLACK_SHIFT,
    encode_position,
)
from src.engine.game import Game


def test_start_position_flags_hold_all_castling_rights() -> None:
    key = encode_position(Game.new().board)
    both = FLAG_KINGSIDE | FLAG_QUEENSIDE
    assert key.flags == both | (both << BLACK_SHIFT)
    assert key.colors == (0xFFFF, 0xFFFF << 48)


def test_same_placement_and_rights_encode_equal() -> None:
    game = Game.new()
    start = encode_position(game.board)
    for from_sq, to_sq in [("G1", "F3"), ("G8", "F6"), ("F3", "G1"), ("F6", "G8")]:
        game.attempt_move(from_sq, to_sq)
    assert encode_position(game.board) == start


def test_castling_rights_change_the_key() -> None:
    with_rights = encode_position(Game.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1").board)
    without = encode_position(Game.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w Kkq - 0 1").board)
    assert with_rights.colors == without.colors
    assert with_rights.types == without.types
    assert with_rights != without


def test_en_passant_availability_sets_the_capturer_bit() -> None:
    available = encode_position(Game.from_fen("4k3/8/8/3Pp3/8/8/8/4K3 w - e6 0 1").board)
    assert available.flags & FLAG_EN_PASSANT
    assert not available.flags & (FLAG_EN_PASSANT << BLACK_SHIFT)

    # Same placement without the double step: no en passant bit
    absent = encode_position(Game.from_fen("4k3/8/8/3Pp3/8/8/8/4K3 w - - 0 1").board)
    assert absent.types == available.types
    assert absent != available


def test_double_step_without_adjacent_pawn_sets_no_bit() -> None:
    game = Game.from_fen("rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1")
    key = encode_position(game.board)
    assert not key.flags & (FLAG_EN_PASSANT | (FLAG_EN_PASSANT << BLACK_SHIFT))
