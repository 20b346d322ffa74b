from __future__ import annotations

from src.engine.game import Game
from src.engine.piece import Color, GameResult


def test_threefold_repetition_is_a_draw() -> None:
    game = Game.new()
    shuffle = [("G1", "F3"), ("G8", "F6"), ("F3", "G1"), ("F6", "G8")]
    for from_sq, to_sq in shuffle:
        assert game.attempt_move(from_sq, to_sq)
    assert game.result is GameResult.ONGOING
    for from_sq, to_sq in shuffle[:3]:
        assert game.attempt_move(from_sq, to_sq)
    assert game.result is GameResult.ONGOING
    assert game.attempt_move(*shuffle[3])
    assert game.result is GameResult.DRAW


def test_castling_rights_distinguish_repeated_placements() -> None:
    # Same placement as the start after the rook shuffle, but rights are gone
    game = Game.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    moves = [("H1", "H2"), ("H8", "H7"), ("H2", "H1"), ("H7", "H8")]
    for _ in range(2):
        for from_sq, to_sq in moves:
            assert game.attempt_move(from_sq, to_sq)
    assert game.result is GameResult.ONGOING


def test_fifty_move_rule_is_a_draw() -> None:
    game = Game.from_fen("4k3/8/8/8/8/8/8/R3K3 w - - 99 40")
    assert game.result is GameResult.ONGOING
    assert game.attempt_move("A1", "A2")
    assert game.halfmove_clock == 100
    assert game.result is GameResult.DRAW


def test_fifty_move_counter_from_fen() -> None:
    game = Game.from_fen("8/8/8/8/8/8/8/R3K2k w - - 100 1")
    assert game.result is GameResult.DRAW


def test_bare_kings_are_a_draw() -> None:
    game = Game.from_fen("8/8/8/8/8/8/8/4K2k w - - 0 1")
    assert game.result is GameResult.DRAW


def test_capture_into_king_and_bishop_is_a_draw() -> None:
    game = Game.from_fen("4k3/8/8/8/8/8/3r4/4KB2 w - - 0 1")
    assert game.result is GameResult.ONGOING
    assert game.attempt_move("E1", "D2")
    assert game.capture is True
    assert game.result is GameResult.DRAW


def test_king_and_rook_is_not_insufficient() -> None:
    game = Game.from_fen("4k3/8/8/8/8/8/8/R3K3 w - - 0 1")
    assert game.result is GameResult.ONGOING


def test_stalemate_is_a_draw() -> None:
    # Black to move is stalemated (not in check, no legal moves)
    game = Game.from_fen("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
    assert game.check is False
    assert game.result is GameResult.DRAW


def test_checkmate_from_fen() -> None:
    game = Game.from_fen("7k/6Q1/6K1/8/8/8/8/8 b - - 0 1")
    assert game.check is True
    assert game.result is GameResult.WHITE_WON


def test_checkmate_overrides_fifty_move_draw() -> None:
    # Qb8# lands on the hundredth half-move
    game = Game.from_fen("7k/8/6K1/8/8/8/8/1Q6 w - - 99 80")
    assert game.attempt_move("B1", "B8")
    assert game.result is GameResult.WHITE_WON


def test_black_checkmates_white() -> None:
    game = Game.new()
    for from_sq, to_sq in [("F2", "F3"), ("E7", "E5"), ("G2", "G4"), ("D8", "H4")]:
        assert game.attempt_move(from_sq, to_sq)
    assert game.check is True
    assert game.result is GameResult.BLACK_WON
    assert game.turn is Color.WHITE
