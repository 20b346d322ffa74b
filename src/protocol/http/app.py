from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field

from .error import (
    exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from .session import InMemorySessionStore
from ...engine.game import Game
from ...engine.move import PROMOTION_PIECES, parse_uci
from ...engine.perft import perft as perft_nodes
from ...engine.piece import Color, PieceType
from ...engine.square import Square, squares_in


logger = logging.getLogger(__name__)


class CreateGameRequest(BaseModel):
    fen: Optional[str] = Field(default=None, description="FEN string; standard start if omitted")


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str


class SetPositionRequest(BaseModel):
    fen: str = Field(..., min_length=1, description="FEN string, 1-6 fields")


class MoveRequest(BaseModel):
    move: str = Field(..., description="Coordinate move, e.g. e2e4 or e7e8q")


class PromotionRequest(BaseModel):
    piece: str = Field(..., description="One of q, r, b, n")


class WinRequest(BaseModel):
    color: str = Field(..., pattern="^(white|black)$")


class PerftRequest(BaseModel):
    fen: Optional[str] = None
    depth: int = Field(default=1, ge=0, le=3)


class LegalMovesResponse(BaseModel):
    square: str
    moves: List[str]
    mask: int


class GameState(BaseModel):
    game_id: str
    fen: str
    turn: str
    result: str
    check: bool
    capture: bool
    promotion_pending: bool
    last_move_from: Optional[str]
    last_move_to: Optional[str]
    captured: Dict[str, List[str]]
    fullmove_number: int
    halfmove_clock: int
    board: Dict[str, str]


def game_state(game_id: str, game: Game) -> GameState:
    def _sq(sq: Square) -> Optional[str]:
        return sq.to_algebraic() if sq.in_bounds() else None

    return GameState(
        game_id=game_id,
        fen=game.to_fen(),
        turn=game.turn.name.lower(),
        result=game.result.value,
        check=game.check,
        capture=game.capture,
        promotion_pending=game.promotion_pending,
        last_move_from=_sq(game.last_moved_from),
        last_move_to=_sq(game.last_moved_to),
        captured={
            color.name.lower(): [t.value for t in types] for color, types in game.captured.items()
        },
        fullmove_number=game.fullmove_number,
        halfmove_clock=game.halfmove_clock,
        board={sq.to_algebraic(): p.symbol for sq, p in game.board_state().items()},
    )


def create_app() -> FastAPI:
    app = FastAPI(title="Chess Rules Engine API", version="0.1.0")

    # Basic logging setup
    logging.basicConfig(level=logging.INFO)

    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = InMemorySessionStore()

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game(req: Optional[CreateGameRequest] = None) -> CreateGameResponse:
        game = Game.from_fen(req.fen) if req is not None and req.fen else Game.new()
        game_id = store.create(game)
        logger.info("created game %s", game_id)
        return CreateGameResponse(game_id=game_id, fen=game.to_fen())

    @app.get("/api/games/{game_id}/state", response_model=GameState)
    async def get_state(game_id: str) -> GameState:
        with store.checkout(game_id) as game:
            return game_state(game_id, _require(game))

    @app.post("/api/games/{game_id}/position", response_model=GameState)
    async def set_position(game_id: str, req: SetPositionRequest) -> GameState:
        game = Game.from_fen(req.fen)
        try:
            store.replace(game_id, game)
        except KeyError:
            raise HTTPException(status_code=404, detail="game not found")
        return game_state(game_id, game)

    @app.get("/api/games/{game_id}/moves/{square}", response_model=LegalMovesResponse)
    async def legal_moves(game_id: str, square: str) -> LegalMovesResponse:
        try:
            sq = Square.from_algebraic(square)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        with store.checkout(game_id) as game:
            mask = _require(game).legal_moves_mask(sq)
        return LegalMovesResponse(
            square=sq.to_algebraic(),
            moves=[s.to_algebraic() for s in squares_in(mask)],
            mask=mask,
        )

    @app.post("/api/games/{game_id}/move", response_model=GameState)
    async def make_move(game_id: str, req: MoveRequest) -> GameState:
        try:
            move = parse_uci(req.move)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        with store.checkout(game_id) as game:
            game = _require(game)
            if not game.play(move):
                raise HTTPException(status_code=400, detail="illegal move")
            return game_state(game_id, game)

    @app.post("/api/games/{game_id}/promotion", response_model=GameState)
    async def promote(game_id: str, req: PromotionRequest) -> GameState:
        piece = req.piece.lower()
        if piece not in PROMOTION_PIECES:
            raise HTTPException(status_code=400, detail=f"invalid promotion piece: {req.piece!r}")
        with store.checkout(game_id) as game:
            game = _require(game)
            if not game.resolve_promotion(PieceType(piece)):
                raise HTTPException(status_code=400, detail="no promotion pending")
            return game_state(game_id, game)

    @app.post("/api/games/{game_id}/draw", response_model=GameState)
    async def declare_draw(game_id: str) -> GameState:
        with store.checkout(game_id) as game:
            game = _require(game)
            if not game.declare_draw():
                raise HTTPException(status_code=409, detail="game is already over")
            return game_state(game_id, game)

    @app.post("/api/games/{game_id}/win", response_model=GameState)
    async def declare_win(game_id: str, req: WinRequest) -> GameState:
        color = Color.WHITE if req.color == "white" else Color.BLACK
        with store.checkout(game_id) as game:
            game = _require(game)
            if not game.declare_win(color):
                raise HTTPException(status_code=409, detail="game is already over")
            return game_state(game_id, game)

    @app.delete("/api/games/{game_id}")
    async def delete_game(game_id: str) -> Dict[str, str]:
        if not store.delete(game_id):
            raise HTTPException(status_code=404, detail="game not found")
        return {"status": "deleted"}

    @app.post("/api/perft")
    def perft(req: PerftRequest) -> Dict[str, Any]:
        game = Game.from_fen(req.fen) if req.fen else Game.new()
        return {"nodes": perft_nodes(game, req.depth), "depth": req.depth}

    return app


def _require(game: Optional[Game]) -> Game:
    if game is None:
        raise HTTPException(status_code=404, detail="game not found")
    return game


# Default app for non-factory servers
app = create_app()
