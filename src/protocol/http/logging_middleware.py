from __future__ import annotations

import logging
import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request


logger = logging.getLogger(__name__)

GAME_PATH_PREFIX = "/api/games/"


def _game_id_from_path(path: str) -> str:
    if not path.startswith(GAME_PATH_PREFIX):
        return ""
    return path[len(GAME_PATH_PREFIX):].split("/", 1)[0]


class RequestIDLoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with a UUID, log it with its game id, echo the header."""

    async def dispatch(self, request: Request, call_next: Callable):
        start = time.perf_counter()
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        game_id = _game_id_from_path(request.url.path)

        logger.info(
            "%s %s",
            request.method,
            request.url.path,
            extra={"request_id": request_id, "game_id": game_id},
        )

        response = await call_next(request)
        duration_ms = int((time.perf_counter() - start) * 1000)
        response.headers["x-request-id"] = request_id

        logger.info(
            "%s %s -> %d in %dms",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            extra={"request_id": request_id, "game_id": game_id},
        )
        return response
