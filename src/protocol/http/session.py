from __future__ import annotations

import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional

from ...engine.game import Game


@dataclass
class GameSession:
    game: Game
    lock: threading.Lock = field(default_factory=threading.Lock)


class InMemorySessionStore:
    """Thread-safe in-memory game session store.

    Responsibilities:
    - Create new sessions with unique `game_id`s
    - Hand out a game under its own lock (games are not thread-safe)
    - Replace or delete sessions
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._sessions: Dict[str, GameSession] = {}

    def create(self, game: Optional[Game] = None) -> str:
        """Create a new game session and return its `game_id`."""
        gid = str(uuid.uuid4())
        with self._lock:
            self._sessions[gid] = GameSession(game if game is not None else Game.new())
        return gid

    @contextmanager
    def checkout(self, game_id: str) -> Iterator[Optional[Game]]:
        """Yield the game for `game_id` (or None) while holding its lock."""
        with self._lock:
            session = self._sessions.get(game_id)
        if session is None:
            yield None
            return
        with session.lock:
            yield session.game

    def replace(self, game_id: str, game: Game) -> None:
        with self._lock:
            session = self._sessions.get(game_id)
            if session is None:
                raise KeyError(game_id)
        with session.lock:
            session.game = game

    def delete(self, game_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(game_id, None) is not None
