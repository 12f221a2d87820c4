from __future__ import annotations

import threading

from verijack_backend.engine.internal import GameRuntime
from verijack_backend.repo.base import GameRepository


class GameExistsError(KeyError):
    pass


class InMemoryGameRepository(GameRepository):
    """Arena of live games keyed by game index.

    The table lock only covers insertion and lookup; each game carries its own
    lock for mutation.
    """

    def __init__(self) -> None:
        self._games: dict[int, GameRuntime] = {}
        self._table_lock = threading.Lock()

    def create(self, game: GameRuntime) -> None:
        with self._table_lock:
            if game.game_index in self._games:
                raise GameExistsError(f"game {game.game_index} already exists")
            self._games[game.game_index] = game

    def get(self, game_index: int) -> GameRuntime:
        with self._table_lock:
            if game_index not in self._games:
                raise KeyError(f"game {game_index} not found")
            return self._games[game_index]

    def all(self) -> list[GameRuntime]:
        with self._table_lock:
            return [self._games[index] for index in sorted(self._games)]
