from __future__ import annotations

from abc import ABC, abstractmethod

from verijack_backend.engine.internal import GameRuntime


class GameRepository(ABC):
    @abstractmethod
    def create(self, game: GameRuntime) -> None:
        raise NotImplementedError

    @abstractmethod
    def get(self, game_index: int) -> GameRuntime:
        raise NotImplementedError

    @abstractmethod
    def all(self) -> list[GameRuntime]:
        raise NotImplementedError
