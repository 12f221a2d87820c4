from __future__ import annotations

from abc import ABC, abstractmethod

from verijack_backend.engine.models import GameStart


class ChainLogDecoder(ABC):
    """Source of the game parameters a start transaction put on chain.

    The engine trusts what it returns as-is.
    """

    @abstractmethod
    def get_start(self, tx_hash: str) -> GameStart:
        raise NotImplementedError
