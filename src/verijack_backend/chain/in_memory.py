from __future__ import annotations

from verijack_backend.chain.base import ChainLogDecoder
from verijack_backend.engine.models import GameStart


def _normalize(tx_hash: str) -> str:
    return tx_hash.lower().removeprefix("0x")


class InMemoryStartLedger(ChainLogDecoder):
    def __init__(self) -> None:
        self._starts: dict[str, GameStart] = {}

    def record(self, tx_hash: str, start: GameStart) -> None:
        self._starts[_normalize(tx_hash)] = start

    def get_start(self, tx_hash: str) -> GameStart:
        key = _normalize(tx_hash)
        if key not in self._starts:
            raise KeyError(f"transaction {tx_hash} not found")
        return self._starts[key]
