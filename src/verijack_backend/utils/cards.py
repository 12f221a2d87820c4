from __future__ import annotations

import hashlib
from collections.abc import Sequence
from dataclasses import dataclass


ACE = 1
TEN = 10
BLACKJACK = 21
GAME_SEED_BYTES = 32
_BLOCK_BYTES = 32


def _block(seed: bytes, index: int) -> bytes:
    return hashlib.sha256(seed + index.to_bytes(8, byteorder="big", signed=False)).digest()


@dataclass(frozen=True)
class CardSource:
    """Position in the card stream derived from a 32-byte game seed.

    The stream is SHA-256 in counter mode. Drawing never mutates the source;
    it hands back the card together with the source advanced by one byte, so
    any earlier source can be kept and replayed.
    """

    seed: bytes
    position: int = 0

    def __post_init__(self) -> None:
        if len(self.seed) != GAME_SEED_BYTES:
            raise ValueError(f"card source seed must be {GAME_SEED_BYTES} bytes, got {len(self.seed)}")

    @classmethod
    def from_seeds(cls, dealer_seed: bytes, player_seed: bytes) -> CardSource:
        return cls(seed=bytes(dealer_seed) + bytes(player_seed))

    def next_byte(self) -> tuple[int, CardSource]:
        block_index, offset = divmod(self.position, _BLOCK_BYTES)
        value = _block(self.seed, block_index)[offset]
        return value, CardSource(self.seed, self.position + 1)

    def draw(self) -> tuple[int, CardSource]:
        value, following = self.next_byte()
        return card_from_byte(value), following

    def draw_many(self, count: int) -> tuple[list[int], CardSource]:
        cards: list[int] = []
        source = self
        for _ in range(count):
            card, source = source.draw()
            cards.append(card)
        return cards, source


def card_from_byte(value: int) -> int:
    # 11, 12 and 13 all collapse onto the ten
    card = value % 13 + 1
    return TEN if card > TEN else card


def hard_sum(cards: Sequence[int]) -> int:
    return sum(cards)


def best_sum(cards: Sequence[int]) -> int:
    total = hard_sum(cards)
    if ACE in cards and total + 10 <= BLACKJACK:
        total += 10
    return total


def is_natural(cards: Sequence[int]) -> bool:
    return len(cards) == 2 and cards.count(ACE) == 1 and cards.count(TEN) == 1
