from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from verijack_backend.engine.models import Action, GameInput
from verijack_backend.engine.rules import GameState


@dataclass
class GameRuntime:
    game_index: int
    player_seed: bytes
    player_pubkey: bytes
    initial_bets: list[int]
    state: GameState
    actions: list[Action] = field(default_factory=list)
    signatures: list[bytes] = field(default_factory=list)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def record(self, action: Action, signature: bytes, state: GameState) -> None:
        if action.nonce != len(self.actions):
            raise RuntimeError(f"action log out of step: nonce {action.nonce} at length {len(self.actions)}")
        self.state = state
        self.actions.append(action)
        self.signatures.append(bytes(signature))

    def extract(self) -> GameInput | None:
        if not self.state.terminated:
            return None
        return GameInput(
            player_seed=self.player_seed,
            pubkey=self.player_pubkey,
            initial_hands=len(self.initial_bets),
            bets=list(self.initial_bets),
            actions=list(self.actions),
            signatures=list(self.signatures),
        )
