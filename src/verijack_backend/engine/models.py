from __future__ import annotations

import logging
import os
import secrets
from enum import Enum
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
)

from verijack_backend.engine.errors import UnknownActionKindError


logger = logging.getLogger(__name__)

ENGINE_VERSION = "0.1.0"
RULESET_VERSION = "bj-s17-split4-v1"

SEED_BYTES = 16
SIGNATURE_BYTES = 64
MAX_HANDS = 4
UINT256_LIMIT = 2**256


def _parse_hex(value: Any) -> Any:
    if isinstance(value, str):
        raw = value[2:] if value.startswith(("0x", "0X")) else value
        return bytes.fromhex(raw)
    if isinstance(value, list):
        return bytes(value)
    return value


HexBytes = Annotated[
    bytes,
    BeforeValidator(_parse_hex),
    PlainSerializer(lambda value: "0x" + value.hex(), return_type=str, when_used="json"),
]
Uint8 = Annotated[int, Field(ge=0, le=255)]
Uint256 = Annotated[int, Field(ge=0, lt=UINT256_LIMIT)]


class ActionKind(str, Enum):
    HIT = "hit"
    STAND = "stand"
    DOUBLE = "double"
    SPLIT = "split"

    @property
    def code(self) -> int:
        return _KIND_TO_CODE[self]

    @classmethod
    def from_code(cls, code: int) -> ActionKind:
        try:
            return _CODE_TO_KIND[code]
        except KeyError:
            raise UnknownActionKindError(code) from None


_KIND_TO_CODE = {
    ActionKind.HIT: 0,
    ActionKind.STAND: 1,
    ActionKind.DOUBLE: 2,
    ActionKind.SPLIT: 3,
}
_CODE_TO_KIND = {code: kind for kind, code in _KIND_TO_CODE.items()}


class HandResult(str, Enum):
    BLACKJACK_WIN = "blackjack_win"
    WIN = "win"
    PUSH = "push"
    LOSE = "lose"
    DOUBLE_WIN = "double_win"
    DOUBLE_LOSE = "double_lose"
    DOUBLE_PUSH = "double_push"


class BlackjackPayout(str, Enum):
    FIVE_HALVES = "five_halves"
    THREE_HALVES_CEIL = "three_halves_ceil"


class InvalidGamePolicy(str, Enum):
    ISOLATE = "isolate"
    ABORT_BATCH = "abort_batch"


class RulesConfig(BaseModel):
    blackjack_payout: BlackjackPayout = BlackjackPayout.FIVE_HALVES
    invalid_game_policy: InvalidGamePolicy = InvalidGamePolicy.ISOLATE

    model_config = ConfigDict(extra="forbid", frozen=True)


class ServiceConfig(BaseModel):
    dealer_seed: HexBytes
    rules: RulesConfig = RulesConfig()
    report_winnings: bool = False

    model_config = ConfigDict(extra="forbid")

    @field_validator("dealer_seed")
    @classmethod
    def _dealer_seed_length(cls, value: bytes) -> bytes:
        if len(value) != SEED_BYTES:
            raise ValueError(f"dealer_seed must be {SEED_BYTES} bytes")
        return value

    @classmethod
    def from_env(cls) -> ServiceConfig:
        seed = os.getenv("VERIJACK_DEALER_SEED")
        rules = RulesConfig(
            blackjack_payout=os.getenv("VERIJACK_BLACKJACK_PAYOUT", BlackjackPayout.FIVE_HALVES.value),
            invalid_game_policy=os.getenv("VERIJACK_INVALID_GAME_POLICY", InvalidGamePolicy.ISOLATE.value),
        )
        report = os.getenv("VERIJACK_REPORT_WINNINGS", "false").lower() in ("true", "1", "t")
        if not seed:
            logger.warning("VERIJACK_DEALER_SEED is not set, dealing from a random dealer seed")
        return cls(
            dealer_seed=seed if seed else secrets.token_bytes(SEED_BYTES),
            rules=rules,
            report_winnings=report,
        )


class Action(BaseModel):
    nonce: Uint8
    hand_id: Uint8
    kind: ActionKind
    player_cards: list[Uint8]
    dealer_cards: list[Uint8]

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("kind", mode="before")
    @classmethod
    def _kind_from_code(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return ActionKind.from_code(value)
        return value


class EngineError(BaseModel):
    code: str
    message: str

    model_config = ConfigDict(extra="forbid")


class GameStart(BaseModel):
    game_index: Annotated[int, Field(ge=0, lt=2**64)]
    bets: list[Uint256]
    player_commitment: HexBytes
    player_pubkey: HexBytes

    model_config = ConfigDict(extra="forbid")


class StartGameRequest(BaseModel):
    tx_hash: str
    player_seed: HexBytes

    model_config = ConfigDict(extra="forbid")


class StartGameResponse(BaseModel):
    player_hands: list[list[int]]
    dealer_hand: list[int]
    hands_active: list[bool]
    game_index: int

    model_config = ConfigDict(extra="forbid")


class SubmitActionRequest(BaseModel):
    action: Action
    signature: HexBytes

    model_config = ConfigDict(extra="forbid")


class SubmitActionResponse(BaseModel):
    accepted: bool
    error: EngineError | None = None
    player_hands: list[list[int]]
    dealer_hand: list[int]
    hands_active: list[bool]
    winnings: int | None = None

    model_config = ConfigDict(extra="forbid")


class GameView(BaseModel):
    game_index: int
    player_hands: list[list[int]]
    dealer_hand: list[int]
    hands_active: list[bool]
    focus_index: int
    next_nonce: int
    terminated: bool

    model_config = ConfigDict(extra="forbid")


class GameInput(BaseModel):
    player_seed: HexBytes
    pubkey: HexBytes
    initial_hands: Uint8
    bets: list[Uint256]
    actions: list[Action] = Field(default_factory=list)
    signatures: list[HexBytes] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class BatchInput(BaseModel):
    dealer_seed: HexBytes
    games: list[GameInput]

    model_config = ConfigDict(extra="forbid")


class GameVerdict(BaseModel):
    player_commitment: HexBytes
    player_pubkey: HexBytes
    payout: int
    doubled_hands: list[int]
    split_hands: list[int]
    action_log_hash: HexBytes
    terminated: bool

    model_config = ConfigDict(extra="forbid")


class BatchOutput(BaseModel):
    dealer_commitment: HexBytes
    games: list[GameVerdict]

    model_config = ConfigDict(extra="forbid")
