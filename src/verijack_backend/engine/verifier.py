"""Offline replay of complete games.

``verify_batch`` re-runs every game of a batch through the same rules the live
service uses and reports, per game, the commitment-bound outcome. It keeps no
state between calls and reads no clock, so identical input always produces an
identical output.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from verijack_backend.engine import rules
from verijack_backend.engine.codec import decode_batch_input, encode_action_log, encode_batch_output
from verijack_backend.engine.errors import BatchAbortedError, EngineRejectedAction, MalformedInputError
from verijack_backend.engine.models import (
    MAX_HANDS,
    SEED_BYTES,
    BatchInput,
    BatchOutput,
    GameInput,
    GameVerdict,
    InvalidGamePolicy,
    RulesConfig,
)
from verijack_backend.utils.hashing import ZERO_HASH, commitment, digest


logger = logging.getLogger(__name__)


def _check_shape(position: int, game: GameInput) -> None:
    if len(game.player_seed) != SEED_BYTES:
        raise MalformedInputError(f"game {position}: player seed must be {SEED_BYTES} bytes")
    if game.initial_hands != len(game.bets):
        raise MalformedInputError(
            f"game {position}: initial_hands {game.initial_hands} does not match {len(game.bets)} bets",
        )
    if not 1 <= len(game.bets) <= MAX_HANDS:
        raise MalformedInputError(f"game {position}: a game holds between 1 and {MAX_HANDS} hands")
    if len(game.actions) != len(game.signatures):
        raise MalformedInputError(
            f"game {position}: {len(game.actions)} actions but {len(game.signatures)} signatures",
        )


def replay_game(dealer_seed: bytes, game: GameInput, config: RulesConfig) -> rules.GameState:
    """Replay one game; raises ``EngineRejectedAction`` on the first illegal step."""
    state = rules.deal(dealer_seed, game.player_seed, game.bets, config)
    for action, signature in zip(game.actions, game.signatures):
        state = rules.submit(state, action, signature, game.pubkey, config)
    if not state.terminated:
        raise EngineRejectedAction("GAME_NOT_TERMINATED", "Action log ends with live hands.")
    return state


def _invalid_verdict(game: GameInput) -> GameVerdict:
    return GameVerdict(
        player_commitment=commitment(game.player_seed),
        player_pubkey=game.pubkey,
        payout=0,
        doubled_hands=[],
        split_hands=[],
        action_log_hash=digest(encode_action_log(game.actions)),
        terminated=False,
    )


def verify_game(
    dealer_seed: bytes,
    game: GameInput,
    config: RulesConfig,
    position: int = 0,
) -> GameVerdict:
    _check_shape(position, game)
    try:
        state = replay_game(dealer_seed, game, config)
    except EngineRejectedAction as exc:
        if config.invalid_game_policy is InvalidGamePolicy.ABORT_BATCH:
            raise BatchAbortedError(position, exc.code) from exc
        logger.warning("game %d failed replay: %s (%s)", position, exc.code, exc.message)
        return _invalid_verdict(game)

    return GameVerdict(
        player_commitment=commitment(game.player_seed),
        player_pubkey=game.pubkey,
        payout=state.payout,
        doubled_hands=list(state.doubled),
        split_hands=list(state.split),
        action_log_hash=ZERO_HASH,
        terminated=True,
    )


def verify_batch(
    dealer_seed: bytes,
    games: Sequence[GameInput],
    config: RulesConfig | None = None,
) -> BatchOutput:
    config = config or RulesConfig()
    if len(dealer_seed) != SEED_BYTES:
        raise MalformedInputError(f"dealer seed must be {SEED_BYTES} bytes")

    verdicts = [verify_game(dealer_seed, game, config, position) for position, game in enumerate(games)]
    logger.info(
        "verified batch of %d game(s), %d terminated",
        len(verdicts),
        sum(1 for verdict in verdicts if verdict.terminated),
    )
    return BatchOutput(dealer_commitment=commitment(dealer_seed), games=verdicts)


def verify_input(batch: BatchInput, config: RulesConfig | None = None) -> BatchOutput:
    return verify_batch(batch.dealer_seed, batch.games, config)


def verify_encoded_batch(data: bytes, config: RulesConfig | None = None) -> bytes:
    return encode_batch_output(verify_input(decode_batch_input(data), config))
