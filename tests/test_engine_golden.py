from __future__ import annotations

import pytest

from verijack_backend.engine.models import ActionKind, BlackjackPayout, RulesConfig
from verijack_backend.engine.verifier import verify_batch

from .test_utils import (
    SCENARIO_PLAYER_SEED,
    ZERO_SEED,
    action_for,
    make_engine,
    play_service_game,
    register_start,
    sign_action,
)


@pytest.mark.asyncio
async def test_single_stand_agrees_between_service_and_verifier(signing_key) -> None:
    engine, ledger = make_engine(ZERO_SEED)
    tx_hash = register_start(ledger, signing_key, game_index=1, bets=[100], player_seed=SCENARIO_PLAYER_SEED)
    await engine.start_game(tx_hash, SCENARIO_PLAYER_SEED)

    state = engine._repo.get(1).state  # noqa: SLF001
    stand = action_for(state, ActionKind.STAND)
    await engine.submit_action(1, stand, sign_action(signing_key, stand))

    live = engine._repo.get(1).state  # noqa: SLF001
    assert live.terminated is True
    assert live.payout in {0, 100, 200, 250}

    game = await engine.extract_game_input(1)
    (verdict,) = verify_batch(ZERO_SEED, [game]).games
    assert verdict.terminated is True
    assert verdict.payout == live.payout == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("policy", list(BlackjackPayout))
async def test_collected_batch_reproduces_every_live_payout(signing_key, policy: BlackjackPayout) -> None:
    rules_config = RulesConfig(blackjack_payout=policy)
    engine, ledger = make_engine(b"\x5a" * 16, rules_config)
    for index in range(12):
        player_seed = bytes([index + 1]) * 16
        tx_hash = register_start(ledger, signing_key, game_index=index, bets=[25, 75], player_seed=player_seed)
        await engine.start_game(tx_hash, player_seed)
        await play_service_game(engine, index, signing_key)

    batch = await engine.collect_batch()
    output = verify_batch(batch.dealer_seed, batch.games, rules_config)

    assert len(output.games) == 12
    for index, verdict in enumerate(output.games):
        live = engine._repo.get(index).state  # noqa: SLF001
        assert verdict.terminated is True
        assert verdict.payout == live.payout
        assert verdict.doubled_hands == list(live.doubled)
        assert verdict.split_hands == list(live.split)
