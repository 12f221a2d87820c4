from __future__ import annotations

import logging

from verijack_backend.chain.base import ChainLogDecoder
from verijack_backend.engine import rules
from verijack_backend.engine.errors import EngineRejectedAction
from verijack_backend.engine.internal import GameRuntime
from verijack_backend.engine.models import (
    SEED_BYTES,
    Action,
    BatchInput,
    GameInput,
    GameView,
    ServiceConfig,
    StartGameResponse,
    SubmitActionResponse,
)
from verijack_backend.repo.base import GameRepository
from verijack_backend.utils.hashing import commitment


logger = logging.getLogger(__name__)


class BlackjackEngineService:
    def __init__(
        self,
        repository: GameRepository,
        decoder: ChainLogDecoder,
        config: ServiceConfig,
    ) -> None:
        self._repo = repository
        self._decoder = decoder
        self._config = config

    @property
    def config(self) -> ServiceConfig:
        return self._config

    async def start_game(self, tx_hash: str, player_seed: bytes) -> StartGameResponse:
        if len(player_seed) != SEED_BYTES:
            raise EngineRejectedAction("BAD_SEED", f"player_seed must be {SEED_BYTES} bytes.")
        try:
            start = self._decoder.get_start(tx_hash)
        except KeyError as exc:
            raise EngineRejectedAction("UNKNOWN_TX", f"No start event for transaction {tx_hash}.") from exc
        if commitment(player_seed) != bytes(start.player_commitment):
            raise EngineRejectedAction("SEED_MISMATCH", "player_seed does not match the on-chain commitment.")

        state = rules.deal(self._config.dealer_seed, player_seed, start.bets, self._config.rules)
        game = GameRuntime(
            game_index=start.game_index,
            player_seed=bytes(player_seed),
            player_pubkey=bytes(start.player_pubkey),
            initial_bets=list(start.bets),
            state=state,
        )
        try:
            self._repo.create(game)
        except KeyError as exc:
            raise EngineRejectedAction("GAME_EXISTS", f"Game {start.game_index} already started.") from exc

        logger.info(
            "started game %d with %d hand(s)%s",
            start.game_index,
            len(start.bets),
            ", settled at deal" if state.terminated else "",
        )
        return StartGameResponse(
            player_hands=[list(hand) for hand in state.hands],
            dealer_hand=list(state.dealer_hand),
            hands_active=list(state.active),
            game_index=start.game_index,
        )

    async def submit_action(
        self,
        game_index: int,
        action: Action,
        signature: bytes,
    ) -> SubmitActionResponse:
        game = self._get(game_index)

        async with game.lock:
            try:
                state = rules.submit(
                    game.state,
                    action,
                    signature,
                    game.player_pubkey,
                    self._config.rules,
                )
            except EngineRejectedAction as exc:
                logger.warning("game %d rejected action nonce=%d: %s", game_index, action.nonce, exc.code)
                raise

            game.record(action, signature, state)
            if state.terminated:
                logger.info("game %d terminated after %d action(s)", game_index, len(game.actions))
            return self._action_response(state)

    async def get_view(self, game_index: int) -> GameView:
        game = self._get(game_index)
        async with game.lock:
            state = game.state
            return GameView(
                game_index=game_index,
                player_hands=[list(hand) for hand in state.hands],
                dealer_hand=list(state.dealer_hand),
                hands_active=list(state.active),
                focus_index=state.focus_index,
                next_nonce=state.next_nonce,
                terminated=state.terminated,
            )

    async def extract_game_input(self, game_index: int) -> GameInput:
        game = self._get(game_index)
        async with game.lock:
            extracted = game.extract()
        if extracted is None:
            raise EngineRejectedAction("GAME_NOT_TERMINATED", f"Game {game_index} is still in play.")
        return extracted

    async def collect_batch(self) -> BatchInput:
        games: list[GameInput] = []
        for game in self._repo.all():
            async with game.lock:
                extracted = game.extract()
            if extracted is not None:
                games.append(extracted)
        return BatchInput(dealer_seed=self._config.dealer_seed, games=games)

    def _get(self, game_index: int) -> GameRuntime:
        try:
            return self._repo.get(game_index)
        except KeyError as exc:
            raise EngineRejectedAction("GAME_NOT_FOUND", f"Game {game_index} does not exist.") from exc

    def _action_response(self, state: rules.GameState) -> SubmitActionResponse:
        winnings = state.payout if self._config.report_winnings and state.terminated else None
        return SubmitActionResponse(
            accepted=True,
            player_hands=[list(hand) for hand in state.hands],
            dealer_hand=list(state.dealer_hand),
            hands_active=list(state.active),
            winnings=winnings,
        )
