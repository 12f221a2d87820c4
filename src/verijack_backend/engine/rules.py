"""Blackjack rules shared by the live service and the batch verifier.

Everything here is a pure function of its arguments. A ``GameState`` is never
mutated; accepting an action produces a new state, so a rejected action leaves
the caller holding exactly the state it had before.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
from typing import TypeVar

from verijack_backend.engine.auth import verify_action_signature
from verijack_backend.engine.errors import EngineRejectedAction
from verijack_backend.engine.models import (
    MAX_HANDS,
    SEED_BYTES,
    Action,
    ActionKind,
    HandResult,
    RulesConfig,
)
from verijack_backend.engine.payout import blackjack_payout, payout, resolve_hand, total_payout
from verijack_backend.utils.cards import BLACKJACK, CardSource, best_sum, hard_sum, is_natural


DEALER_STANDS_ON = 17

T = TypeVar("T")


@dataclass(frozen=True)
class GameState:
    bets: tuple[int, ...]
    hands: tuple[tuple[int, ...], ...]
    active: tuple[bool, ...]
    naturals: tuple[bool, ...]
    winnings: tuple[int, ...]
    dealer_hand: tuple[int, ...]
    cards: CardSource
    focus_index: int = 0
    next_nonce: int = 0
    doubled: tuple[int, ...] = ()
    split: tuple[int, ...] = ()
    results: tuple[HandResult, ...] = ()

    @property
    def terminated(self) -> bool:
        return not any(self.active)

    @property
    def payout(self) -> int:
        return total_payout(self.winnings)


def _replace_at(items: tuple[T, ...], index: int, value: T) -> tuple[T, ...]:
    return items[:index] + (value,) + items[index + 1:]


def _insert_after(items: tuple[T, ...], index: int, value: T) -> tuple[T, ...]:
    return items[: index + 1] + (value,) + items[index + 1:]


def deal(
    dealer_seed: bytes,
    player_seed: bytes,
    bets: Sequence[int],
    rules: RulesConfig,
) -> GameState:
    if len(dealer_seed) != SEED_BYTES or len(player_seed) != SEED_BYTES:
        raise EngineRejectedAction("BAD_SEED", f"Seeds must be {SEED_BYTES} bytes each.")
    if not 1 <= len(bets) <= MAX_HANDS:
        raise EngineRejectedAction("BAD_BETS", f"A game holds between 1 and {MAX_HANDS} hands.")

    source = CardSource.from_seeds(dealer_seed, player_seed)
    dealer_hand, source = source.draw_many(2)
    hands: list[tuple[int, ...]] = []
    for _ in bets:
        cards, source = source.draw_many(2)
        hands.append(tuple(cards))

    naturals = tuple(is_natural(hand) for hand in hands)
    state = GameState(
        bets=tuple(bets),
        hands=tuple(hands),
        active=tuple(not natural for natural in naturals),
        naturals=naturals,
        winnings=tuple(0 for _ in bets),
        dealer_hand=tuple(dealer_hand),
        cards=source,
    )

    if is_natural(state.dealer_hand):
        # no play happens: dealt naturals are paid, everything else is dead
        return replace(
            state,
            active=tuple(False for _ in bets),
            results=tuple(HandResult.BLACKJACK_WIN if natural else HandResult.LOSE for natural in naturals),
            winnings=tuple(
                blackjack_payout(bet, rules) if natural else 0 for bet, natural in zip(bets, naturals)
            ),
        )
    if state.terminated:
        return settle(state, rules)
    return state


def resolve_dealer(dealer_hand: tuple[int, ...], cards: CardSource) -> tuple[tuple[int, ...], CardSource]:
    while best_sum(dealer_hand) < DEALER_STANDS_ON:
        card, cards = cards.draw()
        dealer_hand = dealer_hand + (card,)
    return dealer_hand, cards


def score(state: GameState, rules: RulesConfig) -> tuple[tuple[HandResult, ...], tuple[int, ...]]:
    dealer_best = best_sum(state.dealer_hand)
    results = tuple(
        resolve_hand(
            best_sum(hand),
            dealer_best,
            doubled=index in state.doubled,
            natural=state.naturals[index],
        )
        for index, hand in enumerate(state.hands)
    )
    winnings = tuple(payout(result, bet, rules) for result, bet in zip(results, state.bets))
    return results, winnings


def settle(state: GameState, rules: RulesConfig) -> GameState:
    dealer_hand, cards = resolve_dealer(state.dealer_hand, state.cards)
    drawn = replace(state, dealer_hand=dealer_hand, cards=cards)
    results, winnings = score(drawn, rules)
    return replace(drawn, results=results, winnings=winnings)


def check_action(state: GameState, action: Action) -> GameState:
    """Validate everything about ``action`` except its signature and legality for the hand shape.

    Returns the state with the focus moved onto the first live hand.
    """
    if state.terminated:
        raise EngineRejectedAction("GAME_TERMINATED", "Game is terminated.")
    if action.nonce != state.next_nonce:
        raise EngineRejectedAction(
            "BAD_NONCE",
            f"Expected nonce {state.next_nonce}, got {action.nonce}.",
        )

    focus = state.focus_index
    while focus < len(state.hands) and not state.active[focus]:
        focus += 1
    if focus >= len(state.hands):
        raise EngineRejectedAction("GAME_TERMINATED", "Game is terminated.")

    if action.hand_id != focus:
        raise EngineRejectedAction("WRONG_HAND", f"Expected hand {focus}, got {action.hand_id}.")
    if tuple(action.player_cards) != state.hands[focus]:
        raise EngineRejectedAction("STALE_PLAYER_CARDS", "Player cards do not match the current hand.")
    if tuple(action.dealer_cards) != state.dealer_hand:
        raise EngineRejectedAction("STALE_DEALER_CARDS", "Dealer cards do not match the current dealer hand.")
    return replace(state, focus_index=focus)


def apply_action(state: GameState, action: Action, rules: RulesConfig) -> GameState:
    index = state.focus_index
    hand = state.hands[index]

    if action.kind is ActionKind.HIT:
        if hard_sum(hand) > BLACKJACK:
            raise EngineRejectedAction("CANNOT_HIT", "Hand is already bust.")
        card, cards = state.cards.draw()
        hand = hand + (card,)
        bust = hard_sum(hand) > BLACKJACK
        following = replace(
            state,
            hands=_replace_at(state.hands, index, hand),
            active=_replace_at(state.active, index, False) if bust else state.active,
            focus_index=index + 1 if bust else index,
            cards=cards,
        )
    elif action.kind is ActionKind.STAND:
        following = replace(
            state,
            active=_replace_at(state.active, index, False),
            focus_index=index + 1,
        )
    elif action.kind is ActionKind.DOUBLE:
        if len(hand) != 2:
            raise EngineRejectedAction("CANNOT_DOUBLE", "Only a two-card hand can double.")
        card, cards = state.cards.draw()
        following = replace(
            state,
            hands=_replace_at(state.hands, index, hand + (card,)),
            active=_replace_at(state.active, index, False),
            doubled=state.doubled + (index,),
            focus_index=index + 1,
            cards=cards,
        )
    elif action.kind is ActionKind.SPLIT:
        if len(hand) != 2 or hand[0] != hand[1]:
            raise EngineRejectedAction("CANNOT_SPLIT", "Only a pair can be split.")
        if len(state.hands) >= MAX_HANDS:
            raise EngineRejectedAction("CANNOT_SPLIT", f"A game holds at most {MAX_HANDS} hands.")
        card, cards = state.cards.draw()
        hands = _replace_at(state.hands, index, (hand[0], card))
        # focus stays on the original hand
        following = replace(
            state,
            hands=_insert_after(hands, index, (hand[1],)),
            bets=_insert_after(state.bets, index, state.bets[index]),
            active=_insert_after(state.active, index, True),
            naturals=_insert_after(_replace_at(state.naturals, index, False), index, False),
            winnings=_insert_after(state.winnings, index, 0),
            split=state.split + (index,),
            cards=cards,
        )
    else:
        raise EngineRejectedAction("UNKNOWN_ACTION", f"Unsupported action {action.kind}.")

    following = replace(following, next_nonce=state.next_nonce + 1)
    if following.terminated:
        following = settle(following, rules)
    return following


def submit(
    state: GameState,
    action: Action,
    signature: bytes,
    pubkey: bytes,
    rules: RulesConfig,
) -> GameState:
    """One authenticated step: the only way either driver advances a game."""
    staged = check_action(state, action)
    if not verify_action_signature(action, signature, pubkey):
        raise EngineRejectedAction("BAD_SIGNATURE", "Signature does not match the action.")
    return apply_action(staged, action, rules)
