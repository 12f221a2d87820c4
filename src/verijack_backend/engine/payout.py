from __future__ import annotations

from collections.abc import Iterable

from verijack_backend.engine.errors import PayoutOverflowError
from verijack_backend.engine.models import (
    UINT256_LIMIT,
    BlackjackPayout,
    HandResult,
    RulesConfig,
)
from verijack_backend.utils.cards import BLACKJACK


# total return per unit of the original wager, stake included
_MULTIPLIERS = {
    HandResult.WIN: 2,
    HandResult.PUSH: 1,
    HandResult.LOSE: 0,
    HandResult.DOUBLE_WIN: 4,
    HandResult.DOUBLE_PUSH: 2,
    HandResult.DOUBLE_LOSE: 0,
}


def _checked(value: int) -> int:
    if value < 0 or value >= UINT256_LIMIT:
        raise PayoutOverflowError(f"payout arithmetic left the uint256 range: {value}")
    return value


def resolve_hand(hand_best: int, dealer_best: int, *, doubled: bool, natural: bool) -> HandResult:
    if natural:
        return HandResult.BLACKJACK_WIN
    if hand_best > BLACKJACK:
        return HandResult.DOUBLE_LOSE if doubled else HandResult.LOSE
    if dealer_best > BLACKJACK or hand_best > dealer_best:
        return HandResult.DOUBLE_WIN if doubled else HandResult.WIN
    if hand_best == dealer_best:
        return HandResult.DOUBLE_PUSH if doubled else HandResult.PUSH
    return HandResult.DOUBLE_LOSE if doubled else HandResult.LOSE


def blackjack_payout(bet: int, rules: RulesConfig) -> int:
    _checked(bet)
    if rules.blackjack_payout is BlackjackPayout.THREE_HALVES_CEIL:
        profit = _checked(bet * 3)
        return _checked(bet + (profit + 1) // 2)
    return _checked(bet * 5) // 2


def payout(result: HandResult, bet: int, rules: RulesConfig) -> int:
    """Total amount returned to the player for one hand.

    ``bet`` is the wager the hand was dealt with; doubling is expressed by the
    result variant, not by the bet.
    """
    if result is HandResult.BLACKJACK_WIN:
        return blackjack_payout(bet, rules)
    return _checked(_checked(bet) * _MULTIPLIERS[result])


def total_payout(winnings: Iterable[int]) -> int:
    total = 0
    for amount in winnings:
        total = _checked(total + amount)
    return total
