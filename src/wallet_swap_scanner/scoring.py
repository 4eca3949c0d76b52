from __future__ import annotations

import math
from collections.abc import Sequence

from .netflow import outflow_value, reference_value, summary_net_loss
from .tokens import TokenClassifier
from .types import BUY, AddressResult, DailySummary, SwapEvent


def score(volume: float) -> int:
    """Activity score: floor(log2(volume)), never below zero."""
    if not volume > 0 or not math.isfinite(volume):
        return 0
    return max(0, math.floor(math.log2(volume)))


def buy_volume(
    swaps: Sequence[SwapEvent],
    classifier: TokenClassifier,
    native_price: float,
    boosted: bool = False,
) -> float:
    total = 0.0
    for swap in swaps:
        spent = outflow_value(swap, classifier, native_price)
        if boosted:
            spent *= classifier.boost_multiplier(swap.to_token)
        total += spent
    return total


def unique_tokens(swaps: Sequence[SwapEvent]) -> set[str]:
    tokens: set[str] = set()
    for swap in swaps:
        tokens.add(swap.from_token)
        tokens.add(swap.to_token)
    return tokens


def build_daily_summary(
    swaps: Sequence[SwapEvent],
    classifier: TokenClassifier,
    native_price: float,
    wallet_balance: float = 0.0,
) -> DailySummary:
    total_gas = sum(s.gas_fee for s in swaps)
    plain_volume = buy_volume(swaps, classifier, native_price)
    boosted_volume = buy_volume(swaps, classifier, native_price, boosted=True)
    return DailySummary(
        total_transactions=len(swaps),
        total_gas_fee=total_gas,
        total_gas_fee_ref=total_gas * native_price,
        total_value=sum(reference_value(s, classifier, native_price) for s in swaps),
        buy_volume=plain_volume,
        boosted_buy_volume=boosted_volume,
        unique_tokens=len(unique_tokens(swaps)),
        net_loss=summary_net_loss(swaps),
        score=score(boosted_volume),
        wallet_balance=wallet_balance,
    )


def reference_score(result: AddressResult, classifier: TokenClassifier) -> int:
    """Score an existing result against the current boosted list.

    Uses the reference value each buy was annotated with, so the price in
    effect at analysis time is kept.
    """
    volume = 0.0
    for swap in result.swaps:
        if swap.side == BUY:
            volume += swap.flow_value * classifier.boost_multiplier(swap.to_token)
    return score(volume)
