from __future__ import annotations

import logging
from collections.abc import Sequence

from .tokens import TokenClassifier
from .types import BUY, SELL, SwapEvent

logger = logging.getLogger(__name__)


def to_reference(symbol: str, amount: float, classifier: TokenClassifier, native_price: float) -> float:
    if classifier.is_native(symbol):
        return amount * native_price
    return amount


def outflow_value(swap: SwapEvent, classifier: TokenClassifier, native_price: float) -> float:
    """Reference value spent by a buy, or 0 when the spent leg is not a reference currency."""
    if swap.side != BUY or not classifier.is_reference_currency(swap.from_token):
        return 0.0
    return to_reference(swap.from_token, swap.from_amount, classifier, native_price)


def inflow_value(swap: SwapEvent, classifier: TokenClassifier, native_price: float) -> float:
    """Reference value recovered by a sell, or 0 when the received leg is not a reference currency."""
    if swap.side != SELL or not classifier.is_reference_currency(swap.to_token):
        return 0.0
    return to_reference(swap.to_token, swap.to_amount, classifier, native_price)


def reference_value(swap: SwapEvent, classifier: TokenClassifier, native_price: float) -> float:
    if classifier.is_reference_currency(swap.from_token):
        return to_reference(swap.from_token, swap.from_amount, classifier, native_price)
    if classifier.is_reference_currency(swap.to_token):
        return to_reference(swap.to_token, swap.to_amount, classifier, native_price)
    return 0.0


def compute_net_loss(swaps: Sequence[SwapEvent], classifier: TokenClassifier, native_price: float) -> float:
    total_outflow = 0.0
    total_inflow = 0.0
    for swap in swaps:
        total_outflow += outflow_value(swap, classifier, native_price)
        total_inflow += inflow_value(swap, classifier, native_price)
    logger.debug("Reference outflow=%.6f inflow=%.6f", total_outflow, total_inflow)
    return total_outflow - total_inflow


def attribute_losses(
    swaps: Sequence[SwapEvent],
    classifier: TokenClassifier,
    native_price: float,
) -> float:
    """Annotate every swap with its share of the loss and the address-wide net loss.

    Buys carry what they spent (positive), sells carry what they recovered
    (negative), swaps without a reference leg on the relevant side carry 0.
    Every swap gets the same ``net_loss``. Returns that net loss.
    """
    net_loss = compute_net_loss(swaps, classifier, native_price)
    for swap in swaps:
        spent = outflow_value(swap, classifier, native_price)
        recovered = inflow_value(swap, classifier, native_price)
        if spent:
            swap.loss = spent
        elif recovered:
            swap.loss = -recovered
        else:
            swap.loss = 0.0
        swap.flow_value = abs(swap.loss)
        swap.net_loss = net_loss
    return net_loss


def summary_net_loss(swaps: Sequence[SwapEvent]) -> float:
    # Every annotated swap carries the same figure; read it from the first one.
    return swaps[0].net_loss if swaps else 0.0
