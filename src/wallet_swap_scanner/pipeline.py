from __future__ import annotations

from collections.abc import Sequence

from .grouping import group_swaps
from .netflow import attribute_losses
from .scoring import build_daily_summary
from .tokens import TokenClassifier
from .types import SUCCEEDED, AddressResult, DailySummary, TransferRecord


def analyze_transfers(
    transfers: Sequence[TransferRecord],
    address: str,
    classifier: TokenClassifier,
    native_price: float,
    wallet_balance: float = 0.0,
    attempts: int = 1,
) -> AddressResult:
    swaps = group_swaps(transfers, address, classifier)
    attribute_losses(swaps, classifier, native_price)
    summary = build_daily_summary(swaps, classifier, native_price, wallet_balance)
    return AddressResult(
        address=address,
        summary=summary,
        swaps=tuple(swaps),
        status=SUCCEEDED,
        attempts=attempts,
    )


def empty_result(address: str, status: str = SUCCEEDED, attempts: int = 1) -> AddressResult:
    return AddressResult(
        address=address,
        summary=DailySummary.empty(),
        swaps=(),
        status=status,
        attempts=attempts,
    )
