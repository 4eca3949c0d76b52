from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass

from .tokens import TokenClassifier, normalize_symbol
from .types import BUY, SELL, SwapEvent, TransferRecord

logger = logging.getLogger(__name__)

NATIVE_DECIMALS = 18
# uint256 tops out at 78 digits, so wider decimal counts are not real tokens.
MAX_DECIMALS = 77


@dataclass(frozen=True)
class _Leg:
    symbol: str
    amount: float
    from_address: str
    to_address: str


def parse_decimals(raw: str | None) -> int:
    if raw is None or str(raw).strip() == "":
        return NATIVE_DECIMALS
    try:
        value = int(str(raw).strip())
    except ValueError:
        return NATIVE_DECIMALS
    return value if 0 <= value <= MAX_DECIMALS else NATIVE_DECIMALS


def parse_amount(raw: str | None, decimals: int = NATIVE_DECIMALS) -> float:
    """Convert a raw integer amount string into token units.

    Anything that does not parse, or does not fit in a finite float, is 0.
    """
    text = str(raw or "").strip()
    if not text:
        return 0.0
    number: int | float
    try:
        number = int(text)
    except ValueError:
        try:
            number = float(text)
        except ValueError:
            return 0.0
        if not math.isfinite(number):
            return 0.0
    try:
        value = number / 10**decimals
    except OverflowError:
        return 0.0
    return value if math.isfinite(value) else 0.0


def parse_int(raw: str | None) -> int:
    text = str(raw or "").strip()
    try:
        return int(text)
    except ValueError:
        try:
            value = float(text)
        except ValueError:
            return 0
        return int(value) if math.isfinite(value) else 0


def gas_fee(gas_used: str | None, gas_price: str | None) -> float:
    try:
        fee = parse_int(gas_used) * parse_int(gas_price) / 10**NATIVE_DECIMALS
    except OverflowError:
        return 0.0
    return fee if math.isfinite(fee) else 0.0


def group_by_hash(records: Iterable[TransferRecord]) -> dict[str, list[TransferRecord]]:
    groups: dict[str, list[TransferRecord]] = {}
    for record in records:
        groups.setdefault(record.tx_hash, []).append(record)
    return groups


def group_swaps(
    records: Iterable[TransferRecord],
    address: str,
    classifier: TokenClassifier,
) -> list[SwapEvent]:
    """Reconstruct one swap per transaction hash from a flat transfer list.

    Only the first outgoing and the first incoming leg of a transaction are
    looked at, so multi-hop routes collapse onto their outer legs. Returns
    swaps newest first.
    """
    me = address.strip().lower()
    swaps: list[SwapEvent] = []

    for tx_hash, txs in group_by_hash(records).items():
        legs = [leg for leg in (_to_leg(tx, classifier) for tx in txs) if leg is not None]
        if not legs:
            continue

        outgoing = [leg for leg in legs if leg.from_address == me]
        incoming = [leg for leg in legs if leg.to_address == me]
        if not outgoing or not incoming:
            continue

        swap = _build_swap(tx_hash, txs[0], outgoing[0], incoming[0], classifier)
        if swap is not None:
            swaps.append(swap)

    logger.debug("Grouped %d swaps for %s", len(swaps), address)
    return sorted(swaps, key=lambda s: s.timestamp, reverse=True)


def classify_side(from_token: str, to_token: str, classifier: TokenClassifier) -> str:
    ref_out = classifier.is_reference_currency(from_token)
    ref_in = classifier.is_reference_currency(to_token)
    native_out = classifier.is_native(from_token)
    native_in = classifier.is_native(to_token)

    if ref_out and not ref_in:
        return BUY
    if not ref_out and ref_in:
        return SELL
    if native_out and not native_in and not ref_in:
        return BUY
    if native_in and not native_out and not ref_out:
        return SELL
    return SELL


def is_excluded_pair(from_token: str, to_token: str, classifier: TokenClassifier) -> bool:
    ref_out = classifier.is_reference_currency(from_token)
    ref_in = classifier.is_reference_currency(to_token)
    if ref_out and ref_in:
        return True
    if classifier.is_native(from_token) and ref_in:
        return True
    if classifier.is_native(to_token) and ref_out:
        return True
    return False


def _to_leg(tx: TransferRecord, classifier: TokenClassifier) -> _Leg | None:
    symbol = normalize_symbol(tx.token_symbol)
    if symbol:
        amount = parse_amount(tx.value, parse_decimals(tx.token_decimal))
    else:
        amount = parse_amount(tx.value, NATIVE_DECIMALS)
        if amount == 0:
            return None
        symbol = classifier.native
    return _Leg(
        symbol=symbol,
        amount=amount,
        from_address=tx.from_address.strip().lower(),
        to_address=tx.to_address.strip().lower(),
    )


def _build_swap(
    tx_hash: str,
    first: TransferRecord,
    out_leg: _Leg,
    in_leg: _Leg,
    classifier: TokenClassifier,
) -> SwapEvent | None:
    from_token = out_leg.symbol
    to_token = in_leg.symbol
    if is_excluded_pair(from_token, to_token, classifier):
        return None

    side = classify_side(from_token, to_token, classifier)
    pair = f"{to_token}/{from_token}" if side == BUY else f"{from_token}/{to_token}"

    return SwapEvent(
        tx_hash=tx_hash,
        timestamp=parse_int(first.timestamp),
        side=side,
        pair=pair,
        from_token=from_token,
        from_amount=out_leg.amount,
        to_token=to_token,
        to_amount=in_leg.amount,
        gas_fee=gas_fee(first.gas_used, first.gas_price),
    )
