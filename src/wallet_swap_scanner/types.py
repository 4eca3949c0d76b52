from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

BUY = "buy"
SELL = "sell"

SUCCEEDED = "succeeded"
EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class TransferRecord:
    tx_hash: str
    from_address: str
    to_address: str
    value: str
    timestamp: str
    gas_used: str = "0"
    gas_price: str = "0"
    token_symbol: str | None = None
    token_name: str | None = None
    token_decimal: str | None = None
    contract_address: str | None = None

    @classmethod
    def from_api(cls, row: dict[str, Any]) -> TransferRecord:
        return cls(
            tx_hash=str(row.get("hash") or ""),
            from_address=str(row.get("from") or ""),
            to_address=str(row.get("to") or ""),
            value=str(row.get("value") or "0"),
            timestamp=str(row.get("timeStamp") or "0"),
            gas_used=str(row.get("gasUsed") or "0"),
            gas_price=str(row.get("gasPrice") or "0"),
            token_symbol=_string_or_none(row.get("tokenSymbol")),
            token_name=_string_or_none(row.get("tokenName")),
            token_decimal=_string_or_none(row.get("tokenDecimal")),
            contract_address=_string_or_none(row.get("contractAddress")),
        )


@dataclass
class SwapEvent:
    tx_hash: str
    timestamp: int
    side: str
    pair: str
    from_token: str
    from_amount: float
    to_token: str
    to_amount: float
    gas_fee: float
    # Filled in by the net-flow pass.
    loss: float = 0.0
    net_loss: float = 0.0
    flow_value: float = 0.0


@dataclass(frozen=True)
class DailySummary:
    total_transactions: int = 0
    total_gas_fee: float = 0.0
    total_gas_fee_ref: float = 0.0
    total_value: float = 0.0
    buy_volume: float = 0.0
    boosted_buy_volume: float = 0.0
    unique_tokens: int = 0
    net_loss: float = 0.0
    score: int = 0
    wallet_balance: float = 0.0

    @classmethod
    def empty(cls) -> DailySummary:
        return cls()


@dataclass(frozen=True)
class AddressResult:
    address: str
    summary: DailySummary
    swaps: tuple[SwapEvent, ...] = field(default_factory=tuple)
    status: str = SUCCEEDED
    attempts: int = 1


@dataclass(frozen=True)
class PriceSample:
    value: float
    fetched_at: float | None


def _string_or_none(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
