from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone

from .tokens import DEFAULT_CHAIN_ID
from .types import SUCCEEDED, AddressResult, DailySummary, SwapEvent

EXPLORERS = {
    1: "https://etherscan.io",
    56: "https://bscscan.com",
    137: "https://polygonscan.com",
    42161: "https://arbiscan.io",
    10: "https://optimistic.etherscan.io",
    8453: "https://basescan.org",
    43114: "https://snowtrace.io",
    250: "https://ftmscan.com",
}


def short_address(address: str | None) -> str:
    if not address:
        return "Unknown"
    addr = address.strip()
    if len(addr) <= 12:
        return addr
    return f"{addr[:6]}...{addr[-4:]}"


def format_number(value: float, decimals: int = 6) -> str:
    if value == 0:
        return "0"
    if abs(value) < 0.000001:
        return "< 0.000001" if value > 0 else "> -0.000001"
    return f"{value:.{decimals}f}"


def swap_time_iso(ts: int) -> str:
    dt = datetime.fromtimestamp(ts, tz=timezone.utc)
    return dt.isoformat().replace("+00:00", "Z")


def build_tx_link(tx_hash: str | None, chain_id: int = DEFAULT_CHAIN_ID) -> str | None:
    if not tx_hash:
        return None
    base = EXPLORERS.get(chain_id)
    if base is None:
        return None
    return f"{base}/tx/{tx_hash}"


def format_swap_line(swap: SwapEvent) -> str:
    return (
        f"{swap_time_iso(swap.timestamp)} {swap.side.upper():<4} {swap.pair:<16} "
        f"{format_number(swap.from_amount, 4)} {swap.from_token} -> "
        f"{format_number(swap.to_amount, 4)} {swap.to_token} "
        f"loss={format_number(swap.loss, 2)} gas={format_number(swap.gas_fee)}"
    )


def format_summary_line(label: str, summary: DailySummary) -> str:
    return (
        f"{label}: swaps={summary.total_transactions} buy={format_number(summary.buy_volume, 2)} "
        f"net_loss={format_number(summary.net_loss, 2)} gas={format_number(summary.total_gas_fee)} "
        f"tokens={summary.unique_tokens} score={summary.score}"
    )


def format_report(
    results: Sequence[AddressResult],
    total: DailySummary,
    chain_id: int = DEFAULT_CHAIN_ID,
) -> str:
    lines: list[str] = []
    for result in results:
        label = short_address(result.address)
        if result.status != SUCCEEDED:
            label = f"{label} [{result.status}]"
        lines.append(format_summary_line(label, result.summary))
        for swap in result.swaps:
            lines.append(f"  {format_swap_line(swap)}")
            link = build_tx_link(swap.tx_hash, chain_id)
            if link:
                lines.append(f"    {link}")
    lines.append(format_summary_line("TOTAL", total))
    return "\n".join(lines)
