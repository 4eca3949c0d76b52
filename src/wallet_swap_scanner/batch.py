from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import fields
from enum import Enum
from typing import Protocol

from .pipeline import analyze_transfers, empty_result
from .price_cache import PriceCache
from .scoring import unique_tokens
from .tokens import DEFAULT_CHAIN_ID, TokenClassifier
from .types import EXHAUSTED, SUCCEEDED, AddressResult, DailySummary, TransferRecord

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]
Sleeper = Callable[[float], Awaitable[None]]


class TransferFetcher(Protocol):
    async def fetch(self, address: str, chain_id: int) -> list[TransferRecord]: ...


class AddressState(Enum):
    PENDING = "pending"
    FETCHING = "fetching"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


class BatchOrchestrator:
    """Runs the swap pipeline over many addresses, one at a time.

    Each address walks PENDING -> FETCHING -> SUCCEEDED, or through
    RETRYING back to FETCHING on fetch errors until ``max_attempts`` is used
    up, at which point it ends EXHAUSTED with an all-zero result. A failing
    address never aborts the batch.
    """

    def __init__(
        self,
        fetcher: TransferFetcher,
        price_cache: PriceCache,
        classifier: TokenClassifier,
        chain_id: int = DEFAULT_CHAIN_ID,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        inter_address_delay: float = 0.5,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if base_delay < 0 or inter_address_delay < 0:
            raise ValueError("delays must be >= 0")
        self.fetcher = fetcher
        self.price_cache = price_cache
        self.classifier = classifier
        self.chain_id = chain_id
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.inter_address_delay = inter_address_delay
        self._sleep = sleep
        self.transitions: list[tuple[str, AddressState]] = []

    def backoff_delay(self, attempt: int) -> float:
        return self.base_delay * 2 ** (attempt - 1)

    async def run(
        self,
        addresses: Sequence[str],
        on_progress: ProgressCallback | None = None,
    ) -> list[AddressResult]:
        if not addresses:
            raise ValueError("addresses must not be empty")

        self.transitions = []
        total = len(addresses)
        results: list[AddressResult] = []
        for index, address in enumerate(addresses, start=1):
            results.append(await self.run_address(address))
            if on_progress is not None:
                on_progress(index, total, address)
            if index < total and self.inter_address_delay > 0:
                await self._sleep(self.inter_address_delay)
        return results

    async def run_address(self, address: str) -> AddressResult:
        attempt = 0
        state = self._enter(address, AddressState.PENDING)
        transfers: list[TransferRecord] = []

        while state not in (AddressState.SUCCEEDED, AddressState.EXHAUSTED):
            attempt += 1
            state = self._enter(address, AddressState.FETCHING)
            try:
                transfers = await self.fetcher.fetch(address, self.chain_id)
            except Exception as exc:
                if attempt >= self.max_attempts:
                    logger.error("Giving up on %s after %d attempts: %s", address, attempt, exc)
                    state = self._enter(address, AddressState.EXHAUSTED)
                    continue
                delay = self.backoff_delay(attempt)
                logger.warning(
                    "Fetch failed for %s (attempt %d/%d): %s. Retrying in %.1fs",
                    address,
                    attempt,
                    self.max_attempts,
                    exc,
                    delay,
                )
                state = self._enter(address, AddressState.RETRYING)
                await self._sleep(delay)
                continue
            state = self._enter(address, AddressState.SUCCEEDED)

        if state is AddressState.EXHAUSTED:
            return empty_result(address, EXHAUSTED, attempt)
        if not transfers:
            logger.info("No transfers for %s", address)
            return empty_result(address, SUCCEEDED, attempt)

        native_price = await self.price_cache.get()
        result = analyze_transfers(transfers, address, self.classifier, native_price, attempts=attempt)
        logger.info(
            "Analyzed %s swaps=%d net_loss=%.4f score=%d",
            address,
            result.summary.total_transactions,
            result.summary.net_loss,
            result.summary.score,
        )
        return result

    def _enter(self, address: str, state: AddressState) -> AddressState:
        self.transitions.append((address, state))
        logger.debug("%s -> %s", address, state.value)
        return state


def summarize_batch(results: Sequence[AddressResult]) -> DailySummary:
    """Sum every summary field across addresses.

    Distinct tokens are re-counted over all swaps so a token traded by two
    addresses is counted once.
    """
    totals = {f.name: getattr(DailySummary(), f.name) for f in fields(DailySummary)}
    for result in results:
        for name in totals:
            totals[name] += getattr(result.summary, name)

    tokens: set[str] = set()
    for result in results:
        tokens |= unique_tokens(result.swaps)
    totals["unique_tokens"] = len(tokens)
    return DailySummary(**totals)
