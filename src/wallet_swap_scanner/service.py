from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace

from .batch import BatchOrchestrator, ProgressCallback, Sleeper, TransferFetcher, summarize_batch
from .binance import BinancePriceClient
from .config import Settings
from .etherscan import EtherscanClient
from .price_cache import PriceCache, PriceFetcher
from .scoring import reference_score
from .tokens import BoostedAssets, TokenClassifier
from .types import EXHAUSTED, SUCCEEDED, AddressResult, DailySummary

logger = logging.getLogger(__name__)


@dataclass
class Metrics:
    batches: int = 0
    addresses: int = 0
    succeeded: int = 0
    exhausted: int = 0
    retries: int = 0
    swaps: int = 0


class ScannerService:
    def __init__(
        self,
        settings: Settings,
        fetcher: TransferFetcher | None = None,
        price_fetch: PriceFetcher | None = None,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self.settings = settings
        self.metrics = Metrics()
        self.boosted = BoostedAssets(settings.boosted_assets)
        self.classifier = TokenClassifier.for_chain(settings.chain_id, self.boosted)
        self.etherscan = EtherscanClient(
            settings.etherscan_api_key,
            api_base=settings.etherscan_api_base,
            utc_offset_hours=settings.utc_offset_hours,
        )
        self.binance = BinancePriceClient(settings.binance_api_base, symbol=settings.price_symbol)
        self.price_cache = PriceCache(
            price_fetch or self.binance.fetch_price,
            ttl_seconds=settings.price_ttl_seconds,
            fallback=settings.price_fallback,
        )
        self.orchestrator = BatchOrchestrator(
            fetcher or self.etherscan,
            self.price_cache,
            self.classifier,
            chain_id=settings.chain_id,
            max_attempts=settings.max_attempts,
            base_delay=settings.retry_base_delay_seconds,
            inter_address_delay=settings.inter_address_delay_seconds,
            sleep=sleep,
        )
        logger.info("Boosted assets: %s", ", ".join(self.boosted.snapshot()) or "none")

    async def close(self) -> None:
        await self.etherscan.close()
        await self.binance.close()

    async def run_batch(
        self,
        addresses: Sequence[str],
        on_progress: ProgressCallback | None = None,
    ) -> list[AddressResult]:
        results = await self.orchestrator.run(addresses, on_progress)
        self.metrics.batches += 1
        self._record(results)
        self._log_metrics()
        return results

    async def run_single(self, address: str) -> AddressResult:
        result = await self.orchestrator.run_address(address)
        if result.status == SUCCEEDED:
            balance = await self.etherscan.fetch_balance(address, self.settings.chain_id)
            logger.info("Balance %s native=%.6f ref=%.2f", address, balance, await self.price_cache.convert(balance))
            result = replace(result, summary=replace(result.summary, wallet_balance=balance))
        self._record([result])
        return result

    def get_reference_score(self, result: AddressResult) -> int:
        return reference_score(result, self.classifier)

    def summarize(self, results: Sequence[AddressResult]) -> DailySummary:
        return summarize_batch(results)

    def _record(self, results: Sequence[AddressResult]) -> None:
        for result in results:
            self.metrics.addresses += 1
            if result.status == EXHAUSTED:
                self.metrics.exhausted += 1
            else:
                self.metrics.succeeded += 1
            self.metrics.retries += result.attempts - 1
            self.metrics.swaps += len(result.swaps)

    def _log_metrics(self) -> None:
        price = self.price_cache.status()
        logger.info(
            "batch addresses=%d succeeded=%d exhausted=%d retries=%d swaps=%d price=%.4f price_age=%s",
            self.metrics.addresses,
            self.metrics.succeeded,
            self.metrics.exhausted,
            self.metrics.retries,
            self.metrics.swaps,
            price["price"],
            price["age_seconds"],
        )
