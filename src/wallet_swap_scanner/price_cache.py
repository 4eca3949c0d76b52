from __future__ import annotations

import asyncio
import logging
import math
import time
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

from .types import PriceSample

logger = logging.getLogger(__name__)

PriceFetcher = Callable[[], Awaitable[float]]

DEFAULT_TTL_SECONDS = 300.0
DEFAULT_FALLBACK_PRICE = 600.0


class PriceState(Enum):
    FRESH = "fresh"
    STALE = "stale"


class PriceCache:
    """Native coin price with a TTL and single-flight refresh.

    Concurrent callers that find the value stale share one upstream fetch:
    whoever gets the lock fetches, everyone queued behind it sees the
    generation counter move and returns the outcome of that fetch. A failed
    fetch keeps the previous sample (or the fallback) and is never raised.
    """

    def __init__(
        self,
        fetch: PriceFetcher,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        fallback: float = DEFAULT_FALLBACK_PRICE,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must be >= 0")
        if not fallback > 0:
            raise ValueError("fallback price must be positive")
        self.ttl_seconds = ttl_seconds
        self._fetch = fetch
        self._clock = clock
        self._sample = PriceSample(value=fallback, fetched_at=None)
        self._lock = asyncio.Lock()
        self._generation = 0
        self.upstream_calls = 0

    @property
    def sample(self) -> PriceSample:
        return self._sample

    def peek(self) -> float:
        return self._sample.value

    def state(self) -> PriceState:
        fetched_at = self._sample.fetched_at
        if fetched_at is None or self._clock() - fetched_at >= self.ttl_seconds:
            return PriceState.STALE
        return PriceState.FRESH

    def status(self) -> dict[str, Any]:
        fetched_at = self._sample.fetched_at
        age = None if fetched_at is None else round(self._clock() - fetched_at)
        return {"price": self._sample.value, "fetched_at": fetched_at, "age_seconds": age}

    async def get(self) -> float:
        if self.state() is PriceState.FRESH:
            return self._sample.value
        return await self._refresh()

    async def force_refresh(self) -> float:
        return await self._refresh()

    async def convert(self, native_amount: float) -> float:
        return native_amount * await self.get()

    async def _refresh(self) -> float:
        generation = self._generation
        async with self._lock:
            if self._generation != generation:
                return self._sample.value
            try:
                await self._fetch_and_store()
            finally:
                self._generation += 1
            return self._sample.value

    async def _fetch_and_store(self) -> None:
        self.upstream_calls += 1
        try:
            value = float(await self._fetch())
        except Exception as exc:
            logger.warning("Native price refresh failed, keeping %.4f: %s", self._sample.value, exc)
            return

        if not value > 0 or not math.isfinite(value):
            logger.warning("Ignoring invalid native price %r, keeping %.4f", value, self._sample.value)
            return

        self._sample = PriceSample(value=value, fetched_at=self._clock())
        logger.info("Native price updated: %.4f", value)
