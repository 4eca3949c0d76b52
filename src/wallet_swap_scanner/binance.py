from __future__ import annotations

import logging

import httpx

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.binance.com/api/v3"


class BinancePriceClient:
    def __init__(
        self,
        api_base: str = DEFAULT_API_BASE,
        symbol: str = "BNBUSDT",
        timeout: float = 5.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_base = api_base.rstrip("/")
        self.symbol = symbol
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        await self._client.aclose()

    async def fetch_price(self) -> float:
        resp = await self._client.get(f"{self.api_base}/ticker/price", params={"symbol": self.symbol})
        resp.raise_for_status()
        data = resp.json()
        price = float(data["price"])
        logger.debug("Spot %s = %.4f", self.symbol, price)
        return price
