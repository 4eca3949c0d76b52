from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import httpx

from .grouping import parse_amount, parse_int
from .tokens import chain_name
from .types import TransferRecord

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.etherscan.io/v2/api"
NO_TRANSACTIONS = "No transactions found"
SECONDS_PER_DAY = 86400


class EtherscanError(RuntimeError):
    pass


def today_window(now: float, utc_offset_hours: int = 8) -> tuple[int, int]:
    """Unix bounds [start, end) of the calendar day containing ``now`` in UTC+offset."""
    offset = utc_offset_hours * 3600
    local = datetime.fromtimestamp(now + offset, tz=timezone.utc)
    midnight = local.replace(hour=0, minute=0, second=0, microsecond=0)
    start = int(midnight.timestamp()) - offset
    return start, start + SECONDS_PER_DAY


class EtherscanClient:
    def __init__(
        self,
        api_key: str,
        api_base: str = DEFAULT_API_BASE,
        timeout: float = 30.0,
        utc_offset_hours: int = 8,
        page_size: int = 1000,
        clock: Callable[[], float] = time.time,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_key = api_key
        self.api_base = api_base.rstrip("/")
        self.utc_offset_hours = utc_offset_hours
        self.page_size = page_size
        self._clock = clock
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        await self._client.aclose()

    async def fetch(self, address: str, chain_id: int) -> list[TransferRecord]:
        """Today's native and token transfers for ``address``, newest first."""
        start, end = today_window(self._clock(), self.utc_offset_hours)
        normal, tokens = await asyncio.gather(
            self._list(address, chain_id, "txlist"),
            self._list(address, chain_id, "tokentx"),
        )
        logger.info(
            "Fetched %d normal and %d token transfers for %s on %s",
            len(normal),
            len(tokens),
            address,
            chain_name(chain_id),
        )

        records = [TransferRecord.from_api(row) for row in [*normal, *tokens] if isinstance(row, dict)]
        today = [r for r in records if start <= parse_int(r.timestamp) < end]
        return sorted(today, key=lambda r: parse_int(r.timestamp), reverse=True)

    async def fetch_balance(self, address: str, chain_id: int) -> float:
        try:
            result = await self._call(
                chain_id,
                {"module": "account", "action": "balance", "address": address, "tag": "latest"},
            )
        except Exception as exc:
            logger.warning("Balance lookup failed for %s on %s: %s", address, chain_name(chain_id), exc)
            return 0.0
        return parse_amount(str(result))

    async def _list(self, address: str, chain_id: int, action: str) -> list[Any]:
        result = await self._call(
            chain_id,
            {
                "module": "account",
                "action": action,
                "address": address,
                "startblock": 0,
                "endblock": 99999999,
                "page": 1,
                "offset": self.page_size,
                "sort": "desc",
            },
        )
        if not isinstance(result, list):
            raise EtherscanError(f"Unexpected {action} result: {result!r}")
        return result

    async def _call(self, chain_id: int, params: dict[str, Any]) -> Any:
        resp = await self._client.get(
            self.api_base,
            params={"chainid": chain_id, **params, "apikey": self.api_key},
        )
        resp.raise_for_status()
        data = resp.json()
        if not isinstance(data, dict):
            raise EtherscanError("Unexpected Etherscan response shape")

        status = str(data.get("status", ""))
        message = str(data.get("message") or "")
        if status == "1":
            return data.get("result")
        if status == "0" and message == NO_TRANSACTIONS:
            return []
        # Etherscan puts the useful detail (rate limit, bad key) in "result".
        raise EtherscanError(f"{message or 'API request failed'}: {data.get('result')}")
