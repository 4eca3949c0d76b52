from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .tokens import DEFAULT_BOOSTED_ASSETS, DEFAULT_CHAIN_ID


@dataclass(frozen=True)
class Settings:
    etherscan_api_key: str
    etherscan_api_base: str
    binance_api_base: str
    chain_id: int
    price_symbol: str
    price_ttl_seconds: float
    price_fallback: float
    max_attempts: int
    retry_base_delay_seconds: float
    inter_address_delay_seconds: float
    utc_offset_hours: int
    boosted_assets: tuple[str, ...]
    addresses: tuple[str, ...]
    log_level: str


def _required(name: str) -> str:
    value = os.getenv(name, "").strip()
    if not value:
        raise ValueError(f"Missing required environment variable: {name}")
    return value


def _optional_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


def _optional_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return float(raw)


def _optional_list(name: str, default: tuple[str, ...] = ()) -> tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def load_settings() -> Settings:
    load_dotenv()
    settings = Settings(
        etherscan_api_key=_required("ETHERSCAN_API_KEY"),
        etherscan_api_base=os.getenv("ETHERSCAN_API_BASE", "https://api.etherscan.io/v2/api").strip(),
        binance_api_base=os.getenv("BINANCE_API_BASE", "https://api.binance.com/api/v3").strip(),
        chain_id=_optional_int("CHAIN_ID", DEFAULT_CHAIN_ID),
        price_symbol=os.getenv("PRICE_SYMBOL", "BNBUSDT").strip().upper(),
        price_ttl_seconds=_optional_float("PRICE_TTL_SECONDS", 300.0),
        price_fallback=_optional_float("PRICE_FALLBACK", 600.0),
        max_attempts=_optional_int("MAX_ATTEMPTS", 3),
        retry_base_delay_seconds=_optional_float("RETRY_BASE_DELAY_SECONDS", 1.0),
        inter_address_delay_seconds=_optional_float("INTER_ADDRESS_DELAY_SECONDS", 0.5),
        utc_offset_hours=_optional_int("UTC_OFFSET_HOURS", 8),
        boosted_assets=_optional_list("BOOSTED_ASSETS", DEFAULT_BOOSTED_ASSETS),
        addresses=_optional_list("ADDRESSES"),
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper(),
    )
    if settings.max_attempts < 1:
        raise ValueError("MAX_ATTEMPTS must be >= 1")
    if settings.price_fallback <= 0:
        raise ValueError("PRICE_FALLBACK must be positive")
    return settings
