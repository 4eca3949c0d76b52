from __future__ import annotations

from collections.abc import Iterable, Iterator

SETTLEMENT_SYMBOLS = frozenset({"USDT", "USDC", "BUSD", "DAI"})

# Wrapped or bridged tickers that settle as one of the symbols above.
SYMBOL_ALIASES = {"BSC-USD": "USDT"}

DEFAULT_BOOSTED_ASSETS = (
    "ZKJ",
    "KOGE",
    "CHEEMS",
    "APX",
    "AIXBT",
    "AI16Z",
    "KOMA",
    "B2",
    "SKYAI",
    "KMNO",
    "MERL",
    "TAIKO",
    "BR",
)

DEFAULT_CHAIN_ID = 56

SUPPORTED_CHAINS: dict[int, tuple[str, str]] = {
    1: ("Ethereum Mainnet", "ETH"),
    56: ("BNB Smart Chain Mainnet", "BNB"),
    137: ("Polygon Mainnet", "MATIC"),
    42161: ("Arbitrum One Mainnet", "ETH"),
    10: ("OP Mainnet", "ETH"),
    8453: ("Base Mainnet", "ETH"),
    43114: ("Avalanche C-Chain", "AVAX"),
    250: ("Fantom Opera", "FTM"),
}


def chain_name(chain_id: int) -> str:
    entry = SUPPORTED_CHAINS.get(chain_id)
    return entry[0] if entry else f"Chain {chain_id}"


def native_symbol(chain_id: int) -> str:
    entry = SUPPORTED_CHAINS.get(chain_id)
    return entry[1] if entry else "ETH"


def normalize_symbol(symbol: str | None) -> str:
    s = (symbol or "").strip().upper()
    return SYMBOL_ALIASES.get(s, s)


class BoostedAssets:
    """User-editable list of symbols that count double toward the score.

    Symbols are stored upper-cased and without duplicates. Every write swaps
    in a new tuple, so a reader iterating during a batch keeps a consistent
    snapshot.
    """

    def __init__(self, symbols: Iterable[str] | None = None) -> None:
        self._symbols: tuple[str, ...] = ()
        self.replace(DEFAULT_BOOSTED_ASSETS if symbols is None else symbols)

    def __contains__(self, symbol: object) -> bool:
        if not isinstance(symbol, str):
            return False
        return symbol.strip().upper() in self._symbols

    def __iter__(self) -> Iterator[str]:
        return iter(self._symbols)

    def __len__(self) -> int:
        return len(self._symbols)

    def snapshot(self) -> tuple[str, ...]:
        return self._symbols

    def add(self, symbol: str) -> bool:
        s = symbol.strip().upper()
        if not s or s in self._symbols:
            return False
        self._symbols = (*self._symbols, s)
        return True

    def remove(self, symbol: str) -> bool:
        s = symbol.strip().upper()
        if s not in self._symbols:
            return False
        self._symbols = tuple(x for x in self._symbols if x != s)
        return True

    def replace(self, symbols: Iterable[str]) -> None:
        out: list[str] = []
        for symbol in symbols:
            s = symbol.strip().upper()
            if s and s not in out:
                out.append(s)
        self._symbols = tuple(out)

    def reset(self) -> None:
        self.replace(DEFAULT_BOOSTED_ASSETS)


class TokenClassifier:
    def __init__(self, native: str = "BNB", boosted: BoostedAssets | None = None) -> None:
        self.native = native.strip().upper()
        self.boosted = boosted if boosted is not None else BoostedAssets()
        self._reference = SETTLEMENT_SYMBOLS | {self.native}

    @classmethod
    def for_chain(cls, chain_id: int, boosted: BoostedAssets | None = None) -> TokenClassifier:
        return cls(native_symbol(chain_id), boosted)

    def is_reference_currency(self, symbol: str | None) -> bool:
        return normalize_symbol(symbol) in self._reference

    def is_native(self, symbol: str | None) -> bool:
        return normalize_symbol(symbol) == self.native

    def is_boosted_asset(self, symbol: str | None) -> bool:
        return normalize_symbol(symbol) in self.boosted

    def boost_multiplier(self, symbol: str | None) -> int:
        return 2 if self.is_boosted_asset(symbol) else 1
