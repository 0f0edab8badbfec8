# core/ledger.py
from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Dict, List

from core.errors import InvalidTrade


@dataclass(frozen=True)
class Trade:
    symbol: str
    quantity: float
    price: float


class TradeLedger:
    """Validated trades grouped by symbol, in insertion order."""

    def __init__(self):
        self._trades: Dict[str, List[Trade]] = {}

    def add_trade(self, trade: Trade) -> None:
        if not _is_positive(trade.quantity) or not _is_positive(trade.price):
            raise InvalidTrade(
                f"Invalid trade values for {trade.symbol}: qty={trade.quantity} price={trade.price}"
            )
        self._trades.setdefault(trade.symbol, []).append(trade)

    def symbols(self) -> List[str]:
        return list(self._trades)

    def trades_for(self, symbol: str) -> List[Trade]:
        return list(self._trades.get(symbol, []))

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._trades

    def __len__(self) -> int:
        return sum(len(ts) for ts in self._trades.values())


def _is_positive(x: float) -> bool:
    # NaN fails the comparison; inf is not a usable amount
    return math.isfinite(x) and x > 0
