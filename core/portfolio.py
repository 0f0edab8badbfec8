# core/portfolio.py
from __future__ import annotations
from dataclasses import dataclass
from fractions import Fraction
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from core.alerts import AlertDispatcher
from core.errors import SymbolNotFound
from core.ledger import TradeLedger
from utils.logging import get_logger

log = get_logger("portfolio")

PriceLookup = Callable[[str], float]
PriceSnapshot = Dict[str, float]


@dataclass(frozen=True)
class Holding:
    symbol: str
    quantity: float
    average_cost: float

    def valuation(self, market_price: float) -> float:
        return self.quantity * market_price

    def pnl(self, market_price: float) -> float:
        return self.quantity * (market_price - self.average_cost)

    def profit_percent(self, market_price: float) -> float:
        # average_cost > 0: trades are validated on ingestion
        return (market_price - self.average_cost) / self.average_cost * 100


def price_lookup_from(prices: Mapping[str, float]) -> PriceLookup:
    """Wrap a symbol -> price mapping as a lookup that raises SymbolNotFound."""
    def lookup(symbol: str) -> float:
        try:
            return prices[symbol]
        except KeyError:
            raise SymbolNotFound(symbol) from None
    return lookup


class HoldingsCalculator:
    def __init__(self, ledger: TradeLedger, price_lookup: PriceLookup,
                 dispatcher: Optional[AlertDispatcher] = None):
        self.ledger = ledger
        self.price_lookup = price_lookup
        self.dispatcher = dispatcher if dispatcher is not None else AlertDispatcher()

    def compute_holdings(self) -> Tuple[List[Holding], PriceSnapshot]:
        """
        Aggregate the ledger into holdings valued at current market prices.
        Returns (holdings sorted by valuation desc, price snapshot).
        Raises SymbolNotFound if any held symbol has no price; in that case
        no listener is called for this pass.
        """
        holdings: List[Holding] = []
        snapshot: PriceSnapshot = {}

        for symbol in self.ledger.symbols():
            # exact sums; a single trade averages back to its own price
            total_qty = Fraction(0)
            total_cost = Fraction(0)
            for t in self.ledger.trades_for(symbol):
                qty = Fraction(t.quantity)
                total_qty += qty
                total_cost += qty * Fraction(t.price)
            if total_qty == 0:
                continue

            snapshot[symbol] = self.price_lookup(symbol)
            holdings.append(Holding(symbol, float(total_qty), float(total_cost / total_qty)))

        for h in holdings:
            self.dispatcher.notify(h.symbol, snapshot[h.symbol])

        # sorted() is stable with reverse=True, ties keep ledger order
        holdings = sorted(holdings, key=lambda h: h.valuation(snapshot[h.symbol]), reverse=True)
        log.debug("Computed %d holdings.", len(holdings))
        return holdings, snapshot


def summarize(holdings: List[Holding], snapshot: Mapping[str, float], rate: float) -> dict:
    total_value = sum(h.valuation(snapshot[h.symbol]) for h in holdings)
    return {
        "holdings": len(holdings),
        "total_value": total_value,
        "total_value_conv": total_value * rate,
    }
