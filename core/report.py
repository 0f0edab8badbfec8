# core/report.py
from __future__ import annotations
from typing import List, Mapping

from core.portfolio import Holding

PRIMARY_SIGN = "$"
CONVERTED_SIGN = "₹"


def build_rows(holdings: List[Holding], snapshot: Mapping[str, float], rate: float) -> List[dict]:
    """One row per holding, in the order given."""
    rows = []
    for h in holdings:
        price = snapshot[h.symbol]
        value = h.valuation(price)
        pnl = h.pnl(price)
        rows.append({
            "symbol": h.symbol,
            "qty": h.quantity,
            "price": price,
            "value": value,
            "value_conv": value * rate,
            "pnl": pnl,
            "pnl_conv": pnl * rate,
            "pnl_pct": h.profit_percent(price),
        })
    return rows


def format_row(row: dict, primary: str = PRIMARY_SIGN, converted: str = CONVERTED_SIGN) -> str:
    return (
        f"{row['symbol']}, Qty: {row['qty']:.4f}, "
        f"Value: {primary}{row['value']:.2f} ({converted}{row['value_conv']:.2f}), "
        f"P&L: {primary}{row['pnl']:.2f} ({converted}{row['pnl_conv']:.2f}), "
        f"Profit%: {row['pnl_pct']:.2f}%"
    )


def format_report(holdings: List[Holding], snapshot: Mapping[str, float], rate: float) -> List[str]:
    return [format_row(r) for r in build_rows(holdings, snapshot, rate)]
