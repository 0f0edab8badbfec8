# core/alerts.py
from __future__ import annotations
from typing import Callable, List

PriceListener = Callable[[str, float], None]


class AlertDispatcher:
    """
    Holds price listeners and calls them synchronously, in registration order.
    A listener that raises stops the loop and the error reaches the caller.
    """

    def __init__(self):
        self._listeners: List[PriceListener] = []

    def add_listener(self, listener: PriceListener) -> None:
        self._listeners.append(listener)

    def notify(self, symbol: str, price: float) -> None:
        for listener in self._listeners:
            listener(symbol, price)

    def __len__(self) -> int:
        return len(self._listeners)
