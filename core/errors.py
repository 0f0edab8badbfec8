# core/errors.py
from __future__ import annotations


class TrackerError(Exception):
    """Base class for tracker failures."""


class InvalidTrade(TrackerError, ValueError):
    """Trade with a non-positive quantity or price."""


class SymbolNotFound(TrackerError, LookupError):
    def __init__(self, symbol: str):
        super().__init__(f"Symbol not found: {symbol}")
        self.symbol = symbol


class IOFailure(TrackerError, OSError):
    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
