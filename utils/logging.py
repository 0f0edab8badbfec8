# utils/logging.py
from __future__ import annotations
import logging
import os

from rich.console import Console
from rich.logging import RichHandler

ROOT_NAME = "crypto_tracker"
LEVEL_ENV = "CRYPTO_TRACKER_LOG_LEVEL"

_configured = False


def _configure_root() -> logging.Logger:
    global _configured
    root = logging.getLogger(ROOT_NAME)
    if not _configured:
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            markup=False,
            rich_tracebacks=False,
        )
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        root.addHandler(handler)
        root.setLevel(os.environ.get(LEVEL_ENV, "INFO").upper())
        _configured = True
    return root


def get_logger(name: str) -> logging.Logger:
    _configure_root()
    return logging.getLogger(f"{ROOT_NAME}.{name}")


def set_level(level: str) -> None:
    """Apply a config-provided level unless the environment already set one."""
    root = _configure_root()
    if os.environ.get(LEVEL_ENV):
        return
    root.setLevel(str(level).upper())
