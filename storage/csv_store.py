# storage/csv_store.py
import io
import json
import os
import tempfile
from typing import Any, Dict, List

from core.errors import IOFailure, InvalidTrade
from core.ledger import Trade, TradeLedger
from utils.logging import get_logger

log = get_logger("store")

HOME_DIR = os.path.expanduser("~/.crypto_tracker")
CONFIG_PATH = os.path.join(HOME_DIR, "config.json")

DEFAULT_CONFIG = {
    "trades_path": "trades.csv",
    "prices_path": "prices.csv",
    "report_path": "pnl_report.csv",
    "alerts_path": "alerts.txt",
    "usd_to_inr": 84.0,
    "alert_threshold": 1000.0,
    "alert_webhook": "",
    "recompute_summary": False,
    "log_level": "INFO",
}


def _atomic_write_text(path: str, text: str):
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=directory, prefix=".tmp-", text=True)
    try:
        with io.open(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp, path)
    finally:
        if os.path.exists(tmp):
            os.remove(tmp)


def _split_fields(line: str) -> List[str]:
    parts = line.split(",")
    # trailing empty fields are dropped: "BTC,1,100," is a 3-field line
    while parts and parts[-1] == "":
        parts.pop()
    return [p.strip() for p in parts]


# ---- Trades ----

def load_trades(path: str, ledger: TradeLedger) -> int:
    """
    Read `symbol,quantity,price` lines into the ledger.
    Blank, duplicate and wrong-width lines are ignored; bad numbers and
    invalid trades are logged and skipped. Returns the number of trades added.
    """
    seen = set()
    count = 0
    try:
        with open(path, "r", encoding="utf-8") as f:
            for raw in f:
                line = raw.strip()
                if not line or line in seen:
                    continue
                seen.add(line)

                parts = _split_fields(line)
                if len(parts) != 3:
                    continue
                try:
                    trade = Trade(parts[0], float(parts[1]), float(parts[2]))
                    ledger.add_trade(trade)
                except (ValueError, InvalidTrade):
                    log.warning("Skipping invalid line: %s", line)
                    continue
                log.debug("%s: %.4f @ $%.2f", trade.symbol, trade.quantity, trade.price)
                count += 1
    except OSError as e:
        raise IOFailure(path, e.strerror or str(e)) from e
    log.info("Loaded %d trades from %s", count, path)
    return count


# ---- Prices ----

def read_prices(path: str) -> Dict[str, float]:
    """Read `symbol,price` lines. A missing or unreadable file yields {}."""
    prices: Dict[str, float] = {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            for raw in f:
                line = raw.strip()
                if not line:
                    continue
                parts = _split_fields(line)
                if len(parts) != 2:
                    continue
                try:
                    prices[parts[0]] = float(parts[1])
                except ValueError:
                    log.warning("Invalid price format: %s", line)
    except OSError as e:
        log.warning("Failed to load prices from %s: %s", path, e.strerror or e)
        return {}
    log.info("Loaded %d price quotes from %s", len(prices), path)
    return prices


# ---- Report / alerts ----

def write_report(path: str, lines: List[str]) -> None:
    """Replace the report at `path` with `lines`."""
    text = "".join(line + "\n" for line in lines)
    try:
        _atomic_write_text(path, text)
    except OSError as e:
        raise IOFailure(path, e.strerror or str(e)) from e


def append_alert_line(path: str, text: str) -> None:
    try:
        with open(path, "a", encoding="utf-8") as f:
            f.write(text + "\n")
    except OSError as e:
        raise IOFailure(path, e.strerror or str(e)) from e


# ---- Config ----

def read_json(path: str, default: Dict[str, Any] | None = None) -> Dict[str, Any]:
    if not os.path.exists(path):
        return default or {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except OSError as e:
        raise IOFailure(path, e.strerror or str(e)) from e
    except ValueError as e:
        raise IOFailure(path, f"invalid JSON ({e})") from e


def read_config() -> Dict[str, Any]:
    cfg = dict(DEFAULT_CONFIG)
    disk = read_json(CONFIG_PATH, {})
    if not isinstance(disk, dict):
        raise IOFailure(CONFIG_PATH, "expected a JSON object")
    cfg.update({k: v for k, v in disk.items() if k in DEFAULT_CONFIG})
    return cfg


def write_config(cfg: dict):
    """Atomic write of config.json, known keys only."""
    clean = {k: cfg.get(k, default) for k, default in DEFAULT_CONFIG.items()}
    _atomic_write_text(CONFIG_PATH, json.dumps(clean, indent=2, ensure_ascii=False))


def ensure_config_exists():
    if not os.path.exists(CONFIG_PATH):
        write_config(dict(DEFAULT_CONFIG))
