# services/notify.py
from __future__ import annotations
import requests

from core.alerts import PriceListener
from core.errors import IOFailure
from storage.csv_store import append_alert_line
from utils.logging import get_logger
from utils.timeutils import utc_now_iso

log = get_logger("notify")


def send_webhook(url: str, text: str, timeout: tuple[float, float] = (3.0, 10.0)) -> bool:
    """
    Posts a simple message to Slack/Discord-compatible webhooks.
    Slack expects {"text": "..."}; Discord expects {"content": "..."}.
    Returns True on 2xx, else False.
    """
    if not url or not text:
        return False

    payload = {"text": text}
    u = url.lower()
    if "discord.com/api/webhooks" in u or "discordapp.com/api/webhooks" in u:
        payload = {"content": text}

    try:
        r = requests.post(url, json=payload, headers={"Content-Type": "application/json"}, timeout=timeout)
        r.raise_for_status()
        return True
    except requests.RequestException as e:
        log.warning("Webhook delivery failed: %s", type(e).__name__)
        return False


def alert_text(symbol: str, price: float, threshold: float, rate: float, ts: str | None = None) -> str:
    ts = ts or utc_now_iso()
    return (f"ALERT [{ts}]: {symbol} exceeded ${threshold:g} → "
            f"${price:.2f} (₹{price * rate:.2f})")


# -------- Listeners --------

def console_listener(rate: float) -> PriceListener:
    def on_price_change(symbol: str, price: float) -> None:
        log.info("Price update: %s → $%.2f (₹%.2f)", symbol, price, price * rate)
    return on_price_change


def file_alert_listener(path: str, threshold: float, rate: float) -> PriceListener:
    """Append an alert line to `path` when a price is strictly above `threshold`."""
    def on_price_change(symbol: str, price: float) -> None:
        if price <= threshold:
            return
        try:
            append_alert_line(path, alert_text(symbol, price, threshold, rate))
        except IOFailure as e:
            # a lost alert must not abort the valuation
            log.error("Failed to write alert: %s", e)
    return on_price_change


def webhook_alert_listener(url: str, threshold: float, rate: float) -> PriceListener:
    def on_price_change(symbol: str, price: float) -> None:
        if price > threshold:
            send_webhook(url, alert_text(symbol, price, threshold, rate))
    return on_price_change
