# cli.py
import argparse
import json
import sys

from rich.console import Console
from rich.table import Table

from core.alerts import AlertDispatcher
from core.errors import IOFailure, SymbolNotFound
from core.ledger import TradeLedger
from core.portfolio import HoldingsCalculator, price_lookup_from, summarize
from core.report import build_rows, format_report
from services.notify import console_listener, file_alert_listener, webhook_alert_listener
from storage.csv_store import (
    load_trades, read_prices, write_report, read_config, write_config, ensure_config_exists,
    DEFAULT_CONFIG,
)
from utils.logging import get_logger, set_level

log = get_logger("cli")


def _print_table(rows: list[dict], summary: dict):
    table = Table(title="Crypto P&L")
    table.add_column("Symbol", justify="left")
    table.add_column("Qty", justify="right")
    table.add_column("Price (USD)", justify="right")
    table.add_column("Value", justify="right")
    table.add_column("P/L", justify="right")
    table.add_column("P/L %", justify="right")

    for row in rows:
        table.add_row(
            row["symbol"],
            f"{row['qty']:.4f}",
            f"${row['price']:,.2f}",
            f"${row['value']:,.2f}",
            f"${row['pnl']:,.2f}",
            f"{row['pnl_pct']:,.2f}%"
        )
    table.add_row("", "", "", "", "", "")
    table.add_row("[b]TOTAL[/b]", "", "", f"[b]${summary['total_value']:,.2f}[/b]", "", "")
    Console().print(table)


def build_dispatcher(rate: float, threshold: float, alerts_path: str, webhook: str) -> AlertDispatcher:
    dispatcher = AlertDispatcher()
    dispatcher.add_listener(console_listener(rate))
    dispatcher.add_listener(file_alert_listener(alerts_path, threshold, rate))
    if webhook:
        dispatcher.add_listener(webhook_alert_listener(webhook, threshold, rate))
    return dispatcher


def run_report(trades_path: str, prices_path: str, out_path: str, alerts_path: str,
               rate: float, threshold: float, webhook: str = "",
               recompute_summary: bool = False, table: bool = False) -> int:
    """Load inputs, write the P&L report and print a summary. Returns an exit code."""
    prices = read_prices(prices_path)
    ledger = TradeLedger()
    calc = HoldingsCalculator(
        ledger,
        price_lookup_from(prices),
        build_dispatcher(rate, threshold, alerts_path, webhook),
    )

    rc = 0
    try:
        load_trades(trades_path, ledger)
        holdings, snapshot = calc.compute_holdings()
        try:
            write_report(out_path, format_report(holdings, snapshot, rate))
        except IOFailure as e:
            # no report for this run; the summary is still shown
            log.error("I/O error while exporting report: %s", e)
            print(f"I/O error while exporting report: {e}", file=sys.stderr)
            rc = 1

        if recompute_summary:
            holdings, snapshot = calc.compute_holdings()
        summary = summarize(holdings, snapshot, rate)
    except SymbolNotFound as e:
        log.error("Symbol lookup failed: %s", e)
        print(f"Symbol lookup failed: {e}", file=sys.stderr)
        return 1
    except IOFailure as e:
        log.error("I/O error: %s", e)
        print(f"I/O error: {e}", file=sys.stderr)
        return 1

    if table:
        _print_table(build_rows(holdings, snapshot, rate), summary)
    print(f"Portfolio Summary: {summary['holdings']} holdings, "
          f"Total Value: ${summary['total_value']:.2f} (₹{summary['total_value_conv']:.2f})")
    if rc == 0:
        print(f"Report generated: {out_path}")
    return rc


# -------- Commands --------

def _config_failed(e: OSError) -> int:
    log.error("Config error: %s", e)
    print(f"Config error: {e}", file=sys.stderr)
    return 1


def cmd_report(args: argparse.Namespace) -> int:
    try:
        cfg = read_config()
    except IOFailure as e:
        return _config_failed(e)
    set_level(cfg.get("log_level", "INFO"))
    return run_report(
        trades_path=args.trades or cfg["trades_path"],
        prices_path=args.prices or cfg["prices_path"],
        out_path=args.out or cfg["report_path"],
        alerts_path=args.alerts or cfg["alerts_path"],
        rate=args.rate if args.rate is not None else float(cfg["usd_to_inr"]),
        threshold=args.threshold if args.threshold is not None else float(cfg["alert_threshold"]),
        webhook=args.webhook or cfg.get("alert_webhook", ""),
        recompute_summary=args.recompute_summary or bool(cfg.get("recompute_summary")),
        table=args.table,
    )


def _parse_kv_list(pairs: list[str]) -> dict:
    out = {}
    for item in pairs or []:
        if "=" not in item:
            raise ValueError(f"Expected key=value, got '{item}'")
        k, v = item.split("=", 1)
        out[k.strip()] = v.strip()
    return out


def _coerce_config_value(key: str, value: str):
    if key not in DEFAULT_CONFIG:
        raise ValueError(f"Unknown key '{key}'. Allowed: {', '.join(DEFAULT_CONFIG)}")
    if key in ("usd_to_inr", "alert_threshold"):
        try:
            num = float(value)
        except ValueError:
            raise ValueError(f"{key} must be a number.")
        if num <= 0:
            raise ValueError(f"{key} must be > 0.")
        return num
    if key == "recompute_summary":
        v = value.lower()
        if v not in ("true", "false", "1", "0", "yes", "no"):
            raise ValueError("recompute_summary must be true or false.")
        return v in ("true", "1", "yes")
    if key == "log_level":
        v = value.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError("log_level must be DEBUG, INFO, WARNING, ERROR or CRITICAL.")
        return v
    if key.endswith("_path") and not value:
        raise ValueError(f"{key} cannot be empty.")
    return value


def cmd_config(args: argparse.Namespace) -> int:
    try:
        ensure_config_exists()
        cfg = read_config()
    except OSError as e:
        return _config_failed(e)

    if args.path:
        from storage.csv_store import CONFIG_PATH
        print(CONFIG_PATH)
        return 0

    if args.set:
        try:
            for k, v in _parse_kv_list(args.set).items():
                cfg[k] = _coerce_config_value(k, v)
        except ValueError as e:
            print(str(e), file=sys.stderr)
            return 2
        try:
            write_config(cfg)
        except OSError as e:
            return _config_failed(e)
        print("Config updated.")

    if args.show or not args.set:
        print(json.dumps(cfg, indent=2, ensure_ascii=False))
    return 0


# -------- Parser --------

def build_parser():
    p = argparse.ArgumentParser(prog="crypto", description="Crypto P&L report")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_rep = sub.add_parser("report", help="Value recorded trades and write the P&L report")
    p_rep.add_argument("--trades", help="Trades file, lines of symbol,quantity,price")
    p_rep.add_argument("--prices", help="Prices file, lines of symbol,price")
    p_rep.add_argument("--out", help="Report output path (overwritten)")
    p_rep.add_argument("--alerts", help="Alerts file (appended)")
    p_rep.add_argument("--rate", type=float, help="USD to INR conversion factor")
    p_rep.add_argument("--threshold", type=float, help="Alert when price is above this (USD)")
    p_rep.add_argument("--webhook", help="Slack/Discord webhook URL for alerts")
    p_rep.add_argument("--recompute-summary", action="store_true",
                       help="Recompute holdings for the summary (listeners fire twice)")
    p_rep.add_argument("--table", action="store_true", help="Pretty table output")
    p_rep.set_defaults(func=cmd_report)

    p_cfg = sub.add_parser("config", help="Show or edit configuration")
    p_cfg.add_argument("--show", action="store_true", help="Show current config")
    p_cfg.add_argument("--set", nargs="*", help="Set key=value. Ex: --set usd_to_inr=83.5 alert_threshold=2000")
    p_cfg.add_argument("--path", action="store_true", help="Print the config file path and exit")
    p_cfg.set_defaults(func=cmd_config)

    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
