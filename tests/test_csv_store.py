import pytest

import storage.csv_store as store
from core.errors import IOFailure
from core.ledger import TradeLedger


def _write(path, text):
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_load_trades_skips_blank_duplicate_and_malformed(tmp_path):
    path = _write(tmp_path / "trades.csv", "\n".join([
        "BTC,1,100",
        "",
        "BTC,1,100",          # duplicate line
        "  BTC,1,100  ",      # duplicate after trimming
        "ETH,2",              # wrong field count
        "ETH,abc,10",         # non-numeric
        "ETH,-1,10",          # invalid trade
        "ETH,2,50",
        "BTC,1,300",
    ]) + "\n")
    ledger = TradeLedger()

    count = store.load_trades(path, ledger)

    assert count == 3
    assert [t.price for t in ledger.trades_for("BTC")] == [100.0, 300.0]
    assert [t.quantity for t in ledger.trades_for("ETH")] == [2.0]


def test_load_trades_strips_fields(tmp_path):
    path = _write(tmp_path / "trades.csv", " SOL , 3.5 , 20.25 \n")
    ledger = TradeLedger()
    store.load_trades(path, ledger)
    t = ledger.trades_for("SOL")[0]
    assert (t.symbol, t.quantity, t.price) == ("SOL", 3.5, 20.25)


def test_load_trades_missing_file_raises(tmp_path):
    with pytest.raises(IOFailure) as exc:
        store.load_trades(str(tmp_path / "nope.csv"), TradeLedger())
    assert exc.value.path.endswith("nope.csv")


def test_read_prices_tolerates_bad_lines_and_last_wins(tmp_path):
    path = _write(tmp_path / "prices.csv", "BTC,400\n\nETH\nETH,x\nADA,0.3,1\nBTC,450\n")
    assert store.read_prices(path) == {"BTC": 450.0}


def test_read_prices_missing_file_is_empty(tmp_path):
    assert store.read_prices(str(tmp_path / "missing.csv")) == {}


def test_write_report_overwrites(tmp_path):
    out = tmp_path / "report.csv"
    out.write_text("old line\nanother\n", encoding="utf-8")
    store.write_report(str(out), ["a", "b"])
    assert out.read_text(encoding="utf-8") == "a\nb\n"


def test_write_report_failure_raises_io_failure(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    with pytest.raises(IOFailure):
        store.write_report(str(blocker / "report.csv"), ["a"])


def test_append_alert_line_appends(tmp_path):
    path = str(tmp_path / "alerts.txt")
    store.append_alert_line(path, "one")
    store.append_alert_line(path, "two")
    with open(path, encoding="utf-8") as f:
        assert f.read() == "one\ntwo\n"


def test_trailing_empty_fields_are_ignored(tmp_path):
    trades = _write(tmp_path / "trades.csv", "BTC,1,100,\nETH,2,50,,\n")
    prices = _write(tmp_path / "prices.csv", "BTC,400,\n")
    ledger = TradeLedger()

    assert store.load_trades(trades, ledger) == 2
    assert ledger.trades_for("ETH")[0].price == 50.0
    assert store.read_prices(prices) == {"BTC": 400.0}


def test_read_config_rejects_garbage(tmp_path, monkeypatch):
    monkeypatch.setattr(store, "CONFIG_PATH", str(tmp_path / "config.json"))
    (tmp_path / "config.json").write_text("not json", encoding="utf-8")
    with pytest.raises(IOFailure):
        store.read_config()
