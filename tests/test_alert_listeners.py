from services import notify


def test_alert_text_format():
    text = notify.alert_text("BTC", 1500.0, 1000.0, 84.0, ts="2026-01-02T03:04:05+00:00")
    assert text == "ALERT [2026-01-02T03:04:05+00:00]: BTC exceeded $1000 → $1500.00 (₹126000.00)"


def test_file_listener_appends_only_above_threshold(tmp_path):
    path = tmp_path / "alerts.txt"
    path.write_text("earlier alert\n", encoding="utf-8")
    listener = notify.file_alert_listener(str(path), threshold=1000.0, rate=84.0)

    listener("ETH", 1000.0)   # not strictly above
    listener("ADA", 0.3)
    listener("BTC", 65000.0)

    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert lines[0] == "earlier alert"
    assert "BTC exceeded $1000 → $65000.00" in lines[1]


def test_file_listener_swallows_write_failure(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    listener = notify.file_alert_listener(str(blocker / "alerts.txt"), threshold=1.0, rate=1.0)
    listener("BTC", 2.0)  # must not raise


def test_webhook_listener_threshold(monkeypatch):
    sent = []
    monkeypatch.setattr(notify, "send_webhook", lambda url, text: sent.append((url, text)) or True)
    listener = notify.webhook_alert_listener("https://hooks.slack.com/services/x", 1000.0, 84.0)

    listener("ETH", 999.0)
    listener("BTC", 70000.0)

    assert len(sent) == 1
    assert sent[0][0] == "https://hooks.slack.com/services/x"
    assert "BTC exceeded $1000" in sent[0][1]
