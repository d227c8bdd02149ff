from unittest.mock import patch

from stripe_ops.errors import TelegramError
from stripe_ops.metrics import Metrics

def test_metrics_start_empty(client):
    r = client.get("/metrics")
    assert r.status_code == 200
    body = r.json()
    assert body["sessions_handled"] == 0
    assert body["uptime_seconds"] >= 0
    assert body["sessions"] == {"processed": 0, "duplicates": 0}
    assert body["deliveries"]["telegram"] == {"sent": 0, "failed": 0, "skipped": 0}

def test_metrics_count_deliveries_and_duplicates(client, notifiers, sheet_writer, make_event):
    tg, _ = notifiers
    tg.side_effect = TelegramError("telegram error: 502", status_code=502)

    client.post("/webhook/stripe", json=make_event(event_id="evt_1"))
    client.post("/webhook/stripe", json=make_event(event_id="evt_2"))

    body = client.get("/metrics").json()
    assert body["sessions_handled"] == 1
    assert body["sessions"] == {"processed": 1, "duplicates": 1}
    assert body["deliveries"] == {
        "telegram": {"sent": 0, "failed": 1, "skipped": 0},
        "slack": {"sent": 1, "failed": 0, "skipped": 0},
        "sheets": {"sent": 1, "failed": 0, "skipped": 0},
    }

def test_unconfigured_channel_counts_as_skipped(client, sheet_writer, make_event):
    # real senders, nothing configured
    client.post("/webhook/stripe", json=make_event())

    deliveries = client.get("/metrics").json()["deliveries"]
    assert deliveries["telegram"] == {"sent": 0, "failed": 0, "skipped": 1}
    assert deliveries["slack"] == {"sent": 0, "failed": 0, "skipped": 1}

def test_uptime_and_reset():
    m = Metrics()
    with patch("stripe_ops.metrics.time.monotonic", return_value=m.started_at + 12.5):
        assert m.snapshot()["uptime_seconds"] == 12.5

    m.session_processed()
    m.delivery("slack", "sent")
    m.reset()
    snap = m.snapshot()
    assert snap["sessions"]["processed"] == 0
    assert snap["deliveries"]["slack"]["sent"] == 0
