import time
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from stripe_ops.config import settings
from stripe_ops.dedup import SeenSet, get_seen_set
from stripe_ops.main import create_app
from stripe_ops.metrics import metrics
from stripe_ops.sheets.writer import SheetWriter, get_sheet_writer

@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    # tests never reach real services, whatever the local .env says
    for name in (
        "STRIPE_SECRET_KEY",
        "STRIPE_WEBHOOK_SECRET",
        "TELEGRAM_BOT_TOKEN",
        "TELEGRAM_CHAT_ID",
        "SLACK_BOT_TOKEN",
        "SLACK_CHANNEL_ID",
        "GOOGLE_SHEETS_DOC_ID",
        "GOOGLE_SERVICE_EMAIL",
        "GOOGLE_SERVICE_PRIVATE_KEY",
    ):
        monkeypatch.setattr(settings, name, None)
    monkeypatch.setattr(settings, "notifications_disabled", False)
    monkeypatch.setattr(settings, "rate_limit_enabled", False)
    monkeypatch.setattr(settings, "trust_proxy_headers", False)
    # most tests post unsigned events; signature tests set a secret
    monkeypatch.setattr(settings, "app_env", "dev")
    monkeypatch.setattr(settings, "allow_unsigned_webhooks", True)
    metrics.reset()

@pytest.fixture()
def seen() -> SeenSet:
    return SeenSet()

@pytest.fixture()
def sheet_writer() -> MagicMock:
    writer = MagicMock(spec=SheetWriter)
    writer.append_payment.return_value = True
    return writer

@pytest.fixture()
def notifiers():
    with patch("stripe_ops.routes.webhooks.send_telegram", return_value=True) as tg, patch(
        "stripe_ops.routes.webhooks.send_slack", return_value=True
    ) as slack:
        yield tg, slack

@pytest.fixture()
def client(seen, sheet_writer) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_seen_set] = lambda: seen
    app.dependency_overrides[get_sheet_writer] = lambda: sheet_writer
    return TestClient(app)

def _checkout_session(session_id: str = "cs_test_123", **overrides) -> dict:
    obj = {
        "id": session_id,
        "object": "checkout.session",
        "created": int(time.time()),
        "amount_total": 4999,
        "currency": "usd",
        "customer": "cus_test_123",
        "customer_details": {
            "email": "jane@example.com",
            "address": {"country": "US", "city": "Austin"},
        },
        "payment_status": "paid",
        "payment_method_types": ["card"],
        "mode": "payment",
        "status": "complete",
        "metadata": {
            "utm_source": "facebook",
            "ad_name": "videoAd3",
            "campaign_name": "springSale2025",
        },
    }
    obj.update(overrides)
    return obj

def _checkout_event(session: dict | None = None, event_id: str = "evt_test_1") -> dict:
    return {
        "id": event_id,
        "type": "checkout.session.completed",
        "data": {"object": session if session is not None else _checkout_session()},
    }

@pytest.fixture()
def make_session():
    return _checkout_session

@pytest.fixture()
def make_event():
    return _checkout_event
