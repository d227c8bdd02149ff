from unittest.mock import MagicMock, patch

import redis
from fastapi.testclient import TestClient
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from stripe_ops.config import settings
from stripe_ops.dedup import get_seen_set
from stripe_ops.main import create_app
from stripe_ops.ratelimit import _hash
from stripe_ops.sheets.writer import get_sheet_writer

def _pipeline(count: int) -> MagicMock:
    pipe = MagicMock()
    pipe.execute.return_value = [count, True]
    return pipe

def test_under_limit_passes(client, notifiers, make_event):
    settings.rate_limit_enabled = True

    with patch("stripe_ops.ratelimit.redis_client.pipeline", return_value=_pipeline(1)):
        r = client.post("/webhook/stripe", json=make_event())
    assert r.status_code == 200

def test_over_limit_is_rejected(client, notifiers, make_event):
    settings.rate_limit_enabled = True

    with patch(
        "stripe_ops.ratelimit.redis_client.pipeline",
        return_value=_pipeline(settings.rate_limit_webhooks_per_min + 1),
    ):
        r = client.post("/webhook/stripe", json=make_event())
    assert r.status_code == 429
    assert r.json()["detail"] == "rate_limited"

    tg, _ = notifiers
    tg.assert_not_called()

def test_fails_open_when_redis_is_down(client, notifiers, make_event):
    settings.rate_limit_enabled = True

    pipe = MagicMock()
    pipe.execute.side_effect = redis.ConnectionError("redis down")
    with patch("stripe_ops.ratelimit.redis_client.pipeline", return_value=pipe):
        r = client.post("/webhook/stripe", json=make_event())
    assert r.status_code == 200

class CountingPipeline:
    """Stands in for redis: INCR per key, shared across requests."""

    def __init__(self, counts: dict[str, int]):
        self.counts = counts
        self.keys: list[str] = []

    def incr(self, key):
        self.keys.append(key)

    def expire(self, key, seconds, nx=False):
        pass

    def execute(self):
        key = self.keys.pop()
        self.counts[key] = self.counts.get(key, 0) + 1
        return [self.counts[key], True]

def test_forwarded_header_does_not_change_the_bucket(client, notifiers, make_event):
    settings.rate_limit_enabled = True

    counts: dict[str, int] = {}
    with patch("stripe_ops.ratelimit.redis_client.pipeline", side_effect=lambda: CountingPipeline(counts)):
        for i in range(3):
            client.post("/webhook/stripe", json=make_event(), headers={"x-forwarded-for": f"10.0.0.{i}"})
    assert list(counts.values()) == [3]
    assert list(counts) == [f"rl:webhooks:stripe:{_hash('testclient')}"]

def test_spoofed_forwarded_header_is_still_limited(client, notifiers, make_event):
    settings.rate_limit_enabled = True

    counts = {f"rl:webhooks:stripe:{_hash('testclient')}": settings.rate_limit_webhooks_per_min}
    with patch("stripe_ops.ratelimit.redis_client.pipeline", side_effect=lambda: CountingPipeline(counts)):
        r = client.post("/webhook/stripe", json=make_event(), headers={"x-forwarded-for": "203.0.113.9"})
    assert r.status_code == 429

def test_trusted_proxy_rewrites_client(seen, sheet_writer, notifiers, make_event):
    settings.rate_limit_enabled = True

    app = create_app()
    app.dependency_overrides[get_seen_set] = lambda: seen
    app.dependency_overrides[get_sheet_writer] = lambda: sheet_writer
    proxied = TestClient(ProxyHeadersMiddleware(app, trusted_hosts="*"))

    counts: dict[str, int] = {}
    with patch("stripe_ops.ratelimit.redis_client.pipeline", side_effect=lambda: CountingPipeline(counts)):
        r = proxied.post("/webhook/stripe", json=make_event(), headers={"x-forwarded-for": "203.0.113.9"})
    assert r.status_code == 200
    assert list(counts) == [f"rl:webhooks:stripe:{_hash('203.0.113.9')}"]
