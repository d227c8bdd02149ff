from __future__ import annotations

import hashlib
import hmac
import json
import os
import time
import uuid

import requests
from rich import print

BASE = os.getenv("API_BASE_URL", "http://127.0.0.1:8000")
SECRET = os.getenv("STRIPE_WEBHOOK_SECRET")

def stripe_sig(secret: str, raw: bytes) -> str:
    ts = int(time.time())
    signed = f"{ts}.".encode("utf-8") + raw
    v1 = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={ts},v1={v1}"

def post_event(event: dict) -> requests.Response:
    raw = json.dumps(event).encode("utf-8")
    headers = {"content-type": "application/json"}
    if SECRET:
        headers["stripe-signature"] = stripe_sig(SECRET, raw)
    return requests.post(f"{BASE}/webhook/stripe", data=raw, headers=headers, timeout=30)

def sample_checkout_completed(session_id: str) -> dict:
    return {
        "id": f"evt_demo_{uuid.uuid4().hex[:12]}",
        "type": "checkout.session.completed",
        "data": {
            "object": {
                "id": session_id,
                "object": "checkout.session",
                "created": int(time.time()),
                "amount_total": 2999,
                "currency": "usd",
                "customer": None,
                "customer_details": {
                    "email": "demo.buyer@example.com",
                    "address": {"country": "US", "city": "Austin"},
                },
                "payment_status": "paid",
                "payment_method_types": ["card"],
                "mode": "payment",
                "status": "complete",
                "metadata": {
                    "utm_source": "facebook",
                    "utm_campaign": "springSale2025",
                    "ad_name": "videoAd3US",
                    "adset_name": "broadWomen25",
                    "campaign_name": "springSale2025",
                    "creative_link": "https://example.com/creative/3",
                },
            }
        },
    }

def wait_ready(timeout_s: float = 30.0) -> None:
    deadline = time.time() + timeout_s
    last_err: Exception | None = None

    while time.time() < deadline:
        try:
            r = requests.get(f"{BASE}/health", timeout=3)
            if r.status_code == 200:
                return
        except requests.RequestException as e:
            last_err = e
        time.sleep(1)

    raise RuntimeError(f"api not ready after {timeout_s}s: {last_err}")

def main() -> None:
    print(f"[bold]stripe-ops demo[/bold] against {BASE}")
    wait_ready()

    session_id = f"cs_test_demo_{uuid.uuid4().hex[:16]}"
    event = sample_checkout_completed(session_id)

    r1 = post_event(event)
    print("[cyan]first delivery[/cyan]", r1.status_code, r1.json())
    r1.raise_for_status()

    # stripe redelivers with the same session; the second one must be deduped
    r2 = post_event(event)
    print("[cyan]redelivery[/cyan]", r2.status_code, r2.json())
    r2.raise_for_status()

    if r2.json().get("dedup") is not True:
        print("[red]redelivery was not deduplicated[/red]")
        raise SystemExit(1)

    ignored = post_event({"id": "evt_demo_ignored", "type": "invoice.paid", "data": {"object": {}}})
    print("[cyan]unhandled type[/cyan]", ignored.status_code, ignored.json())

    print("[green]done[/green]")

if __name__ == "__main__":
    main()
