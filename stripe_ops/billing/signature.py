from __future__ import annotations

import hashlib
import hmac
import time

from fastapi import HTTPException

def parse_signature_header(signature: str) -> dict[str, list[str]]:
    parts: dict[str, list[str]] = {}
    for item in signature.split(","):
        if "=" not in item:
            continue
        k, v = item.split("=", 1)
        parts.setdefault(k.strip(), []).append(v.strip())
    return parts

def compute_signature(secret: str, payload_bytes: bytes, timestamp: int) -> str:
    signed_payload = f"{timestamp}.".encode("utf-8") + payload_bytes
    return hmac.new(secret.encode("utf-8"), signed_payload, hashlib.sha256).hexdigest()

def verify_stripe_signature(
    payload_bytes: bytes,
    signature: str | None,
    secret: str,
    tolerance_seconds: int = 300,
    now: int | None = None,
) -> None:
    if not signature:
        raise HTTPException(status_code=400, detail="missing stripe-signature")

    parts = parse_signature_header(signature)
    ts_list = parts.get("t") or []
    v1_list = parts.get("v1") or []
    if not ts_list or not v1_list:
        raise HTTPException(status_code=400, detail="invalid stripe-signature format")

    try:
        ts = int(ts_list[0])
    except ValueError:
        raise HTTPException(status_code=400, detail="invalid stripe-signature timestamp")

    now = int(time.time()) if now is None else now
    if abs(now - ts) > tolerance_seconds:
        raise HTTPException(status_code=400, detail="stale stripe-signature")

    expected = compute_signature(secret, payload_bytes, ts)
    if not any(hmac.compare_digest(expected, cand) for cand in v1_list):
        raise HTTPException(status_code=400, detail="invalid stripe-signature")
