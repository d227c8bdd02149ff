from __future__ import annotations

import json
from collections.abc import Callable

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from fastapi.concurrency import run_in_threadpool

from stripe_ops.billing.customers import fetch_customer_metadata
from stripe_ops.billing.signature import verify_stripe_signature
from stripe_ops.config import settings
from stripe_ops.dedup import SeenSet, get_seen_set
from stripe_ops.errors import IntegrationError
from stripe_ops.logging_config import get_logger
from stripe_ops.metrics import metrics
from stripe_ops.notify.format import format_slack, format_telegram, mask_email
from stripe_ops.notify.slack import send_slack
from stripe_ops.notify.telegram import send_telegram
from stripe_ops.payments import build_payment_record
from stripe_ops.ratelimit import rate_limit
from stripe_ops.schemas.checkout_session import CheckoutSession
from stripe_ops.schemas.payments import PaymentRecord
from stripe_ops.sheets.writer import SheetWriter, get_sheet_writer

logger = get_logger(__name__)

router = APIRouter(tags=["webhooks"])

CHECKOUT_COMPLETED = "checkout.session.completed"

def _deliver(service: str, session_id: str, fn: Callable[[], bool]) -> bool:
    # one failed channel must not block the others or fail the webhook
    try:
        sent: bool | None = bool(fn())
    except IntegrationError as e:
        logger.warning(
            "delivery failed",
            service=e.service,
            session_id=session_id,
            status_code=e.status_code,
            error=str(e),
        )
        sent = None
    except Exception as e:
        logger.exception("delivery failed", service=service, session_id=session_id, error=str(e))
        sent = None

    if sent is None:
        metrics.delivery(service, "failed")
        return False
    metrics.delivery(service, "sent" if sent else "skipped")
    return sent

def fan_out(record: PaymentRecord, writer: SheetWriter | None) -> dict[str, bool]:
    delivered = {"telegram": False, "slack": False, "sheets": False}

    if settings.notifications_disabled:
        logger.info("notifications disabled, skipping telegram and slack", session_id=record.id)
    else:
        delivered["telegram"] = _deliver("telegram", record.id, lambda: send_telegram(format_telegram(record)))
        delivered["slack"] = _deliver("slack", record.id, lambda: send_slack(format_slack(record)))

    if writer is None:
        logger.info("sheets not configured, skipping row", session_id=record.id)
    else:
        delivered["sheets"] = _deliver("sheets", record.id, lambda: writer.append_payment(record))

    return delivered

def handle_checkout_completed(
    session: CheckoutSession,
    seen: SeenSet,
    writer: SheetWriter | None,
) -> dict:
    if seen.was_handled(session.id):
        logger.info("duplicate checkout session ignored", session_id=session.id)
        metrics.session_duplicate()
        return {"ok": True, "dedup": True, "session_id": session.id}

    customer_metadata = fetch_customer_metadata(session.customer)
    record = build_payment_record(session, customer_metadata)

    logger.info(
        "checkout session completed",
        session_id=record.id,
        customer_id=record.customer_id,
        amount=str(record.amount),
        currency=record.currency,
        email=mask_email(record.email),
        country=record.country,
    )

    delivered = fan_out(record, writer)

    seen.mark_handled(session.id)
    metrics.session_processed()
    return {"ok": True, "session_id": session.id, "delivered": delivered}

@router.post("/webhook/stripe")
@router.post("/webhooks/stripe")
async def stripe_webhook(
    request: Request,
    seen: SeenSet = Depends(get_seen_set),
    writer: SheetWriter | None = Depends(get_sheet_writer),
    stripe_signature: str | None = Header(default=None, alias="stripe-signature"),
    _: None = Depends(
        rate_limit(
            "webhooks:stripe",
            limit_per_window=settings.rate_limit_webhooks_per_min,
            window_seconds=60,
        )
    ),
):
    raw = await request.body()

    secret = settings.STRIPE_WEBHOOK_SECRET
    if secret:
        try:
            verify_stripe_signature(
                raw,
                stripe_signature,
                secret,
                tolerance_seconds=settings.stripe_signature_tolerance_seconds,
            )
        except HTTPException as e:
            logger.warning("stripe signature verification failed", reason=e.detail)
            raise
    elif settings.allow_unsigned_webhooks and settings.app_env != "prod":
        logger.warning("STRIPE_WEBHOOK_SECRET not set, accepting unsigned event", app_env=settings.app_env)
    else:
        # 5xx so stripe keeps redelivering until the secret is configured
        logger.error("STRIPE_WEBHOOK_SECRET not set, rejecting event")
        raise HTTPException(status_code=500, detail="webhook_secret_not_configured")

    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        raise HTTPException(status_code=400, detail="invalid json")

    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="invalid_stripe_event")

    event_id = payload.get("id")
    event_type = payload.get("type")
    if not event_id or not event_type:
        raise HTTPException(status_code=400, detail="invalid_stripe_event")

    if event_type != CHECKOUT_COMPLETED:
        logger.info("stripe event ignored", event_id=event_id, event_type=event_type)
        return {"ok": True, "ignored": event_type}

    try:
        data = payload.get("data") or {}
        obj = data.get("object") if isinstance(data, dict) else None
        if not isinstance(obj, dict):
            raise TypeError("stripe event data.object must be an object")
        session = CheckoutSession.model_validate(obj)
        return await run_in_threadpool(handle_checkout_completed, session, seen, writer)
    except Exception as e:
        # not marked as handled, so stripe's redelivery can retry
        logger.exception("webhook handler error", event_id=event_id, error=f"{type(e).__name__}: {e}")
        raise HTTPException(status_code=500, detail="webhook_processing_failed")
