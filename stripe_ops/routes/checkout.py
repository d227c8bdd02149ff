from __future__ import annotations

import stripe
from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool

from stripe_ops.billing.checkout import create_checkout_session
from stripe_ops.config import settings
from stripe_ops.logging_config import get_logger
from stripe_ops.ratelimit import rate_limit
from stripe_ops.schemas.checkout import CreateCheckoutIn, CreateCheckoutOut

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["checkout"])

@router.post("/create-checkout", response_model=CreateCheckoutOut)
async def create_checkout(
    payload: CreateCheckoutIn,
    _: None = Depends(
        rate_limit(
            "api:create_checkout",
            limit_per_window=settings.rate_limit_checkout_per_min,
            window_seconds=60,
        )
    ),
) -> CreateCheckoutOut:
    if not settings.STRIPE_SECRET_KEY:
        raise HTTPException(status_code=503, detail="stripe_not_configured")

    try:
        session = await run_in_threadpool(create_checkout_session, payload)
    except stripe.StripeError as e:
        logger.error("checkout session creation failed", error=str(e))
        raise HTTPException(status_code=502, detail="stripe_error")

    return CreateCheckoutOut(
        id=session.id,
        url=session.get("url"),
        metadata=dict(session.get("metadata") or {}),
    )
