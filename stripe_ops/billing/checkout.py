from __future__ import annotations

from datetime import datetime, timezone
from urllib.parse import parse_qs, urlparse

import stripe

from stripe_ops.config import settings
from stripe_ops.logging_config import get_logger
from stripe_ops.schemas.checkout import CreateCheckoutIn

logger = get_logger(__name__)

# query params copied from the landing page onto session metadata
ATTRIBUTION_PARAMS = (
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "utm_content",
    "utm_term",
    "ad_name",
    "adset_name",
    "campaign_name",
    "campaign_id",
    "adset_id",
    "ad_id",
    "publisher_site_id",
    "fbclid",
    "gclid",
    "gender",
    "age",
    "product_tag",
    "creative_link",
    "platform_placement",
)

def extract_attribution(url: str | None) -> dict[str, str]:
    if not url:
        return {}
    query = parse_qs(urlparse(url).query)
    return {k: (query.get(k) or [""])[0] for k in ATTRIBUTION_PARAMS}

def checkout_metadata(payload: CreateCheckoutIn) -> dict[str, str]:
    metadata = {k: v for k, v in extract_attribution(payload.referrer_url).items() if v}
    metadata["source"] = "api"
    metadata["created_at"] = datetime.now(timezone.utc).isoformat()
    return metadata

def create_checkout_session(payload: CreateCheckoutIn):
    price = payload.price_data
    session = stripe.checkout.Session.create(
        api_key=settings.STRIPE_SECRET_KEY,
        stripe_version=settings.stripe_api_version,
        payment_method_types=["card"],
        line_items=[
            {
                "price_data": {
                    "currency": price.currency,
                    "product_data": {"name": price.product_name},
                    "unit_amount": price.unit_amount,
                },
                "quantity": payload.quantity,
            }
        ],
        mode="payment",
        success_url=payload.success_url or f"{settings.base_url}/success",
        cancel_url=payload.cancel_url or f"{settings.base_url}/cancel",
        metadata=checkout_metadata(payload),
    )
    logger.info("checkout session created", session_id=session.id, amount=price.unit_amount * payload.quantity)
    return session
