from __future__ import annotations

import stripe

from stripe_ops.config import settings
from stripe_ops.logging_config import get_logger

logger = get_logger(__name__)

def fetch_customer_metadata(customer_id: str | None) -> dict[str, str]:
    """Metadata of a Stripe Customer, or ``{}`` when it cannot be read.

    Geo and attribution fields are written onto the customer after checkout,
    so the session alone is often missing them.
    """
    if not customer_id or not settings.STRIPE_SECRET_KEY:
        return {}

    try:
        customer = stripe.Customer.retrieve(
            customer_id,
            api_key=settings.STRIPE_SECRET_KEY,
            stripe_version=settings.stripe_api_version,
        )
    except stripe.StripeError as e:
        logger.warning("stripe customer lookup failed", customer_id=customer_id, error=str(e))
        return {}

    if getattr(customer, "deleted", False):
        return {}

    metadata = customer.get("metadata") or {}
    return {str(k): "" if v is None else str(v) for k, v in metadata.items()}

# cheapest authenticated call, for /status
def stripe_ping() -> bool:
    stripe.Customer.list(
        limit=1,
        api_key=settings.STRIPE_SECRET_KEY,
        stripe_version=settings.stripe_api_version,
    )
    return True
