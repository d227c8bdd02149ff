from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from stripe_ops.schemas.checkout_session import CheckoutSession
from stripe_ops.schemas.payments import PaymentRecord

_ATTRIBUTION_KEYS = (
    "gender",
    "age",
    "product_tag",
    "creative_link",
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "utm_content",
    "utm_term",
    "platform_placement",
    "ad_name",
    "adset_name",
    "campaign_name",
    "web_campaign",
    "payment_count",
)

def _clean(v: str | None) -> str | None:
    if v is None:
        return None
    v = v.strip()
    if not v or v == "N/A":
        return None
    return v

def merged_metadata(session: CheckoutSession, customer_metadata: dict[str, str] | None) -> dict[str, str]:
    # customer metadata wins: it is where geo lookups are written after checkout
    merged = dict(session.metadata)
    for k, v in (customer_metadata or {}).items():
        merged[str(k)] = "" if v is None else str(v)
    return merged

def build_payment_record(
    session: CheckoutSession,
    customer_metadata: dict[str, str] | None = None,
) -> PaymentRecord:
    m = merged_metadata(session, customer_metadata)
    details = session.customer_details
    address = details.address if details else None

    created = (
        datetime.fromtimestamp(session.created, tz=timezone.utc)
        if session.created
        else datetime.now(timezone.utc)
    )
    amount = (Decimal(session.amount_total or 0) / 100).quantize(Decimal("0.01"))

    email = (details.email if details else None) or session.customer_email

    country = (
        _clean(m.get("geo_country"))
        or _clean(m.get("country"))
        or (address.country if address else None)
    )
    city = _clean(m.get("geo_city")) or (address.city if address else None)

    return PaymentRecord(
        id=session.id,
        created_at=created,
        amount=amount,
        currency=(session.currency or "usd").upper(),
        payment_status=session.payment_status or "",
        status=session.status or "",
        mode=session.mode or "",
        payment_method=(session.payment_method_types[0] if session.payment_method_types else "card"),
        customer_id=session.customer,
        email=email,
        client_reference_id=session.client_reference_id,
        country=country,
        city=city,
        metadata=m,
        **{k: _clean(m.get(k)) for k in _ATTRIBUTION_KEYS},
    )
