from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel

class PaymentRecord(BaseModel):
    id: str
    created_at: datetime
    amount: Decimal
    currency: str
    payment_status: str = ""
    status: str = ""
    mode: str = ""
    payment_method: str = "card"

    customer_id: str | None = None
    email: str | None = None
    client_reference_id: str | None = None

    country: str | None = None
    city: str | None = None

    gender: str | None = None
    age: str | None = None
    product_tag: str | None = None
    creative_link: str | None = None
    utm_source: str | None = None
    utm_medium: str | None = None
    utm_campaign: str | None = None
    utm_content: str | None = None
    utm_term: str | None = None
    platform_placement: str | None = None
    ad_name: str | None = None
    adset_name: str | None = None
    campaign_name: str | None = None
    web_campaign: str | None = None
    payment_count: str | None = None

    metadata: dict[str, str] = {}

    @property
    def location(self) -> str:
        country = self.country or "Unknown"
        if self.city:
            return f"{country}, {self.city}"
        return country
