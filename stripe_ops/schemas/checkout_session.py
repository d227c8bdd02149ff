from pydantic import BaseModel, ConfigDict, field_validator

class Address(BaseModel):
    model_config = ConfigDict(extra="ignore")

    city: str | None = None
    country: str | None = None
    line1: str | None = None
    postal_code: str | None = None
    state: str | None = None

class CustomerDetails(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: str | None = None
    name: str | None = None
    address: Address | None = None

# the subset of a checkout.session object this service reads
class CheckoutSession(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    created: int | None = None
    amount_total: int | None = None
    currency: str | None = None
    customer: str | None = None
    customer_email: str | None = None
    customer_details: CustomerDetails | None = None
    client_reference_id: str | None = None
    payment_status: str | None = None
    payment_method_types: list[str] = []
    mode: str | None = None
    status: str | None = None
    metadata: dict[str, str] = {}

    # expanded payloads carry the whole customer object
    @field_validator("customer", mode="before")
    @classmethod
    def _customer_id(cls, v):
        if isinstance(v, dict):
            return v.get("id")
        return v

    @field_validator("metadata", mode="before")
    @classmethod
    def _metadata(cls, v):
        if not v:
            return {}
        return {str(k): "" if val is None else str(val) for k, val in v.items()}
