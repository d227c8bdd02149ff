from pydantic import BaseModel, Field

class PriceDataIn(BaseModel):
    currency: str = "usd"
    product_name: str = "Product"
    unit_amount: int = Field(default=100, gt=0)

class CreateCheckoutIn(BaseModel):
    price_data: PriceDataIn = Field(default_factory=PriceDataIn)
    quantity: int = Field(default=1, ge=1)
    success_url: str | None = None
    cancel_url: str | None = None
    # landing page url carrying the utm/ad query params
    referrer_url: str | None = None

class CreateCheckoutOut(BaseModel):
    id: str
    url: str | None = None
    metadata: dict[str, str] = {}
