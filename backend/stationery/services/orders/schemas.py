"""Input schemas for order placement."""

from pydantic import BaseModel, Field


class OrderItemRequest(BaseModel):
    """Requested product and quantity. ``product_id`` is validated by the service."""

    product_id: int | str
    quantity: int = Field(default=1, ge=1)


class ShippingAddress(BaseModel):
    address: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    zip_code: str = Field(min_length=1)
    country: str | None = None
