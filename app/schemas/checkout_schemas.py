# app/schemas/checkout_schemas.py
from decimal import Decimal
from pydantic import BaseModel, Field


class CheckoutRequest(BaseModel):
    """Shipment details picked on the checkout page."""

    recipient_name: str = Field(..., min_length=2)
    recipient_phone: str = Field(..., min_length=8, max_length=20)
    area_id: str = Field(..., min_length=1)   # Biteship area id
    area_name: str
    postal_code: str
    address_detail: str = Field(..., min_length=5)
    courier: str                               # jne, sicepat, ...
    service: str                               # reg, ez, ...
    shipping_cost: Decimal = Field(..., ge=0)   # the rate shown to the customer, re-quoted on submit
