from decimal import Decimal
from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

from app.constants.order_status import OrderStatus


class OrderItemOut(BaseModel):
    product_id: int
    product_name: str
    price: Decimal
    quantity: int
    line_total: Decimal

    class Config:
        from_attributes = True


class ShipmentOut(BaseModel):
    recipient_name: str
    recipient_phone: str
    area_name: str
    postal_code: str
    address_detail: str
    courier: str
    service: str
    cost: Decimal
    resi: Optional[str]
    shipped_at: Optional[datetime]

    class Config:
        from_attributes = True


class TimelineEntry(BaseModel):
    event_type: str
    label: str
    from_status: Optional[OrderStatus] = None
    to_status: Optional[OrderStatus] = None
    actor: str
    created_at: datetime

    class Config:
        from_attributes = True


class OrderSummaryOut(BaseModel):
    id: int
    status: OrderStatus
    subtotal: Decimal
    shipping_cost: Decimal
    total_amount: Decimal
    created_at: datetime

    class Config:
        from_attributes = True


class OrderDetailOut(OrderSummaryOut):
    snap_token: Optional[str]
    items: List[OrderItemOut]
    shipment: Optional[ShipmentOut]
    timeline: List[TimelineEntry] = []
