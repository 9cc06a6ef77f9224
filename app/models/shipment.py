from decimal import Decimal
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, TYPE_CHECKING
from datetime import datetime

if TYPE_CHECKING:
    from app.models.order import Order


class Shipment(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="order.id", unique=True)

    recipient_name: str
    recipient_phone: str
    area_id: str
    area_name: str
    postal_code: str
    address_detail: str

    courier: str   # e.g. "jne"
    service: str   # e.g. "reg"
    cost: Decimal = Field(default=Decimal("0"), max_digits=14, decimal_places=2)

    # set only once the logistics provider minted a label
    resi: Optional[str] = Field(default=None, index=True)
    biteship_order_id: Optional[str] = None
    shipped_at: Optional[datetime] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)

    order: Optional["Order"] = Relationship(back_populates="shipment")
