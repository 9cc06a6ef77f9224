from decimal import Decimal
from sqlmodel import SQLModel, Field, Relationship
from typing import List, Optional
from datetime import datetime

from app.constants.order_status import OrderStatus
from app.models.order_item import OrderItem
from app.models.shipment import Shipment
from app.models.user import User

class Order(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)

    subtotal: Decimal = Field(max_digits=14, decimal_places=2)
    shipping_cost: Decimal = Field(default=Decimal("0"), max_digits=14, decimal_places=2)
    total_amount: Decimal = Field(max_digits=14, decimal_places=2)

    status: OrderStatus = Field(default=OrderStatus.PENDING, index=True)
    snap_token: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    user: Optional["User"] = Relationship()
    items: List["OrderItem"] = Relationship(back_populates="order")
    shipment: Optional["Shipment"] = Relationship(
        back_populates="order",
        sa_relationship_kwargs={"uselist": False},
    )

    @property
    def total_weight(self) -> int:
        return sum(item.product.weight * item.quantity for item in self.items)
