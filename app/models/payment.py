from decimal import Decimal
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime


class Payment(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    order_id: int = Field(foreign_key="order.id", unique=True)

    amount: Decimal = Field(max_digits=14, decimal_places=2)
    status: str  # raw gateway transaction_status: settlement | pending | expire ...
    payment_method: Optional[str] = None   # bank_transfer | gopay | credit_card ...
    midtrans_id: Optional[str] = Field(default=None, index=True)
    paid_at: Optional[datetime] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
