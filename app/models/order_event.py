from datetime import datetime
from typing import Optional

from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field

from app.constants.order_status import OrderStatus


class OrderEvent(SQLModel, table=True):
    """One row per thing that happened to an order; never updated."""

    __tablename__ = "order_event"
    id: Optional[int] = Field(default=None, primary_key=True)

    order_id: int = Field(foreign_key="order.id", index=True)
    event_type: str = Field(index=True)
    label: str

    # empty for events that are not status changes (order placed)
    from_status: Optional[OrderStatus] = None
    to_status: Optional[OrderStatus] = None

    actor: str = Field(default="system")
    meta: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
