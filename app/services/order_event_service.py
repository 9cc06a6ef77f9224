from datetime import datetime
from typing import List, Optional

from sqlmodel import Session, select

from app.constants.order_status import OrderStatus
from app.models.order_event import OrderEvent


def log_order_event(
    session: Session,
    order_id: int,
    event_type: str,
    label: str,
    actor: str = "system",
    from_status: Optional[OrderStatus] = None,
    to_status: Optional[OrderStatus] = None,
    meta: Optional[dict] = None,
) -> OrderEvent:
    """Stage a timeline row in the caller's transaction."""
    event = OrderEvent(
        order_id=order_id,
        event_type=event_type,
        label=label,
        from_status=from_status,
        to_status=to_status,
        actor=actor,
        meta=meta or None,
        created_at=datetime.utcnow(),
    )
    session.add(event)
    return event


def get_order_timeline(session: Session, order_id: int) -> List[OrderEvent]:
    return session.exec(
        select(OrderEvent)
        .where(OrderEvent.order_id == order_id)
        .order_by(OrderEvent.created_at, OrderEvent.id)
    ).all()
