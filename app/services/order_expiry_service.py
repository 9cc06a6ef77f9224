import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlmodel import select, Session

from app.config import settings
from app.constants.order_status import OrderStatus
from app.exceptions import StoreError
from app.models.order import Order
from app.models.user import User
from app.notifications import OrderEvent, dispatch_order_event
from app.services.actor import SYSTEM_ACTOR
from app.services.transition_guard import apply_transition

logger = logging.getLogger(__name__)


def expire_unpaid_orders(session: Session, now: Optional[datetime] = None) -> list[int]:
    """
    Move PENDING orders older than PAYMENT_EXPIRY_HOURS to EXPIRED.

    Each order is its own transaction; an order the gateway settled in the
    meantime is simply skipped by the guard.
    """
    now = now or datetime.utcnow()
    cutoff = now - timedelta(hours=settings.PAYMENT_EXPIRY_HOURS)

    candidate_ids = session.exec(
        select(Order.id)
        .where(Order.status == OrderStatus.PENDING)
        .where(Order.created_at < cutoff)
    ).all()

    expired = []
    for order_id in candidate_ids:
        try:
            order = session.exec(
                select(Order).where(Order.id == order_id).with_for_update()
            ).first()
            if not order or order.status != OrderStatus.PENDING:
                session.rollback()
                continue
            apply_transition(session, order, SYSTEM_ACTOR, OrderStatus.EXPIRED)
            session.commit()
        except StoreError as exc:
            session.rollback()
            logger.warning(f"Could not expire order {order_id}: {exc.message}")
            continue

        session.refresh(order)
        expired.append(order.id)
        dispatch_order_event(
            event=OrderEvent.EXPIRED,
            order=order,
            user=session.get(User, order.user_id),
            session=session,
        )

    logger.info(f"Expired {len(expired)} unpaid orders")
    return expired
