"""
Order reads and the human-driven status changes (cancel, pack, complete).

Every write goes through ``apply_transition``; notifications are only
sent after the transition has been committed.
"""
import logging
from typing import Optional

from sqlalchemy import or_
from sqlmodel import Session, select

from app.constants.order_status import OrderStatus
from app.exceptions import OrderNotFound, Unauthorized
from app.models.order import Order
from app.models.shipment import Shipment
from app.models.user import User
from app.notifications import OrderEvent, dispatch_order_event
from app.services.actor import Actor
from app.services.transition_guard import apply_transition

logger = logging.getLogger(__name__)


def get_order_for_actor(session: Session, actor: Actor, order_id: int) -> Order:
    order = session.get(Order, order_id)
    if not order:
        raise OrderNotFound()
    if not actor.is_staff and order.user_id != actor.user_id:
        raise Unauthorized()
    return order


def list_customer_orders(session: Session, actor: Actor, status: Optional[OrderStatus] = None):
    query = select(Order).where(Order.user_id == actor.user_id)
    if status:
        query = query.where(Order.status == status)
    return query.order_by(Order.created_at.desc())


def _transition_and_notify(
    session: Session,
    actor: Actor,
    order_id: int,
    requested: OrderStatus,
    event: OrderEvent,
    meta: Optional[dict] = None,
) -> Order:
    try:
        order = session.exec(
            select(Order).where(Order.id == order_id).with_for_update()
        ).first()
        if not order:
            raise OrderNotFound()
        apply_transition(session, order, actor, requested, meta=meta)
        session.commit()
    except Exception:
        session.rollback()
        raise

    session.refresh(order)
    dispatch_order_event(
        event=event,
        order=order,
        user=session.get(User, order.user_id),
        session=session,
    )
    return order


def cancel_order(session: Session, actor: Actor, order_id: int, reason: Optional[str] = None) -> Order:
    return _transition_and_notify(
        session,
        actor,
        order_id,
        OrderStatus.DIBATALKAN,
        OrderEvent.CANCELLED,
        meta={"reason": reason} if reason else None,
    )


def mark_packed(session: Session, actor: Actor, order_id: int) -> Order:
    return _transition_and_notify(session, actor, order_id, OrderStatus.DIKEMAS, OrderEvent.PACKED)


def mark_completed(session: Session, actor: Actor, order_id: int) -> Order:
    return _transition_and_notify(session, actor, order_id, OrderStatus.SELESAI, OrderEvent.DELIVERED)


# -------- staff views --------

def label_queue_query(statuses=(OrderStatus.DIBAYAR, OrderStatus.DIKEMAS)):
    """Orders the warehouse still has to pack or label, oldest first."""
    return (
        select(Order)
        .where(Order.status.in_(statuses))
        .order_by(Order.created_at.asc())
    )


def shipment_history_query(status: Optional[OrderStatus] = None, search: Optional[str] = None):
    query = (
        select(Order)
        .join(Shipment, Shipment.order_id == Order.id)
        .where(Shipment.resi.is_not(None))
    )
    if status:
        query = query.where(Order.status == status)
    if search:
        term = f"%{search}%"
        conditions = [Shipment.resi.ilike(term), Shipment.recipient_name.ilike(term)]
        if search.isdigit():
            conditions.append(Order.id == int(search))
        query = query.where(or_(*conditions))
    return query.order_by(Shipment.shipped_at.desc())
