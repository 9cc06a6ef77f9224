"""
Status Transition Guard.

Single source of truth for who may move an order between which states.
Every status write in the code base goes through ``apply_transition``.
"""
import logging
from datetime import datetime

from sqlmodel import Session

from app.constants.order_status import (
    ALLOWED_TRANSITIONS,
    ActorRole,
    OrderStatus,
    status_rank,
)
from app.exceptions import ForbiddenTransition
from app.models.order import Order
from app.services.actor import Actor
from app.services.order_event_service import log_order_event

logger = logging.getLogger(__name__)

STATUS_LABELS = {
    OrderStatus.PENDING: "Menunggu pembayaran",
    OrderStatus.DIBAYAR: "Pembayaran diterima",
    OrderStatus.DIKEMAS: "Pesanan dikemas",
    OrderStatus.DIKIRIM: "Pesanan dikirim",
    OrderStatus.SELESAI: "Pesanan selesai",
    OrderStatus.EXPIRED: "Pembayaran kedaluwarsa",
    OrderStatus.DIBATALKAN: "Pesanan dibatalkan",
}


def is_transition_allowed(
    current: OrderStatus,
    role: ActorRole,
    requested: OrderStatus,
) -> bool:
    allowed_roles = ALLOWED_TRANSITIONS.get((current, requested))
    if not allowed_roles or role not in allowed_roles:
        return False
    # the table only holds forward moves; early exits are only reachable from PENDING
    return status_rank(requested) > status_rank(current)


def ensure_transition(current: OrderStatus, role: ActorRole, requested: OrderStatus):
    if not is_transition_allowed(current, role, requested):
        logger.warning(
            f"Rejected transition {current.value} -> {requested.value} by {role.value}"
        )
        raise ForbiddenTransition(
            f"Status pesanan tidak dapat diubah dari {current.value} ke {requested.value}"
        )


def apply_transition(
    session: Session,
    order: Order,
    actor: Actor,
    requested: OrderStatus,
    meta: dict | None = None,
) -> Order:
    """
    Check and stage a status change on ``order``.

    Nothing is committed here: the caller commits the transition together
    with its other writes, or rolls everything back.
    """
    if actor.role == ActorRole.CUSTOMER and order.user_id != actor.user_id:
        raise ForbiddenTransition("Anda tidak dapat mengubah pesanan milik pengguna lain")

    previous = order.status
    ensure_transition(previous, actor.role, requested)

    order.status = requested
    order.updated_at = datetime.utcnow()
    session.add(order)

    log_order_event(
        session,
        order_id=order.id,
        event_type=f"status_{requested.value.lower()}",
        label=STATUS_LABELS[requested],
        actor=actor.label,
        from_status=previous,
        to_status=requested,
        meta=meta,
    )

    logger.info(f"Order {order.id}: {previous.value} -> {requested.value} by {actor.label}")
    return order
