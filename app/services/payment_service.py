"""
Payment Gateway Adapter: Snap token issuance and Midtrans notification handling.

Single source of truth for completing payments. Redelivered or out-of-order
notifications are accepted and acknowledged, but only the first one that
moves the order out of PENDING has any effect.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional, Tuple

from sqlmodel import Session, select

from app.constants.order_status import OrderStatus
from app.exceptions import (
    ForbiddenError,
    InvalidState,
    OrderNotFound,
    Unauthorized,
    ValidationError,
)
from app.models.order import Order
from app.models.payment import Payment
from app.models.user import User
from app.notifications import OrderEvent, dispatch_order_event
from app.services.actor import Actor, PAYMENT_GATEWAY_ACTOR
from app.services.inventory_service import reduce_inventory
from app.services.midtrans_gateway import MidtransGateway, gross_amount_for
from app.services.transition_guard import apply_transition

logger = logging.getLogger(__name__)


def _lock_order(session: Session, order_id: int) -> Optional[Order]:
    return session.exec(
        select(Order).where(Order.id == order_id).with_for_update()
    ).first()


def request_payment_token(
    session: Session,
    actor: Actor,
    order_id: int,
    gateway: MidtransGateway,
) -> str:
    """
    Return the Snap token for an order, minting it at most once.

    The order row stays locked while the gateway is called, so two
    concurrent requests end up with the same token.
    """
    try:
        order = _lock_order(session, order_id)
        if not order:
            raise OrderNotFound()
        if order.user_id != actor.user_id:
            raise Unauthorized()

        if order.snap_token:
            session.rollback()
            return order.snap_token

        if order.status != OrderStatus.PENDING:
            raise InvalidState("Pesanan ini tidak lagi menunggu pembayaran")

        user = session.get(User, order.user_id)
        transaction = gateway.create_transaction(
            order_id=order.id,
            gross_amount=order.total_amount,
            customer_details={"first_name": user.name, "email": user.email},
        )

        order.snap_token = transaction["token"]
        order.updated_at = datetime.utcnow()
        session.add(order)
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info(f"Snap token issued for order {order_id}")
    return order.snap_token


def map_gateway_status(
    transaction_status: Optional[str],
    fraud_status: Optional[str] = None,
) -> Optional[OrderStatus]:
    """
    Target order status for a Midtrans transaction status.

    ``None`` means the notification carries no state change.
    """
    if transaction_status == "capture":
        if fraud_status == "accept":
            return OrderStatus.DIBAYAR
        # challenge: wait for the merchant review to settle it
        return OrderStatus.PENDING
    if transaction_status == "settlement":
        return OrderStatus.DIBAYAR
    if transaction_status == "pending":
        return OrderStatus.PENDING
    if transaction_status in ("cancel", "deny"):
        return OrderStatus.DIBATALKAN
    if transaction_status == "expire":
        return OrderStatus.EXPIRED
    return None


def _parse_order_id(raw) -> int:
    try:
        return int(str(raw))
    except (TypeError, ValueError):
        raise ValidationError("order_id tidak valid")


def _parse_gross_amount(raw) -> Decimal:
    try:
        return Decimal(str(raw))
    except ArithmeticError:
        raise ValidationError("gross_amount tidak valid")


def _record_payment(
    session: Session,
    order: Order,
    payload: dict,
    target: Optional[OrderStatus],
) -> Payment:
    payment = session.exec(
        select(Payment).where(Payment.order_id == order.id)
    ).first()

    if payment and payment.paid_at:
        # a settled payment is final
        return payment

    if not payment:
        payment = Payment(order_id=order.id, amount=order.total_amount, status="")

    payment.status = payload.get("transaction_status") or payment.status
    payment.payment_method = payload.get("payment_type") or payment.payment_method
    payment.midtrans_id = payload.get("transaction_id") or payment.midtrans_id
    payment.updated_at = datetime.utcnow()
    if target == OrderStatus.DIBAYAR:
        payment.paid_at = datetime.utcnow()

    session.add(payment)
    return payment


NOTIFY_EVENTS = {
    OrderStatus.DIBAYAR: OrderEvent.PAYMENT_SUCCESS,
    OrderStatus.DIBATALKAN: OrderEvent.CANCELLED,
    OrderStatus.EXPIRED: OrderEvent.EXPIRED,
}


def handle_payment_notification(
    session: Session,
    payload: dict,
    gateway: MidtransGateway,
) -> dict:
    """
    Apply a Midtrans HTTP notification to its order.

    Returns ``applied=False`` for redeliveries and for notifications that
    carry no state change; the caller acknowledges those with 200 as well.
    """
    order_id_raw = payload.get("order_id")
    if not gateway.verify_signature(
        order_id=str(order_id_raw),
        status_code=str(payload.get("status_code")),
        gross_amount=str(payload.get("gross_amount")),
        signature_key=payload.get("signature_key"),
    ):
        logger.warning(f"Rejected notification with bad signature for order {order_id_raw}")
        raise ForbiddenError("Signature tidak valid")

    order_id = _parse_order_id(order_id_raw)
    target = map_gateway_status(
        payload.get("transaction_status"),
        payload.get("fraud_status"),
    )

    applied = False
    oversold = []
    try:
        order = _lock_order(session, order_id)
        if not order:
            raise OrderNotFound()

        if order.status != OrderStatus.PENDING or target in (None, OrderStatus.PENDING):
            _record_payment(session, order, payload, None)
            session.commit()
            logger.info(
                f"Notification for order {order_id} ignored "
                f"(order {order.status.value}, gateway {payload.get('transaction_status')})"
            )
            return {"order_id": order_id, "status": order.status.value, "applied": False}

        if target == OrderStatus.DIBAYAR:
            paid = _parse_gross_amount(payload.get("gross_amount"))
            if int(paid) != gross_amount_for(order.total_amount):
                logger.error(
                    f"Amount mismatch on order {order_id}: paid {paid}, expected {order.total_amount}"
                )
                raise ValidationError("Jumlah pembayaran tidak sesuai")

        _record_payment(session, order, payload, target)
        apply_transition(
            session,
            order,
            PAYMENT_GATEWAY_ACTOR,
            target,
            meta={"transaction_status": payload.get("transaction_status")},
        )
        if target == OrderStatus.DIBAYAR:
            oversold = reduce_inventory(session, order)

        session.commit()
        applied = True
    except Exception:
        session.rollback()
        raise

    session.refresh(order)
    if oversold:
        logger.warning(f"Order {order.id} paid with oversold products {oversold}")

    dispatch_order_event(
        event=NOTIFY_EVENTS[target],
        order=order,
        user=session.get(User, order.user_id),
        session=session,
    )
    return {"order_id": order.id, "status": order.status.value, "applied": applied}


def get_payment_status(session: Session, actor: Actor, order_id: int) -> Tuple[Order, Optional[Payment]]:
    order = session.get(Order, order_id)
    if not order:
        raise OrderNotFound()
    if order.user_id != actor.user_id and not actor.is_staff:
        raise Unauthorized()
    payment = session.exec(
        select(Payment).where(Payment.order_id == order.id)
    ).first()
    return order, payment
