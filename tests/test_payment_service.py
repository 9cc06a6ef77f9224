from decimal import Decimal

import pytest
from sqlmodel import select

from app.constants.order_status import OrderStatus
from app.exceptions import ForbiddenError, GatewayError, InvalidState, OrderNotFound, Unauthorized, ValidationError
from app.models.notifications import Notification
from app.models.order import Order
from app.models.payment import Payment
from app.services.order_builder import build_order_from_cart
from app.services.payment_service import (
    handle_payment_notification,
    map_gateway_status,
    request_payment_token,
)
from tests.factories import (
    FakeGateway,
    actor_for,
    add_to_cart,
    checkout_request,
    make_product,
    notification_payload,
)


@pytest.fixture
def guitar(session, category):
    return make_product(session, category, price="1500000", stock=5)


@pytest.fixture
def order(session, customer, guitar, logistics):
    add_to_cart(session, customer, guitar, 2)
    return build_order_from_cart(session, actor_for(customer), checkout_request(shipping_cost="20000"), logistics)


# ---------- token ----------

def test_token_is_minted_once(session, customer, order, gateway):
    first = request_payment_token(session, actor_for(customer), order.id, gateway)
    second = request_payment_token(session, actor_for(customer), order.id, gateway)

    assert first == second
    assert gateway.calls == [order.id]


def test_token_for_other_users_order_is_rejected(session, other_customer, order, gateway):
    with pytest.raises(Unauthorized):
        request_payment_token(session, actor_for(other_customer), order.id, gateway)
    assert gateway.calls == []


def test_token_for_missing_order(session, customer, gateway):
    with pytest.raises(OrderNotFound):
        request_payment_token(session, actor_for(customer), 999, gateway)


def test_token_requires_pending_order(session, customer, order, gateway):
    order.status = OrderStatus.EXPIRED
    session.add(order)
    session.commit()

    with pytest.raises(InvalidState):
        request_payment_token(session, actor_for(customer), order.id, gateway)


def test_gateway_failure_persists_nothing(session, customer, order):
    failing = FakeGateway(fail=True)

    with pytest.raises(GatewayError):
        request_payment_token(session, actor_for(customer), order.id, failing)

    session.refresh(order)
    assert order.snap_token is None
    assert order.status == OrderStatus.PENDING


# ---------- notification ----------

@pytest.mark.parametrize("transaction_status,fraud_status,expected", [
    ("capture", "accept", OrderStatus.DIBAYAR),
    ("capture", "challenge", OrderStatus.PENDING),
    ("settlement", None, OrderStatus.DIBAYAR),
    ("pending", None, OrderStatus.PENDING),
    ("cancel", None, OrderStatus.DIBATALKAN),
    ("deny", None, OrderStatus.DIBATALKAN),
    ("expire", None, OrderStatus.EXPIRED),
    ("refund", None, None),
])
def test_map_gateway_status(transaction_status, fraud_status, expected):
    assert map_gateway_status(transaction_status, fraud_status) == expected


def test_settlement_marks_paid_and_reduces_stock_once(session, order, guitar, gateway):
    payload = notification_payload(order.id, order.total_amount)

    first = handle_payment_notification(session, payload, gateway)
    second = handle_payment_notification(session, payload, gateway)

    assert first["applied"] is True
    assert second["applied"] is False
    session.refresh(order)
    session.refresh(guitar)
    assert order.status == OrderStatus.DIBAYAR
    assert guitar.stock == 3

    payment = session.exec(select(Payment).where(Payment.order_id == order.id)).one()
    assert payment.paid_at is not None
    assert payment.payment_method == "bank_transfer"

    paid_notifications = session.exec(
        select(Notification).where(Notification.trigger_source == "payment_success")
    ).all()
    assert len(paid_notifications) == 1


def test_late_expire_after_settlement_is_ignored(session, order, gateway):
    handle_payment_notification(session, notification_payload(order.id, order.total_amount), gateway)

    result = handle_payment_notification(
        session,
        notification_payload(order.id, order.total_amount, transaction_status="expire", status_code="407"),
        gateway,
    )

    assert result["applied"] is False
    session.refresh(order)
    assert order.status == OrderStatus.DIBAYAR
    payment = session.exec(select(Payment).where(Payment.order_id == order.id)).one()
    assert payment.status == "settlement"


def test_bad_signature_is_rejected(session, order, gateway):
    payload = notification_payload(order.id, order.total_amount)
    payload["signature_key"] = "0" * 128

    with pytest.raises(ForbiddenError):
        handle_payment_notification(session, payload, gateway)

    session.refresh(order)
    assert order.status == OrderStatus.PENDING


@pytest.mark.parametrize("signature_key", ["\u00e9", "", None, "forged"])
def test_malformed_signature_is_forbidden(session, order, gateway, signature_key):
    payload = notification_payload(order.id, order.total_amount)
    payload["signature_key"] = signature_key

    with pytest.raises(ForbiddenError):
        handle_payment_notification(session, payload, gateway)

    session.refresh(order)
    assert order.status == OrderStatus.PENDING


def test_amount_mismatch_is_rejected(session, order, gateway):
    payload = notification_payload(order.id, Decimal("1000"))

    with pytest.raises(ValidationError):
        handle_payment_notification(session, payload, gateway)

    session.refresh(order)
    assert order.status == OrderStatus.PENDING
    assert session.exec(select(Payment)).all() == []


def test_pending_notification_keeps_order_pending(session, order, gateway):
    result = handle_payment_notification(
        session,
        notification_payload(order.id, order.total_amount, transaction_status="pending", status_code="201"),
        gateway,
    )

    assert result == {"order_id": order.id, "status": "PENDING", "applied": False}
    payment = session.exec(select(Payment).where(Payment.order_id == order.id)).one()
    assert payment.status == "pending"
    assert payment.paid_at is None


def test_expire_notification_expires_order_without_touching_stock(session, order, guitar, gateway):
    handle_payment_notification(
        session,
        notification_payload(order.id, order.total_amount, transaction_status="expire", status_code="407"),
        gateway,
    )

    session.refresh(order)
    session.refresh(guitar)
    assert order.status == OrderStatus.EXPIRED
    assert guitar.stock == 5


def test_oversold_stock_is_clamped_at_zero(session, order, guitar, gateway):
    guitar.stock = 1
    session.add(guitar)
    session.commit()

    handle_payment_notification(session, notification_payload(order.id, order.total_amount), gateway)

    session.refresh(guitar)
    assert guitar.stock == 0
    assert session.get(Order, order.id).status == OrderStatus.DIBAYAR


def test_unknown_order_id(session, gateway):
    with pytest.raises(OrderNotFound):
        handle_payment_notification(session, notification_payload(404, Decimal("1000")), gateway)
