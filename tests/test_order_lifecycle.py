from datetime import datetime, timedelta

import pytest
from sqlmodel import select

from app.constants.order_status import OrderStatus
from app.exceptions import ForbiddenTransition, Unauthorized
from app.models.order import Order
from app.services.order_builder import build_order_from_cart
from app.services.order_expiry_service import expire_unpaid_orders
from app.services.order_service import cancel_order, get_order_for_actor, mark_completed, mark_packed
from app.services.payment_service import handle_payment_notification
from tests.factories import actor_for, add_to_cart, checkout_request, make_product, notification_payload


@pytest.fixture
def order(session, customer, category, logistics):
    guitar = make_product(session, category)
    add_to_cart(session, customer, guitar, 1)
    return build_order_from_cart(session, actor_for(customer), checkout_request(), logistics)


def test_customer_cancels_own_pending_order(session, customer, order):
    cancelled = cancel_order(session, actor_for(customer), order.id, reason="Salah pilih warna")
    assert cancelled.status == OrderStatus.DIBATALKAN


def test_customer_cannot_cancel_after_payment(session, customer, order, gateway):
    handle_payment_notification(session, notification_payload(order.id, order.total_amount), gateway)

    with pytest.raises(ForbiddenTransition):
        cancel_order(session, actor_for(customer), order.id)

    session.refresh(order)
    assert order.status == OrderStatus.DIBAYAR


def test_customer_cannot_pack(session, customer, order, gateway):
    handle_payment_notification(session, notification_payload(order.id, order.total_amount), gateway)

    with pytest.raises(ForbiddenTransition):
        mark_packed(session, actor_for(customer), order.id)


def test_completed_order_cannot_go_back(session, order, gudang, admin, gateway, logistics):
    from app.services.shipment_label import generate_label

    handle_payment_notification(session, notification_payload(order.id, order.total_amount), gateway)
    mark_packed(session, actor_for(gudang), order.id)
    generate_label(session, actor_for(gudang), order.id, logistics)
    done = mark_completed(session, actor_for(admin), order.id)
    assert done.status == OrderStatus.SELESAI

    for step in (mark_packed, mark_completed, cancel_order):
        with pytest.raises(ForbiddenTransition):
            step(session, actor_for(admin), order.id)


def test_other_customer_cannot_read_order(session, other_customer, order):
    with pytest.raises(Unauthorized):
        get_order_for_actor(session, actor_for(other_customer), order.id)


def test_staff_can_read_any_order(session, gudang, order):
    assert get_order_for_actor(session, actor_for(gudang), order.id).id == order.id


def test_expiry_sweep_only_touches_stale_pending_orders(session, customer, category, order, logistics):
    fresh_product = make_product(session, category, name="Ibanez GRX70")
    add_to_cart(session, customer, fresh_product, 1)
    fresh = build_order_from_cart(session, actor_for(customer), checkout_request(), logistics)

    order.created_at = datetime.utcnow() - timedelta(hours=30)
    session.add(order)
    session.commit()

    expired = expire_unpaid_orders(session)

    assert expired == [order.id]
    assert session.get(Order, order.id).status == OrderStatus.EXPIRED
    assert session.get(Order, fresh.id).status == OrderStatus.PENDING
    # a second sweep has nothing left to do
    assert expire_unpaid_orders(session) == []
    assert len(session.exec(select(Order)).all()) == 2
