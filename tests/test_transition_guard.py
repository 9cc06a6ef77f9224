from decimal import Decimal

import pytest

from app.constants.order_status import ActorRole, OrderStatus
from app.exceptions import ForbiddenTransition
from app.models.order import Order
from app.models.order_event import OrderEvent
from app.services.actor import Actor, PAYMENT_GATEWAY_ACTOR
from app.services.transition_guard import apply_transition, ensure_transition, is_transition_allowed
from sqlmodel import select


ALLOWED = [
    (OrderStatus.PENDING, ActorRole.PAYMENT_GATEWAY, OrderStatus.DIBAYAR),
    (OrderStatus.PENDING, ActorRole.PAYMENT_GATEWAY, OrderStatus.EXPIRED),
    (OrderStatus.PENDING, ActorRole.SYSTEM, OrderStatus.EXPIRED),
    (OrderStatus.PENDING, ActorRole.PAYMENT_GATEWAY, OrderStatus.DIBATALKAN),
    (OrderStatus.PENDING, ActorRole.ADMIN, OrderStatus.DIBATALKAN),
    (OrderStatus.PENDING, ActorRole.CUSTOMER, OrderStatus.DIBATALKAN),
    (OrderStatus.DIBAYAR, ActorRole.ADMIN, OrderStatus.DIKEMAS),
    (OrderStatus.DIBAYAR, ActorRole.GUDANG, OrderStatus.DIKEMAS),
    (OrderStatus.DIKEMAS, ActorRole.LABEL_GENERATOR, OrderStatus.DIKIRIM),
    (OrderStatus.DIKIRIM, ActorRole.ADMIN, OrderStatus.SELESAI),
    (OrderStatus.DIKIRIM, ActorRole.GUDANG, OrderStatus.SELESAI),
]


@pytest.mark.parametrize("current,role,requested", ALLOWED)
def test_table_entries_are_allowed(current, role, requested):
    assert is_transition_allowed(current, role, requested)
    ensure_transition(current, role, requested)


def test_everything_outside_the_table_is_rejected():
    allowed = set(ALLOWED)
    for current in OrderStatus:
        for role in ActorRole:
            for requested in OrderStatus:
                if (current, role, requested) in allowed:
                    continue
                assert not is_transition_allowed(current, role, requested), (current, role, requested)


@pytest.mark.parametrize("current,requested", [
    (OrderStatus.DIKIRIM, OrderStatus.DIKEMAS),
    (OrderStatus.SELESAI, OrderStatus.DIKIRIM),
    (OrderStatus.DIBAYAR, OrderStatus.PENDING),
    (OrderStatus.EXPIRED, OrderStatus.PENDING),
])
def test_backward_transitions_fail_for_every_actor(current, requested):
    for role in ActorRole:
        with pytest.raises(ForbiddenTransition):
            ensure_transition(current, role, requested)


def test_customer_cannot_pay_own_order():
    with pytest.raises(ForbiddenTransition):
        ensure_transition(OrderStatus.PENDING, ActorRole.CUSTOMER, OrderStatus.DIBAYAR)


def test_staff_cannot_ship_without_label():
    with pytest.raises(ForbiddenTransition):
        ensure_transition(OrderStatus.DIKEMAS, ActorRole.ADMIN, OrderStatus.DIKIRIM)


def _order(session, user_id, status=OrderStatus.PENDING):
    order = Order(
        user_id=user_id,
        subtotal=Decimal("100000"),
        shipping_cost=Decimal("10000"),
        total_amount=Decimal("110000"),
        status=status,
    )
    session.add(order)
    session.commit()
    session.refresh(order)
    return order


def test_apply_transition_records_timeline_event(session, customer):
    order = _order(session, customer.id)

    apply_transition(session, order, PAYMENT_GATEWAY_ACTOR, OrderStatus.DIBAYAR)
    session.commit()

    assert order.status == OrderStatus.DIBAYAR
    event = session.exec(select(OrderEvent).where(OrderEvent.order_id == order.id)).one()
    assert event.event_type == "status_dibayar"
    assert event.actor == "payment_gateway"
    assert (event.from_status, event.to_status) == (OrderStatus.PENDING, OrderStatus.DIBAYAR)
    assert event.meta is None


def test_customer_cannot_cancel_someone_elses_order(session, customer, other_customer):
    order = _order(session, customer.id)
    intruder = Actor(user_id=other_customer.id, role=ActorRole.CUSTOMER)

    with pytest.raises(ForbiddenTransition):
        apply_transition(session, order, intruder, OrderStatus.DIBATALKAN)

    assert order.status == OrderStatus.PENDING


def test_rejected_transition_writes_nothing(session, customer):
    order = _order(session, customer.id, status=OrderStatus.DIKIRIM)
    staff = Actor(user_id=None, role=ActorRole.ADMIN)

    with pytest.raises(ForbiddenTransition):
        apply_transition(session, order, staff, OrderStatus.DIKEMAS)
    session.rollback()

    session.refresh(order)
    assert order.status == OrderStatus.DIKIRIM
    assert session.exec(select(OrderEvent).where(OrderEvent.order_id == order.id)).all() == []
