import pytest
from sqlmodel import select

from app.constants.order_status import OrderStatus
from app.exceptions import ForbiddenError, InvalidState, ShippingProviderError
from app.models.order_event import OrderEvent
from app.models.shipment import Shipment
from app.services.order_builder import build_order_from_cart
from app.services.order_service import mark_packed
from app.services.payment_service import handle_payment_notification
from app.services.shipment_label import build_label_payload, generate_label
from tests.factories import (
    FakeLogistics,
    actor_for,
    add_to_cart,
    checkout_request,
    make_product,
    notification_payload,
)


@pytest.fixture
def paid_order(session, customer, category, gateway, logistics):
    guitar = make_product(session, category, weight=2500)
    add_to_cart(session, customer, guitar, 2)
    order = build_order_from_cart(session, actor_for(customer), checkout_request(), logistics)
    handle_payment_notification(session, notification_payload(order.id, order.total_amount), gateway)
    session.refresh(order)
    return order


@pytest.fixture
def packed_order(session, paid_order, gudang):
    return mark_packed(session, actor_for(gudang), paid_order.id)


def test_generates_resi_and_ships(session, packed_order, gudang, logistics):
    shipment = generate_label(session, actor_for(gudang), packed_order.id, logistics)

    session.refresh(packed_order)
    assert shipment.resi == "JNE00000001"
    assert shipment.biteship_order_id == "bs-1"
    assert shipment.shipped_at is not None
    assert packed_order.status == OrderStatus.DIKIRIM

    event = session.exec(
        select(OrderEvent).where(OrderEvent.event_type == "status_dikirim")
    ).one()
    assert event.actor == "label_generator"
    assert event.from_status == OrderStatus.DIKEMAS


def test_label_is_idempotent(session, packed_order, gudang, admin, logistics):
    first = generate_label(session, actor_for(gudang), packed_order.id, logistics)
    second = generate_label(session, actor_for(admin), packed_order.id, logistics)

    assert first.resi == second.resi
    assert len(logistics.created) == 1


def test_label_requires_packed_order(session, paid_order, gudang, logistics):
    with pytest.raises(InvalidState):
        generate_label(session, actor_for(gudang), paid_order.id, logistics)

    session.refresh(paid_order)
    shipment = session.exec(select(Shipment).where(Shipment.order_id == paid_order.id)).one()
    assert paid_order.status == OrderStatus.DIBAYAR
    assert shipment.resi is None
    assert logistics.created == []


def test_customer_cannot_generate_label(session, packed_order, customer, logistics):
    with pytest.raises(ForbiddenError):
        generate_label(session, actor_for(customer), packed_order.id, logistics)
    assert logistics.created == []


def test_provider_failure_leaves_order_packed(session, packed_order, gudang):
    failing = FakeLogistics(fail=True)

    with pytest.raises(ShippingProviderError):
        generate_label(session, actor_for(gudang), packed_order.id, failing)

    session.refresh(packed_order)
    assert packed_order.status == OrderStatus.DIKEMAS
    shipment = session.exec(select(Shipment).where(Shipment.order_id == packed_order.id)).one()
    assert shipment.resi is None


def test_label_payload_carries_weight_and_destination(session, packed_order):
    shipment = session.exec(select(Shipment).where(Shipment.order_id == packed_order.id)).one()

    payload = build_label_payload(packed_order, shipment)

    assert payload["courier_company"] == "jne"
    assert payload["courier_type"] == "reg"
    assert payload["destination_area_id"] == shipment.area_id
    assert payload["destination_postal_code"] == 12410
    assert sum(i["weight"] * i["quantity"] for i in payload["items"]) == packed_order.total_weight == 5000
