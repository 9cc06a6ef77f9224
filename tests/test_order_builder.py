from decimal import Decimal

import pytest
from sqlmodel import select

from app.constants.order_status import OrderStatus
from app.exceptions import EmptyCart, InsufficientStock, ValidationError
from app.models.cart import CartItem
from app.models.notifications import Notification
from app.models.order import Order
from app.models.order_item import OrderItem
from app.models.shipment import Shipment
from app.services.order_builder import build_order_from_cart
from tests.factories import actor_for, add_to_cart, checkout_request, make_product


def test_builds_pending_order_with_total_invariant(session, customer, category, logistics):
    guitar = make_product(session, category, name="Yamaha F310", price="1500000", stock=5)
    strings = make_product(session, category, name="Senar Elixir", price="250000", stock=20, weight=100)
    add_to_cart(session, customer, guitar, 1)
    add_to_cart(session, customer, strings, 2)

    order = build_order_from_cart(session, actor_for(customer), checkout_request(shipping_cost="35000", courier="SICEPAT"), logistics)

    assert order.status == OrderStatus.PENDING
    assert order.subtotal == Decimal("2000000")
    assert order.shipping_cost == Decimal("35000")
    assert order.total_amount == order.subtotal + order.shipping_cost
    assert sum(i.price * i.quantity for i in order.items) == order.subtotal


def test_clears_cart_and_creates_shipment(session, customer, category, logistics):
    guitar = make_product(session, category)
    add_to_cart(session, customer, guitar, 1)

    order = build_order_from_cart(session, actor_for(customer), checkout_request(), logistics)

    assert session.exec(select(CartItem).where(CartItem.user_id == customer.id)).all() == []
    shipment = session.exec(select(Shipment).where(Shipment.order_id == order.id)).one()
    assert shipment.courier == "jne"
    assert shipment.resi is None


def test_stock_is_not_touched_at_checkout(session, customer, category, logistics):
    guitar = make_product(session, category, stock=5)
    add_to_cart(session, customer, guitar, 2)

    build_order_from_cart(session, actor_for(customer), checkout_request(), logistics)

    session.refresh(guitar)
    assert guitar.stock == 5


def test_item_price_does_not_follow_catalog_changes(session, customer, category, logistics):
    guitar = make_product(session, category, price="1500000")
    add_to_cart(session, customer, guitar, 1)
    order = build_order_from_cart(session, actor_for(customer), checkout_request(), logistics)

    guitar.price = Decimal("1750000")
    session.add(guitar)
    session.commit()

    item = session.exec(select(OrderItem).where(OrderItem.order_id == order.id)).one()
    assert item.price == Decimal("1500000")


def test_empty_cart_fails(session, customer, logistics):
    with pytest.raises(EmptyCart):
        build_order_from_cart(session, actor_for(customer), checkout_request(), logistics)


def test_insufficient_stock_creates_nothing(session, customer, category, logistics):
    guitar = make_product(session, category, stock=1)
    add_to_cart(session, customer, guitar, 3)

    with pytest.raises(InsufficientStock) as exc:
        build_order_from_cart(session, actor_for(customer), checkout_request(), logistics)

    assert exc.value.available == 1
    assert session.exec(select(Order)).all() == []
    assert session.exec(select(OrderItem)).all() == []
    # the cart survives so the customer can fix the quantity
    assert len(session.exec(select(CartItem)).all()) == 1


def test_order_placed_notifies_admin_once(session, customer, category, logistics):
    guitar = make_product(session, category)
    add_to_cart(session, customer, guitar, 1)

    order = build_order_from_cart(session, actor_for(customer), checkout_request(), logistics)

    notifications = session.exec(
        select(Notification).where(Notification.related_id == order.id)
    ).all()
    assert [n.trigger_source for n in notifications] == ["order_placed"]


@pytest.mark.parametrize("shipping_cost", ["0", "15000", "20001"])
def test_shipping_cost_must_match_the_quote(session, customer, category, logistics, shipping_cost):
    guitar = make_product(session, category, price="500000")
    add_to_cart(session, customer, guitar, 2)

    with pytest.raises(ValidationError):
        build_order_from_cart(session, actor_for(customer), checkout_request(shipping_cost=shipping_cost), logistics)

    assert session.exec(select(Order)).all() == []
    assert len(session.exec(select(CartItem)).all()) == 1


def test_unquoted_courier_service_is_rejected(session, customer, category, logistics):
    guitar = make_product(session, category)
    add_to_cart(session, customer, guitar, 1)

    with pytest.raises(ValidationError):
        build_order_from_cart(
            session, actor_for(customer), checkout_request(courier="JNE", service="yes"), logistics
        )

    assert session.exec(select(Order)).all() == []


def test_quote_is_requested_for_the_cart_contents(session, customer, category, logistics):
    guitar = make_product(session, category, price="1500000", weight=2500)
    add_to_cart(session, customer, guitar, 2)

    build_order_from_cart(session, actor_for(customer), checkout_request(), logistics)

    assert logistics.rate_requests == [
        [{"name": "Yamaha F310", "value": 1500000, "quantity": 2, "weight": 2500}]
    ]
