"""
Order Builder: turns the actor's cart into a PENDING order.

Prices are copied onto the order items so later catalog changes never touch
historical orders. Stock is only checked here; it is decremented when the
payment is captured (see ``inventory_service.reduce_inventory``).
"""
import logging
from decimal import Decimal

from sqlmodel import Session, select

from app.config import settings
from app.constants.order_status import OrderStatus
from app.exceptions import EmptyCart, InsufficientStock, ValidationError
from app.models.cart import CartItem
from app.models.order import Order
from app.models.order_item import OrderItem
from app.models.product import Product
from app.models.shipment import Shipment
from app.models.user import User
from app.notifications import OrderEvent, dispatch_order_event
from app.schemas.checkout_schemas import CheckoutRequest
from app.services.actor import Actor
from app.services.biteship_client import BiteshipClient, rate_items
from app.services.order_event_service import log_order_event
from app.utils.template import rupiah

logger = logging.getLogger(__name__)


def _load_cart(session: Session, user_id: int):
    return session.exec(
        select(CartItem).where(CartItem.user_id == user_id)
    ).all()


def _quote_shipping(logistics: BiteshipClient, checkout: CheckoutRequest, lines) -> Decimal:
    """
    Price the picked courier service on the server.

    The client only echoes the figure it showed the customer; a stale or
    edited amount is rejected instead of being charged.
    """
    rates = logistics.get_rates(
        settings.BITESHIP_ORIGIN_AREA_ID or "",
        checkout.area_id,
        rate_items(lines),
    )
    courier = checkout.courier.lower()
    service = checkout.service.lower()
    quoted = next(
        (
            Decimal(str(rate["price"]))
            for rate in rates
            if str(rate.get("company", "")).lower() == courier
            and str(rate.get("courier_service_code", "")).lower() == service
            and rate.get("price") is not None
        ),
        None,
    )
    if quoted is None:
        raise ValidationError("Layanan kurir tidak tersedia untuk alamat ini")
    if quoted != checkout.shipping_cost:
        logger.warning(
            f"Shipping cost mismatch on {courier}/{service}: sent {checkout.shipping_cost}, quoted {quoted}"
        )
        raise ValidationError("Ongkos kirim sudah berubah, silakan pilih ulang layanan kurir")
    return quoted


def build_order_from_cart(
    session: Session,
    actor: Actor,
    checkout: CheckoutRequest,
    logistics: BiteshipClient,
) -> Order:
    if actor.user_id is None:
        raise ValidationError("Pesanan hanya dapat dibuat oleh pengguna")

    try:
        cart_items = _load_cart(session, actor.user_id)
        lines = [c for c in cart_items if c.product is not None and c.product.is_active]
        if not lines:
            raise EmptyCart()

        shipping_cost = _quote_shipping(logistics, checkout, lines)

        # lock the product rows so the stock we check is the stock at commit time
        products = {
            p.id: p
            for p in session.exec(
                select(Product)
                .where(Product.id.in_([c.product_id for c in lines]))
                .with_for_update()
            ).all()
        }

        subtotal = Decimal("0")
        for line in lines:
            product = products[line.product_id]
            if line.quantity < 1:
                raise ValidationError("Jumlah produk tidak valid")
            if line.quantity > product.stock:
                raise InsufficientStock(product.name, product.stock)
            subtotal += product.price * line.quantity

        order = Order(
            user_id=actor.user_id,
            subtotal=subtotal,
            shipping_cost=shipping_cost,
            total_amount=subtotal + shipping_cost,
            status=OrderStatus.PENDING,
        )
        session.add(order)
        session.flush()

        for line in lines:
            product = products[line.product_id]
            session.add(
                OrderItem(
                    order_id=order.id,
                    product_id=product.id,
                    product_name=product.name,
                    price=product.price,
                    quantity=line.quantity,
                )
            )

        session.add(
            Shipment(
                order_id=order.id,
                recipient_name=checkout.recipient_name,
                recipient_phone=checkout.recipient_phone,
                area_id=checkout.area_id,
                area_name=checkout.area_name,
                postal_code=checkout.postal_code,
                address_detail=checkout.address_detail,
                courier=checkout.courier.lower(),
                service=checkout.service,
                cost=shipping_cost,
            )
        )

        # items pointing at deleted products go too; they can no longer be bought
        for c in cart_items:
            session.delete(c)

        log_order_event(
            session,
            order_id=order.id,
            event_type="order_placed",
            label="Pesanan dibuat",
            actor=actor.label,
            to_status=order.status,
            meta={"total_amount": str(order.total_amount)},
        )

        session.commit()
    except Exception:
        session.rollback()
        raise

    session.refresh(order)
    logger.info(f"Order {order.id} created for user {actor.user_id}, total {order.total_amount}")

    dispatch_order_event(
        event=OrderEvent.ORDER_PLACED,
        order=order,
        user=session.get(User, actor.user_id),
        session=session,
        extra={"admin_content": f"Pesanan #{order.id} dibuat, total {rupiah(order.total_amount)}"},
    )
    return order
