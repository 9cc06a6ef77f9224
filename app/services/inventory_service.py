import logging

from sqlmodel import Session, select

from app.models.order import Order
from app.models.product import Product

logger = logging.getLogger(__name__)


def reduce_inventory(session: Session, order: Order) -> list[int]:
    """
    Capture stock for a paid order.

    Called exactly once, inside the PENDING -> DIBAYAR transaction. Money has
    already been taken at this point, so a shortfall is clamped to zero and
    reported instead of rejecting the payment. Returns the ids of oversold
    products.
    """
    product_ids = [item.product_id for item in order.items]
    products = {
        p.id: p
        for p in session.exec(
            select(Product).where(Product.id.in_(product_ids)).with_for_update()
        ).all()
    }

    oversold = []
    for item in order.items:
        product = products[item.product_id]
        if product.stock < item.quantity:
            logger.warning(
                f"Oversold {product.name} on order {order.id}: "
                f"stock {product.stock}, paid quantity {item.quantity}"
            )
            oversold.append(product.id)
            product.stock = 0
        else:
            product.stock -= item.quantity
        session.add(product)

    logger.info(f"Reduced inventory for order {order.id} ({len(order.items)} items)")
    return oversold
