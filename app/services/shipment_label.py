"""
Shipment Label Generator.

Books the courier on Biteship for a packed order, stores the waybill (resi)
and moves the order to DIKIRIM. A shipment that already has a resi is
returned as-is, so retries and double clicks never book a second courier.
"""
import logging
from datetime import datetime

from sqlmodel import Session, select

from app.config import settings
from app.constants.order_status import OrderStatus
from app.exceptions import (
    ForbiddenError,
    InvalidState,
    NotFoundError,
    OrderNotFound,
    ValidationError,
)
from app.models.order import Order
from app.models.shipment import Shipment
from app.models.user import User
from app.notifications import OrderEvent, dispatch_order_event
from app.services.actor import Actor, LABEL_GENERATOR_ACTOR
from app.services.biteship_client import BiteshipClient
from app.services.transition_guard import apply_transition

logger = logging.getLogger(__name__)


def _courier_type(service: str) -> str:
    # "REG" / "Regular" / "reg 23" -> "reg"
    return service.lower().split(" ")[0]


def build_label_payload(order: Order, shipment: Shipment) -> dict:
    return {
        "origin_contact_name": settings.BITESHIP_SHIPPER_NAME,
        "origin_contact_phone": settings.BITESHIP_SHIPPER_PHONE,
        "origin_address": settings.BITESHIP_ORIGIN_ADDRESS,
        "origin_postal_code": settings.BITESHIP_ORIGIN_POSTAL_CODE,
        "origin_area_id": settings.BITESHIP_ORIGIN_AREA_ID,
        "destination_contact_name": shipment.recipient_name,
        "destination_contact_phone": shipment.recipient_phone,
        "destination_address": f"{shipment.address_detail}, {shipment.area_name}",
        "destination_postal_code": int(shipment.postal_code) if shipment.postal_code.isdigit() else 0,
        "destination_area_id": shipment.area_id,
        "courier_company": shipment.courier.lower(),
        "courier_type": _courier_type(shipment.service),
        "delivery_type": "now",
        "order_note": "Handle with care",
        "items": [
            {
                "name": item.product_name,
                "value": int(item.price),
                "quantity": item.quantity,
                "weight": item.product.weight,
            }
            for item in order.items
        ],
    }


def generate_label(
    session: Session,
    actor: Actor,
    order_id: int,
    logistics: BiteshipClient,
) -> Shipment:
    if not actor.is_staff:
        raise ForbiddenError("Hanya admin atau gudang yang dapat membuat label")
    try:
        order = session.exec(
            select(Order).where(Order.id == order_id).with_for_update()
        ).first()
        if not order:
            raise OrderNotFound()

        shipment = session.exec(
            select(Shipment).where(Shipment.order_id == order_id).with_for_update()
        ).first()
        if not shipment:
            raise NotFoundError("Data pengiriman tidak ditemukan")

        if shipment.resi:
            session.rollback()
            logger.info(f"Label for order {order_id} already exists ({shipment.resi})")
            return shipment

        if order.status != OrderStatus.DIKEMAS:
            raise InvalidState("Label hanya dapat dibuat untuk pesanan yang sudah dikemas")
        if not settings.BITESHIP_ORIGIN_AREA_ID:
            raise ValidationError("Area asal pengiriman belum dikonfigurasi")

        result = logistics.create_order(build_label_payload(order, shipment))

        shipment.resi = result["waybill_id"]
        shipment.biteship_order_id = result.get("id")
        shipment.shipped_at = datetime.utcnow()
        session.add(shipment)

        apply_transition(
            session,
            order,
            LABEL_GENERATOR_ACTOR,
            OrderStatus.DIKIRIM,
            meta={"resi": shipment.resi, "requested_by": actor.label},
        )
        session.commit()
    except Exception:
        session.rollback()
        raise

    session.refresh(shipment)
    session.refresh(order)
    logger.info(f"Label {shipment.resi} generated for order {order_id} by {actor.label}")

    dispatch_order_event(
        event=OrderEvent.SHIPPED,
        order=order,
        user=session.get(User, order.user_id),
        session=session,
        extra={"shipment": shipment},
    )
    return shipment
