import logging

from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.config import settings
from app.database import get_session
from app.schemas.payment_schemas import (
    PaymentNotification,
    PaymentTokenRequest,
    PaymentTokenResponse,
)
from app.services.actor import Actor
from app.services.midtrans_gateway import MidtransGateway, get_payment_gateway
from app.services.payment_service import (
    get_payment_status,
    handle_payment_notification,
    request_payment_token,
)
from app.utils.token import get_current_actor

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/token", response_model=PaymentTokenResponse)
def create_payment_token(
    payload: PaymentTokenRequest,
    session: Session = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
    gateway: MidtransGateway = Depends(get_payment_gateway),
):
    token = request_payment_token(session, actor, payload.order_id, gateway)
    return PaymentTokenResponse(
        order_id=payload.order_id,
        token=token,
        client_key=settings.MIDTRANS_CLIENT_KEY,
    )


@router.post("/notification")
def payment_notification(
    payload: PaymentNotification,
    session: Session = Depends(get_session),
    gateway: MidtransGateway = Depends(get_payment_gateway),
):
    """Midtrans HTTP notification endpoint; no user auth, signature checked instead."""
    result = handle_payment_notification(session, payload.model_dump(), gateway)
    return {"message": "OK", **result}


@router.get("/{order_id}/status")
def payment_status(
    order_id: int,
    session: Session = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
):
    order, payment = get_payment_status(session, actor, order_id)
    return {
        "order_id": order.id,
        "order_status": order.status,
        "payment_status": payment.status if payment else None,
        "payment_method": payment.payment_method if payment else None,
        "paid_at": payment.paid_at if payment else None,
    }
