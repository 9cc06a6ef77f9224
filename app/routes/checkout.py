from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.database import get_session
from app.schemas.checkout_schemas import CheckoutRequest
from app.schemas.orders_schemas import OrderDetailOut
from app.services.actor import Actor
from app.services.biteship_client import BiteshipClient, get_logistics_client
from app.services.order_builder import build_order_from_cart
from app.routes.orders import order_detail
from app.utils.token import get_current_actor

router = APIRouter()


@router.post("/orders", response_model=OrderDetailOut, status_code=status.HTTP_201_CREATED)
def place_order(
    checkout: CheckoutRequest,
    session: Session = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
    logistics: BiteshipClient = Depends(get_logistics_client),
):
    order = build_order_from_cart(session, actor, checkout, logistics)
    return order_detail(session, order)
