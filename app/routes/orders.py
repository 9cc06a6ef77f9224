from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlmodel import Session

from app.constants.order_status import OrderStatus
from app.database import get_session
from app.models.order import Order
from app.schemas.orders_schemas import OrderDetailOut, OrderSummaryOut, TimelineEntry
from app.services.actor import Actor
from app.services import order_service
from app.services.order_event_service import get_order_timeline
from app.utils.pagination import paginate
from app.utils.token import get_current_actor

router = APIRouter()


class CancelOrderRequest(BaseModel):
    reason: Optional[str] = None


def order_detail(session: Session, order: Order) -> OrderDetailOut:
    detail = OrderDetailOut.model_validate(order, from_attributes=True)
    detail.timeline = [
        TimelineEntry.model_validate(event) for event in get_order_timeline(session, order.id)
    ]
    return detail


@router.get("/")
def list_my_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[OrderStatus] = None,
    session: Session = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
):
    data = paginate(
        session=session,
        query=order_service.list_customer_orders(session, actor, status),
        page=page,
        limit=limit,
    )
    data["results"] = [OrderSummaryOut.model_validate(o) for o in data["results"]]
    return data


@router.get("/{order_id}", response_model=OrderDetailOut)
def get_order(
    order_id: int,
    session: Session = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
):
    order = order_service.get_order_for_actor(session, actor, order_id)
    return order_detail(session, order)


@router.post("/{order_id}/cancel", response_model=OrderDetailOut)
def cancel_my_order(
    order_id: int,
    payload: Optional[CancelOrderRequest] = None,
    session: Session = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
):
    order = order_service.get_order_for_actor(session, actor, order_id)
    order = order_service.cancel_order(
        session, actor, order.id, reason=payload.reason if payload else None
    )
    return order_detail(session, order)
