# -------- STAFF ORDER OPERATIONS --------
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from pydantic import BaseModel
from sqlmodel import Session, select

from app.constants.order_status import OrderStatus
from app.database import get_session
from app.models.order import Order
from app.models.shipment import Shipment
from app.models.user import User
from app.routes.orders import order_detail
from app.schemas.orders_schemas import OrderDetailOut
from app.services import order_service
from app.services.actor import Actor
from app.services.biteship_client import BiteshipClient, get_logistics_client
from app.services.label_pdf import render_label_pdf
from app.services.shipment_label import generate_label
from app.utils.pagination import paginate
from app.utils.token import get_current_actor, get_current_admin, get_current_staff

router = APIRouter()

QUEUE_STATUSES = (OrderStatus.DIBAYAR, OrderStatus.DIKEMAS)


class AdminCancelRequest(BaseModel):
    reason: Optional[str] = None


def _queue_row(order: Order) -> dict:
    shipment = order.shipment
    return {
        "id": order.id,
        "status": order.status,
        "customer": order.user.name if order.user else None,
        "total_amount": order.total_amount,
        "items": sum(i.quantity for i in order.items),
        "courier": shipment.courier if shipment else None,
        "service": shipment.service if shipment else None,
        "resi": shipment.resi if shipment else None,
        "created_at": order.created_at,
    }


def _get_shipment(session: Session, order_id: int) -> Shipment:
    shipment = session.exec(select(Shipment).where(Shipment.order_id == order_id)).first()
    if not shipment:
        raise HTTPException(404, "Data pengiriman tidak ditemukan")
    return shipment


@router.get("/queue")
def label_queue(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[OrderStatus] = None,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_staff),
):
    if status and status not in QUEUE_STATUSES:
        raise HTTPException(400, "Status antrean hanya DIBAYAR atau DIKEMAS")
    statuses = (status,) if status else QUEUE_STATUSES
    data = paginate(
        session=session,
        query=order_service.label_queue_query(statuses),
        page=page,
        limit=limit,
    )
    data["results"] = [_queue_row(o) for o in data["results"]]
    return data


@router.get("/shipments")
def shipment_history(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[OrderStatus] = None,
    search: Optional[str] = None,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_staff),
):
    data = paginate(
        session=session,
        query=order_service.shipment_history_query(status, search),
        page=page,
        limit=limit,
    )
    data["results"] = [
        {**_queue_row(o), "shipped_at": o.shipment.shipped_at}
        for o in data["results"]
    ]
    return data


@router.get("/{order_id}", response_model=OrderDetailOut)
def get_order_admin(
    order_id: int,
    session: Session = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
    _: User = Depends(get_current_staff),
):
    return order_detail(session, order_service.get_order_for_actor(session, actor, order_id))


@router.post("/{order_id}/pack", response_model=OrderDetailOut)
def mark_packed(
    order_id: int,
    session: Session = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
    _: User = Depends(get_current_staff),
):
    return order_detail(session, order_service.mark_packed(session, actor, order_id))


@router.post("/{order_id}/label")
def create_label(
    order_id: int,
    session: Session = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
    logistics: BiteshipClient = Depends(get_logistics_client),
    _: User = Depends(get_current_staff),
):
    shipment = generate_label(session, actor, order_id, logistics)
    return {
        "order_id": order_id,
        "resi": shipment.resi,
        "courier": shipment.courier,
        "service": shipment.service,
        "shipped_at": shipment.shipped_at,
    }


@router.get("/{order_id}/label.pdf")
def download_label(
    order_id: int,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_staff),
):
    order = session.get(Order, order_id)
    if not order:
        raise HTTPException(404, "Pesanan tidak ditemukan")
    shipment = _get_shipment(session, order_id)
    if not shipment.resi:
        raise HTTPException(409, "Label belum dibuat")

    return Response(
        content=render_label_pdf(order, shipment),
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="label_{order_id}.pdf"'},
    )


@router.get("/{order_id}/tracking")
def tracking(
    order_id: int,
    session: Session = Depends(get_session),
    logistics: BiteshipClient = Depends(get_logistics_client),
    _: User = Depends(get_current_staff),
):
    shipment = _get_shipment(session, order_id)
    if not shipment.biteship_order_id:
        raise HTTPException(409, "Pesanan belum memiliki label pengiriman")

    detail = logistics.get_order_detail(shipment.biteship_order_id)
    if detail is None:
        raise HTTPException(502, "Gagal mengambil data pelacakan")
    return {"order_id": order_id, "resi": shipment.resi, **detail}


@router.post("/{order_id}/complete", response_model=OrderDetailOut)
def mark_completed(
    order_id: int,
    session: Session = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
    _: User = Depends(get_current_staff),
):
    return order_detail(session, order_service.mark_completed(session, actor, order_id))


@router.post("/{order_id}/cancel", response_model=OrderDetailOut)
def cancel_order_admin(
    order_id: int,
    payload: Optional[AdminCancelRequest] = None,
    session: Session = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
    _: User = Depends(get_current_admin),
):
    order = order_service.cancel_order(
        session, actor, order_id, reason=payload.reason if payload else None
    )
    return order_detail(session, order)
