from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session, select

from app.config import settings
from app.database import get_session
from app.models.cart import CartItem
from app.models.user import User
from app.schemas.shipping_schemas import CostRequest, RatesRequest
from app.services import rajaongkir_client
from app.services.biteship_client import BiteshipClient, get_logistics_client, rate_items
from app.utils.token import get_current_user

router = APIRouter()


# -------- Biteship --------

@router.get("/areas")
def search_areas(
    q: str = Query(""),
    logistics: BiteshipClient = Depends(get_logistics_client),
):
    return {"areas": logistics.search_areas(q.strip())}


@router.post("/rates")
def courier_rates(
    payload: RatesRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
    logistics: BiteshipClient = Depends(get_logistics_client),
):
    cart_items = session.exec(
        select(CartItem).where(CartItem.user_id == current_user.id)
    ).all()
    items = rate_items(cart_items)
    if not items:
        raise HTTPException(400, "Keranjang kosong")

    rates = logistics.get_rates(
        settings.BITESHIP_ORIGIN_AREA_ID or "",
        payload.destination_area_id,
        items,
    )
    return {"rates": rates}


# -------- RajaOngkir --------

@router.get("/provinces")
def provinces():
    return {"provinces": rajaongkir_client.get_provinces()}


@router.get("/cities")
def cities(province_id: Optional[str] = None):
    if not province_id:
        raise HTTPException(400, "province_id wajib diisi")
    return {"cities": rajaongkir_client.get_cities(province_id)}


@router.post("/cost")
def shipping_cost(payload: CostRequest):
    courier = payload.courier.lower()
    if courier not in rajaongkir_client.SUPPORTED_COURIERS:
        raise HTTPException(400, "Kurir tidak didukung")

    result = rajaongkir_client.get_cost(payload.destination, payload.weight, courier)
    if not result or not result.get("costs"):
        raise HTTPException(502, "Gagal menghitung ongkos kirim")

    service = result["costs"][0]
    if not service.get("cost"):
        raise HTTPException(502, "Gagal menghitung ongkos kirim")
    cost = service["cost"][0]
    return {
        "courier": result.get("code", courier),
        "service": service.get("service"),
        "cost": cost.get("value"),
        "etd": cost.get("etd"),
    }
