import logging
from functools import lru_cache
from typing import List, Optional

import requests

from app.config import settings
from app.exceptions import ShippingProviderError

logger = logging.getLogger(__name__)

RATE_COURIERS = "jne,sicepat,jnt,tiki,pos,wahana,anteraja"

# served when the rates endpoint fails (sandbox without balance, outage)
DUMMY_RATES = [
    {
        "company": "jne",
        "courier_name": "JNE",
        "courier_service_name": "Regular",
        "courier_service_code": "reg",
        "duration": "1 - 2 hari",
        "price": 15000,
    },
    {
        "company": "sicepat",
        "courier_name": "SiCepat",
        "courier_service_name": "Regular",
        "courier_service_code": "reg",
        "duration": "1 - 2 hari",
        "price": 14000,
    },
    {
        "company": "jnt",
        "courier_name": "J&T",
        "courier_service_name": "EZ",
        "courier_service_code": "ez",
        "duration": "1 - 2 hari",
        "price": 16000,
    },
]


def rate_items(cart_items) -> List[dict]:
    """Cart lines in the shape the rates endpoint expects; inactive products are skipped."""
    return [
        {
            "name": c.product.name,
            "value": int(c.product.price),
            "quantity": c.quantity,
            "weight": c.product.weight,
        }
        for c in cart_items
        if c.product and c.product.is_active
    ]


class BiteshipClient:
    """Area search, courier rates, label creation and tracking on Biteship."""

    def __init__(self, api_key: str, base_url: str, timeout: int = 15):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _headers(self) -> dict:
        return {
            "Authorization": self.api_key,
            "Content-Type": "application/json",
        }

    def _request(self, method: str, path: str, **kwargs) -> dict:
        response = requests.request(
            method,
            f"{self.base_url}{path}",
            headers=self._headers(),
            timeout=self.timeout,
            **kwargs,
        )
        data = response.json()
        if not isinstance(data, dict):
            raise ShippingProviderError("Respons Biteship tidak valid")
        if not data.get("success"):
            raise ShippingProviderError(data.get("error") or "Biteship menolak permintaan")
        return data

    def search_areas(self, query: str) -> List[dict]:
        if not query or len(query) < 3:
            return []
        try:
            data = self._request(
                "GET",
                "/maps/areas",
                params={"countries": "ID", "input": query, "type": "single"},
            )
        except (requests.RequestException, ValueError, ShippingProviderError) as exc:
            logger.error(f"Biteship area search for '{query}' failed: {exc}")
            return []
        return data.get("areas") or []

    def get_rates(self, origin_area_id: str, destination_area_id: str, items: List[dict]) -> List[dict]:
        payload = {
            "origin_area_id": origin_area_id,
            "destination_area_id": destination_area_id,
            "couriers": RATE_COURIERS,
            "items": items,
        }
        try:
            data = self._request("POST", "/rates/couriers", json=payload)
        except (requests.RequestException, ValueError, ShippingProviderError) as exc:
            logger.warning(f"Biteship rates failed, using dummy rates: {exc}")
            return DUMMY_RATES
        return data.get("pricing") or []

    def create_order(self, payload: dict) -> dict:
        """
        Book the courier and mint the waybill.

        Raises ``ShippingProviderError`` on any failure so the caller can
        leave the order in DIKEMAS and retry.
        """
        try:
            data = self._request("POST", "/orders", json=payload)
        except (requests.RequestException, ValueError) as exc:
            logger.error(f"Biteship create order failed: {exc}")
            raise ShippingProviderError() from exc

        courier = data.get("courier") or {}
        waybill_id = courier.get("waybill_id") or courier.get("tracking_id")
        if not waybill_id:
            logger.error(f"Biteship order {data.get('id')} returned no waybill")
            raise ShippingProviderError("Biteship tidak mengembalikan nomor resi")

        logger.info(f"Biteship order {data.get('id')} created with waybill {waybill_id}")
        return {
            "id": data.get("id"),
            "waybill_id": waybill_id,
            "price": data.get("price"),
            "status": data.get("status"),
        }

    def get_order_detail(self, biteship_order_id: str) -> Optional[dict]:
        try:
            data = self._request("GET", f"/orders/{biteship_order_id}")
        except (requests.RequestException, ValueError, ShippingProviderError) as exc:
            logger.error(f"Biteship order {biteship_order_id} lookup failed: {exc}")
            return None
        return {
            "id": data.get("id"),
            "status": data.get("status"),
            "courier": data.get("courier"),
            "origin": data.get("origin"),
            "destination": data.get("destination"),
            "history": data.get("history") or [],
        }


@lru_cache(maxsize=1)
def get_logistics_client() -> BiteshipClient:
    if not settings.BITESHIP_API_KEY:
        logger.warning("BITESHIP_API_KEY is not set")
    return BiteshipClient(
        api_key=settings.BITESHIP_API_KEY,
        base_url=settings.BITESHIP_BASE_URL,
    )
