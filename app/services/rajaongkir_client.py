import logging
from typing import List, Optional

import requests

from app.config import settings

logger = logging.getLogger(__name__)

SUPPORTED_COURIERS = ("jne", "pos", "tiki")


def _body(data) -> Optional[dict]:
    body = data.get("rajaongkir") if isinstance(data, dict) else None
    if not isinstance(body, dict):
        logger.error("RajaOngkir returned an unexpected body")
        return None
    if (body.get("status") or {}).get("code") != 200:
        logger.error(f"RajaOngkir error: {(body.get('status') or {}).get('description')}")
        return None
    return body


def _get(path: str, params: Optional[dict] = None) -> Optional[dict]:
    try:
        response = requests.get(
            f"{settings.RAJAONGKIR_BASE_URL}{path}",
            headers={"key": settings.RAJAONGKIR_API_KEY},
            params=params,
            timeout=15,
        )
        data = response.json()
    except (requests.RequestException, ValueError) as exc:
        logger.error(f"RajaOngkir GET {path} failed: {exc}")
        return None

    return _body(data)


def get_provinces() -> List[dict]:
    body = _get("/province")
    return (body or {}).get("results") or []


def get_cities(province_id: Optional[str] = None) -> List[dict]:
    params = {"province": province_id} if province_id else None
    body = _get("/city", params)
    return (body or {}).get("results") or []


def get_cost(destination_city_id: str, weight_grams: int, courier: str) -> Optional[dict]:
    """First courier result for the destination, or None when unavailable."""
    try:
        response = requests.post(
            f"{settings.RAJAONGKIR_BASE_URL}/cost",
            headers={"key": settings.RAJAONGKIR_API_KEY},
            data={
                "origin": settings.RAJAONGKIR_ORIGIN_CITY_ID,
                "destination": destination_city_id,
                "weight": str(weight_grams),
                "courier": courier,
            },
            timeout=15,
        )
        data = response.json()
    except (requests.RequestException, ValueError) as exc:
        logger.error(f"RajaOngkir cost failed: {exc}")
        return None

    body = _body(data)
    if body is None:
        return None

    results = body.get("results") or []
    return results[0] if results else None
