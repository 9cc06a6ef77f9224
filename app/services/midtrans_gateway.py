import hashlib
import hmac
import logging
from decimal import Decimal
from functools import lru_cache

import midtransclient
import requests
from midtransclient.error_midtrans import JSONDecodeError as MidtransJSONDecodeError, MidtransAPIError

from app.config import settings
from app.exceptions import GatewayError

logger = logging.getLogger(__name__)


def gross_amount_for(total_amount: Decimal) -> int:
    # Midtrans only accepts whole rupiah
    return int(total_amount)


class MidtransGateway:
    """Thin wrapper around the Snap client plus notification signature checks."""

    def __init__(self, server_key: str, client_key: str, is_production: bool = False):
        self.server_key = server_key
        self.snap = midtransclient.Snap(
            is_production=is_production,
            server_key=server_key,
            client_key=client_key,
        )

    def create_transaction(self, order_id: int, gross_amount: Decimal, customer_details: dict) -> dict:
        parameter = {
            "transaction_details": {
                "order_id": str(order_id),
                "gross_amount": gross_amount_for(gross_amount),
            },
            "customer_details": customer_details,
        }
        try:
            transaction = self.snap.create_transaction(parameter)
        except (MidtransAPIError, MidtransJSONDecodeError, requests.RequestException) as exc:
            logger.error(f"Snap transaction for order {order_id} failed: {exc}")
            raise GatewayError() from exc

        if not transaction.get("token"):
            logger.error(f"Snap transaction for order {order_id} returned no token")
            raise GatewayError()

        logger.info(f"Snap transaction created for order {order_id}")
        return transaction

    def verify_signature(self, order_id: str, status_code: str, gross_amount: str, signature_key: str) -> bool:
        # SHA512(order_id + status_code + gross_amount + server_key)
        raw = f"{order_id}{status_code}{gross_amount}{self.server_key}"
        expected = hashlib.sha512(raw.encode("utf-8")).hexdigest()
        # bytes, so a non-ASCII key from an untrusted body is just a mismatch
        return hmac.compare_digest(expected.encode("ascii"), str(signature_key or "").encode("utf-8"))


@lru_cache(maxsize=1)
def get_payment_gateway() -> MidtransGateway:
    if not settings.MIDTRANS_SERVER_KEY:
        logger.warning("MIDTRANS_SERVER_KEY is not set")
    return MidtransGateway(
        server_key=settings.MIDTRANS_SERVER_KEY,
        client_key=settings.MIDTRANS_CLIENT_KEY,
        is_production=settings.MIDTRANS_IS_PRODUCTION,
    )
