"""
Domain error kinds raised by the order lifecycle services.

Routes translate them into HTTP responses through the handlers registered
in ``register_exception_handlers``. Every error carries a user-facing
(Indonesian) message; internal faults are logged and replaced by a generic
message so implementation details never reach the client.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Terjadi kesalahan. Silakan coba lagi."


class StoreError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = GENERIC_ERROR_MESSAGE

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# ---------- base kinds ----------

class ValidationError(StoreError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Data tidak valid"


class NotFoundError(StoreError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Data tidak ditemukan"


class ForbiddenError(StoreError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Akses ditolak"


class ConflictError(StoreError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Permintaan bertentangan dengan kondisi data saat ini"


class ExternalServiceError(StoreError):
    """Payment or shipping provider failure; safe for the caller to retry."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Layanan eksternal tidak dapat dihubungi"


# ---------- specific kinds ----------

class EmptyCart(ValidationError):
    default_message = "Keranjang kosong"


class InsufficientStock(ConflictError):
    default_message = "Stok tidak mencukupi"

    def __init__(self, product_name: str | None = None, available: int | None = None):
        message = self.default_message
        if product_name:
            message = f"Stok {product_name} tidak mencukupi (tersisa {available})"
        super().__init__(message)
        self.product_name = product_name
        self.available = available


class InvalidState(ConflictError):
    default_message = "Status pesanan tidak sesuai untuk aksi ini"


class ForbiddenTransition(ConflictError):
    default_message = "Perubahan status pesanan tidak diizinkan"


class OrderNotFound(NotFoundError):
    default_message = "Pesanan tidak ditemukan"


class Unauthorized(ForbiddenError):
    default_message = "Anda tidak memiliki akses ke pesanan ini"


class GatewayError(ExternalServiceError):
    default_message = "Gagal membuat transaksi pembayaran"


class ShippingProviderError(ExternalServiceError):
    default_message = "Gagal menghubungi layanan pengiriman"


# ---------- handlers ----------

async def store_error_handler(request: Request, exc: StoreError):
    if isinstance(exc, ExternalServiceError):
        logger.warning(f"{request.method} {request.url.path}: {exc.__class__.__name__}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": GENERIC_ERROR_MESSAGE},
    )


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(StoreError, store_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
