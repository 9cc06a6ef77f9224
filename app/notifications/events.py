from enum import Enum
from typing import NamedTuple, Optional


class OrderEvent(str, Enum):
    ORDER_PLACED = "order_placed"
    PAYMENT_SUCCESS = "payment_success"
    PACKED = "packed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class EventCopy(NamedTuple):
    admin_title: str
    user_template: Optional[str] = None
    user_subject: Optional[str] = None


EVENT_COPY = {
    OrderEvent.ORDER_PLACED: EventCopy("Pesanan Baru", "emails/order_placed.html", "Pesanan #{id} berhasil dibuat"),
    OrderEvent.PAYMENT_SUCCESS: EventCopy("Pembayaran Diterima", "emails/payment_success.html", "Pembayaran pesanan #{id} diterima"),
    OrderEvent.PACKED: EventCopy("Pesanan Dikemas"),
    OrderEvent.SHIPPED: EventCopy("Pesanan Dikirim", "emails/order_shipped.html", "Pesanan #{id} sedang dikirim"),
    OrderEvent.DELIVERED: EventCopy("Pesanan Selesai", "emails/order_status.html", "Pesanan #{id} selesai"),
    OrderEvent.CANCELLED: EventCopy("Pesanan Dibatalkan", "emails/order_status.html", "Pesanan #{id} dibatalkan"),
    OrderEvent.EXPIRED: EventCopy("Pesanan Kedaluwarsa", "emails/order_status.html", "Pesanan #{id} kedaluwarsa"),
}
