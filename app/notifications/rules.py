from enum import Enum

from app.notifications.events import OrderEvent


class Channel(str, Enum):
    EMAIL_USER = "email_user"
    EMAIL_ADMIN = "email_admin"
    INAPP_ADMIN = "inapp_admin"


# who hears about what; the warehouse only watches the admin feed
NOTIFICATION_RULES = {
    OrderEvent.ORDER_PLACED: frozenset({Channel.EMAIL_USER, Channel.INAPP_ADMIN}),
    OrderEvent.PAYMENT_SUCCESS: frozenset({Channel.EMAIL_USER, Channel.INAPP_ADMIN, Channel.EMAIL_ADMIN}),
    OrderEvent.PACKED: frozenset({Channel.INAPP_ADMIN}),
    OrderEvent.SHIPPED: frozenset({Channel.EMAIL_USER, Channel.INAPP_ADMIN}),
    OrderEvent.DELIVERED: frozenset({Channel.EMAIL_USER}),
    OrderEvent.CANCELLED: frozenset({Channel.EMAIL_USER, Channel.INAPP_ADMIN}),
    OrderEvent.EXPIRED: frozenset({Channel.EMAIL_USER}),
}


def channels_for(event: OrderEvent) -> frozenset:
    return NOTIFICATION_RULES.get(event, frozenset())
