import logging
from typing import Optional

from app.models.notifications import RecipientRole
from app.notifications.email_handlers import email_admin, email_customer
from app.notifications.events import EVENT_COPY, OrderEvent
from app.notifications.rules import Channel, channels_for
from app.services.notification_service import create_notification

logger = logging.getLogger(__name__)


def dispatch_order_event(
    *,
    event: OrderEvent,
    order,
    user,
    session,
    extra: Optional[dict] = None,
):
    """
    Fan one order event out to the admin feed and the emails.

    Callers invoke this once per applied transition, after it was committed,
    so a redelivered callback that changes nothing never notifies twice.
    Mail failures are logged by the email service and never raised.
    """
    channels = channels_for(event)
    copy = EVENT_COPY[event]
    extra = dict(extra or {})
    admin_content = extra.pop("admin_content", None) or f"Pesanan #{order.id}: {order.status.value}"

    if Channel.INAPP_ADMIN in channels:
        create_notification(
            session=session,
            recipient_role=RecipientRole.admin,
            user_id=None,
            trigger_source=event.value,
            related_id=order.id,
            title=copy.admin_title,
            content=admin_content,
        )
        session.commit()

    sent_user = False
    if Channel.EMAIL_USER in channels and user and copy.user_template:
        sent_user = email_customer(
            copy.user_template,
            copy.user_subject.format(id=order.id),
            user,
            order,
            **extra,
        )

    if Channel.EMAIL_ADMIN in channels:
        email_admin(f"{copy.admin_title} #{order.id}", order, admin_title=copy.admin_title, **extra)

    logger.info(f"Dispatched {event.value} for order {order.id} (customer email sent: {sent_user})")
