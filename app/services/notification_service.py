from typing import Optional

from sqlmodel import Session, func, select

from app.exceptions import NotFoundError
from app.models.notifications import (
    Notification,
    NotificationChannel,
    NotificationStatus,
    RecipientRole,
)


def create_notification(
    *,
    session: Session,
    recipient_role: RecipientRole,
    user_id: Optional[int],
    trigger_source: str,
    related_id: int,
    title: str,
    content: str,
    channel: NotificationChannel = NotificationChannel.system,
    status: NotificationStatus = NotificationStatus.sent,
) -> Notification:
    """Stage a feed entry; the caller commits."""
    notification = Notification(
        recipient_role=recipient_role,
        user_id=user_id,
        trigger_source=trigger_source,
        related_id=related_id,
        title=title,
        content=content,
        channel=channel,
        status=status,
    )
    session.add(notification)
    session.flush()
    return notification


def admin_feed_query(unread_only: bool = False, trigger_source: Optional[str] = None):
    query = select(Notification).where(Notification.recipient_role == RecipientRole.admin)
    if unread_only:
        query = query.where(Notification.is_read == False)  # noqa: E712
    if trigger_source:
        query = query.where(Notification.trigger_source == trigger_source)
    return query.order_by(Notification.created_at.desc(), Notification.id.desc())


def unread_admin_count(session: Session) -> int:
    return session.exec(
        select(func.count(Notification.id))
        .where(Notification.recipient_role == RecipientRole.admin)
        .where(Notification.is_read == False)  # noqa: E712
    ).one()


def mark_admin_read(session: Session, notification_id: int) -> Notification:
    notification = session.get(Notification, notification_id)
    if not notification or notification.recipient_role != RecipientRole.admin:
        raise NotFoundError("Notifikasi tidak ditemukan")
    notification.is_read = True
    session.add(notification)
    session.commit()
    return notification


def mark_all_admin_read(session: Session) -> int:
    unread = session.exec(admin_feed_query(unread_only=True)).all()
    for notification in unread:
        notification.is_read = True
        session.add(notification)
    session.commit()
    return len(unread)
