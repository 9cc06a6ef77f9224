from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import SQLModel, Field


class RecipientRole(str, Enum):
    admin = "admin"
    customer = "customer"


class NotificationChannel(str, Enum):
    email = "email"
    system = "system"


class NotificationStatus(str, Enum):
    sent = "sent"
    failed = "failed"


class Notification(SQLModel, table=True):
    """Entry in the staff feed; ``related_id`` is the order it is about."""

    id: Optional[int] = Field(default=None, primary_key=True)
    recipient_role: RecipientRole = Field(index=True)
    user_id: Optional[int] = None

    trigger_source: str = Field(index=True)
    related_id: int = Field(index=True)
    title: str
    content: str

    channel: NotificationChannel = NotificationChannel.system
    status: NotificationStatus = NotificationStatus.sent
    is_read: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)
