from enum import Enum
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime

from app.models.base import LifecycleState


class UserRole(str, Enum):
    CUSTOMER = "CUSTOMER"
    ADMIN = "ADMIN"
    GUDANG = "GUDANG"


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    email: str = Field(index=True, unique=True)  # always stored lowercase
    password: str
    role: UserRole = Field(default=UserRole.CUSTOMER)
    photo: Optional[str] = None
    lifecycle: LifecycleState = Field(default=LifecycleState.ACTIVE, index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def is_active(self) -> bool:
        return self.lifecycle == LifecycleState.ACTIVE
