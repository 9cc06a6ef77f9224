from sqlmodel import SQLModel, Field , Relationship
from typing import Optional, TYPE_CHECKING, List
from datetime import datetime

from app.models.base import LifecycleState

if TYPE_CHECKING:
    from .product import Product

class Category(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    slug: str = Field(index=True, unique=True)
    image: Optional[str] = None
    lifecycle: LifecycleState = Field(default=LifecycleState.ACTIVE, index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    products: List["Product"] = Relationship(back_populates="category")
