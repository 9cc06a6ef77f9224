from decimal import Decimal
from sqlmodel import SQLModel, Field ,Relationship
from typing import Optional, TYPE_CHECKING
from datetime import datetime

from app.models.base import LifecycleState

if TYPE_CHECKING:
    from .category import Category

class Product(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    slug: str = Field(index=True, unique=True)
    description: str = ""

    price: Decimal = Field(max_digits=14, decimal_places=2)
    weight: int  # grams, drives shipping cost and label weight
    stock: int = 0

    image: Optional[str] = None

    category_id: int = Field(foreign_key="category.id", index=True)
    category: Optional["Category"] = Relationship(back_populates="products")

    lifecycle: LifecycleState = Field(default=LifecycleState.ACTIVE, index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def in_stock(self) -> bool:
         return self.stock > 0

    @property
    def is_active(self) -> bool:
        return self.lifecycle == LifecycleState.ACTIVE
