from decimal import Decimal
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=200)
    description: str = ""
    price: Decimal = Field(..., gt=0)
    weight: int = Field(..., gt=0)  # grams
    stock: int = Field(default=0, ge=0)
    category_id: int
    image: Optional[str] = None


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, gt=0)
    weight: Optional[int] = Field(None, gt=0)
    stock: Optional[int] = Field(None, ge=0)
    category_id: Optional[int] = None
    image: Optional[str] = None


class ProductResponse(BaseModel):
    id: int
    name: str
    slug: str
    description: str
    price: Decimal
    weight: int
    stock: int
    image: Optional[str]
    category_id: int
    created_at: datetime

    class Config:
        from_attributes = True
