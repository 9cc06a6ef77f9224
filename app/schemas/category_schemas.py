from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    image: Optional[str] = None

class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    image: Optional[str] = None

class CategoryResponse(BaseModel):
    id: int
    name: str
    slug: str
    image: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True
