from pydantic import BaseModel, Field

class CartAddRequest(BaseModel):
    product_id: int
    quantity: int = Field(default=1, ge=1)

class CartUpdateRequest(BaseModel):
    quantity: int
