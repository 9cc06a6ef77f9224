from pydantic import BaseModel, Field


class RatesRequest(BaseModel):
    destination_area_id: str = Field(..., min_length=1)


class CostRequest(BaseModel):
    destination: str
    weight: int = Field(..., gt=0)  # grams
    courier: str = "jne"
