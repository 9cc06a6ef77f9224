from decimal import Decimal
from sqlmodel import SQLModel, Field , Relationship
from typing import Optional , TYPE_CHECKING

if TYPE_CHECKING:
    from app.models.order import Order
    from app.models.product import Product

class OrderItem(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="order.id", index=True)
    product_id: int = Field(foreign_key="product.id")

    product_name: str
    # captured at order time, never follows the live product price
    price: Decimal = Field(max_digits=14, decimal_places=2)
    quantity: int

    order: Optional["Order"] = Relationship(back_populates="items")
    product: Optional["Product"] = Relationship()

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity
