from pydantic import BaseModel, ConfigDict
from typing import Optional


class PaymentTokenRequest(BaseModel):
    order_id: int


class PaymentTokenResponse(BaseModel):
    order_id: int
    token: str
    client_key: str


class PaymentNotification(BaseModel):
    """Midtrans HTTP notification body; unknown fields are kept."""

    model_config = ConfigDict(extra="allow")

    order_id: str
    status_code: str
    gross_amount: str
    signature_key: str
    transaction_status: str
    transaction_id: Optional[str] = None
    payment_type: Optional[str] = None
    fraud_status: Optional[str] = None
