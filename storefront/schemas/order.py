from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CreateOrderRequest(BaseModel):
    """Alanlar bilerek tipsiz: yanlış tipli/eksik değerler 422 değil, servis katmanında 400 ile döner."""
    model_config = ConfigDict(populate_by_name=True)

    customer: Any = None
    items: Any = None
    payment_method: Any = Field(default=None, alias="paymentMethod")
    payment: Any = None  # Sadece "Kredi Karti" için: cardHolder, cardNumber, expiryMonth, expiryYear, cvv


class CreateOrderResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    order_no: str = Field(alias="orderNo")
    total: int
    tracking_status: str = Field(alias="trackingStatus")
    approval_code: str | None = Field(default=None, alias="approvalCode")


class UpdateStatusRequest(BaseModel):
    status: Any = None
