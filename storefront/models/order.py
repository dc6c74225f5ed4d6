"""Sipariş belgesi ve durum sabitleri."""
from datetime import datetime
from typing import Any

from pydantic import Field

from .document import Document

# Kalıcı durumlar (admin tarafından ayarlanabilir) ve iptal
STATUS_PREPARING = "Hazirlaniyor"
STATUS_SHIPPED = "Kargoya Verildi"
STATUS_IN_TRANSIT = "Yolda"
STATUS_DELIVERED = "Teslim Edildi"
STATUS_CANCELLED = "Iptal Edildi"

ACTIVE_STATUSES = (STATUS_PREPARING, STATUS_SHIPPED, STATUS_IN_TRANSIT, STATUS_DELIVERED)

PAYMENT_CARD = "Kredi Karti"
PAYMENT_CASH_ON_DELIVERY = "Kapida Odeme"


class Customer(Document):
    full_name: str
    email: str
    phone: str
    address: str
    city: str
    district: str
    postal_code: str


class OrderItem(Document):
    product_id: str
    name: str
    size: str
    quantity: int = Field(gt=0)
    unit_price: int
    line_total: int


class PaymentSnapshot(Document):
    """Kart ödemesinde sadece maskelenmiş bilgiler; numara, SKT ve CVV saklanmaz."""

    method: str
    card_holder: str | None = None
    card_brand: str | None = None
    card_last4: str | None = None
    approval_code: str | None = None


class Order(Document):
    order_no: str
    user_id: int
    created_at: datetime
    customer: Customer
    items: list[OrderItem]
    payment_method: str
    payment: PaymentSnapshot
    subtotal: int
    shipping: int
    total: int
    status: str = STATUS_PREPARING
    cancelled: bool = False
    cancelled_at: datetime | None = None

    def to_public(self, now: datetime | None = None) -> dict[str, Any]:
        """JSON gösterimi + kayıt yaşına göre hesaplanan trackingStatus (saklanmaz)."""
        from storefront.services.tracking import resolve_tracking_status

        data = self.to_json()
        data["trackingStatus"] = resolve_tracking_status(self.created_at, now)
        return data
