from .order import Customer, Order, OrderItem, PaymentSnapshot
from .product import Product
from .user import User

__all__ = [
    "Customer",
    "Order",
    "OrderItem",
    "PaymentSnapshot",
    "Product",
    "User",
]
