"""
Sipariş yaşam döngüsü: sepet doğrulama, tutar hesabı, kayıt, stok düşümü, iptal ve admin durum güncellemesi.

Sipariş oluşturma ya hep ya hiç çalışır: tüm satırlar ve ödeme doğrulanmadan stoğa dokunulmaz.
Ürün ve sipariş koleksiyonlarına birlikte dokunan işlemler kilitleri sabit sırada alır (önce ürünler).
"""
from __future__ import annotations

import logging
import secrets
import time
from collections import defaultdict
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator

from pydantic import ValidationError

from storefront.core.config import settings
from storefront.core.store import Collection, DataStore
from storefront.core.text import normalize_text, to_quantity
from storefront.errors import (
    AlreadyCancelled,
    EmptyCart,
    InsufficientStock,
    InvalidCartLine,
    InvalidStatus,
    MissingCustomerFields,
    NotCancellable,
    OrderNotFound,
    PaymentRejected,
)
from storefront.models.order import (
    ACTIVE_STATUSES,
    PAYMENT_CARD,
    STATUS_CANCELLED,
    STATUS_DELIVERED,
    STATUS_PREPARING,
    Customer,
    Order,
    OrderItem,
    PaymentSnapshot,
)
from storefront.models.user import User
from storefront.services.catalog import ProductRepository
from storefront.services.payment import validate_card_payment
from storefront.services.stock import StockLedger
from storefront.services.tracking import resolve_tracking_status

logger = logging.getLogger(__name__)

CUSTOMER_FIELDS = ("fullName", "email", "phone", "address", "city", "district", "postalCode")


class OrderRepository:
    def __init__(self, collection: Collection):
        self.collection = collection

    @property
    def lock(self):
        return self.collection.lock

    def list(self) -> list[Order]:
        """Doğrulanamayan sipariş kayıtları uyarı ile atlanır; dosyada olduğu gibi kalır."""
        orders = []
        for raw in self.collection.load():
            try:
                orders.append(Order.model_validate(raw))
            except ValidationError as e:
                order_no = raw.get("orderNo") if isinstance(raw, dict) else None
                logger.warning("Gecersiz siparis kaydi atlandi: orderNo=%s (%d hata)", order_no, e.error_count())
        return orders

    def get(self, order_no: str) -> Order | None:
        return next((o for o in self.list() if o.order_no == order_no), None)

    def add(self, order: Order) -> Order:
        with self.lock:
            raw = self.collection.load()
            raw.append(order.to_json())
            self.collection.save(raw)
        return order

    def update(self, order: Order) -> Order:
        with self.lock:
            raw = self.collection.load()
            for i, o in enumerate(raw):
                if isinstance(o, dict) and o.get("orderNo") == order.order_no:
                    raw[i] = order.to_json()
                    break
            else:
                raise OrderNotFound(order.order_no)
            self.collection.save(raw)
        return order


def create_order_no() -> str:
    stamp = str(int(time.time() * 1000))[-8:]
    return f"GS-{stamp}-{100 + secrets.randbelow(900)}"


def compute_shipping(subtotal: int, threshold: int | None = None, fee: int | None = None) -> int:
    threshold = settings.free_shipping_threshold if threshold is None else threshold
    fee = settings.shipping_fee if fee is None else fee
    return 0 if subtotal >= threshold else fee


def _newest_first(orders: list[Order]) -> list[Order]:
    return sorted(orders, key=lambda o: o.created_at, reverse=True)


class OrderService:
    def __init__(self, store: DataStore):
        self.products = ProductRepository(store.products)
        self.orders = OrderRepository(store.orders)
        self.ledger = StockLedger(self.products)

    @contextmanager
    def _locked(self) -> Iterator[None]:
        with self.products.lock, self.orders.lock:
            yield

    # ---------- Oluşturma ----------
    def _clean_customer(self, user: User, customer: Any) -> Customer:
        customer = customer if isinstance(customer, dict) else {}
        values = {
            "fullName": normalize_text(customer.get("fullName")) or (user.full_name or ""),
            "email": user.email,
            "phone": normalize_text(customer.get("phone")) or (user.phone or ""),
            "address": normalize_text(customer.get("address")),
            "city": normalize_text(customer.get("city")),
            "district": normalize_text(customer.get("district")),
            "postalCode": normalize_text(customer.get("postalCode")),
        }
        missing = [key for key in CUSTOMER_FIELDS if not values[key]]
        if missing:
            raise MissingCustomerFields(missing)
        return Customer.model_validate(values)

    def _build_items(self, raw_items: list[Any]) -> list[OrderItem]:
        products = {p.id: p for p in self.products.list()}
        requested: dict[str, int] = defaultdict(int)
        items: list[OrderItem] = []
        for raw in raw_items:
            if not isinstance(raw, dict):
                raise InvalidCartLine("Sepet satiri gecersiz.")
            product_id = normalize_text(raw.get("productId"))
            size = normalize_text(raw.get("size"))
            quantity = to_quantity(raw.get("quantity"))

            product = products.get(product_id)
            if product is None:
                raise InvalidCartLine(f"Urun bulunamadi: {product_id}")
            if not size or size not in product.sizes:
                raise InvalidCartLine(f"Beden gecersiz: {product.name}")
            if quantity is None or quantity <= 0:
                raise InvalidCartLine(f"Adet gecersiz: {product.name}")
            # Aynı ürün farklı bedenlerle birden fazla satırda olabilir; toplam stoğu aşmamalı
            if requested[product.id] + quantity > product.stock:
                raise InsufficientStock(product.id, product.name, product.stock)
            requested[product.id] += quantity

            items.append(
                OrderItem(
                    product_id=product.id,
                    name=product.name,
                    size=size,
                    quantity=quantity,
                    unit_price=product.price,
                    line_total=product.price * quantity,
                )
            )
        return items

    def create_order(
        self,
        user: User,
        customer: Any,
        items: Any,
        payment_method: Any = None,
        payment: Any = None,
        now: datetime | None = None,
    ) -> Order:
        clean_customer = self._clean_customer(user, customer)
        if not isinstance(items, list) or not items:
            raise EmptyCart()

        with self._locked():
            order_items = self._build_items(items)

            method = normalize_text(payment_method) or settings.default_payment_method
            snapshot = PaymentSnapshot(method=method)
            if method == PAYMENT_CARD:
                snapshot, error = validate_card_payment(payment)
                if error:
                    raise PaymentRejected(error)

            subtotal = sum(item.line_total for item in order_items)
            shipping = compute_shipping(subtotal)
            existing = {o.get("orderNo") for o in self.orders.collection.load() if isinstance(o, dict)}
            order_no = create_order_no()
            while order_no in existing:
                order_no = create_order_no()

            order = Order(
                order_no=order_no,
                user_id=user.id,
                created_at=now or datetime.now(timezone.utc),
                customer=clean_customer,
                items=order_items,
                payment_method=method,
                payment=snapshot,
                subtotal=subtotal,
                shipping=shipping,
                total=subtotal + shipping,
                status=STATUS_PREPARING,
                cancelled=False,
            )
            self.orders.add(order)
            for item in order_items:
                self.ledger.reserve(item.product_id, item.quantity)

        logger.info(
            "Order created: order_no=%s user_id=%s items=%d total=%d payment=%s",
            order.order_no,
            order.user_id,
            len(order.items),
            order.total,
            order.payment_method,
        )
        return order

    # ---------- Sorgular ----------
    def list_for_user(self, user_id: int) -> list[Order]:
        return _newest_first([o for o in self.orders.list() if o.user_id == user_id])

    def list_all(self) -> list[Order]:
        return _newest_first(self.orders.list())

    def get_for_user(self, order_no: str, user_id: int) -> Order:
        order = self.orders.get(normalize_text(order_no))
        if order is None or order.user_id != user_id:
            raise OrderNotFound(order_no)
        return order

    def get(self, order_no: str) -> Order:
        order = self.orders.get(normalize_text(order_no))
        if order is None:
            raise OrderNotFound(order_no)
        return order

    # ---------- İptal / durum ----------
    def cancel_order(
        self,
        order_no: str,
        user_id: int | None = None,
        admin: bool = False,
        now: datetime | None = None,
    ) -> Order:
        """
        Siparişi iptal eder ve tüm satırların stoğunu iade eder.
        Kullanıcı iptalinde teslim edilmiş (takip durumu) siparişler reddedilir; admin iptalinde bu kontrol yapılmaz.
        """
        now = now or datetime.now(timezone.utc)
        with self._locked():
            order = self.get(order_no) if admin else self.get_for_user(order_no, user_id)
            if order.cancelled:
                raise AlreadyCancelled(order.order_no)
            if not admin and resolve_tracking_status(order.created_at, now) == STATUS_DELIVERED:
                raise NotCancellable(order.order_no)

            order.cancelled = True
            order.status = STATUS_CANCELLED
            order.cancelled_at = now
            # Önce sipariş yazılır; yazma hata verirse stok iade edilmemiş olur
            self.orders.update(order)
            for item in order.items:
                self.ledger.release(item.product_id, item.quantity)

        logger.info("Order cancelled: order_no=%s by=%s", order.order_no, "admin" if admin else f"user:{user_id}")
        return order

    def update_status(self, order_no: str, status: str | None) -> Order:
        """
        Admin kalıcı durumu ayarlar. İptal edilmiş bir sipariş bu yolla tekrar aktif olur
        (cancelled=false); stok yeniden düşülmez.
        """
        new_status = normalize_text(status)
        if new_status not in ACTIVE_STATUSES:
            raise InvalidStatus(new_status)
        with self.orders.lock:
            order = self.get(order_no)
            order.status = new_status
            if order.cancelled:
                order.cancelled = False
                logger.warning(
                    "Cancelled order reactivated by status update (stock not re-reserved): order_no=%s status=%s",
                    order.order_no,
                    new_status,
                )
            self.orders.update(order)
        return order
