"""Sipariş yaşam döngüsü: doğrulama sırası, tutarlar, hep-ya-hiç stok, iptal ve durum güncelleme."""
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone

import pytest

from storefront.core.store import DataStore, MemoryCollection
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
from storefront.models import User
from storefront.services.orders import OrderService, compute_shipping

from factories import customer_payload, sample_products, valid_card


@pytest.fixture
def service():
    return OrderService(DataStore.in_memory(products=sample_products()))


@pytest.fixture
def user():
    return User(id=1, email="ayse@example.com", hashed_password="x", full_name="Ayse Yilmaz", phone="5551234567")


def _stock(service, product_id):
    return service.products.get(product_id).stock


def _line(product_id="P2", size="M", quantity=1):
    return {"productId": product_id, "size": size, "quantity": quantity}


def _assert_totals(order):
    assert order.subtotal == sum(item.line_total for item in order.items)
    assert order.total == order.subtotal + (0 if order.subtotal >= 1500 else 79)


def test_compute_shipping_threshold():
    assert compute_shipping(1499) == 79
    assert compute_shipping(1500) == 0
    assert compute_shipping(0) == 79


def test_create_order_below_free_shipping(service, user):
    order = service.create_order(user, customer_payload(), [_line("P1", "M", 1)])
    assert order.order_no.startswith("GS-")
    assert order.subtotal == 500
    assert order.shipping == 79
    assert order.total == 579
    assert order.status == "Hazirlaniyor"
    assert order.cancelled is False
    assert order.payment_method == "Kapida Odeme"
    assert order.payment.to_json() == {"method": "Kapida Odeme"}
    assert order.customer.email == "ayse@example.com"
    _assert_totals(order)
    assert service.orders.get(order.order_no) is not None


def test_create_order_free_shipping(service, user):
    order = service.create_order(user, customer_payload(), [_line("P2", "L", 1), _line("P1", "M", 2)])
    assert order.subtotal == 1900
    assert order.shipping == 0
    assert order.total == 1900
    assert [(i.product_id, i.unit_price, i.line_total) for i in order.items] == [("P2", 900, 900), ("P1", 500, 1000)]
    _assert_totals(order)
    assert _stock(service, "P1") == 0
    assert _stock(service, "P2") == 9


def test_customer_defaults_from_profile(service, user):
    order = service.create_order(user, customer_payload(fullName="", phone=""), [_line()])
    assert order.customer.full_name == "Ayse Yilmaz"
    assert order.customer.phone == "5551234567"


def test_missing_customer_fields_listed(service, user):
    with pytest.raises(MissingCustomerFields) as exc:
        service.create_order(user, {"address": "  "}, [_line()])
    assert exc.value.missing_fields == ["address", "city", "district", "postalCode"]


def test_customer_checked_before_cart(service, user):
    with pytest.raises(MissingCustomerFields):
        service.create_order(user, None, [])


@pytest.mark.parametrize("items", [[], None, "P1"])
def test_empty_cart(service, user, items):
    with pytest.raises(EmptyCart):
        service.create_order(user, customer_payload(), items)


@pytest.mark.parametrize(
    "line,message",
    [
        (_line("nope"), "Urun bulunamadi: nope"),
        (_line("P1", "XL"), "Beden gecersiz: Basic Tisort"),
        (_line("P1", "M", 0), "Adet gecersiz: Basic Tisort"),
        (_line("P1", "M", -1), "Adet gecersiz: Basic Tisort"),
        (_line("P1", "M", "abc"), "Adet gecersiz: Basic Tisort"),
        (_line("P1", "M", 1.5), "Adet gecersiz: Basic Tisort"),
    ],
)
def test_invalid_cart_line(service, user, line, message):
    with pytest.raises(InvalidCartLine) as exc:
        service.create_order(user, customer_payload(), [line])
    assert exc.value.message == message


def test_quantity_as_digit_string_is_accepted(service, user):
    order = service.create_order(user, customer_payload(), [_line("P2", "M", "2")])
    assert order.items[0].quantity == 2


def test_insufficient_stock_is_all_or_nothing(service, user):
    with pytest.raises(InsufficientStock) as exc:
        service.create_order(user, customer_payload(), [_line("P2", "M", 3), _line("P1", "M", 3)])
    assert exc.value.message == "Yetersiz stok: Basic Tisort. Kalan stok: 2"
    assert _stock(service, "P2") == 10
    assert _stock(service, "P1") == 2
    assert service.orders.list() == []


def test_same_product_lines_are_summed_against_stock(service, user):
    with pytest.raises(InsufficientStock):
        service.create_order(user, customer_payload(), [_line("P1", "M", 1), _line("P1", "M", 2)])
    assert _stock(service, "P1") == 2


def test_stock_two_scenario(service, user):
    service.create_order(user, customer_payload(), [_line("P1", "M", 2)])
    assert _stock(service, "P1") == 0
    with pytest.raises(InsufficientStock):
        service.create_order(user, customer_payload(), [_line("P1", "M", 1)])
    assert _stock(service, "P1") == 0
    assert len(service.orders.list()) == 1


def test_card_payment_accepted(service, user):
    order = service.create_order(user, customer_payload(), [_line()], "Kredi Karti", valid_card())
    assert order.payment.method == "Kredi Karti"
    assert order.payment.card_last4 == "1111"
    assert order.payment.approval_code.startswith("APR-")
    stored = service.orders.collection.load()[0]
    assert "cardNumber" not in stored["payment"]
    assert "cvv" not in stored["payment"]


def test_luhn_invalid_card_rejected_before_order(service, user):
    with pytest.raises(PaymentRejected) as exc:
        service.create_order(
            user, customer_payload(), [_line()], "Kredi Karti", valid_card(cardNumber="4111111111111112")
        )
    assert exc.value.message == "Kart numarasi gecersiz."
    assert service.orders.list() == []
    assert _stock(service, "P2") == 10


def test_cancel_restores_stock_once(service, user):
    order = service.create_order(user, customer_payload(), [_line("P1", "M", 2)])
    cancelled = service.cancel_order(order.order_no, user_id=user.id)
    assert cancelled.cancelled is True
    assert cancelled.status == "Iptal Edildi"
    assert cancelled.cancelled_at is not None
    assert _stock(service, "P1") == 2

    with pytest.raises(AlreadyCancelled):
        service.cancel_order(order.order_no, user_id=user.id)
    with pytest.raises(AlreadyCancelled):
        service.cancel_order(order.order_no, admin=True)
    assert _stock(service, "P1") == 2


def test_self_cancel_of_delivered_order_fails_but_admin_cancel_succeeds(service, user):
    created = datetime.now(timezone.utc) - timedelta(hours=80)
    order = service.create_order(user, customer_payload(), [_line("P2", "M", 4)], now=created)
    assert order.to_public()["trackingStatus"] == "Teslim Edildi"

    with pytest.raises(NotCancellable):
        service.cancel_order(order.order_no, user_id=user.id)
    assert _stock(service, "P2") == 6

    cancelled = service.cancel_order(order.order_no, admin=True)
    assert cancelled.status == "Iptal Edildi"
    assert _stock(service, "P2") == 10


def test_cancel_of_other_users_order_is_not_found(service, user):
    order = service.create_order(user, customer_payload(), [_line()])
    with pytest.raises(OrderNotFound):
        service.cancel_order(order.order_no, user_id=999)
    assert service.orders.get(order.order_no).cancelled is False


def test_status_update_on_cancelled_order_uncancels_without_reserving(service, user):
    order = service.create_order(user, customer_payload(), [_line("P1", "M", 2)])
    service.cancel_order(order.order_no, user_id=user.id)
    assert _stock(service, "P1") == 2

    updated = service.update_status(order.order_no, "Yolda")
    assert updated.status == "Yolda"
    assert updated.cancelled is False
    assert _stock(service, "P1") == 2
    assert service.orders.get(order.order_no).cancelled is False


@pytest.mark.parametrize("status", ["Iptal Edildi", "", None, "Kayip"])
def test_status_update_rejects_unknown_status(service, user, status):
    order = service.create_order(user, customer_payload(), [_line()])
    with pytest.raises(InvalidStatus):
        service.update_status(order.order_no, status)


def test_status_update_unknown_order(service):
    with pytest.raises(OrderNotFound):
        service.update_status("GS-00000000-000", "Yolda")


def test_lists_are_newest_first(service, user):
    now = datetime.now(timezone.utc)
    old = service.create_order(user, customer_payload(), [_line()], now=now - timedelta(days=3))
    new = service.create_order(user, customer_payload(), [_line()], now=now)
    other = User(id=2, email="b@example.com", hashed_password="x", full_name="B", phone="1")
    service.create_order(other, customer_payload(), [_line()], now=now - timedelta(days=1))

    assert [o.order_no for o in service.list_for_user(user.id)] == [new.order_no, old.order_no]
    assert len(service.list_all()) == 3
    assert service.list_all()[0].order_no == new.order_no
    assert service.get_for_user(old.order_no, user.id).order_no == old.order_no
    with pytest.raises(OrderNotFound):
        service.get_for_user(old.order_no, other.id)


def test_invalid_order_record_is_skipped(service, user):
    order = service.create_order(user, customer_payload(), [_line()])
    raw = service.orders.collection.load()
    raw.append({"orderNo": "GS-bozuk", "userId": "abc"})
    service.orders.collection.save(raw)

    assert [o.order_no for o in service.list_all()] == [order.order_no]
    service.cancel_order(order.order_no, user_id=user.id)
    assert {"orderNo": "GS-bozuk", "userId": "abc"} in service.orders.collection.load()


class _FailingOrders(MemoryCollection):
    fail = False

    def save(self, items):
        if self.fail:
            raise OSError("disk full")
        super().save(items)


def test_failed_cancel_write_keeps_stock_reserved(user):
    orders = _FailingOrders()
    service = OrderService(DataStore(products=MemoryCollection(sample_products()), orders=orders))
    order = service.create_order(user, customer_payload(), [_line("P1", "M", 2)])
    assert _stock(service, "P1") == 0

    orders.fail = True
    with pytest.raises(OSError):
        service.cancel_order(order.order_no, user_id=user.id)
    assert _stock(service, "P1") == 0
    assert service.orders.get(order.order_no).cancelled is False


def test_concurrent_checkouts_never_oversell(tmp_path, user):
    store = DataStore.from_directory(tmp_path)
    products = sample_products()
    products[1]["stock"] = 10
    store.products.save(products)

    def checkout(_):
        try:
            OrderService(store).create_order(user, customer_payload(), [_line("P2", "M", 1)])
            return True
        except InsufficientStock:
            return False

    with ThreadPoolExecutor(max_workers=15) as pool:
        results = list(pool.map(checkout, range(15)))

    service = OrderService(store)
    succeeded = results.count(True)
    assert succeeded == 10
    assert _stock(service, "P2") == 10 - succeeded
    saved = service.list_all()
    assert len(saved) == succeeded
    assert len({o.order_no for o in saved}) == succeeded
