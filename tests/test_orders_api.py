"""Sipariş uçları: oluşturma, listeleme, takip, iptal ve admin işlemleri."""
from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from factories import ADMIN_SECRET, customer_payload, valid_card


def _order_body(**overrides) -> dict:
    body = {
        "customer": customer_payload(),
        "items": [{"productId": "P1", "size": "M", "quantity": 1}],
        "paymentMethod": "Kapida Odeme",
    }
    body.update(overrides)
    return body


def _stock(store, product_id):
    return next(p["stock"] for p in store.products.load() if p["id"] == product_id)


def test_create_order_requires_auth(client: TestClient):
    r = client.post("/api/orders", json=_order_body())
    assert r.status_code == 401
    assert "message" in r.json()


def test_create_order_success(client: TestClient, auth_headers: dict, store):
    r = client.post("/api/orders", json=_order_body(), headers=auth_headers)
    assert r.status_code == 201
    j = r.json()
    assert j["message"] == "Siparis alindi."
    assert j["orderNo"].startswith("GS-")
    assert j["total"] == 579
    assert j["trackingStatus"] == "Hazirlaniyor"
    assert j["approvalCode"] is None
    assert _stock(store, "P1") == 1
    assert "X-Request-ID" in r.headers


def test_create_order_with_card_returns_approval_code(client: TestClient, auth_headers: dict):
    r = client.post(
        "/api/orders",
        json=_order_body(paymentMethod="Kredi Karti", payment=valid_card()),
        headers=auth_headers,
    )
    assert r.status_code == 201
    assert r.json()["approvalCode"].startswith("APR-")


def test_create_order_missing_fields(client: TestClient, auth_headers: dict):
    r = client.post(
        "/api/orders",
        json=_order_body(customer={"address": "Ataturk Cad."}),
        headers=auth_headers,
    )
    assert r.status_code == 400
    j = r.json()
    assert j["message"] == "Musteri bilgileri eksik."
    assert j["missingFields"] == ["city", "district", "postalCode"]


def test_create_order_empty_cart(client: TestClient, auth_headers: dict):
    r = client.post("/api/orders", json=_order_body(items=[]), headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["message"] == "Sepet bos olamaz."


def test_invalid_card_creates_no_order(client: TestClient, auth_headers: dict, store):
    r = client.post(
        "/api/orders",
        json=_order_body(paymentMethod="Kredi Karti", payment=valid_card(cardNumber="4111111111111112")),
        headers=auth_headers,
    )
    assert r.status_code == 400
    assert r.json()["message"] == "Kart numarasi gecersiz."
    assert store.orders.load() == []
    assert _stock(store, "P1") == 2


def test_stock_exhaustion_scenario(client: TestClient, auth_headers: dict, store):
    items = [{"productId": "P1", "size": "M", "quantity": 2}]
    assert client.post("/api/orders", json=_order_body(items=items), headers=auth_headers).status_code == 201
    assert _stock(store, "P1") == 0
    items = [{"productId": "P1", "size": "M", "quantity": 1}]
    r = client.post("/api/orders", json=_order_body(items=items), headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["message"].startswith("Yetersiz stok: Basic Tisort")


def test_my_orders_and_tracking(client: TestClient, auth_headers: dict, other_headers: dict):
    order_no = client.post("/api/orders", json=_order_body(), headers=auth_headers).json()["orderNo"]

    r = client.get("/api/orders/my", headers=auth_headers)
    assert r.status_code == 200
    orders = r.json()
    assert [o["orderNo"] for o in orders] == [order_no]
    assert orders[0]["trackingStatus"] == "Hazirlaniyor"
    assert orders[0]["subtotal"] == sum(i["lineTotal"] for i in orders[0]["items"])

    r = client.get(f"/api/orders/track/{order_no}", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["orderNo"] == order_no
    assert client.get(f"/api/orders/{order_no}", headers=auth_headers).status_code == 200

    assert client.get(f"/api/orders/track/{order_no}", headers=other_headers).status_code == 404
    assert client.get("/api/orders/my", headers=other_headers).json() == []


def test_cancel_twice(client: TestClient, auth_headers: dict, store):
    order_no = client.post("/api/orders", json=_order_body(), headers=auth_headers).json()["orderNo"]
    assert _stock(store, "P1") == 1

    r = client.post(f"/api/orders/{order_no}/cancel", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["order"]["status"] == "Iptal Edildi"
    assert r.json()["order"]["cancelled"] is True
    assert "cancelledAt" in r.json()["order"]
    assert _stock(store, "P1") == 2

    r = client.post(f"/api/orders/{order_no}/cancel", headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["message"] == "Bu siparis zaten iptal edilmis."
    assert _stock(store, "P1") == 2


def test_cancel_unknown_order(client: TestClient, auth_headers: dict):
    assert client.post("/api/orders/GS-1-1/cancel", headers=auth_headers).status_code == 404


def test_delivered_order_self_cancel_vs_admin_cancel(
    client: TestClient, auth_headers: dict, admin_headers: dict, store
):
    order_no = client.post("/api/orders", json=_order_body(), headers=auth_headers).json()["orderNo"]
    raw = store.orders.load()
    raw[0]["createdAt"] = (datetime.now(timezone.utc) - timedelta(hours=100)).isoformat()
    store.orders.save(raw)

    r = client.post(f"/api/orders/{order_no}/cancel", headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["message"] == "Teslim edilmis siparisler iptal edilemez."
    assert _stock(store, "P1") == 1

    r = client.post(f"/api/admin/orders/{order_no}/cancel", headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["order"]["trackingStatus"] == "Teslim Edildi"
    assert _stock(store, "P1") == 2


def test_admin_endpoints_require_admin(client: TestClient, auth_headers: dict):
    assert client.get("/api/admin/orders").status_code == 401
    r = client.get("/api/admin/orders", headers=auth_headers)
    assert r.status_code == 403
    assert r.json()["message"] == "Bu islem icin admin yetkisi gereklidir."


def test_admin_secret_header(client: TestClient):
    assert client.get("/api/admin/orders", headers={"X-Admin-Secret": ADMIN_SECRET}).status_code == 200
    assert client.get("/api/admin/orders", headers={"X-Admin-Secret": "wrong"}).status_code == 401


def test_admin_status_update_uncancels(client: TestClient, auth_headers: dict, admin_headers: dict, store):
    order_no = client.post("/api/orders", json=_order_body(), headers=auth_headers).json()["orderNo"]
    client.post(f"/api/admin/orders/{order_no}/cancel", headers=admin_headers)
    assert _stock(store, "P1") == 2

    r = client.put(f"/api/admin/orders/{order_no}/status", json={"status": "Kargoya Verildi"}, headers=admin_headers)
    assert r.status_code == 200
    order = r.json()["order"]
    assert order["status"] == "Kargoya Verildi"
    assert order["cancelled"] is False
    assert _stock(store, "P1") == 2

    r = client.put(f"/api/admin/orders/{order_no}/status", json={"status": "Iptal Edildi"}, headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["message"] == "Gecersiz durum degeri."
    r = client.put("/api/admin/orders/GS-1-1/status", json={"status": "Yolda"}, headers=admin_headers)
    assert r.status_code == 404


def test_admin_lists_all_orders(client: TestClient, auth_headers: dict, other_headers: dict, admin_headers: dict):
    client.post("/api/orders", json=_order_body(), headers=auth_headers)
    client.post("/api/orders", json=_order_body(), headers=other_headers)
    r = client.get("/api/admin/orders", headers=admin_headers)
    assert r.status_code == 200
    assert len(r.json()) == 2
    assert all("trackingStatus" in o for o in r.json())


def test_wrongly_typed_body_fields_return_400(client: TestClient, auth_headers: dict, store):
    r = client.post("/api/orders", json=_order_body(customer="x"), headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["missingFields"] == ["address", "city", "district", "postalCode"]

    r = client.post("/api/orders", json=_order_body(items="abc"), headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["message"] == "Sepet bos olamaz."

    r = client.post("/api/orders", json=_order_body(paymentMethod="Kredi Karti", payment="x"), headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["message"] == "Kart uzerindeki isim gecersiz."

    assert store.orders.load() == []
    assert _stock(store, "P1") == 2


def test_admin_status_with_wrong_type_is_400(client: TestClient, auth_headers: dict, admin_headers: dict):
    order_no = client.post("/api/orders", json=_order_body(), headers=auth_headers).json()["orderNo"]
    r = client.put(f"/api/admin/orders/{order_no}/status", json={"status": 5}, headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["message"] == "Gecersiz durum degeri."
