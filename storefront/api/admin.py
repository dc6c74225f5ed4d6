"""Yönetim API: admin kullanıcı token'ı veya X-Admin-Secret ile. Siparişler, ürünler, admin hesapları."""
import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlmodel import Session, select

from storefront.api.auth import user_response
from storefront.api.deps import get_order_service, get_product_repository, require_admin, to_http_error
from storefront.core.database import get_db
from storefront.core.security import hash_password
from storefront.core.text import is_email_valid, normalize_email, normalize_text
from storefront.errors import StorefrontError
from storefront.models import User
from storefront.schemas import UpdateStatusRequest
from storefront.services.catalog import ProductRepository, create_product, update_product
from storefront.services.orders import OrderService

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])
log = logging.getLogger(__name__)


# ---------- Siparişler ----------
@router.get("/orders")
def admin_orders(service: OrderService = Depends(get_order_service)):
    return [o.to_public() for o in service.list_all()]


@router.put("/orders/{order_no}/status")
def admin_update_status(
    order_no: str,
    body: UpdateStatusRequest,
    service: OrderService = Depends(get_order_service),
):
    """Kalıcı durumu ayarlar; iptal edilmiş sipariş bu işlemle tekrar aktifleşir."""
    try:
        order = service.update_status(order_no, body.status)
    except StorefrontError as e:
        raise to_http_error(e)
    return {"message": "Siparis durumu guncellendi.", "order": order.to_public()}


@router.post("/orders/{order_no}/cancel")
def admin_cancel_order(order_no: str, service: OrderService = Depends(get_order_service)):
    """Admin iptali teslim kontrolü yapmaz."""
    try:
        order = service.cancel_order(order_no, admin=True)
    except StorefrontError as e:
        raise to_http_error(e)
    return {"message": "Siparis basariyla iptal edildi.", "order": order.to_public()}


# ---------- Ürünler ----------
@router.post("/products", status_code=201)
def admin_create_product(
    data: dict[str, Any] = Body(...),
    repo: ProductRepository = Depends(get_product_repository),
):
    try:
        product = create_product(repo, data)
    except StorefrontError as e:
        raise to_http_error(e)
    log.info("Product created: id=%s", product.id)
    return {"message": "Urun basariyla eklendi.", "product": product.to_json()}


@router.put("/products/{product_id}")
def admin_update_product(
    product_id: str,
    data: dict[str, Any] = Body(...),
    repo: ProductRepository = Depends(get_product_repository),
):
    try:
        product = update_product(repo, normalize_text(product_id), data)
    except StorefrontError as e:
        raise to_http_error(e)
    return {"message": "Urun basariyla guncellendi.", "product": product.to_json()}


@router.delete("/products/{product_id}")
def admin_delete_product(product_id: str, repo: ProductRepository = Depends(get_product_repository)):
    try:
        repo.delete(normalize_text(product_id))
    except StorefrontError as e:
        raise to_http_error(e)
    log.info("Product deleted: id=%s", product_id)
    return {"message": "Urun basariyla silindi."}


# ---------- Admin hesapları ----------
@router.post("/users", status_code=201)
def admin_create_user(data: dict[str, Any] = Body(...), db: Session = Depends(get_db)):
    full_name = normalize_text(data.get("fullName"))
    email = normalize_email(data.get("email"))
    password = str(data.get("password") or "")
    if not full_name or not email or not password:
        raise HTTPException(status_code=400, detail="Tum alanlar zorunludur.")
    if not is_email_valid(email):
        raise HTTPException(status_code=400, detail="E-posta formati gecersiz.")
    if len(password) < 6:
        raise HTTPException(status_code=400, detail="Sifre en az 6 karakter olmalidir.")
    if db.exec(select(User).where(User.email == email)).first():
        raise HTTPException(status_code=409, detail="Bu e-posta ile kayitli bir hesap var.")
    user = User(email=email, hashed_password=hash_password(password), full_name=full_name, phone="", is_admin=True)
    db.add(user)
    db.commit()
    db.refresh(user)
    log.info("Admin user created: user_id=%s", user.id)
    return {"message": "Admin kullanici basariyla eklendi.", "user": user_response(user)}


@router.get("/users")
def admin_users(db: Session = Depends(get_db)):
    users = db.exec(select(User).order_by(User.id)).all()
    return [user_response(u) for u in users]
