"""Müşteri sipariş uçları: oluşturma, listeleme, takip ve iptal."""
from fastapi import APIRouter, Depends, Request

from storefront.api.deps import get_current_user, get_order_service, to_http_error
from storefront.core.rate_limit import DEFAULT_RATE_LIMIT, limiter
from storefront.errors import StorefrontError
from storefront.models import User
from storefront.schemas import CreateOrderRequest, CreateOrderResponse
from storefront.services.orders import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", response_model=CreateOrderResponse, status_code=201)
@limiter.limit(DEFAULT_RATE_LIMIT)
def create_order(
    request: Request,
    body: CreateOrderRequest,
    user: User = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    try:
        order = service.create_order(
            user,
            customer=body.customer,
            items=body.items,
            payment_method=body.payment_method,
            payment=body.payment,
        )
    except StorefrontError as e:
        raise to_http_error(e)
    public = order.to_public()
    return CreateOrderResponse(
        message="Siparis alindi.",
        order_no=order.order_no,
        total=order.total,
        tracking_status=public["trackingStatus"],
        approval_code=order.payment.approval_code,
    )


@router.get("/my")
def my_orders(
    user: User = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    return [o.to_public() for o in service.list_for_user(user.id)]


@router.get("/track/{order_no}")
def track_order(
    order_no: str,
    user: User = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    try:
        return service.get_for_user(order_no, user.id).to_public()
    except StorefrontError as e:
        raise to_http_error(e)


@router.get("/{order_no}")
def get_order(
    order_no: str,
    user: User = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    try:
        return service.get_for_user(order_no, user.id).to_public()
    except StorefrontError as e:
        raise to_http_error(e)


@router.post("/{order_no}/cancel")
def cancel_order(
    order_no: str,
    user: User = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    """Müşteri iptali: teslim edilmiş (takip durumu) siparişler iptal edilemez."""
    try:
        order = service.cancel_order(order_no, user_id=user.id)
    except StorefrontError as e:
        raise to_http_error(e)
    return {"message": "Siparis basariyla iptal edildi.", "order": order.to_public()}
