import hmac

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from storefront.core.config import settings
from storefront.core.database import get_db
from storefront.core.security import user_id_from_token
from storefront.core.store import DataStore, get_store
from storefront.errors import StorefrontError
from storefront.models import User
from storefront.services.catalog import ProductRepository
from storefront.services.orders import OrderService

security = HTTPBearer(auto_error=False)


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> int:
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Bu islem icin giris yapmalisiniz.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user_id = user_id_from_token(credentials.credentials)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Gecersiz veya suresi dolmus oturum.",
        )
    return user_id


def get_current_user(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> User:
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=401, detail="Bu islem icin giris yapmalisiniz.")
    return user


def _admin_secret_matches(provided: str | None) -> bool:
    """Timing-safe karşılaştırma; ADMIN_SECRET boşsa her zaman False."""
    expected = settings.admin_secret
    if not expected or not provided:
        return False
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


def require_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    x_admin_secret: str | None = Header(None, alias="X-Admin-Secret"),
    db: Session = Depends(get_db),
) -> User | None:
    """Admin kullanıcı token'ı veya X-Admin-Secret. Secret ile girişte kullanıcı None döner."""
    if _admin_secret_matches(x_admin_secret):
        return None
    user = get_current_user(get_current_user_id(credentials), db)
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Bu islem icin admin yetkisi gereklidir.")
    return user


def get_order_service(store: DataStore = Depends(get_store)) -> OrderService:
    return OrderService(store)


def get_product_repository(store: DataStore = Depends(get_store)) -> ProductRepository:
    return ProductRepository(store.products)


def to_http_error(exc: StorefrontError) -> HTTPException:
    """Alan hatasını HTTP hatasına çevirir; eksik müşteri alanları listelenir."""
    missing = getattr(exc, "missing_fields", None)
    if missing:
        return HTTPException(status_code=exc.status_code, detail={"message": exc.message, "missingFields": missing})
    return HTTPException(status_code=exc.status_code, detail=exc.message)
