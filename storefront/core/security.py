"""Şifre hash'i (bcrypt) ve oturum token'ı (JWT, sub = kullanıcı id)."""
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from .config import settings

ALGORITHM = "HS256"
MAX_BCRYPT_BYTES = 72  # bcrypt 72 bayttan sonrasını yok sayar


def hash_password(password: str) -> str:
    p = password.encode("utf-8")[:MAX_BCRYPT_BYTES]
    return bcrypt.hashpw(p, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    p = plain.encode("utf-8")[:MAX_BCRYPT_BYTES]
    try:
        return bcrypt.checkpw(p, (hashed or "").encode("utf-8"))
    except ValueError:
        # Boş veya bozuk hash (ör. şifresi henüz atanmamış admin)
        return False


def create_access_token(user_id: int, expires_minutes: int | None = None) -> str:
    minutes = settings.access_token_expire_minutes if expires_minutes is None else expires_minutes
    payload = {
        "sub": str(user_id),
        "exp": datetime.now(timezone.utc) + timedelta(minutes=minutes),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def user_id_from_token(token: str) -> int | None:
    """Geçerli token'dan kullanıcı id; imza/süre hatası veya bozuk sub için None."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return None
    try:
        return int(payload.get("sub"))
    except (TypeError, ValueError):
        return None
