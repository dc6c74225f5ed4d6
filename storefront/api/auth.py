import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlmodel import Session, select

from storefront.api.deps import get_current_user
from storefront.core.database import get_db
from storefront.core.rate_limit import AUTH_RATE_LIMIT, get_client_ip, limiter
from storefront.core.security import create_access_token, hash_password, verify_password
from storefront.core.text import is_email_valid, normalize_email, normalize_text
from storefront.models import User
from storefront.schemas import (
    ChangePasswordRequest,
    DeleteAccountRequest,
    ProfileUpdate,
    Token,
    UserCreate,
    UserLogin,
    UserResponse,
)

router = APIRouter(prefix="/auth", tags=["auth"])
log = logging.getLogger(__name__)


def user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id or 0,
        email=user.email,
        full_name=user.full_name or "",
        phone=user.phone,
        is_admin=bool(user.is_admin),
    )


@router.post("/register", response_model=Token, status_code=201)
@limiter.limit(AUTH_RATE_LIMIT)
def register(request: Request, body: UserCreate, db: Session = Depends(get_db)):
    email = normalize_email(body.email)
    full_name = normalize_text(body.full_name)
    phone = normalize_text(body.phone)
    if not full_name or not email or not phone:
        raise HTTPException(status_code=400, detail="Kayit icin tum alanlar zorunludur.")
    if not is_email_valid(email):
        raise HTTPException(status_code=400, detail="E-posta formati gecersiz.")
    if db.exec(select(User).where(User.email == email)).first():
        raise HTTPException(status_code=409, detail="Bu e-posta ile kayitli bir hesap var.")
    user = User(
        email=email,
        hashed_password=hash_password(body.password),
        full_name=full_name,
        phone=phone,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    log.info("User registered: user_id=%s ip=%s", user.id, get_client_ip(request))
    return Token(access_token=create_access_token(user.id), user=user_response(user))


@router.post("/login", response_model=Token)
@limiter.limit(AUTH_RATE_LIMIT)
def login(request: Request, body: UserLogin, db: Session = Depends(get_db)):
    email = normalize_email(body.email)
    if not email or not body.password:
        raise HTTPException(status_code=400, detail="E-posta ve sifre zorunludur.")
    user = db.exec(select(User).where(User.email == email)).first()
    if not user or not verify_password(body.password, user.hashed_password):
        log.warning("Failed login: email=%s ip=%s", email, get_client_ip(request))
        raise HTTPException(status_code=401, detail="E-posta veya sifre hatali.")
    return Token(access_token=create_access_token(user.id), user=user_response(user))


@router.get("/me", response_model=UserResponse)
def me(user: User = Depends(get_current_user)):
    return user_response(user)


@router.post("/change-password")
@limiter.limit(AUTH_RATE_LIMIT)
def change_password(
    request: Request,
    body: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not body.current_password or not body.new_password:
        raise HTTPException(status_code=400, detail="Mevcut ve yeni sifre zorunludur.")
    if len(body.new_password) < 6:
        raise HTTPException(status_code=400, detail="Yeni sifre en az 6 karakter olmalidir.")
    if not verify_password(body.current_password, user.hashed_password):
        log.warning("Password change rejected: user_id=%s ip=%s", user.id, get_client_ip(request))
        raise HTTPException(status_code=400, detail="Mevcut sifre hatali.")
    user.hashed_password = hash_password(body.new_password)
    db.add(user)
    db.commit()
    log.info("Password changed: user_id=%s", user.id)
    return {"message": "Sifre basariyla degistirildi."}


@router.patch("/profile")
def update_profile(
    body: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Ad soyad ve telefon; e-posta değiştirilemez."""
    full_name = normalize_text(body.full_name)
    phone = normalize_text(body.phone)
    if not full_name or not phone:
        raise HTTPException(status_code=400, detail="Ad Soyad ve Telefon zorunludur.")
    user.full_name = full_name
    user.phone = phone
    db.add(user)
    db.commit()
    db.refresh(user)
    return {"message": "Profil basariyla guncellendi.", "user": user_response(user)}


@router.delete("/account")
@limiter.limit(AUTH_RATE_LIMIT)
def delete_account(
    request: Request,
    body: DeleteAccountRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Hesabı siler; mevcut token'lar kullanıcı bulunamadığı için 401 döner. Siparişler kayıtta kalır."""
    if not body.password:
        raise HTTPException(status_code=400, detail="Hesabi silmek icin sifre gerekli.")
    if not verify_password(body.password, user.hashed_password):
        raise HTTPException(status_code=400, detail="Sifre hatali.")
    user_id = user.id
    db.delete(user)
    db.commit()
    log.info("Account deleted: user_id=%s ip=%s", user_id, get_client_ip(request))
    return {"message": "Hesap basariyla silindi."}
