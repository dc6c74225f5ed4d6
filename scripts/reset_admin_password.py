#!/usr/bin/env python3
"""Admin şifresini sıfırlar (yoksa admin hesabı oluşturur). Proje kökünden:
   python3 scripts/reset_admin_password.py admin@ornek.com [yeni_sifre]"""
import argparse
import secrets
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from sqlmodel import Session, select  # noqa: E402

from storefront.core.database import engine, init_db  # noqa: E402
from storefront.core.security import hash_password  # noqa: E402
from storefront.core.text import normalize_email  # noqa: E402
from storefront.models import User  # noqa: E402


def reset_admin_password(email: str, password: str) -> User:
    init_db()
    with Session(engine) as db:
        user = db.exec(select(User).where(User.email == email)).first()
        if not user:
            user = User(email=email, hashed_password="", full_name="Admin", phone="")
        user.hashed_password = hash_password(password)
        user.is_admin = True
        db.add(user)
        db.commit()
        db.refresh(user)
        return user


def main():
    parser = argparse.ArgumentParser(description="Admin şifresini sıfırla")
    parser.add_argument("email")
    parser.add_argument("password", nargs="?", help="Boşsa rastgele üretilir")
    args = parser.parse_args()
    email = normalize_email(args.email)
    password = args.password or secrets.token_urlsafe(9)
    if len(password) < 6:
        parser.error("Şifre en az 6 karakter olmalı.")
    user = reset_admin_password(email, password)
    print(f"Admin şifresi güncellendi: {user.email} (id={user.id})")
    if not args.password:
        print(f"Yeni şifre: {password}")


if __name__ == "__main__":
    main()
