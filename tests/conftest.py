"""Pytest fixtures: test client, in-memory SQLite kullanıcı DB'si, bellek içi ürün/sipariş koleksiyonları."""
import os
import tempfile
import uuid

import pytest
from fastapi.testclient import TestClient

from factories import ADMIN_SECRET, sample_products

# Test ortamı (app import edilmeden önce set edilmeli)
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="storefront-test-"))
os.environ.setdefault("ADMIN_SECRET", ADMIN_SECRET)
# Rate limit yüksek olsun ki tüm testler geçebilsin
os.environ.setdefault("RATE_LIMIT_PER_MINUTE", "1000")
os.environ.setdefault("RATE_LIMIT_AUTH_PER_MINUTE", "1000")

from sqlmodel import Session

from storefront.core.database import engine, init_db
from storefront.core.security import create_access_token, hash_password
from storefront.core.store import DataStore, get_store
from storefront.main import app
from storefront.models import User


@pytest.fixture
def store():
    return DataStore.in_memory(products=sample_products())


@pytest.fixture(scope="function")
def client(store):
    """TestClient; ürün/sipariş koleksiyonları bellek içi store ile değiştirilir."""
    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def _create_user(is_admin: bool = False) -> User:
    init_db()
    with Session(engine) as db:
        user = User(
            email=f"{uuid.uuid4().hex[:12]}@example.com",
            hashed_password=hash_password("test123456"),
            full_name="Ayse Yilmaz",
            phone="5551234567",
            is_admin=is_admin,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user


def _headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def user():
    return _create_user()


@pytest.fixture
def auth_headers(user):
    """Kayıtlı kullanıcı token'ı ile Authorization header döner."""
    return _headers(user)


@pytest.fixture
def other_headers():
    return _headers(_create_user())


@pytest.fixture
def admin_headers():
    return _headers(_create_user(is_admin=True))
