from sqlalchemy import text
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from .config import settings


def _normalized_database_url(raw_url: str) -> str:
    """
    DATABASE_URL normalizasyonu:
    - postgres:// veya postgresql:// ise psycopg3 dialekti ile çalışacak şekilde dönüştür.
    - Diğer tüm durumlarda olduğu gibi bırak (SQLite vs.).
    """
    if not raw_url:
        return "sqlite:///./storefront.db"
    raw_url = raw_url.strip()
    if raw_url.startswith("postgres://"):
        return "postgresql+psycopg://" + raw_url[len("postgres://") :]
    if raw_url.startswith("postgresql://") and "+psycopg" not in raw_url.split("://", 1)[0]:
        return "postgresql+psycopg://" + raw_url[len("postgresql://") :]
    return raw_url


DATABASE_URL = _normalized_database_url(settings.database_url)

# In-memory SQLite: tek bağlantı kullan ki init_db tabloları tüm isteklerde görünsün (testler için)
_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
_use_static_pool = DATABASE_URL.startswith("sqlite") and ":memory:" in DATABASE_URL
engine = create_engine(
    DATABASE_URL,
    connect_args=_connect_args,
    poolclass=StaticPool if _use_static_pool else None,
)


def get_db():
    with Session(engine) as session:
        yield session


def init_db():
    # Tablo kayıtları için modeller import edilmiş olmalı
    from storefront import models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def database_ok() -> bool:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
