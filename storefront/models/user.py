from datetime import datetime, timezone

from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    email: str = Field(unique=True, index=True)
    hashed_password: str
    full_name: str = ""
    phone: str | None = None
    is_admin: bool = False  # Yönetim paneli: sipariş / ürün / admin hesabı yönetimi
    created_at: datetime | None = Field(default_factory=_utcnow)
