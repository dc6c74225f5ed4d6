"""Kargo takip durumu: siparişin yaşına göre hesaplanır, hiçbir yerde saklanmaz."""
from datetime import datetime, timezone

from storefront.models.order import (
    STATUS_DELIVERED,
    STATUS_IN_TRANSIT,
    STATUS_PREPARING,
    STATUS_SHIPPED,
)

# (üst sınır saat, durum); son eşiği geçen sipariş teslim edilmiş sayılır
_TRACKING_STEPS = (
    (2, STATUS_PREPARING),
    (24, STATUS_SHIPPED),
    (72, STATUS_IN_TRANSIT),
)


def _as_utc(value: datetime | str | None) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def resolve_tracking_status(created_at: datetime | str | None, now: datetime | None = None) -> str:
    created = _as_utc(created_at)
    if created is None:
        return STATUS_PREPARING
    now = _as_utc(now) or datetime.now(timezone.utc)
    age_hours = (now - created).total_seconds() / 3600
    for limit, status in _TRACKING_STEPS:
        if age_hours < limit:
            return status
    return STATUS_DELIVERED
