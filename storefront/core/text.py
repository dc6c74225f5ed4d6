"""İstek gövdesinden gelen serbest değerlerin normalizasyonu."""
import re
from typing import Any

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_NON_DIGIT = re.compile(r"\D")
_EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_text(value: Any) -> str:
    """None -> "", baş/son boşluk kırpılır, < ve > karakterleri atılır."""
    if value is None:
        return ""
    return str(value).strip().replace("<", "").replace(">", "")


def normalize_email(value: Any) -> str:
    return normalize_text(value).lower()


def is_email_valid(email: str) -> bool:
    return bool(_EMAIL.match(email or ""))


def only_digits(value: Any) -> str:
    return _NON_DIGIT.sub("", normalize_text(value))


def to_int(value: Any) -> int | None:
    """Baştaki tam sayıyı okur ("07" -> 7, "12/" -> 12); okunamazsa None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    m = _LEADING_INT.match(str(value))
    return int(m.group(1)) if m else None


def to_quantity(value: Any) -> int | None:
    """Sepet adedi: tam sayı veya yalnızca rakam içeren metin; aksi halde None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None
