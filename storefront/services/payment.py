"""
Kart ödemesi doğrulama (çevrimdışı simülasyon).

Gerçek bir sanal pos'a bağlanılmaz: kart sahibi, Luhn, son kullanma tarihi ve CVV
kontrol edilir; başarılıysa maskelenmiş bir ödeme özeti ve sentetik onay kodu üretilir.
"""
from __future__ import annotations

import calendar
import re
import secrets
import time
from datetime import datetime
from typing import Any

from storefront.core.text import normalize_text, only_digits, to_int
from storefront.models.order import PAYMENT_CARD, PaymentSnapshot

CARD_NUMBER_MIN_LEN = 13
CARD_NUMBER_MAX_LEN = 19

MSG_NAME_INVALID = "Kart uzerindeki isim gecersiz."
MSG_NUMBER_INVALID = "Kart numarasi gecersiz."
MSG_EXPIRY_INVALID = "Son kullanma tarihi gecersiz."
MSG_EXPIRED = "Kartin son kullanma tarihi gecmis."
MSG_CVV_INVALID = "CVV gecersiz."

_CVV = re.compile(r"^\d{3,4}$")
_BRANDS = (
    (re.compile(r"^4"), "Visa"),
    (re.compile(r"^(5[1-5]|2[2-7])"), "Mastercard"),
    (re.compile(r"^3[47]"), "Amex"),
)
GENERIC_BRAND = "Kart"


def luhn_valid(raw_number: Any) -> bool:
    """13-19 hane ve mod-10 (sağdan her ikinci hane iki katı) kontrolü."""
    digits = only_digits(raw_number)
    if not (CARD_NUMBER_MIN_LEN <= len(digits) <= CARD_NUMBER_MAX_LEN):
        return False
    total = 0
    for i, ch in enumerate(reversed(digits)):
        d = int(ch)
        if i % 2 == 1:
            d *= 2
            if d > 9:
                d -= 9
        total += d
    return total % 10 == 0


def detect_card_brand(card_number: str) -> str:
    for pattern, brand in _BRANDS:
        if pattern.match(card_number):
            return brand
    return GENERIC_BRAND


def normalize_expiry_year(raw_year: Any) -> int | None:
    """İki haneli yıllar 2000+ olarak yorumlanır; okunamayan yıl None."""
    year = to_int(raw_year)
    if year is None:
        return None
    if year < 100:
        year += 2000
    if not (1 <= year <= 9999):
        return None
    return year


def is_card_expired(month: int, year: int, now: datetime | None = None) -> bool:
    """Son kullanma ayının son anı şu andan önceyse kart süresi dolmuştur."""
    now = now or datetime.now()
    last_day = calendar.monthrange(year, month)[1]
    last_moment = datetime(year, month, last_day, 23, 59, 59, 999999)
    return last_moment < now


def create_approval_code() -> str:
    stamp = str(int(time.time() * 1000))[-6:]
    return f"APR-{stamp}-{100 + secrets.randbelow(900)}"


def validate_card_payment(
    payment: Any,
    now: datetime | None = None,
) -> tuple[PaymentSnapshot | None, str | None]:
    """
    Kart bilgisini kurallara göre sırayla doğrular; ilk başarısız kural kazanır.
    (ödeme_özeti, hata_mesajı). Hata yoksa hata_mesajı None.
    """
    payment = payment if isinstance(payment, dict) else {}
    card_holder = normalize_text(payment.get("cardHolder"))
    card_number = only_digits(payment.get("cardNumber"))
    expiry_month = to_int(payment.get("expiryMonth"))
    expiry_year = normalize_expiry_year(payment.get("expiryYear"))
    cvv = only_digits(payment.get("cvv"))

    if len(card_holder) < 2:
        return None, MSG_NAME_INVALID
    if not luhn_valid(card_number):
        return None, MSG_NUMBER_INVALID
    if expiry_month is None or not (1 <= expiry_month <= 12) or expiry_year is None:
        return None, MSG_EXPIRY_INVALID
    if is_card_expired(expiry_month, expiry_year, now):
        return None, MSG_EXPIRED
    if not _CVV.match(cvv):
        return None, MSG_CVV_INVALID

    return (
        PaymentSnapshot(
            method=PAYMENT_CARD,
            card_holder=card_holder,
            card_brand=detect_card_brand(card_number),
            card_last4=card_number[-4:],
            approval_code=create_approval_code(),
        ),
        None,
    )
