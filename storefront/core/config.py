from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

# .env proje kökünde: storefront/core/config.py -> storefront/core -> storefront -> kök
_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _ROOT / ".env"


class Settings(BaseSettings):
    secret_key: str = "change-me-in-production"
    # Kullanıcı hesapları SQL veritabanında; ürün ve sipariş koleksiyonları JSON dosyalarında
    database_url: str = "sqlite:///./storefront.db"
    data_dir: Path = _ROOT / "data"
    # CORS: virgülle ayrılmış origin listesi; production'da https://alandiniz.com
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    # IP başına dakikada max istek (rate limit)
    rate_limit_per_minute: int = 60
    # Giriş / kayıt için ayrı limit (testte yüksek tutulabilir)
    rate_limit_auth_per_minute: int = 10
    admin_secret: str = ""             # X-Admin-Secret ile yönetim API erişimi (boşsa sadece admin kullanıcılar)
    environment: str = "development"
    log_level: str = "INFO"
    access_token_expire_minutes: int = 60 * 24 * 30  # 30 gün
    # Sepet / kargo kuralları (TL, kuruşsuz tam sayı)
    free_shipping_threshold: int = 1500
    shipping_fee: int = 79
    default_payment_method: str = "Kapida Odeme"

    model_config = {
        "env_file": _ENV_FILE if _ENV_FILE.is_file() else ".env",
        "extra": "ignore",
    }

    @field_validator("admin_secret", mode="before")
    @classmethod
    def strip_admin_secret(cls, v: str | None) -> str:
        """Boşluk/yanlış kopya kaynaklı hataları azaltır."""
        return (v or "").strip()


settings = Settings()


def cors_origins_list() -> list[str]:
    if not settings.cors_origins or settings.cors_origins.strip() == "*":
        return ["*"]
    return [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
