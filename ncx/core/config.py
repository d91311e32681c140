from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

# .env proje kökünde: ncx/core/config.py -> ncx/core -> ncx -> kök
_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _ROOT / ".env"

DEFAULT_VAPID_SUBJECT = "mailto:noreply@nickelcityxwing.com"


class Settings(BaseSettings):
    database_url: str = "sqlite:///./ncx.db"
    # CORS: virgülle ayrılmış origin listesi
    cors_origins: str = "*"
    # IP başına dakikada max abonelik isteği
    rate_limit_per_minute: int = 60
    environment: str = "development"
    # Web push (VAPID). Anahtarlar base64url; ikisi de zorunlu, yoksa ilk gönderimde hata.
    vapid_public_key: str = ""
    vapid_private_key: str = ""
    vapid_subject: str = DEFAULT_VAPID_SUBJECT
    # /api/push/notify için paylaşılan gizli anahtar (x-push-secret). Boşsa notify kapalı.
    push_notify_secret: str = ""
    # Push servisinin mesajı tutacağı süre (saniye); 4 hafta
    push_ttl_seconds: int = 2419200

    model_config = {
        "env_file": _ENV_FILE if _ENV_FILE.is_file() else ".env",
        "extra": "ignore",
    }

    @field_validator("vapid_public_key", "vapid_private_key", "push_notify_secret", mode="before")
    @classmethod
    def strip_secret(cls, v: str | None) -> str:
        """Boşluk/yanlış kopya kaynaklı hataları azaltır."""
        return (v or "").strip()

    @field_validator("vapid_subject", mode="before")
    @classmethod
    def default_subject(cls, v: str | None) -> str:
        return (v or "").strip() or DEFAULT_VAPID_SUBJECT


settings = Settings()


def is_vapid_configured() -> bool:
    """İki VAPID anahtarı da tanımlı mı?"""
    return bool(settings.vapid_public_key and settings.vapid_private_key)
