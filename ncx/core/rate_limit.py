"""Kayıt uçları (subscribe/save) için IP bazlı limit; proxy arkasında X-Forwarded-For okunur."""
from fastapi import Request
from slowapi import Limiter

from ncx.core.config import settings


def _get_client_ip(request: Request) -> str:
    """X-Forwarded-For'daki ilk adres, yoksa bağlantı adresi."""
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "127.0.0.1"


def enrollment_limit(per_minute: int | None = None) -> str:
    """slowapi limit ifadesi; 0 veya negatif değer 1'e çekilir."""
    n = settings.rate_limit_per_minute if per_minute is None else per_minute
    return f"{max(int(n), 1)}/minute"


ENROLLMENT_LIMIT = enrollment_limit()
limiter = Limiter(key_func=_get_client_ip)
