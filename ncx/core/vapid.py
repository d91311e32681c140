"""
VAPID imza kimliği.
Süreç başında bir kez oluşturulur (app.state.vapid), ilk gönderimde doğrulanır, sonra değişmez.
Anahtar değişimi için süreç yeniden başlatılmalı.
"""
import logging
import threading
from dataclasses import dataclass

from .config import Settings
from .errors import ConfigurationError

log = logging.getLogger("ncx.vapid")


@dataclass(frozen=True)
class SigningIdentity:
    public_key: str
    private_key: str
    subject: str


class VapidContext:
    def __init__(self, public_key: str, private_key: str, subject: str):
        self._public_key = (public_key or "").strip()
        self._private_key = (private_key or "").strip()
        self._subject = subject
        self._identity: SigningIdentity | None = None
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "VapidContext":
        return cls(settings.vapid_public_key, settings.vapid_private_key, settings.vapid_subject)

    @property
    def ready(self) -> bool:
        return self._identity is not None

    def ensure_ready(self) -> SigningIdentity:
        """İlk çağrıda anahtarları doğrular; sonraki çağrılar aynı kimliği döner."""
        if self._identity is not None:
            return self._identity
        with self._lock:
            if self._identity is None:
                if not self._public_key or not self._private_key:
                    raise ConfigurationError("Missing VAPID_PUBLIC_KEY / VAPID_PRIVATE_KEY env vars.")
                self._identity = SigningIdentity(self._public_key, self._private_key, self._subject)
                log.info("VAPID identity ready: subject=%s", self._subject)
        return self._identity

    def claims(self) -> dict:
        # pywebpush claims dict'ine aud/exp ekliyor; her gönderime yeni dict
        return {"sub": self.ensure_ready().subject}
