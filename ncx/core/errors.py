"""Push alt sistemi hata sınıfları."""


class PushError(Exception):
    """Tüm push hatalarının kökü."""


class ValidationError(PushError):
    """Eksik/bozuk abonelik isteği; istemciye 400 döner, sunucu hatası sayılmaz."""


class ConfigurationError(PushError):
    """VAPID anahtarları eksik; dağıtım yapılamaz (kurulum hatası)."""


class UnsupportedError(PushError):
    """Tarayıcı service worker / Push API desteklemiyor (veya iOS'ta kurulu değil)."""


class PermissionDeniedError(PushError):
    """Kullanıcı bildirim iznini vermedi."""


class EnrollmentError(PushError):
    """Sunucu aboneliği kaydetmedi ya da VAPID anahtarını vermedi."""


# Push servisinin "bu endpoint artık geçersiz" dediği kodlar
GONE_STATUS_CODES = (404, 410)


class DeliveryFailure(PushError):
    """Tek bir aboneliğe gönderim hatası; Dispatcher dışına çıkmaz."""

    def __init__(self, endpoint: str, status_code: int | None = None, reason: str = ""):
        self.endpoint = endpoint
        self.status_code = status_code
        self.reason = reason
        super().__init__(f"push to {endpoint[:60]} failed (status={status_code}): {reason}")

    @property
    def gone(self) -> bool:
        return self.status_code in GONE_STATUS_CODES
