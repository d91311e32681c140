"""
Tarayıcı kayıt akışı (enable / disable).

Unregistered -> ServiceWorkerActive -> Subscribed; disable() ile tekrar Unregistered.
Platform çağrıları (service worker, izin, PushManager) BrowserPlatform üzerinden,
sunucu çağrıları httpx.Client üzerinden yapılır. Hiçbir adım otomatik tekrar denenmez.
"""
import base64
import enum
import logging
from typing import Protocol

import httpx

from ncx.core.errors import EnrollmentError, PermissionDeniedError, UnsupportedError
from ncx.schemas import PushPrefs

from .capability import detect_capability

log = logging.getLogger("ncx.client")

SERVICE_WORKER_URL = "/sw.js"
SERVICE_WORKER_SCOPE = "/"


class PlatformSubscription(Protocol):
    endpoint: str

    def to_json(self) -> dict: ...

    def unsubscribe(self) -> bool: ...


class PushManager(Protocol):
    def subscribe(self, *, user_visible_only: bool, application_server_key: bytes) -> PlatformSubscription: ...

    def get_subscription(self) -> PlatformSubscription | None: ...


class Registration(Protocol):
    push_manager: PushManager


class BrowserPlatform(Protocol):
    user_agent: str
    has_service_worker: bool
    has_push_manager: bool
    is_standalone: bool

    def register_service_worker(self, script_url: str, scope: str) -> Registration: ...

    def get_registration(self) -> Registration | None: ...

    def request_notification_permission(self) -> str: ...


class EnrollmentState(str, enum.Enum):
    UNREGISTERED = "unregistered"
    SERVICE_WORKER_ACTIVE = "service_worker_active"
    SUBSCRIBED = "subscribed"


def url_base64_to_bytes(value: str) -> bytes:
    """VAPID public key (base64url, padding'siz) -> applicationServerKey ham baytları."""
    padded = value + "=" * ((4 - len(value) % 4) % 4)
    return base64.urlsafe_b64decode(padded)


class EnrollmentClient:
    def __init__(
        self,
        platform: BrowserPlatform,
        http: httpx.Client,
        script_url: str = SERVICE_WORKER_URL,
        scope: str = SERVICE_WORKER_SCOPE,
    ):
        self.platform = platform
        self.http = http
        self.script_url = script_url
        self.scope = scope
        self.state = EnrollmentState.UNREGISTERED

    def enable(self, prefs: PushPrefs | None = None) -> PlatformSubscription:
        capability = detect_capability(self.platform)
        if not capability.usable:
            if capability.needs_install:
                raise UnsupportedError("Install app to enable notifications")
            raise UnsupportedError("Push not supported in this browser")

        registration = self.platform.register_service_worker(self.script_url, self.scope)
        self.state = EnrollmentState.SERVICE_WORKER_ACTIVE

        permission = self.platform.request_notification_permission()
        if permission != "granted":
            raise PermissionDeniedError(f"Notification permission was not granted ({permission})")

        key = self._fetch_vapid_key()
        subscription = registration.push_manager.subscribe(
            user_visible_only=True,
            application_server_key=url_base64_to_bytes(key),
        )
        self._save(subscription, prefs)
        self.state = EnrollmentState.SUBSCRIBED
        log.info("push enabled: %s", subscription.endpoint[:80])
        return subscription

    def disable(self) -> bool:
        """Önce platformda abonelikten çık, sonra sunucuya bildir. Abonelik yoksa no-op."""
        registration = self.platform.get_registration()
        subscription = registration.push_manager.get_subscription() if registration else None
        if subscription is None:
            self.state = EnrollmentState.UNREGISTERED
            return False
        endpoint = subscription.endpoint
        subscription.unsubscribe()
        # Platform aboneliği gitti; sunucu çağrısı başarısız olsa da durum geri dönmez
        self.state = EnrollmentState.UNREGISTERED
        self._post("/api/push/unsubscribe", {"endpoint": endpoint})
        log.info("push disabled: %s", endpoint[:80])
        return True

    def _fetch_vapid_key(self) -> str:
        try:
            r = self.http.get("/api/push/vapidPublicKey", headers={"Cache-Control": "no-store"})
        except httpx.HTTPError as e:
            raise EnrollmentError(f"vapidPublicKey request failed: {e}") from e
        if r.status_code != 200:
            raise EnrollmentError(f"vapidPublicKey responded {r.status_code}")
        try:
            body = r.json()
        except ValueError as e:
            raise EnrollmentError(f"vapidPublicKey returned invalid JSON: {e}") from e
        key = (body.get("key") or body.get("publicKey")) if isinstance(body, dict) else None
        if not key:
            raise EnrollmentError("vapidPublicKey missing 'key'")
        return key

    def _save(self, subscription: PlatformSubscription, prefs: PushPrefs | None) -> None:
        if prefs is None:
            path, body = "/api/push/subscribe", subscription.to_json()
        else:
            path, body = "/api/push/save", {
                "subscription": subscription.to_json(),
                "prefs": prefs.model_dump(by_alias=True),
            }
        try:
            r = self._post(path, body)
            failed = r.status_code >= 400
            reason = f"{path} responded {r.status_code}"
        except EnrollmentError as e:
            failed, reason = True, str(e)
        if failed:
            # Sunucu kaydetmediyse platform aboneliği de geri alınır
            try:
                subscription.unsubscribe()
            except Exception as e:
                log.warning("rollback unsubscribe failed: %s", e)
            raise EnrollmentError(reason)

    def _post(self, path: str, body: dict) -> httpx.Response:
        try:
            return self.http.post(path, json=body)
        except httpx.HTTPError as e:
            raise EnrollmentError(f"{path} request failed: {e}") from e
