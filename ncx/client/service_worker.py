"""
Service worker push/notificationclick işleyicisi (static/sw.js ile aynı sözleşme).

Ana sayfadan ayrı çalışır; uygulama durumuna erişimi yok, sadece olayın kendisini görür.
Her olayda iş event.wait_until(...) ile tutulur ki worker erken sonlanmasın.
"""
import json
from dataclasses import dataclass, field
from typing import Any, Protocol
from urllib.parse import urljoin, urlsplit

PRODUCT_NAME = "NCX"
FALLBACK_BODY = "You have a new update."
DEFAULT_URL = "/"
ICON = "/icons/icon-192.png"


class Notification(Protocol):
    title: str
    data: dict

    def close(self) -> None: ...


class WindowClient(Protocol):
    url: str

    def focus(self) -> Any: ...


class Clients(Protocol):
    def match_all(self, *, type: str, include_uncontrolled: bool) -> list[WindowClient]: ...

    def open_window(self, url: str) -> Any: ...


class WorkerRegistration(Protocol):
    def show_notification(self, title: str, options: dict) -> Any: ...


@dataclass
class ExtendableEvent:
    pending: list = field(default_factory=list, init=False)

    def wait_until(self, work: Any) -> None:
        self.pending.append(work)


@dataclass
class PushEvent(ExtendableEvent):
    data: bytes | None = None


@dataclass
class NotificationClickEvent(ExtendableEvent):
    notification: Notification | None = None


def parse_push_data(data: bytes | str | None) -> dict:
    """Bozuk/ikili payload hata fırlatmaz; {} döner."""
    if not data:
        return {}
    try:
        parsed = json.loads(data)
    except ValueError:
        return {}
    return parsed if isinstance(parsed, dict) else {}


def _text(value: Any, default: str) -> str:
    return value if isinstance(value, str) and value else default


class ServiceWorkerHandler:
    def __init__(self, registration: WorkerRegistration, clients: Clients, origin: str):
        self.registration = registration
        self.clients = clients
        self.origin = origin.rstrip("/")

    def on_push(self, event: PushEvent) -> Any:
        data = parse_push_data(event.data)
        title = _text(data.get("title"), PRODUCT_NAME)
        url = _text(data.get("url"), DEFAULT_URL)
        shown = self.registration.show_notification(
            title,
            {
                "body": _text(data.get("body"), FALLBACK_BODY),
                "icon": ICON,
                "badge": ICON,
                "data": {"url": url},
            },
        )
        event.wait_until(shown)
        return shown

    def on_notification_click(self, event: NotificationClickEvent) -> Any:
        notification = event.notification
        notification.close()
        url = _text((notification.data or {}).get("url"), DEFAULT_URL)
        target = urljoin(self.origin + "/", url)
        target_path = urlsplit(target).path or "/"

        for client in self.clients.match_all(type="window", include_uncontrolled=True):
            # Tam eşleşme gerekmez; pathname hedef yolu içeriyorsa o sekme öne alınır
            if target_path in (urlsplit(client.url).path or "/"):
                result = client.focus()
                event.wait_until(result)
                return result

        result = self.clients.open_window(target)
        event.wait_until(result)
        return result
