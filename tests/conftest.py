"""Pytest fixtures: test client, in-memory SQLite, sahte push gönderici."""
import os
import threading
import time

import pytest
from fastapi.testclient import TestClient

# 65 baytlık uncompressed P-256 noktası biçiminde (0x04 + 64 bayt) base64url anahtar
TEST_VAPID_PUBLIC_KEY = "B" + "A" * 86
TEST_VAPID_PRIVATE_KEY = "test-private-key"
TEST_PUSH_SECRET = "test-push-secret"

# Test ortamı (app import edilmeden önce set edilmeli)
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("VAPID_PUBLIC_KEY", TEST_VAPID_PUBLIC_KEY)
os.environ.setdefault("VAPID_PRIVATE_KEY", TEST_VAPID_PRIVATE_KEY)
os.environ.setdefault("VAPID_SUBJECT", "mailto:test@example.com")
os.environ.setdefault("PUSH_NOTIFY_SECRET", TEST_PUSH_SECRET)
os.environ.setdefault("RATE_LIMIT_PER_MINUTE", "1000")

from sqlmodel import Session, select  # noqa: E402

from ncx.core.database import engine, init_db  # noqa: E402
from ncx.main import app  # noqa: E402
from ncx.models import PushSubscription  # noqa: E402
from ncx.services import SubscriptionStore  # noqa: E402


class FakeSender:
    """pywebpush.webpush yerine: çağrıları kaydeder, endpoint'e göre hata/gecikme uygular."""

    def __init__(self):
        self.calls: list[dict] = []
        self.errors: dict[str, Exception] = {}
        self.delays: dict[str, float] = {}
        self._lock = threading.Lock()

    def __call__(self, **kwargs):
        endpoint = kwargs["subscription_info"]["endpoint"]
        delay = self.delays.get(endpoint)
        if delay:
            time.sleep(delay)
        with self._lock:
            self.calls.append(kwargs)
        if endpoint in self.errors:
            raise self.errors[endpoint]
        return None

    @property
    def endpoints(self) -> list[str]:
        return [c["subscription_info"]["endpoint"] for c in self.calls]


def make_subscription(n: int | str, p256dh: str = "p256dh-key", auth: str = "auth-secret") -> dict:
    return {
        "endpoint": f"https://fcm.googleapis.com/fcm/send/device-{n}",
        "keys": {"p256dh": p256dh, "auth": auth},
    }


@pytest.fixture(autouse=True)
def _clean_db():
    init_db()
    yield
    with Session(engine) as db:
        for row in db.exec(select(PushSubscription)).all():
            db.delete(row)
        db.commit()


@pytest.fixture
def db():
    with Session(engine) as session:
        yield session


@pytest.fixture
def store(db) -> SubscriptionStore:
    return SubscriptionStore(db)


@pytest.fixture
def sender() -> FakeSender:
    return FakeSender()


@pytest.fixture(scope="function")
def client(sender: FakeSender):
    """TestClient; lifespan sonrası gerçek webpush yerine sahte gönderici."""
    with TestClient(app) as c:
        app.state.push_sender = sender
        yield c


@pytest.fixture
def push_headers() -> dict:
    return {"x-push-secret": TEST_PUSH_SECRET}
