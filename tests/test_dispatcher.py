"""Fan-out dispatcher: concurrent sends, gone-endpoint pruning, failure isolation."""
import json
from types import SimpleNamespace

import anyio
import pytest
from pywebpush import WebPushException

from ncx.core.config import settings
from ncx.core.errors import ConfigurationError
from ncx.core.vapid import VapidContext
from ncx.schemas import NotificationPayload
from ncx.services import DeliveryStats, FanoutDispatcher, SubscriptionStore

from conftest import FakeSender, make_subscription

PAYLOAD = NotificationPayload(title="Game Reported", body="Week 3 vs Foxes", url="/m/report")


def _push_error(status: int) -> WebPushException:
    return WebPushException(f"Push failed: {status}", response=SimpleNamespace(status_code=status, text=""))


def _dispatcher(store: SubscriptionStore, sender: FakeSender, vapid: VapidContext | None = None) -> FanoutDispatcher:
    return FanoutDispatcher(
        store=store,
        vapid=vapid or VapidContext("public", "private", "mailto:ops@example.com"),
        sender=sender,
        stats=DeliveryStats(),
        ttl=60,
    )


def test_broadcast_without_subscriptions(store: SubscriptionStore, sender: FakeSender):
    dispatcher = _dispatcher(store, sender)
    assert anyio.run(dispatcher.broadcast, PAYLOAD) == 0
    assert sender.calls == []


def test_broadcast_sends_same_payload_to_all(store: SubscriptionStore, sender: FakeSender):
    for i in range(3):
        store.upsert(make_subscription(i))
    dispatcher = _dispatcher(store, sender)

    assert anyio.run(dispatcher.broadcast, PAYLOAD) == 3
    assert sorted(sender.endpoints) == sorted(make_subscription(i)["endpoint"] for i in range(3))
    for call in sender.calls:
        assert json.loads(call["data"]) == {"title": "Game Reported", "body": "Week 3 vs Foxes", "url": "/m/report"}
        assert call["vapid_private_key"] == "private"
        assert call["vapid_claims"] == {"sub": "mailto:ops@example.com"}
        assert call["ttl"] == 60
        assert call["subscription_info"]["keys"] == {"p256dh": "p256dh-key", "auth": "auth-secret"}
    assert dispatcher.stats.snapshot() == {"attempted": 3, "delivered": 3, "gone": 0, "failed": 0}


@pytest.mark.parametrize("gone_status", [404, 410])
def test_broadcast_removes_gone_endpoints(store: SubscriptionStore, sender: FakeSender, gone_status: int):
    n = 6
    gone = {1, 2, 4}
    for i in range(n):
        endpoint = make_subscription(i)["endpoint"]
        store.upsert(make_subscription(i))
        # Farklı gecikmeler: sıra/süre sonucu etkilememeli
        sender.delays[endpoint] = 0.01 * ((n - i) % 3)
        if i in gone:
            sender.errors[endpoint] = _push_error(gone_status)
    dispatcher = _dispatcher(store, sender)

    assert anyio.run(dispatcher.broadcast, PAYLOAD) == n
    remaining = sorted(r.endpoint for r in store.list_all())
    assert remaining == sorted(make_subscription(i)["endpoint"] for i in range(n) if i not in gone)
    assert len(sender.calls) == n
    assert dispatcher.stats.gone == len(gone)


def test_transient_failure_keeps_row_and_others_complete(store: SubscriptionStore, sender: FakeSender):
    for i in range(4):
        store.upsert(make_subscription(i))
    sender.errors[make_subscription(0)["endpoint"]] = _push_error(429)
    sender.errors[make_subscription(1)["endpoint"]] = ConnectionError("network down")
    sender.errors[make_subscription(2)["endpoint"]] = WebPushException("no response")
    dispatcher = _dispatcher(store, sender)

    assert anyio.run(dispatcher.broadcast, PAYLOAD) == 4
    assert len(store.list_all()) == 4
    assert len(sender.calls) == 4
    assert dispatcher.stats.snapshot() == {"attempted": 4, "delivered": 1, "gone": 0, "failed": 3}


def test_slow_send_does_not_block_others(store: SubscriptionStore, sender: FakeSender):
    for i in range(3):
        store.upsert(make_subscription(i))
    slow = make_subscription(0)["endpoint"]
    sender.delays[slow] = 0.2
    dispatcher = _dispatcher(store, sender)

    assert anyio.run(dispatcher.broadcast, PAYLOAD) == 3
    # Yavaş gönderim en son biter, diğerleri onu beklemeden tamamlanır
    assert sender.endpoints[-1] == slow


def test_broadcast_missing_keys_raises_before_sending(store: SubscriptionStore, sender: FakeSender):
    store.upsert(make_subscription(1))
    dispatcher = _dispatcher(store, sender, vapid=VapidContext("", "", "mailto:ops@example.com"))

    with pytest.raises(ConfigurationError):
        anyio.run(dispatcher.broadcast, PAYLOAD)
    assert sender.calls == []


def test_broadcast_to_team(store: SubscriptionStore, sender: FakeSender):
    from ncx.schemas import PushPrefs

    store.upsert(make_subscription("all"))
    store.upsert(make_subscription("owls"), prefs=PushPrefs(allTeams=False, teams=["Owls"]))
    dispatcher = _dispatcher(store, sender)

    assert anyio.run(dispatcher.broadcast, PAYLOAD, "Foxes") == 1
    assert sender.endpoints == [make_subscription("all")["endpoint"]]


def test_default_ttl_comes_from_settings(store: SubscriptionStore, sender: FakeSender):
    store.upsert(make_subscription(1))
    dispatcher = FanoutDispatcher(store, VapidContext("public", "private", "mailto:ops@example.com"), sender=sender)

    assert anyio.run(dispatcher.broadcast, PAYLOAD) == 1
    assert dispatcher.ttl == settings.push_ttl_seconds
    assert sender.calls[0]["ttl"] == settings.push_ttl_seconds
