"""
Fan-out dağıtıcı: aynı payload'ı tüm abonelere eşzamanlı gönderir.
Her gönderim bağımsız; 404/410 dönen endpoint silinir, diğer hatalar loglanıp geçilir (tekrar denenmez).
Dönen değer denenen abonelik sayısıdır, teslim edilen değil.
"""
import logging
from typing import Callable

import anyio
from pywebpush import WebPushException, webpush

from ncx.core.config import settings
from ncx.core.errors import DeliveryFailure
from ncx.core.vapid import VapidContext
from ncx.schemas import NotificationPayload

from .delivery_stats import DeliveryStats
from .subscription_store import SubscriptionStore

log = logging.getLogger("ncx.push")


def _status_code(exc: WebPushException) -> int | None:
    # requests.Response 4xx/5xx için bool(False); "is not None" ile bak
    response = getattr(exc, "response", None)
    if response is None:
        return None
    return getattr(response, "status_code", None)


class FanoutDispatcher:
    def __init__(
        self,
        store: SubscriptionStore,
        vapid: VapidContext,
        sender: Callable[..., object] = webpush,
        stats: DeliveryStats | None = None,
        ttl: int | None = None,
    ):
        self.store = store
        self.vapid = vapid
        self.sender = sender
        self.stats = stats or DeliveryStats()
        self.ttl = settings.push_ttl_seconds if ttl is None else ttl

    async def broadcast(self, payload: NotificationPayload, team: str | None = None) -> int:
        self.vapid.ensure_ready()
        targets = [(s.endpoint, s.to_subscription_info()) for s in self.store.list_all(team=team)]
        if not targets:
            log.info("push broadcast: no subscriptions")
            return 0

        data = payload.model_dump_json()
        # Genişlik sınırı yok: her abonelik kendi thread'inde
        limiter = anyio.CapacityLimiter(len(targets))
        async with anyio.create_task_group() as tg:
            for endpoint, info in targets:
                tg.start_soon(self._deliver, endpoint, info, data, limiter)

        log.info("push broadcast: attempted=%s stats=%s", len(targets), self.stats.snapshot())
        return len(targets)

    async def _deliver(self, endpoint: str, info: dict, data: str, limiter: anyio.CapacityLimiter) -> None:
        self.stats.record_attempt()
        try:
            await anyio.to_thread.run_sync(self._send, info, data, limiter=limiter)
        except DeliveryFailure as failure:
            if not failure.gone:
                self.stats.record_failed(endpoint, failure)
                return
            self.stats.record_gone(endpoint, failure.status_code)
            try:
                self.store.remove(endpoint)
            except Exception as e:
                log.exception("push: removing gone subscription failed: %s", e)
        except Exception as e:
            self.stats.record_failed(endpoint, e)
        else:
            self.stats.record_delivered()

    def _send(self, info: dict, data: str) -> None:
        identity = self.vapid.ensure_ready()
        try:
            self.sender(
                subscription_info=info,
                data=data,
                vapid_private_key=identity.private_key,
                vapid_claims=self.vapid.claims(),
                ttl=self.ttl,
            )
        except WebPushException as e:
            raise DeliveryFailure(info["endpoint"], _status_code(e), str(e)) from e
