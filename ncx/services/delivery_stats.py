"""Push teslim sayaçları: yutulan hatalar burada görünür kalır."""
import logging
import threading

log = logging.getLogger("ncx.push")


class DeliveryStats:
    def __init__(self):
        self._lock = threading.Lock()
        self.attempted = 0
        self.delivered = 0
        self.gone = 0
        self.failed = 0

    def _incr(self, name: str) -> None:
        with self._lock:
            setattr(self, name, getattr(self, name) + 1)

    def record_attempt(self) -> None:
        self._incr("attempted")

    def record_delivered(self) -> None:
        self._incr("delivered")

    def record_gone(self, endpoint: str, status_code: int | None) -> None:
        self._incr("gone")
        log.info("push endpoint gone (status=%s), removing: %s", status_code, endpoint[:80])

    def record_failed(self, endpoint: str, exc: Exception) -> None:
        self._incr("failed")
        log.warning("push send failed, not retried: endpoint=%s error=%s", endpoint[:80], exc)

    def snapshot(self) -> dict:
        with self._lock:
            return {
                "attempted": self.attempted,
                "delivered": self.delivered,
                "gone": self.gone,
                "failed": self.failed,
            }
