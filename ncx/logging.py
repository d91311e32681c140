"""
Logging yapılandırması.
Push alt sistemi logger'ları (ncx.push, ncx.vapid, ncx.client) aynı seviyede çalışır;
pywebpush/urllib3 her gönderimde istek logladığı için WARNING'e çekilir.
"""
import logging
import sys

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
PUSH_LOGGERS = ("ncx", "ncx.push", "ncx.vapid", "ncx.client")
# Fan-out sırasında abonelik başına log satırı basan kütüphaneler
CHATTY_LOGGERS = ("pywebpush", "urllib3", "urllib3.connectionpool")


def setup_logging(
    level: int | str = logging.INFO,
    format_string: str | None = None,
    quiet_level: int | str = logging.WARNING,
) -> None:
    logging.basicConfig(
        level=level,
        format=format_string or DEFAULT_FORMAT,
        stream=sys.stdout,
        force=True,
    )
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access", *PUSH_LOGGERS):
        logging.getLogger(name).setLevel(level)
    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)
