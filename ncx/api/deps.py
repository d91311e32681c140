import hmac

from fastapi import Depends, Header, HTTPException, Request, status
from sqlmodel import Session

from ncx.core.config import settings
from ncx.core.database import get_db
from ncx.services import FanoutDispatcher, SubscriptionStore


def get_store(db: Session = Depends(get_db)) -> SubscriptionStore:
    return SubscriptionStore(db)


def get_dispatcher(
    request: Request,
    store: SubscriptionStore = Depends(get_store),
) -> FanoutDispatcher:
    state = request.app.state
    return FanoutDispatcher(
        store=store,
        vapid=state.vapid,
        sender=state.push_sender,
        stats=state.delivery_stats,
        ttl=settings.push_ttl_seconds,
    )


def require_push_secret(x_push_secret: str | None = Header(default=None)) -> None:
    """notify çağrıları için paylaşılan gizli anahtar; tanımlı değilse her istek reddedilir."""
    expected = settings.push_notify_secret
    if not expected or not x_push_secret or not hmac.compare_digest(x_push_secret, expected):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
