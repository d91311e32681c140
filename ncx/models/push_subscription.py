"""PWA push bildirim abonelikleri (Web Push API)."""
from datetime import datetime, timezone

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PushSubscription(SQLModel, table=True):
    __tablename__ = "push_subscriptions"
    endpoint: str = Field(primary_key=True)  # benzersiz; aynı endpoint tekrar kaydedilmez
    p256dh: str  # client public key (base64url)
    auth: str    # auth secret (base64url)
    all_teams: bool = True
    teams: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    def to_subscription_info(self) -> dict:
        """pywebpush subscription_info biçimi."""
        return {"endpoint": self.endpoint, "keys": {"p256dh": self.p256dh, "auth": self.auth}}
