"""Push abonelik deposu: endpoint anahtarlı upsert / silme / listeleme."""
import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ncx.core.errors import ValidationError
from ncx.models import PushSubscription
from ncx.schemas import PushPrefs, PushSubscriptionIn

log = logging.getLogger("ncx.push")


def _coerce(subscription: PushSubscriptionIn | dict | None) -> PushSubscriptionIn:
    if isinstance(subscription, PushSubscriptionIn):
        return subscription
    if not isinstance(subscription, dict):
        raise ValidationError("Invalid subscription payload (need endpoint, keys.p256dh, keys.auth)")
    try:
        return PushSubscriptionIn.model_validate(subscription)
    except ValueError as e:
        raise ValidationError(f"Invalid subscription payload: {e}") from e


class SubscriptionStore:
    def __init__(self, db: Session):
        self.db = db

    def upsert(
        self,
        subscription: PushSubscriptionIn | dict | None,
        *,
        prefs: PushPrefs | None = None,
    ) -> PushSubscription:
        """
        Endpoint'e göre ekler veya anahtarları günceller.
        endpoint / keys.p256dh / keys.auth eksikse ValidationError; hiçbir şey yazılmaz.
        """
        sub = _coerce(subscription)
        endpoint = (sub.endpoint or "").strip()
        p256dh = (sub.keys.p256dh or "").strip() if sub.keys else ""
        auth = (sub.keys.auth or "").strip() if sub.keys else ""
        if not endpoint or not p256dh or not auth:
            raise ValidationError("Invalid subscription payload (need endpoint, keys.p256dh, keys.auth)")

        row = self._write(endpoint, p256dh, auth, prefs)
        if row is None:
            # Aynı endpoint paralel eklendi; son yazan kazanır
            self.db.rollback()
            row = self._write(endpoint, p256dh, auth, prefs)
        return row

    def _write(self, endpoint: str, p256dh: str, auth: str, prefs: PushPrefs | None) -> PushSubscription | None:
        row = self.db.get(PushSubscription, endpoint)
        if row is None:
            row = PushSubscription(endpoint=endpoint, p256dh=p256dh, auth=auth)
        else:
            row.p256dh = p256dh
            row.auth = auth
            row.updated_at = datetime.now(timezone.utc)
        if prefs is not None:
            row.all_teams = prefs.all_teams
            row.teams = list(prefs.teams)
        self.db.add(row)
        try:
            self.db.commit()
        except IntegrityError:
            return None
        self.db.refresh(row)
        return row

    def remove(self, endpoint: str | None) -> bool:
        """Varsa siler; yoksa no-op."""
        if not endpoint:
            return False
        row = self.db.get(PushSubscription, endpoint)
        if row is None:
            return False
        self.db.delete(row)
        self.db.commit()
        return True

    def list_all(self, team: str | None = None) -> list[PushSubscription]:
        """Tüm abonelikler (sayfalama yok). team verilirse o takımı takip edenler."""
        rows = list(self.db.exec(select(PushSubscription)).all())
        if team is None:
            return rows
        return [r for r in rows if r.all_teams or team in (r.teams or [])]

    def get_prefs(self, endpoint: str | None) -> PushPrefs:
        row = self.db.get(PushSubscription, endpoint) if endpoint else None
        if row is None:
            return PushPrefs()
        return PushPrefs(all_teams=row.all_teams, teams=list(row.teams or []))
