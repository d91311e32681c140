from pydantic import BaseModel, ConfigDict, Field


class PushKeys(BaseModel):
    p256dh: str | None = None
    auth: str | None = None


class PushSubscriptionIn(BaseModel):
    """Tarayıcının PushSubscription.toJSON() çıktısı. Alan kontrolü store.upsert'te yapılır."""
    model_config = ConfigDict(extra="ignore")

    endpoint: str | None = None
    expirationTime: float | None = None
    keys: PushKeys | None = None


class PushPrefs(BaseModel):
    """Takım bazlı bildirim tercihi."""
    model_config = ConfigDict(populate_by_name=True)

    all_teams: bool = Field(default=True, alias="allTeams")
    teams: list[str] = Field(default_factory=list)


class NotificationPayload(BaseModel):
    """Gönderim başına oluşturulur, saklanmaz."""
    title: str
    body: str
    url: str


class NotifyRequest(BaseModel):
    title: str | None = None
    body: str | None = None
    url: str | None = None
    # Verilirse sadece bu takımı (veya tüm takımları) takip eden abonelere gider
    team: str | None = None

    def to_payload(self) -> NotificationPayload:
        return NotificationPayload(
            title="NCX" if self.title is None else self.title,
            body="Update" if self.body is None else self.body,
            url="/m/current" if self.url is None else self.url,
        )
