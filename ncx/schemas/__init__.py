from .push import (
    NotificationPayload,
    NotifyRequest,
    PushKeys,
    PushPrefs,
    PushSubscriptionIn,
)

__all__ = [
    "NotificationPayload",
    "NotifyRequest",
    "PushKeys",
    "PushPrefs",
    "PushSubscriptionIn",
]
