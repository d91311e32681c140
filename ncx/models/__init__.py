from .push_subscription import PushSubscription

__all__ = [
    "PushSubscription",
]
