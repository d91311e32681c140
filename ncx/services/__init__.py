from .delivery_stats import DeliveryStats
from .dispatcher import FanoutDispatcher
from .subscription_store import SubscriptionStore

__all__ = ["DeliveryStats", "FanoutDispatcher", "SubscriptionStore"]
