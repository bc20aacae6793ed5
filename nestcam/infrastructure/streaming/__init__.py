# Infrastructure streaming layer exports
from .poll_scheduler import PollScheduler
from .change_filter import ChangeFilter
from .multicast_channel import MulticastChannel, Subscription
from .subscription_registry import SubscriptionRegistry

__all__ = [
    "PollScheduler",
    "ChangeFilter",
    "MulticastChannel",
    "Subscription",
    "SubscriptionRegistry",
]
