"""Notifications — templates, subscriptions and webhook dispatch.

Provides:
- ``render``: fills a subscription template from an event
- ``SubscriptionStore``: the operator's list of webhook targets
- ``WebhookDispatcher``: delivers rendered notifications, one POST each
"""

from __future__ import annotations

from dhr_notifier.notifications.dispatcher import DeliveryOutcome, WebhookDispatcher
from dhr_notifier.notifications.subscriptions import Subscription, SubscriptionStore
from dhr_notifier.notifications.templates import render

__all__ = [
    "DeliveryOutcome",
    "Subscription",
    "SubscriptionStore",
    "WebhookDispatcher",
    "render",
]
