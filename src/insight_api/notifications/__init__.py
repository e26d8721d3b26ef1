"""Notifications: fan-out of relayed transactions to live subscribers.

Provides:
- ``NotificationService``: fan-out event bus using asyncio queues
- ``InvEvent``: summary of a transaction relayed through the API
"""

from __future__ import annotations

from insight_api.notifications.events import InvEvent, RawEvent
from insight_api.notifications.service import NotificationService

__all__ = [
    "InvEvent",
    "NotificationService",
    "RawEvent",
]
