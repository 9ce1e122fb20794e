"""
Event system: async publish/subscribe between services.

Usage
-----
>>> from voidcore.core.event import EventBus, ListenerPriority
>>> bus = EventBus()
>>> bus.subscribe("bank.*", audit_bank_event, priority=ListenerPriority.LOW)
"""

from voidcore.core.event.bus import EventBus
from voidcore.core.event.router import EventRouter
from voidcore.core.event.types import (
    CallbackType,
    EventListener,
    EventPayload,
    ListenerPriority,
)

__all__ = [
    "EventBus",
    "EventRouter",
    "EventListener",
    "EventPayload",
    "CallbackType",
    "ListenerPriority",
]
