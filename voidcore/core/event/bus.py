"""
VOID EventBus: async publish/subscribe with wildcard routing.

Purpose
-------
Decouple services: the bank does not know the leaderboard exists, it just
publishes ``bank.*`` events that anyone may subscribe to.

Responsibilities
----------------
- Register/unregister event listeners with priorities
- Publish events to all matching listeners (exact + wildcard)
- Run listeners in priority order, each guarded by a timeout
- Error isolation (one failing listener never blocks others)
- Publish counters for introspection

Design Decisions
----------------
- **Instance-based**: each container (and each test) owns its own bus
- **Sequential delivery**: listeners run one after another in priority order,
  so a publish has fully settled when ``await publish(...)`` returns
- **Config-driven timeout**: ``events.listener_timeout_seconds``
"""

from __future__ import annotations

import asyncio
import inspect
from collections import Counter
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from voidcore.core.event.router import EventRouter
from voidcore.core.event.types import (
    CallbackType,
    EventListener,
    EventPayload,
    ListenerPriority,
)
from voidcore.core.logging.logger import LogContext, get_logger

if TYPE_CHECKING:
    from voidcore.core.config.manager import ConfigManager

logger = get_logger(__name__)

DEFAULT_LISTENER_TIMEOUT = 5.0


class EventBus:
    """
    Async event bus.

    Examples
    --------
    >>> bus = EventBus()
    >>> bus.subscribe("progression.level_up", on_level_up)
    >>> await bus.publish("progression.level_up", {"player_id": "p1", "new_level": 10})
    """

    def __init__(
        self,
        config_manager: Optional[ConfigManager] = None,
        *,
        listener_timeout_seconds: Optional[float] = None,
    ) -> None:
        self._listeners: Dict[str, List[EventListener]] = {}
        self._router = EventRouter()
        self._published: Counter[str] = Counter()
        self._errors: Counter[str] = Counter()

        if listener_timeout_seconds is None and config_manager is not None:
            listener_timeout_seconds = config_manager.get(
                "events.listener_timeout_seconds", DEFAULT_LISTENER_TIMEOUT
            )
        self._timeout = float(
            listener_timeout_seconds
            if listener_timeout_seconds is not None
            else DEFAULT_LISTENER_TIMEOUT
        )

        logger.debug(
            "EventBus initialized",
            extra={"listener_timeout_seconds": self._timeout},
        )

    # ------------------------------------------------------------------ #
    # Subscription API
    # ------------------------------------------------------------------ #

    @staticmethod
    def _validate_callback_signature(callback: CallbackType) -> None:
        """Reject callbacks that cannot take exactly one payload argument."""
        try:
            sig = inspect.signature(callback)
        except (TypeError, ValueError):
            return

        params = list(sig.parameters.values())
        positional = [p for p in params if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)]
        required = [p for p in positional if p.default is p.empty]
        takes_varargs = any(p.kind is p.VAR_POSITIONAL for p in params)
        if len(required) > 1 or not (positional or takes_varargs):
            callback_name = getattr(callback, "__qualname__", repr(callback))
            raise ValueError(
                f"Event listener must accept exactly 1 parameter (EventPayload), "
                f"got {len(positional)} parameters for '{callback_name}'"
            )

    def subscribe(
        self,
        event_name: str,
        callback: CallbackType,
        *,
        priority: ListenerPriority = ListenerPriority.NORMAL,
        identifier: Optional[str] = None,
        once: bool = False,
    ) -> str:
        """
        Subscribe a callback to an event name or wildcard pattern.

        Returns
        -------
        str:
            The listener identifier (for unsubscribing later).

        Raises
        ------
        ValueError:
            If the callback signature is invalid.
        """
        self._validate_callback_signature(callback)

        listener = EventListener.from_callback(
            event_name=event_name,
            callback=callback,
            priority=priority,
            identifier=identifier,
            once=once,
        )

        bucket = self._listeners.setdefault(event_name, [])
        if any(existing.identifier == listener.identifier for existing in bucket):
            logger.warning(
                "EventBus: duplicate listener prevented",
                extra={"event_name": event_name, "listener_id": listener.identifier},
            )
            return listener.identifier

        bucket.append(listener)
        logger.debug(
            "EventBus: subscribed listener",
            extra={
                "event_name": event_name,
                "listener_id": listener.identifier,
                "priority": listener.priority.name,
            },
        )
        return listener.identifier

    def unsubscribe(self, event_name: str, identifier: str) -> bool:
        """Remove a listener. Returns True if one was removed."""
        bucket = self._listeners.get(event_name, [])
        remaining = [listener for listener in bucket if listener.identifier != identifier]
        removed = len(remaining) != len(bucket)
        if remaining:
            self._listeners[event_name] = remaining
        else:
            self._listeners.pop(event_name, None)

        if removed:
            logger.debug(
                "EventBus: unsubscribed listener",
                extra={"event_name": event_name, "listener_id": identifier},
            )
        return removed

    def clear(self) -> None:
        """Remove all listeners from all events."""
        total = self.get_listener_count()
        self._listeners.clear()
        logger.info(
            "EventBus: cleared all listeners",
            extra={"previous_listener_count": total},
        )

    # ------------------------------------------------------------------ #
    # Publish API
    # ------------------------------------------------------------------ #

    def _extract_listeners(self, event_name: str) -> List[EventListener]:
        """Matching listeners in priority order, pruning ``once`` listeners."""
        matched: List[EventListener] = []
        for pattern in list(self._listeners):
            if not self._router.matches(event_name, pattern):
                continue
            bucket = self._listeners[pattern]
            matched.extend(bucket)
            kept = [listener for listener in bucket if not listener.once]
            if kept:
                self._listeners[pattern] = kept
            else:
                del self._listeners[pattern]

        # sorted() is stable, so equal priorities keep subscription order.
        return sorted(matched, key=lambda listener: listener.priority.value)

    async def publish(self, event_name: str, data: EventPayload) -> List[Any]:
        """
        Publish an event to all subscribed listeners.

        A listener that raises or times out is logged and skipped; the
        remaining listeners still run and ``publish`` itself never raises
        because of a listener.

        Returns
        -------
        list[Any]:
            Results of the listeners that completed, in execution order.
        """
        self._published[event_name] += 1
        listeners = self._extract_listeners(event_name)

        if not listeners:
            logger.debug("EventBus: no listeners for event", extra={"event_name": event_name})
            return []

        results: List[Any] = []
        with LogContext(
            player_id=data.get("player_id"),
            operation=f"event:{event_name}",
        ):
            for listener in listeners:
                try:
                    results.append(await self._run_listener(listener, data))
                except asyncio.TimeoutError:
                    self._errors[event_name] += 1
                    logger.error(
                        "EventBus: listener timed out",
                        extra={
                            "event_name": event_name,
                            "listener_id": listener.identifier,
                            "timeout_seconds": self._timeout,
                        },
                    )
                except Exception as exc:
                    self._errors[event_name] += 1
                    logger.error(
                        "EventBus: listener failed",
                        extra={
                            "event_name": event_name,
                            "listener_id": listener.identifier,
                            "error_type": type(exc).__name__,
                            "error_message": str(exc),
                        },
                        exc_info=True,
                    )
        return results

    async def _run_listener(self, listener: EventListener, data: EventPayload) -> Any:
        result = listener.callback(data)
        if inspect.isawaitable(result):
            return await asyncio.wait_for(result, timeout=self._timeout)
        return result

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    def get_listener_count(self, event_name: Optional[str] = None) -> int:
        """Listeners that would receive ``event_name``, or all listeners."""
        if event_name is None:
            return sum(len(bucket) for bucket in self._listeners.values())
        return sum(
            len(bucket)
            for pattern, bucket in self._listeners.items()
            if self._router.matches(event_name, pattern)
        )

    def get_all_events(self) -> List[str]:
        return sorted(self._listeners)

    def get_metrics_summary(self) -> Dict[str, Any]:
        total = sum(self._published.values())
        total_errors = sum(self._errors.values())
        return {
            "total_events_published": total,
            "events_by_type": dict(self._published),
            "total_errors": total_errors,
            "errors_by_event": dict(self._errors),
            "total_listeners": self.get_listener_count(),
        }
