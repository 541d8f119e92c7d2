"""
Event Bus

Delivers domain events to subscribers once the unit of work has committed.

A handler subscribed to a base class also receives its subclasses, so a
single subscription to DomainEvent observes every event of every context.
Delivery is best effort: a failing handler is logged and skipped, since
the state change it reacts to is already stored.
"""

from collections import defaultdict
from typing import Callable, DefaultDict, Iterable, List, Type
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


class EventBus:
    """Explicit event bus; whoever wires the application owns the instance"""

    def __init__(self):
        self._subscribers: DefaultDict[Type[DomainEvent], List[EventHandler]] = defaultdict(list)

    def subscribe(self, event_type: Type[DomainEvent], handler: EventHandler | None = None):
        """
        Subscribe a handler to an event type and its subclasses

        Usable directly or as a decorator:

            @bus.subscribe(BookingCancelled)
            def notify_guest(event): ...
        """
        if handler is None:
            def decorator(func: EventHandler) -> EventHandler:
                self.subscribe(event_type, func)
                return func
            return decorator

        if handler not in self._subscribers[event_type]:
            self._subscribers[event_type].append(handler)
        return handler

    def handlers_for(self, event_type: Type[DomainEvent]) -> List[EventHandler]:
        """Handlers for the type itself first, then for its base classes"""
        handlers: List[EventHandler] = []
        for klass in event_type.__mro__:
            for handler in self._subscribers.get(klass, ()):
                if handler not in handlers:
                    handlers.append(handler)
        return handlers

    def publish(self, events: Iterable[DomainEvent]) -> int:
        """
        Deliver events in order

        Returns the number of failed deliveries.
        """
        failures = 0
        for event in events:
            name = type(event).__name__
            handlers = self.handlers_for(type(event))
            if not handlers:
                logger.debug(f"{name} has no subscribers")
                continue

            for handler in handlers:
                try:
                    handler(event)
                except Exception as e:
                    failures += 1
                    logger.error(
                        f"{getattr(handler, '__name__', handler)} failed on {name} "
                        f"(event {event.event_id}, aggregate {event.aggregate_id}): {e}",
                        exc_info=True,
                    )
        return failures

    def __len__(self) -> int:
        return sum(len(handlers) for handlers in self._subscribers.values())
