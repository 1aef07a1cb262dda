"""
Invalidation events for the data layer.

Events carry no payload: a subscriber re-reads the store when notified.
The bus is an ordinary object created once by the DataLayer and handed
to whoever needs it.
"""
from collections import deque
from typing import Callable, Deque, Dict, List

from adcraft.errors import EventBusError
from adcraft.logger import logger


class DataEvents:
    PRODUCTS_UPDATED = "products_updated"
    AVATARS_UPDATED = "avatars_updated"
    ALL_DATA_UPDATED = "all_data_updated"

    ALL = (PRODUCTS_UPDATED, AVATARS_UPDATED, ALL_DATA_UPDATED)


class _Subscription:
    __slots__ = ("callback", "active")

    def __init__(self, callback: Callable[[], None]):
        self.callback = callback
        self.active = True


class EventBus:
    """
    Synchronous publish/subscribe over the three data topics.

    Callbacks run in registration order on the emitter's turn. An emit
    raised from inside a callback is queued and delivered once the
    current delivery has finished, so every subscriber sees the same
    ordered sequence of invalidations.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[_Subscription]] = {topic: [] for topic in DataEvents.ALL}
        self._pending: Deque[str] = deque()
        self._delivering = False

    def _check_topic(self, topic: str):
        if topic not in self._subscribers:
            raise EventBusError(f"Unknown topic '{topic}'")

    def subscribe(self, topic: str, callback: Callable[[], None]) -> Callable[[], None]:
        """Register ``callback`` and return a function that unregisters it."""
        self._check_topic(topic)
        if not callable(callback):
            raise EventBusError("Subscriber callback must be callable")

        subscription = _Subscription(callback)
        self._subscribers[topic].append(subscription)

        def unsubscribe():
            if not subscription.active:
                return
            subscription.active = False
            self._subscribers[topic].remove(subscription)

        return unsubscribe

    def emit(self, topic: str) -> None:
        self._check_topic(topic)
        self._pending.append(topic)
        if self._delivering:
            logger.debug(f"Queued re-entrant emit of '{topic}'")
            return

        self._delivering = True
        try:
            while self._pending:
                self._deliver(self._pending.popleft())
        finally:
            self._delivering = False
            self._pending.clear()

    def _deliver(self, topic: str) -> None:
        for subscription in list(self._subscribers[topic]):
            # Unsubscribed by an earlier callback in this same delivery
            if not subscription.active:
                continue
            try:
                subscription.callback()
            except Exception as e:
                logger.error(f"Subscriber for '{topic}' failed: {e}", exc_info=True)

    def subscriber_count(self, topic: str) -> int:
        self._check_topic(topic)
        return len(self._subscribers[topic])
