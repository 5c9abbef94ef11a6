"""In-process publish/subscribe for actors.

Setup callbacks run inside their actor, so ``pubsub.subscribe(topic)``
with no subscriber subscribes the calling actor. Subscribers that have
died are pruned on the next broadcast.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

from .actor import current_actor
from .logging_utils import get_module_logger


class Subscriber(Protocol):
    @property
    def is_alive(self) -> bool: ...

    def send(self, message: Any) -> bool: ...


class PubSub:

    def __init__(self, name: str = "pubsub"):
        self.name = name
        self.logger = get_module_logger(f"PubSub.{name}")
        self._topics: Dict[str, List[Subscriber]] = {}

    def subscribe(self, topic: str, subscriber: Optional[Subscriber] = None) -> Subscriber:
        if subscriber is None:
            subscriber = current_actor()
            if subscriber is None:
                raise RuntimeError(
                    "subscribe() called outside an actor; pass the subscriber explicitly"
                )
        subscribers = self._topics.setdefault(topic, [])
        if subscriber not in subscribers:
            subscribers.append(subscriber)
            self.logger.debug("%r subscribed to %s", subscriber, topic)
        return subscriber

    def unsubscribe(self, topic: str, subscriber: Optional[Subscriber] = None) -> bool:
        subscriber = subscriber if subscriber is not None else current_actor()
        subscribers = self._topics.get(topic, [])
        if subscriber not in subscribers:
            return False
        subscribers.remove(subscriber)
        if not subscribers:
            self._topics.pop(topic, None)
        return True

    def broadcast(self, topic: str, message: Any) -> int:
        """Send ``message`` to every live subscriber of ``topic``.

        Returns:
            Number of subscribers that accepted the message.
        """
        subscribers = self._topics.get(topic)
        if not subscribers:
            self.logger.debug("Broadcast on %s with no subscribers: %r", topic, message)
            return 0

        alive = [subscriber for subscriber in subscribers if subscriber.is_alive]
        if len(alive) != len(subscribers):
            self.logger.debug("Pruned %d dead subscribers from %s", len(subscribers) - len(alive), topic)
        if alive:
            self._topics[topic] = alive
        else:
            self._topics.pop(topic, None)

        delivered = 0
        for subscriber in alive:
            if subscriber.send(message):
                delivered += 1
        return delivered

    def subscribers(self, topic: str) -> List[Subscriber]:
        return [subscriber for subscriber in self._topics.get(topic, []) if subscriber.is_alive]

    def topics(self) -> List[str]:
        return sorted(self._topics)


__all__ = ["PubSub", "Subscriber"]
