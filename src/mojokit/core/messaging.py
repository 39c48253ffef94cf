"""
Messaging Bus

Synchronous topic-based publish/subscribe. Delivery happens in subscription
order and runs to completion before ``publish`` returns; a publish issued
from inside a subscriber is delivered immediately (depth-first).
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, Union
import itertools

from .errors import ConfigurationError
from .observable import Observable
from .utils import require_name

logger = logging.getLogger(__name__)

_subscription_ids = itertools.count(1)


@dataclass(eq=False)
class Subscription:
    """Handle for one subscriber binding; pass it to ``unsubscribe``."""
    topic: str
    callback: Callable[..., Any]
    subscription_id: int = field(default_factory=lambda: next(_subscription_ids))
    active: bool = True


class Topic(Observable):
    """
    Named pub/sub channel.

    The last published message is only held while it is being delivered.
    Controllers can observe a topic directly through its ``on_publish`` event.
    """

    def __init__(self, name: str):
        self.name = require_name(name, "Topic", "topic")
        self.message: Any = None
        self.subscriptions: List[Subscription] = []

    def get_message(self) -> Any:
        return self.message

    def on_publish(self, message: Any = None) -> None:
        """Hook fired when this topic gets published."""
        self.emit("on_publish", message)

    def __repr__(self) -> str:
        return f"Topic({self.name!r}, subscribers={len(self.subscriptions)})"


class MessagingBus:
    """Topic registry with synchronous delivery."""

    def __init__(self):
        self._topics: Dict[str, Topic] = {}

    def get_topic(self, name: str) -> Topic:
        """Get the Topic registered under ``name``, creating it if needed."""
        require_name(name, "MessagingBus.get_topic", "topic")
        topic = self._topics.get(name)
        if topic is None:
            topic = Topic(name)
            self._topics[name] = topic
            logger.debug(f"Created topic {name}")
        return topic

    def has_topic(self, name: str) -> bool:
        return name in self._topics

    def publish(self, topic: str, message: Any = None) -> None:
        """
        Invoke all listeners subscribed to ``topic``.

        Args:
            topic: Topic name
            message: Optional message. A list is spread into positional
                arguments, ``None`` delivers no arguments, anything else is
                delivered as a single argument.
        """
        require_name(topic, "MessagingBus.publish", "topic")
        topic_obj = self.get_topic(topic)
        topic_obj.message = message
        try:
            topic_obj.on_publish(message)
            args = self._normalize(message)
            for subscription in list(topic_obj.subscriptions):
                if subscription.active:
                    subscription.callback(*args)
        finally:
            # wipe clean, but keep the topic
            topic_obj.message = None

    def subscribe(
        self,
        topic: str,
        target: Union[object, Callable[..., Any]],
        method_name: Optional[str] = None,
    ) -> Subscription:
        """
        Attach a listener to ``topic``.

        Args:
            topic: Topic name
            target: Object owning ``method_name``, or a callable
            method_name: Name of the method to call on ``target``

        Returns:
            Subscription handle for ``unsubscribe``
        """
        require_name(topic, "MessagingBus.subscribe", "topic")
        if target is None:
            raise ConfigurationError("MessagingBus.subscribe - target parameter is required")
        if method_name is None:
            if not callable(target):
                raise ConfigurationError("MessagingBus.subscribe - target must be callable when no method name is given")
            callback = target
        else:
            callback = getattr(target, method_name, None)
            if not callable(callback):
                raise ConfigurationError(
                    f"MessagingBus.subscribe - {type(target).__name__} has no method {method_name!r}"
                )
        subscription = Subscription(topic, callback)
        self.get_topic(topic).subscriptions.append(subscription)
        return subscription

    def unsubscribe(self, handle: Subscription) -> None:
        """Remove a single subscriber binding."""
        if handle is None:
            raise ConfigurationError("MessagingBus.unsubscribe - handle parameter is required")
        topic = self._topics.get(handle.topic)
        if topic is not None and handle in topic.subscriptions:
            topic.subscriptions.remove(handle)
        handle.active = False

    def subscriber_count(self, topic: str) -> int:
        topic_obj = self._topics.get(topic)
        return len(topic_obj.subscriptions) if topic_obj else 0

    @staticmethod
    def _normalize(message: Any) -> Tuple[Any, ...]:
        if message is None:
            return ()
        if isinstance(message, list):
            return tuple(message)
        return (message,)
