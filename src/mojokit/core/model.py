"""
Model Store

Key/value application state with change notification. Every mutation
(``set``, ``add``, ``remove``) notifies exactly once: the key's
ModelReference fires ``on_notify`` and the bus publishes ``/mojo/model/<key>``.
"""

import copy
import logging
import weakref
from typing import Any, Callable, Dict, List, Optional

from .errors import ConfigurationError
from .messaging import MessagingBus, Subscription
from .observable import Observable
from .utils import require_name

logger = logging.getLogger(__name__)

MODEL_TOPIC_PREFIX = "/mojo/model/"


def model_topic(key: str) -> str:
    """Bus topic name used to announce changes of ``key``."""
    return MODEL_TOPIC_PREFIX + key


class ModelReference(Observable):
    """
    Notification handle for one model key.

    Holds only a weak reference to its store, so it never keeps the store
    alive. Observe it in a Controller through its ``on_notify`` event.
    """

    def __init__(self, key: str, store: 'ModelStore'):
        self._key = require_name(key, "ModelReference", "key")
        self._store = weakref.ref(store)

    @property
    def key(self) -> str:
        return self._key

    @property
    def store(self) -> Optional['ModelStore']:
        return self._store()

    def on_notify(self) -> None:
        """Hook fired when the model under this key changes."""
        self.emit("on_notify", self)

    def get_value(self) -> Any:
        store = self._require_store()
        return store.get(self._key)

    def set_value(self, value: Any) -> None:
        store = self._require_store()
        store.set(self._key, value)

    def _require_store(self) -> 'ModelStore':
        store = self._store()
        if store is None:
            raise ConfigurationError(f"ModelReference {self._key!r} - model store no longer exists")
        return store

    def __repr__(self) -> str:
        return f"ModelReference({self._key!r})"


class ModelStore:
    """Notifying key/value store built on a MessagingBus."""

    def __init__(self, bus: MessagingBus):
        self.bus = bus
        self._values: Dict[str, Any] = {}
        self._references: Dict[str, ModelReference] = {}
        self._deferred: Optional[List[Callable[[], Any]]] = None

    def set(self, key: str, value: Any) -> None:
        """Store a deep copy of ``value`` under ``key`` and notify."""
        require_name(key, "ModelStore.set", "key")
        self._values[key] = copy.deepcopy(value)
        self.notify(key)

    def add(self, key: str, value: Any) -> None:
        """
        Append ``value`` to the list stored under ``key``.

        A missing (or falsy, see ``contains``) entry behaves like ``set``.
        An existing scalar is promoted to ``[old, value]``; a list ``value``
        is spliced in element by element.
        """
        require_name(key, "ModelStore.add", "key")
        if value is None:
            raise ConfigurationError("ModelStore.add - value parameter is required")
        if isinstance(value, str) and value == "":
            raise ConfigurationError("ModelStore.add - value parameter must be a non-empty string")
        if not self.contains(key):
            self.set(key, value)
            return
        current = self._values[key]
        if not isinstance(current, list):
            current = [current]
            self._values[key] = current
        if isinstance(value, list):
            current.extend(copy.deepcopy(value))
        else:
            current.append(copy.deepcopy(value))
        self.notify(key)

    def get(self, key: str) -> Any:
        """Return the value for ``key``; ``None`` when the key was never set."""
        require_name(key, "ModelStore.get", "key")
        if key not in self._values:
            logger.debug(f"No model entry found for {key!r} key")
            return None
        return self._values[key]

    def contains(self, key: str) -> bool:
        """
        True when a truthy value is stored under ``key``.

        Does not distinguish a key that was never set from one holding an
        empty or falsy value.
        """
        require_name(key, "ModelStore.contains", "key")
        return bool(self._values.get(key))

    def remove(self, key: str) -> None:
        """Clear the value for ``key`` and notify. The reference is kept."""
        require_name(key, "ModelStore.remove", "key")
        self.get_reference(key)
        self._values[key] = None
        self.notify(key)

    def get_reference(self, key: str) -> ModelReference:
        """Get the ModelReference for ``key``, creating it if needed."""
        require_name(key, "ModelStore.get_reference", "key")
        reference = self._references.get(key)
        if reference is None:
            reference = ModelReference(key, self)
            self._references[key] = reference
        return reference

    def notify(self, key: str) -> None:
        """
        Announce a change of ``key`` to its reference and to bus subscribers.

        Callbacks queued with ``defer`` while notifying run once the
        outermost notify has published.
        """
        require_name(key, "ModelStore.notify", "key")
        outermost = self._deferred is None
        if outermost:
            self._deferred = []
        try:
            self.get_reference(key).on_notify()
            self.bus.publish(model_topic(key))
            if outermost:
                while self._deferred:
                    callback = self._deferred.pop(0)
                    callback()
        finally:
            if outermost:
                self._deferred = None

    def defer(self, callback: Callable[[], Any]) -> None:
        """Run ``callback`` after the notify in progress, or now if none is."""
        if self._deferred is None:
            callback()
        else:
            self._deferred.append(callback)

    def add_observer(self, key: str, target: Any, method_name: Optional[str] = None) -> Subscription:
        """Subscribe ``target.method_name`` (or a callable) to changes of ``key``."""
        require_name(key, "ModelStore.add_observer", "key")
        if target is None:
            raise ConfigurationError("ModelStore.add_observer - target parameter is required")
        return self.bus.subscribe(model_topic(key), target, method_name)

    def remove_observer(self, handle: Subscription) -> None:
        if handle is None:
            raise ConfigurationError("ModelStore.remove_observer - handle parameter is required")
        self.bus.unsubscribe(handle)

    def keys(self) -> List[str]:
        return list(self._values)
