"""
Event Source Capability

Objects that can be observed by a Controller implement ``listen`` and
``unlisten``. Topics, model references, params, units, controllers and host
elements all share this mixin.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
import itertools

Listener = Callable[..., Any]

_handle_ids = itertools.count(1)


def event_key(event_name: str) -> str:
    "Normalize `event_name` so `onResponse`, `on_response` and `onresponse` are one event"
    return event_name.replace("_", "").lower()


@dataclass(eq=False)
class ListenerHandle:
    """Handle returned by ``listen``; pass it to ``unlisten`` to disconnect."""
    source: Any
    event_name: str
    listener: Listener
    handle_id: int = field(default_factory=lambda: next(_handle_ids))
    active: bool = True

    def disconnect(self) -> None:
        if self.active:
            self.source.unlisten(self)


class Observable:
    """Mixin providing named events with ordered listeners."""

    def _listener_table(self) -> Dict[str, List[ListenerHandle]]:
        table = self.__dict__.get("_listeners")
        if table is None:
            table = {}
            self.__dict__["_listeners"] = table
        return table

    def listen(self, event_name: str, listener: Listener) -> ListenerHandle:
        """Attach ``listener`` to ``event_name``. Listeners run in attach order.

        Event names are matched case-insensitively, ignoring underscores.
        """
        handle = ListenerHandle(self, event_key(event_name), listener)
        self._listener_table().setdefault(handle.event_name, []).append(handle)
        return handle

    def unlisten(self, handle: ListenerHandle) -> None:
        handles = self._listener_table().get(handle.event_name, [])
        if handle in handles:
            handles.remove(handle)
        handle.active = False

    def emit(self, event_name: str, *args: Any) -> None:
        """Call every listener of ``event_name`` with ``args``."""
        handles = list(self._listener_table().get(event_key(event_name), []))
        for handle in handles:
            if handle.active:
                handle.listener(*args)

    def listener_count(self, event_name: Optional[str] = None) -> int:
        table = self._listener_table()
        if event_name is not None:
            return len(table.get(event_key(event_name), []))
        return sum(len(handles) for handles in table.values())
