"""
Host Capability

The core only relies on this boundary: event sources that can be listened
to, and, for delegation and selector resolution, elements that can be
queried, matched and walked upwards.
"""

from typing import Any, Callable, Optional, Protocol, runtime_checkable

from .dom import Document, Element, HostEvent, dom_event_name
from .selectors import matches, parse


@runtime_checkable
class EventSource(Protocol):
    def listen(self, event_name: str, handler: Callable[..., Any]) -> Any: ...
    def unlisten(self, handle: Any) -> None: ...


@runtime_checkable
class DelegatingSource(EventSource, Protocol):
    parent: Optional[Any]
    def matches(self, selector: str) -> bool: ...


__all__ = [
    'EventSource',
    'DelegatingSource',
    'Document',
    'Element',
    'HostEvent',
    'dom_event_name',
    'matches',
    'parse',
]
