"""
In-memory host document.

A small DOM-like element tree that satisfies the event-source capability
used by controllers: ``listen``/``unlisten`` for binding, ``matches`` and
``parent`` for event delegation, and ``query`` for selector resolution.
Trees can be built from fastcore FT components, the same component objects
FastHTML renders.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from fastcore.basics import listify
from fastcore.xml import FT

from ..core.observable import ListenerHandle, Observable
from . import selectors


def dom_event_name(event_name: str) -> str:
    "Strip the `on` handler prefix: `onclick` and `click` name the same event"
    name = event_name.lower()
    return name[2:] if name.startswith("on") and len(name) > 2 else name


@dataclass(eq=False)
class HostEvent:
    """Event object delivered to listeners while it bubbles up the tree."""
    type: str
    target: 'Element'
    data: Dict[str, Any] = field(default_factory=dict)
    current_target: Optional['Element'] = None
    propagation_stopped: bool = False
    default_prevented: bool = False

    def stop_propagation(self) -> None:
        self.propagation_stopped = True

    def prevent_default(self) -> None:
        self.default_prevented = True

    def __getattr__(self, name: str) -> Any:
        data = self.__dict__.get('data', {})
        if name in data:
            return data[name]
        raise AttributeError(name)


class Element(Observable):
    """A node of the host document."""

    def __init__(self, tag: str, attrs: Optional[Dict[str, Any]] = None, children=None, text: str = ""):
        self.tag = tag.lower()
        self.attrs: Dict[str, Any] = dict(attrs or {})
        self.text = text
        self.parent: Optional['Element'] = None
        self.children: List['Element'] = []
        for child in listify(children):
            self.append(child)

    @classmethod
    def from_ft(cls, ft: FT) -> 'Element':
        "Build an `Element` tree from a fastcore FT component"
        element = cls(ft.tag, {k: v for k, v in ft.attrs.items() if v is not None and v is not False})
        texts = []
        for child in ft.children:
            if isinstance(child, FT):
                element.append(Element.from_ft(child))
            elif child is not None:
                texts.append(str(child))
        element.text = "".join(texts)
        return element

    @property
    def id(self) -> Optional[str]:
        return self.attrs.get('id')

    @property
    def classes(self) -> List[str]:
        return str(self.attrs.get('class', '')).split()

    @property
    def value(self) -> Any:
        return self.attrs.get('value')

    @value.setter
    def value(self, value: Any) -> None:
        self.attrs['value'] = value

    def listen(self, event_name: str, listener) -> ListenerHandle:
        return super().listen(dom_event_name(event_name), listener)

    def get_attribute(self, name: str, default: Any = None) -> Any:
        return self.attrs.get(name, default)

    def set_attribute(self, name: str, value: Any) -> None:
        self.attrs[name] = value

    def append(self, child: 'Element') -> 'Element':
        if child.parent is not None:
            child.remove()
        child.parent = self
        self.children.append(child)
        return child

    def remove(self) -> None:
        """Detach this element from its parent."""
        if self.parent is not None:
            self.parent.children.remove(self)
            self.parent = None

    @property
    def is_connected(self) -> bool:
        node = self
        while node.parent is not None:
            node = node.parent
        return isinstance(node, Document)

    def iter_descendants(self) -> Iterator['Element']:
        for child in self.children:
            yield child
            yield from child.iter_descendants()

    def query(self, selector: str) -> List['Element']:
        """Descendants matching ``selector``, in document order."""
        selectors.parse(selector)
        return [e for e in self.iter_descendants() if selectors.matches(e, selector)]

    def query_first(self, selector: str) -> Optional['Element']:
        return next((e for e in self.iter_descendants() if selectors.matches(e, selector)), None)

    def matches(self, selector: str) -> bool:
        return selectors.matches(self, selector)

    def closest(self, selector: str, root: Optional['Element'] = None) -> Optional['Element']:
        """First of this element and its ancestors matching ``selector``, stopping before ``root``."""
        node = self
        while node is not None and node is not root:
            if node.matches(selector):
                return node
            node = node.parent
        return None

    def dispatch(self, event_type: str, **data: Any) -> HostEvent:
        """Fire ``event_type`` on this element and bubble it to the root."""
        event = HostEvent(dom_event_name(event_type), self, data)
        node = self
        while node is not None and not event.propagation_stopped:
            event.current_target = node
            node.emit(event.type, event)
            node = node.parent
        event.current_target = None
        return event

    def __repr__(self) -> str:
        ident = f"#{self.id}" if self.id else ""
        cls = "".join(f".{c}" for c in self.classes)
        return f"<{self.tag}{ident}{cls}>"


class Document(Element):
    """Root of a host tree; elements below it are connected."""

    def __init__(self, children=None):
        super().__init__('#document', children=children)

    @classmethod
    def from_ft(cls, *fts: FT) -> 'Document':
        return cls([Element.from_ft(ft) for ft in fts])

    def get_element_by_id(self, element_id: str) -> Optional[Element]:
        return next((e for e in self.iter_descendants() if e.id == element_id), None)
