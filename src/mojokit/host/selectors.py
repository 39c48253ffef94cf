"""
Minimal CSS selector engine for the in-memory host.

Supports selector groups (``a, b``), descendant and child combinators and
compound selectors made of a tag, ``#id``, ``.class`` and ``[attr]`` /
``[attr=value]`` parts.
"""

import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional, Tuple, TYPE_CHECKING

from ..core.errors import ConfigurationError

if TYPE_CHECKING:
    from .dom import Element

_COMPOUND = re.compile(r'^(?P<tag>\*|[a-zA-Z][\w-]*)?(?P<rest>(?:#[\w-]+|\.[\w-]+|\[[^\]]+\])*)$')
_PART = re.compile(r'#(?P<id>[\w-]+)|\.(?P<cls>[\w-]+)|\[(?P<attr>[^\]=\s]+)\s*(?:=\s*(?P<value>"[^"]*"|\'[^\']*\'|[^\]]*))?\]')


@dataclass(frozen=True)
class Compound:
    tag: Optional[str] = None
    ids: Tuple[str, ...] = ()
    classes: Tuple[str, ...] = ()
    attrs: Tuple[Tuple[str, Optional[str]], ...] = ()

    def matches(self, element: 'Element') -> bool:
        if self.tag and self.tag != '*' and element.tag != self.tag:
            return False
        if any(element.id != i for i in self.ids):
            return False
        element_classes = element.classes
        if any(c not in element_classes for c in self.classes):
            return False
        for name, value in self.attrs:
            if name not in element.attrs:
                return False
            if value is not None and str(element.attrs[name]) != value:
                return False
        return True


@dataclass(frozen=True)
class Selector:
    """One comma-free selector: compounds joined by combinators, right-most last."""
    compounds: Tuple[Compound, ...]
    combinators: Tuple[str, ...] = field(default=())

    def matches(self, element: 'Element', root: Optional['Element'] = None) -> bool:
        return self._match_from(element, len(self.compounds) - 1, root)

    def _match_from(self, element: 'Element', index: int, root: Optional['Element']) -> bool:
        if not self.compounds[index].matches(element):
            return False
        if index == 0:
            return True
        combinator = self.combinators[index - 1]
        ancestor = element.parent
        while ancestor is not None and ancestor is not root:
            if self._match_from(ancestor, index - 1, root):
                return True
            if combinator == '>':
                return False
            ancestor = ancestor.parent
        return False


def _parse_compound(text: str, source: str) -> Compound:
    m = _COMPOUND.match(text)
    if not m:
        raise ConfigurationError(f"Invalid selector {source!r}")
    ids, classes, attrs = [], [], []
    for part in _PART.finditer(m.group('rest') or ''):
        if part.group('id'): ids.append(part.group('id'))
        elif part.group('cls'): classes.append(part.group('cls'))
        else:
            value = part.group('value')
            if value is not None: value = value.strip().strip('"\'')
            attrs.append((part.group('attr'), value))
    tag = m.group('tag').lower() if m.group('tag') else None
    return Compound(tag, tuple(ids), tuple(classes), tuple(attrs))


@lru_cache(maxsize=256)
def parse(selector: str) -> Tuple[Selector, ...]:
    "Parse `selector` into a tuple of alternative `Selector`s"
    if not isinstance(selector, str) or not selector.strip():
        raise ConfigurationError("selector must be a non-empty string")
    groups = []
    for group in selector.split(','):
        tokens = group.replace('>', ' > ').split()
        if not tokens or tokens[0] == '>' or tokens[-1] == '>':
            raise ConfigurationError(f"Invalid selector {selector!r}")
        compounds: List[Compound] = []
        combinators: List[str] = []
        pending = ' '
        for token in tokens:
            if token == '>':
                pending = '>'
                continue
            if compounds:
                combinators.append(pending)
            compounds.append(_parse_compound(token, selector))
            pending = ' '
        groups.append(Selector(tuple(compounds), tuple(combinators)))
    return tuple(groups)


def matches(element: 'Element', selector: str, root: Optional['Element'] = None) -> bool:
    "True if `element` matches any group of `selector`, ancestors limited to below `root`"
    return any(s.matches(element, root) for s in parse(selector))
