"""
Controller Params

Declared parameters of a Controller. A class declares ``ParamSpec`` entries
with ``param()``; every instance gets its own ``Param`` objects, cloned from
the declarations of the whole class hierarchy, that validate values and can
be observed through their ``on_change`` event.

Example:
    class MenuController(Controller):
        params = {
            "selected": param(0, type=int),
            "title": param(required=True, type=str),
        }
"""

import copy
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Iterator, Optional

from pydantic import TypeAdapter, ValidationError

from ..core.errors import ConfigurationError
from ..core.observable import Observable

logger = logging.getLogger(__name__)


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass(frozen=True)
class ParamSpec:
    """Declaration of one controller parameter."""
    default: Any = None
    required: bool = False
    type: Any = None


def param(default: Any = None, required: bool = False, type: Any = None) -> ParamSpec:
    return ParamSpec(default=default, required=required, type=type)


@lru_cache(maxsize=None)
def _adapter(type_: Any) -> TypeAdapter:
    return TypeAdapter(type_)


def _is_present(value: Any) -> bool:
    return value is not UNSET and value is not None and value != ""


class Param(Observable):
    """A controller parameter instance."""

    def __init__(self, name: str, default: Any = None, required: bool = False,
                 type: Any = None, owner: Optional['ParamSet'] = None):
        self._name = name
        self._value = None
        self._default = default
        self._type = type
        self._owner = owner
        self._required = False
        self.set_value(default)
        # required applies to values set after the default
        self._required = bool(required)

    @property
    def name(self) -> str:
        return self._name

    @property
    def default(self) -> Any:
        return self._default

    @property
    def required(self) -> bool:
        return self._required

    @property
    def type(self) -> Any:
        return self._type

    def get_value(self) -> Any:
        return self._value

    @property
    def value(self) -> Any:
        return self._value

    def set_value(self, value: Any = UNSET) -> None:
        """
        Validate and store ``value``, firing ``on_change`` when it differs.

        Args:
            value: New value. ``UNSET`` leaves the current value in place.

        Raises:
            ConfigurationError: if the param is required and ``value`` is
                missing, or ``value`` is not an instance of the param type.
        """
        if self._required and not _is_present(value):
            raise ConfigurationError(f"Param.set_value - value for {self._name!r} is required")
        if value is UNSET:
            return
        if self._type is not None and value is not None:
            try:
                _adapter(self._type).validate_python(value, strict=True)
            except ValidationError as e:
                raise ConfigurationError(
                    f"Param.set_value - value for {self._name!r} is invalid type: {e.errors()[0]['msg']}"
                ) from e
        if self._value != value:
            self._value = value
            self.on_change()
            if self._owner is not None:
                self._owner.on_change()

    def on_change(self) -> None:
        """Fires when the value changes."""
        self.emit("on_change", self)

    def __repr__(self) -> str:
        return f"Param({self._name!r}, value={self._value!r})"


class ParamSet(Observable):
    """The cloned params of one Controller instance, keyed by name."""

    def __init__(self):
        self._params: Dict[str, Param] = {}

    @classmethod
    def from_specs(cls, specs: Dict[str, ParamSpec], values: Optional[Dict[str, Any]] = None) -> 'ParamSet':
        """Clone ``specs`` into fresh params, then apply construction ``values``."""
        params = cls()
        for name, spec in specs.items():
            if not isinstance(spec, ParamSpec):
                continue
            item = Param(name, copy.deepcopy(spec.default), spec.required, spec.type, params)
            params._params[name] = item
            if values is not None:
                item.set_value(values.get(name, UNSET))
        return params

    def get(self, name: str) -> Param:
        if name not in self._params:
            raise ConfigurationError(f"ParamSet - {name!r} does not reference a declared param")
        return self._params[name]

    def __getitem__(self, name: str) -> Param:
        return self.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._params

    def __iter__(self) -> Iterator[str]:
        return iter(self._params)

    def __len__(self) -> int:
        return len(self._params)

    def values(self):
        return self._params.values()

    def items(self):
        return self._params.items()

    def to_dict(self) -> Dict[str, Any]:
        return {name: item.get_value() for name, item in self._params.items()}

    def on_change(self) -> None:
        """Fires when any param of the set changes."""
        self.emit("on_change", self)
