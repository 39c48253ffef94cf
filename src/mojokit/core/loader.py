"""
Unit Loader

Resolves the string identifiers used by ``add_command`` and the site map to
factories. Lookup order: names registered on the loader, names declared
process-wide with ``@define``, then a dotted ``module.attribute`` import.
"""

import importlib
import logging
from typing import Any, Callable, Dict, Optional, TypeVar, Union

from .errors import ConfigurationError
from .utils import require_name

logger = logging.getLogger(__name__)

T = TypeVar('T')
Factory = Callable[..., Any]

# Process-wide declarations made with @define
_definitions: Dict[str, Factory] = {}


def define(name: str) -> Callable[[T], T]:
    """
    Declare a controller, command, behavior or rule under ``name``.

    Example:
        @define("shorteh.controller.FormController")
        class FormController(Controller):
            ...
    """
    require_name(name, "define")

    def decorator(obj: T) -> T:
        _definitions[name] = obj
        if isinstance(obj, type) and "declared_name" not in obj.__dict__:
            obj.declared_name = name
        return obj

    return decorator


def _import_path(name: str) -> Optional[Factory]:
    module_name, _, attribute = name.rpartition('.')
    if not module_name:
        return None
    try:
        module = importlib.import_module(module_name)
    except ImportError:
        return None
    return getattr(module, attribute, None)


class UnitLoader:
    """String-keyed registry of factories."""

    def __init__(self, factories: Optional[Dict[str, Factory]] = None):
        self._factories: Dict[str, Factory] = dict(factories or {})

    def register(self, name: str, factory: Optional[Factory] = None):
        """Register ``factory`` under ``name``; usable as a decorator when ``factory`` is omitted."""
        require_name(name, "UnitLoader.register")
        if factory is None:
            def decorator(obj):
                self._factories[name] = obj
                return obj
            return decorator
        if not callable(factory):
            raise ConfigurationError(f"UnitLoader.register - factory for {name!r} must be callable")
        self._factories[name] = factory
        return factory

    def is_registered(self, name: str) -> bool:
        return name in self._factories or name in _definitions

    def load(self, name: str) -> Factory:
        """Resolve ``name`` to a factory or raise ConfigurationError."""
        require_name(name, "UnitLoader.load")
        factory = self._factories.get(name) or _definitions.get(name)
        if factory is None:
            factory = _import_path(name)
            if factory is not None:
                logger.debug(f"Resolved {name} by import")
        if factory is None or not callable(factory):
            raise ConfigurationError(f"UnitLoader.load - {name!r} does not reference a loadable unit")
        return factory

    def create(self, ref: Union[str, Factory], *args: Any, **kwargs: Any) -> Any:
        """Instantiate ``ref``: a registered name, a class or a factory callable."""
        if ref is None:
            raise ConfigurationError("UnitLoader.create - reference is required")
        factory = self.load(ref) if isinstance(ref, str) else ref
        if not callable(factory):
            raise ConfigurationError(f"UnitLoader.create - {ref!r} is not callable")
        return factory(*args, **kwargs)
