"""
Runtime

One explicit context object owning the process-scoped state: the messaging
bus, the model store, the loader, the controller registry, the host document,
the HTTP transport and the service registry. A default Runtime lives for the
whole process (``get_runtime``); tests build their own in isolation.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar, TYPE_CHECKING

from .core.config import MojoConfig
from .core.messaging import MessagingBus
from .core.model import ModelStore
from .core.loader import UnitLoader

if TYPE_CHECKING:
    from .controller.registry import ControllerRegistry
    from .host.dom import Element
    from .service.service import Service

logger = logging.getLogger(__name__)

T = TypeVar('T')

# transport(method, url, params, on_success, on_error)
Transport = Callable[[str, str, Dict[str, Any], Callable[[Any], None], Callable[..., None]], Any]


class Runtime:
    """Process-scoped collaborators shared by controllers, units and services."""

    def __init__(
        self,
        config: Optional[MojoConfig] = None,
        document: Optional['Element'] = None,
        transport: Optional[Transport] = None,
        loader: Optional[UnitLoader] = None,
    ):
        self.config = config or MojoConfig.from_environment()
        self.bus = MessagingBus()
        self.model = ModelStore(self.bus)
        self.loader = loader or UnitLoader()
        self.document = document
        self.transport = transport
        self.services: Dict[str, 'Service'] = {}
        self._registry: Optional['ControllerRegistry'] = None
        self._instances: Dict[type, Any] = {}

    @property
    def registry(self) -> 'ControllerRegistry':
        if self._registry is None:
            from .controller.registry import ControllerRegistry
            self._registry = ControllerRegistry(self)
        return self._registry

    @property
    def is_development(self) -> bool:
        return self.config.is_development

    def query(self, selector: str, root: Optional['Element'] = None) -> List['Element']:
        """Resolve ``selector`` below ``root``, or below the document when omitted."""
        root = root if root is not None else self.document
        if root is None:
            logger.debug(f"No host document to resolve {selector!r}")
            return []
        return root.query(selector)

    def instance_of(self, cls: Type[T]) -> T:
        """Per-runtime singleton of ``cls``."""
        if cls not in self._instances:
            self._instances[cls] = cls(runtime=self)
        return self._instances[cls]


_default_runtime: Optional[Runtime] = None


def get_runtime() -> Runtime:
    """Get the process-wide default Runtime, creating it on first use."""
    global _default_runtime
    if _default_runtime is None:
        _default_runtime = Runtime()
    return _default_runtime


def set_runtime(runtime: Optional[Runtime]) -> None:
    """Replace (or with ``None`` reset) the process-wide default Runtime."""
    global _default_runtime
    _default_runtime = runtime
