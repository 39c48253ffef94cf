"""
Controller Registry

Maps controllers to host elements and pages from a declarative site map:

    site_map = [
        {"pattern": "#menu-navigation",
         "controllers": [{"controller": "sample.controller.MenuController", "params": {"selected": 0}}]},
        {"pattern": re.compile(r"home\\.htm"),
         "controllers": [{"controller": "sample.controller.HomeController"}]},
    ]
    registry = runtime.registry
    registry.set_site_map(site_map)
    registry.map_controllers("http://example.com/home.htm")

Selector patterns are resolved against the context element (or the runtime
document); regex and predicate patterns are tested against a string context
such as the current URL and map page-level controllers.
"""

import logging
import re
from typing import Any, Callable, Dict, List, Optional, Set, Tuple, Union, TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from ..core.errors import ConfigurationError
from ..core.observable import Observable
from ..core.utils import require_name
from .controller import Controller, ControllerState

if TYPE_CHECKING:
    from ..runtime import Runtime

logger = logging.getLogger(__name__)

MAP_CONTROLLERS_TOPIC = "/mojo/controller/mapControllers"


class ControllerMapping(BaseModel):
    """One controller of a site map entry."""
    model_config = ConfigDict(extra="forbid")

    controller: str = Field(min_length=1)
    params: Optional[Dict[str, Any]] = None


class SiteMapEntry(BaseModel):
    """A pattern and the controllers mapped where it matches."""
    model_config = ConfigDict(arbitrary_types_allowed=True, extra="forbid")

    pattern: Union[str, re.Pattern, Callable[[str], Any]]
    controllers: List[ControllerMapping]

    def matches_page(self, page: str) -> bool:
        if isinstance(self.pattern, re.Pattern):
            return self.pattern.search(page) is not None
        return bool(self.pattern(page))


_site_map_adapter = TypeAdapter(List[SiteMapEntry])


class ControllerRegistry(Observable):
    """Instantiates controllers once per (element, controller name) or once per page-level name."""

    def __init__(self, runtime: 'Runtime'):
        self.runtime = runtime
        self._site_map: Optional[List[SiteMapEntry]] = None
        self._page_controllers: Dict[str, Controller] = {}
        # id(element) -> (element, {controller name: controller})
        self._element_controllers: Dict[int, Tuple[Any, Dict[str, Controller]]] = {}
        self._mapping: Set[Tuple[int, str]] = set()
        self._subscription = runtime.bus.subscribe(MAP_CONTROLLERS_TOPIC, self, "map_controllers")

    def set_site_map(self, site_map: Any) -> None:
        """Validate and store the site map.

        Raises:
            ConfigurationError: if ``site_map`` is missing or malformed.
        """
        if site_map is None:
            raise ConfigurationError("ControllerRegistry.set_site_map - site_map parameter is required")
        try:
            self._site_map = _site_map_adapter.validate_python(site_map)
        except ValidationError as e:
            raise ConfigurationError(
                "ControllerRegistry.set_site_map - site_map must consist of entries in the format "
                f'{{"pattern": "pattern", "controllers": [{{"controller": "controller.path"}}]}}: {e}'
            ) from e

    def get_site_map(self) -> List[SiteMapEntry]:
        if self._site_map is None:
            raise ConfigurationError("ControllerRegistry - site map not set")
        return self._site_map

    def map_controllers(self, context: Any = None) -> None:
        """
        Map the site map's controllers.

        Args:
            context: Element to search for selector patterns (the runtime
                document when omitted), or a string tested against regex
                and predicate patterns.
        """
        root = context if context is not None and not isinstance(context, str) else None
        for entry in self.get_site_map():
            if isinstance(entry.pattern, str):
                for element in self.runtime.query(entry.pattern, root):
                    self._map_all(entry.controllers, element)
            elif isinstance(context, str) and entry.matches_page(context):
                self._map_all(entry.controllers)
        self.on_complete()

    def _map_all(self, mappings: List[ControllerMapping], context: Any = None) -> None:
        for mapping in mappings:
            if not self.runtime.is_development:
                self.map_controller(mapping.controller, context, mapping.params)
                continue
            try:
                self.map_controller(mapping.controller, context, mapping.params)
            except (ConfigurationError, NotImplementedError):
                raise
            except Exception as e:
                logger.warning(
                    f"EXCEPTION: {e} in ControllerRegistry.map_controller() for controller: {mapping.controller}",
                    exc_info=True,
                )

    def map_controller(self, controller_name: str, context: Any = None,
                       params: Optional[Dict[str, Any]] = None) -> Optional[Controller]:
        """
        Instantiate ``controller_name`` on ``context`` unless it is already mapped there.

        Returns:
            The mapped controller; ``None`` while the same mapping is still
            initializing further up the stack.
        """
        require_name(controller_name, "ControllerRegistry.map_controller", "controller_name")
        factory = self.runtime.loader.load(controller_name)
        if context is not None:
            _, cache = self._element_controllers.setdefault(id(context), (context, {}))
        else:
            cache = self._page_controllers

        existing = cache.get(controller_name)
        if existing is not None and existing.state is not ControllerState.TORN_DOWN:
            return existing
        key = (id(context), controller_name)
        if key in self._mapping:
            return None

        self._mapping.add(key)
        try:
            controller = factory(context, params, runtime=self.runtime)
        finally:
            self._mapping.discard(key)
        if not isinstance(controller, Controller):
            raise ConfigurationError(
                f"ControllerRegistry.map_controller - {controller_name!r} must be an instance of Controller"
            )
        cache[controller_name] = controller
        logger.debug(f"Mapped {controller_name} to {context!r}")
        return controller

    def controllers_for(self, element: Any) -> Dict[str, Controller]:
        """Controllers mapped to ``element``, keyed by controller name."""
        entry = self._element_controllers.get(id(element))
        if entry is None or entry[0] is not element:
            return {}
        return dict(entry[1])

    @property
    def page_controllers(self) -> Dict[str, Controller]:
        return dict(self._page_controllers)

    def remap(self, context: Any = None) -> None:
        """Ask the registry to map controllers again through the messaging bus."""
        self.runtime.bus.publish(MAP_CONTROLLERS_TOPIC, None if context is None else [context])

    def on_complete(self) -> None:
        """Fires when a mapping pass completes."""
        self.emit("on_complete", self)
