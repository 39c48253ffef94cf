"""
Controller

Binds event sources to named chains of executable units. A concrete
controller registers its commands, observers and intercepts in hook methods
that run while the controller initializes; every class of the hierarchy
contributes its own hooks, base classes first.

Example:
    @define("sample.controller.ProfileController")
    class ProfileController(Controller):
        params = {"user_id": param(required=True, type=int)}

        def add_commands(self):
            self.add_command("GetProfile", "sample.command.GetProfileCommand")
            self.add_command("ShowProfile", ShowProfileBehavior)

        def add_observers(self):
            self.add_observer("#profile-link", "onclick", "GetProfile",
                              lambda context, caller: {"user_id": self.get_value("user_id")})
            self.add_observer(self.get_command("GetProfile"), "on_response", "ShowProfile")

        def add_intercepts(self):
            self.add_intercept("around", "GetProfile", "CheckLogin")
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Set, Tuple

from ..command import UNIT_TYPES, ExecutableUnit
from ..core.errors import ConfigurationError
from ..core.messaging import Subscription
from ..core.observable import ListenerHandle, Observable
from ..core.utils import require_name
from ..host import EventSource
from ..runtime import Runtime, get_runtime
from .intercept import Dispatcher, InterceptType, Invocation, compose
from .param import ParamSet, ParamSpec
from .request import FixedParams, Request, to_params_source

logger = logging.getLogger(__name__)

# Event families that bubble and can be delegated to the context element
DELEGATED_EVENTS = re.compile(r"^(on)?(click|mouse|key|move)", re.IGNORECASE)

REBIND_ALL_TOPIC = "/mojo/controller/addObservers"


def rebind_topic(controller_name: str) -> str:
    return f"/mojo/controller/{controller_name}/addObservers"


class ControllerState(Enum):
    CONSTRUCTED = "constructed"
    INITIALIZING = "initializing"
    ACTIVE = "active"
    TORN_DOWN = "torn_down"


@dataclass(frozen=True)
class Observation:
    """One (command, params, delegate selector) entry of a binding."""
    command_name: str
    params: Any = None
    delegate: str = ""


def params_signature(params: Any) -> str:
    """Serialize a params source for binding deduplication."""
    source = to_params_source(params)
    if isinstance(source, FixedParams):
        if source.values is False:
            return "False"
        if not source.values:
            return ""
        return ",".join(f"{key}:{value!r}" for key, value in source.values.items() if value)
    code = getattr(source.resolver, "__code__", None)
    if code is None:
        return repr(source.resolver)
    return f"{code.co_filename}:{code.co_firstlineno}:{code.co_name}:{hash(code.co_code)}"


class Controller(Observable):
    """
    Base class of all controllers.

    The ``add_commands``, ``add_observers`` and ``add_intercepts`` hooks of
    every class in the hierarchy run once each, base class first, so an
    override must not call ``super()``.

    Args:
        context: Host element the controller is bound to, or ``None`` for a
            page-level controller.
        params: Construction values for the declared params.
        runtime: Runtime owning the bus, model store and loader; defaults to
            the process-wide runtime.
    """

    declared_name: Optional[str] = None
    params: Dict[str, ParamSpec] = {}

    def __init__(self, context: Any = None, params: Optional[Mapping[str, Any]] = None,
                 runtime: Optional[Runtime] = None):
        self.runtime = runtime or get_runtime()
        self.state = ControllerState.CONSTRUCTED
        self._context = context
        self._commands: Dict[str, List[ExecutableUnit]] = {}
        self._heads: Dict[str, Dispatcher] = {}
        self._handles: List[ListenerHandle] = []
        self._subscriptions: List[Subscription] = []
        # id(source) -> (source, {controller name: {signature}})
        self._tags: Dict[int, Tuple[Any, Dict[str, Set[str]]]] = {}
        self._pending: Optional[Dict[str, Dict[str, List[Observation]]]] = None
        self._query_cache: Dict[str, List[Any]] = {}
        self._init(params)

    # Lifecycle

    def _init(self, values: Optional[Mapping[str, Any]]) -> None:
        self.state = ControllerState.INITIALIZING
        if values is not None and not isinstance(values, Mapping):
            raise ConfigurationError(f"{self.controller_name} - params must be a mapping")
        self.params = ParamSet.from_specs(self._param_specs(), values)

        try:
            self._call_hooks("add_commands")
            self._add_observers()
            self._call_hooks("add_intercepts")
            self.on_init()
            for item in self.params.values():
                if item.get_value() is not None:
                    item.on_change()

            bus = self.runtime.bus
            self._subscriptions.append(bus.subscribe(rebind_topic(self.controller_name), self, "_add_observers"))
            self._subscriptions.append(bus.subscribe(REBIND_ALL_TOPIC, self, "_add_observers"))
        except BaseException:
            # release observers bound before the failure
            self.teardown()
            raise
        self.state = ControllerState.ACTIVE
        logger.debug(f"Initialized {self.controller_name} on {self._context!r}")

    @classmethod
    def _controller_classes(cls) -> List[type]:
        "Controller subclasses of the hierarchy, base first, excluding `Controller`"
        return [klass for klass in reversed(cls.__mro__)
                if issubclass(klass, Controller) and klass is not Controller]

    @classmethod
    def _param_specs(cls) -> Dict[str, ParamSpec]:
        specs: Dict[str, ParamSpec] = {}
        for klass in cls._controller_classes():
            specs.update(klass.__dict__.get("params") or {})
        return specs

    def _call_hooks(self, hook_name: str) -> None:
        for klass in self._controller_classes():
            hook = klass.__dict__.get(hook_name)
            if hook is not None:
                hook.__get__(self, type(self))()

    def add_commands(self) -> None:
        """Register the controller's commands with ``add_command``."""

    def add_observers(self) -> None:
        """Register the controller's observers with ``add_observer``."""

    def add_intercepts(self) -> None:
        """Register the controller's intercepts with ``add_intercept``."""

    def on_init(self) -> None:
        """Fires once the controller is initialized."""
        self.emit("on_init", self)

    def teardown(self) -> None:
        """Disconnect every observer and bus subscription and release the context."""
        if self.state is ControllerState.TORN_DOWN:
            return
        self.remove_observers()
        for subscription in self._subscriptions:
            self.runtime.bus.unsubscribe(subscription)
        self._subscriptions.clear()
        self._context = None
        self.state = ControllerState.TORN_DOWN
        logger.debug(f"Tore down {self.controller_name}")

    # Accessors

    @property
    def controller_name(self) -> str:
        cls = type(self)
        return cls.__dict__.get("declared_name") or f"{cls.__module__}.{cls.__qualname__}"

    @property
    def context(self) -> Any:
        return self._context

    def get_context_element(self) -> Any:
        return self._context

    def get_config(self, config_name: str) -> Any:
        if config_name.lower() == "params":
            return self.params
        return None

    def get_value(self, param_name: str) -> Any:
        return self.params.get(param_name).get_value()

    def set_value(self, param_name: str, value: Any) -> None:
        self.params.get(param_name).set_value(value)

    def get_context_controller(self, controller_name: str) -> Optional['Controller']:
        """Sibling controller mapped to the same context element, or ``None``."""
        if self._context is None:
            return None
        return self.runtime.registry.controllers_for(self._context).get(controller_name)

    # Commands

    def add_command(self, command_name: str, unit_ref: Any) -> ExecutableUnit:
        """
        Append a unit to the chain registered under ``command_name``.

        Args:
            command_name: Reference name of the chain.
            unit_ref: Loader name, unit class or factory of a Command,
                Behavior or Rule.

        Returns:
            The new unit instance.
        """
        require_name(command_name, "Controller.add_command", "command_name")
        if not unit_ref:
            raise ConfigurationError("Controller.add_command - unit reference is not set")
        unit = self.runtime.loader.create(unit_ref)
        if not isinstance(unit, UNIT_TYPES):
            raise ConfigurationError(
                f"Controller.add_command - {unit_ref!r} is not a Command, Behavior or Rule"
            )
        self._commands.setdefault(command_name, []).append(unit)
        self._heads.setdefault(command_name, unit.dispatch)
        return unit

    def get_command(self, command_name: str) -> ExecutableUnit:
        """First unit of the chain registered under ``command_name``."""
        return self.get_command_chain(command_name)[0]

    def get_command_chain(self, command_name: str) -> List[ExecutableUnit]:
        require_name(command_name, "Controller.get_command_chain", "command_name")
        chain = self._commands.get(command_name)
        if not chain:
            raise ConfigurationError(
                f"Controller.get_command_chain - {command_name!r} does not reference a command in {self.controller_name}"
            )
        return chain

    def has_command(self, command_name: str) -> bool:
        return bool(self._commands.get(command_name))

    def fire_command_chain(self, command_name: str, request: Request) -> List[Any]:
        """
        Dispatch ``request`` to every unit of the chain in registration order.

        The head unit runs through its intercepts.

        Returns:
            The result of each dispatch, in order. Rules contribute a bool
            rather than the result of the invocation they guard.
        """
        chain = list(self.get_command_chain(command_name))
        results = []
        for index, unit in enumerate(chain):
            dispatcher = self._heads[command_name] if index == 0 else unit.dispatch
            results.append(dispatcher(request))
        return results

    def _set_request(self, params: Any, caller: Any, event: Any, command_name: str,
                     invocation: Optional[Invocation] = None) -> Request:
        return Request(caller, command_name, self, event=event, params=params, invocation=invocation)

    # Observers

    def add_observer(self, source: Any, event_name: str, command_name: str, params: Any = None) -> None:
        """
        Fire ``command_name`` whenever ``source`` emits ``event_name``.

        Args:
            source: Event source, list of event sources, selector or list of
                selectors resolved within the context element.
            event_name: Event to observe, e.g. ``"onclick"`` or ``"on_response"``.
            command_name: Registered command to fire.
            params: Mapping, ``False``, or resolver called with
                ``(context, caller, controller)`` at dispatch time.
        """
        if source is None or (isinstance(source, (str, list, tuple)) and not source):
            return
        require_name(event_name, "Controller.add_observer", "event_name")
        require_name(command_name, "Controller.add_observer", "command_name")
        if not self.has_command(command_name):
            raise ConfigurationError(
                f"Controller.add_observer - {command_name!r} does not reference a command in {self.controller_name}"
            )
        to_params_source(params)

        sources = list(source) if isinstance(source, (list, tuple)) else [source]
        if all(isinstance(s, str) for s in sources):
            for selector in sources:
                self._observe_selector(selector, event_name, Observation(command_name, params))
        else:
            for item in sources:
                self._bind(item, event_name, [Observation(command_name, params)])

    def _observe_selector(self, selector: str, event_name: str, observation: Observation) -> None:
        if self._context is not None and DELEGATED_EVENTS.match(event_name):
            delegated = Observation(observation.command_name, observation.params, selector)
            self._bind(self._context, event_name, [delegated])
            return
        if self._pending is None:
            for element in self._query(selector):
                self._bind(element, event_name, [observation])
            return
        if selector not in self._query_cache:
            self._query_cache[selector] = self._query(selector)
        self._pending.setdefault(selector, {}).setdefault(event_name, []).append(observation)

    def _query(self, selector: str) -> List[Any]:
        return self.runtime.query(selector, self._context)

    def _add_observers(self, *_: Any) -> None:
        """Run one binding pass; selector observers are batched per element and event."""
        if self.state is ControllerState.TORN_DOWN:
            return
        self._pending, self._query_cache = {}, {}
        try:
            self._call_hooks("add_observers")
            for selector, by_event in self._pending.items():
                for element in self._query_cache.get(selector, []):
                    for event_name, observations in by_event.items():
                        self._bind(element, event_name, list(observations))
        finally:
            self._pending, self._query_cache = None, {}

    def rebind(self) -> None:
        """Re-run the binding pass, e.g. after content was inserted into the context."""
        self._add_observers()

    @staticmethod
    def update_observers(runtime: Optional[Runtime] = None, controller_name: Optional[str] = None) -> None:
        """Re-run the binding pass of every controller, or only those named ``controller_name``."""
        runtime = runtime or get_runtime()
        runtime.bus.publish(rebind_topic(controller_name) if controller_name else REBIND_ALL_TOPIC)

    def _signatures(self, source: Any) -> Set[str]:
        _, by_controller = self._tags.setdefault(id(source), (source, {}))
        return by_controller.setdefault(self.controller_name, set())

    def _bind(self, source: Any, event_name: str, observations: List[Observation]) -> Optional[ListenerHandle]:
        if not isinstance(source, EventSource):
            raise ConfigurationError(
                f"Controller.add_observer - {source!r} is not an event source"
            )
        signatures = self._signatures(source)
        batch = []
        for observation in observations:
            signature = "_".join((event_name + observation.delegate, observation.command_name,
                                  params_signature(observation.params)))
            if signature not in signatures:
                signatures.add(signature)
                batch.append(observation)
        if not batch:
            return None

        handle = source.listen(event_name, self._make_handler(source, batch))
        self._handles.append(handle)
        return handle

    def _make_handler(self, source: Any, batch: List[Observation]) -> Callable[..., None]:
        def handler(*args: Any) -> None:
            event = args[0] if args else None
            if self._is_detached():
                logger.debug(f"Context of {self.controller_name} was removed; tearing down")
                self.teardown()
                return
            for observation in batch:
                caller = source
                if observation.delegate:
                    caller = self._match_delegate(event, observation.delegate)
                if caller is not None:
                    request = self._set_request(observation.params, caller, event, observation.command_name)
                    self.fire_command_chain(observation.command_name, request)
        return handler

    def _is_detached(self) -> bool:
        context = self._context
        if context is None or context is self.runtime.document:
            return False
        return getattr(context, "parent", context) is None

    def _match_delegate(self, event: Any, selector: str) -> Any:
        "Event target or nearest ancestor below the context matching `selector`"
        node = getattr(event, "target", None)
        while node is not None and node is not self._context:
            if node.matches(selector):
                return node
            node = node.parent
        return None

    def remove_observers(self) -> None:
        """Disconnect every bound observer; a later binding pass binds them again."""
        for handle in self._handles:
            handle.source.unlisten(handle)
        self._handles.clear()
        self._tags.clear()

    def observer_count(self) -> int:
        return len(self._handles)

    # Intercepts

    def add_intercept(self, kind: Any, target: str, injected: str, params: Any = None) -> None:
        """
        Inject the ``injected`` chain before, after or around the head unit of ``target``.

        Args:
            kind: ``"before"``, ``"after"`` or ``"around"``.
            target: Command to intercept.
            injected: Command fired as advice. In ``around`` intercepts its
                request carries an invocation whose ``proceed()`` runs the
                intercepted command.
            params: Params source of the injected request.
        """
        kind = InterceptType.parse(kind)
        require_name(target, "Controller.add_intercept", "target")
        require_name(injected, "Controller.add_intercept", "injected")
        if target == injected:
            raise ConfigurationError("Controller.add_intercept - a command cannot add advice to itself")
        if not self.has_command(target):
            raise ConfigurationError(
                f"Controller.add_intercept - {target!r} does not reference a command in {self.controller_name}"
            )
        if not self.has_command(injected):
            raise ConfigurationError(
                f"Controller.add_intercept - {injected!r} does not reference a command in {self.controller_name}"
            )
        to_params_source(params)

        def advice(invocation: Invocation) -> Any:
            original = invocation.request
            request = self._set_request(params, original.caller, original.event, injected, invocation)
            return self.fire_command_chain(injected, request)

        self._heads[target] = compose(kind, self._heads[target], advice, self.get_command(target))
        logger.debug(f"{self.controller_name}: {injected} intercepts {target} ({kind.value})")

    def __repr__(self) -> str:
        return f"<{self.controller_name} {self.state.value}>"
