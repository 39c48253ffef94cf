"""
Controller Request

Encapsulates one dispatch occurrence: who fired it, which command it targets,
the owning controller, the triggering event and the params handed to the
units of the chain.
"""

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Union, TYPE_CHECKING

from ..core.errors import ConfigurationError

if TYPE_CHECKING:
    from .controller import Controller
    from .intercept import Invocation

Resolver = Callable[..., Any]


@dataclass(frozen=True)
class FixedParams:
    """Params known when the binding is made; ``False`` disables the request."""
    values: Union[Mapping[str, Any], bool, None] = None


@dataclass(frozen=True)
class DeferredParams:
    """Params computed at dispatch time by ``resolver(context, caller, controller)``."""
    resolver: Resolver


ParamsSource = Union[FixedParams, DeferredParams]


def to_params_source(params: Any) -> ParamsSource:
    """Normalize a mapping, callable, ``False`` or ``None`` into a params variant."""
    if isinstance(params, (FixedParams, DeferredParams)):
        return params
    if params is None:
        return FixedParams()
    if params is False:
        return FixedParams(False)
    if isinstance(params, Mapping):
        return FixedParams(params)
    if callable(params):
        return DeferredParams(params)
    raise ConfigurationError(f"params must be a mapping, a callable or False, not {type(params).__name__}")


def _call_resolver(resolver: Resolver, *args: Any) -> Any:
    "Call `resolver` with as many of `args` as its signature accepts"
    try:
        sig = inspect.signature(resolver)
    except (TypeError, ValueError):
        return resolver(*args)
    positional = [p for p in sig.parameters.values()
                  if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)]
    if any(p.kind == p.VAR_POSITIONAL for p in sig.parameters.values()):
        return resolver(*args)
    return resolver(*args[:len(positional)])


class Request:
    """Request object passed to Commands, Behaviors and Rules."""

    def __init__(
        self,
        caller: Any,
        command_name: str,
        controller: 'Controller',
        event: Any = None,
        params: Any = None,
        invocation: Optional['Invocation'] = None,
    ):
        from .controller import Controller

        if caller is None:
            raise ConfigurationError("Request - caller is not set")
        if command_name is None:
            raise ConfigurationError("Request - command_name is not set")
        if not isinstance(command_name, str):
            raise ConfigurationError("Request - command_name is not type str")
        if controller is None:
            raise ConfigurationError("Request - controller is not set")
        if not isinstance(controller, Controller):
            raise ConfigurationError("Request - controller is not type Controller")

        self.caller = caller
        self.command_name = command_name
        self.controller = controller
        self.event = event
        self.invocation = invocation
        self.params_source = to_params_source(params)

        if isinstance(self.params_source, DeferredParams):
            self._params: Union[Dict[str, Any], bool] = {}
            self._resolved = False
        else:
            values = self.params_source.values
            self._params = False if values is False else dict(values or {})
            self._resolved = True

    @property
    def is_deferred(self) -> bool:
        return isinstance(self.params_source, DeferredParams)

    def update(self) -> None:
        """Re-run the deferred resolver and merge its result into the params."""
        if not self.is_deferred:
            return
        latest = _call_resolver(self.params_source.resolver, self.context, self.caller, self.controller)
        self._resolved = True
        if latest is False:
            self._params = False
            return
        if latest is None:
            return
        if not isinstance(latest, Mapping):
            raise ConfigurationError(
                f"Request.update - params resolver for {self.command_name!r} must return a mapping"
            )
        if self._params is False:
            self._params = {}
        self._params.update(latest)

    def get_params(self) -> Union[Dict[str, Any], bool]:
        """
        Params for the units of the chain; ``False`` when the request is disabled.

        Example:
            target = request.get_params().get("target")
        """
        if not self._resolved:
            self.update()
        return self._params

    @property
    def params(self) -> Union[Dict[str, Any], bool]:
        return self.get_params()

    @property
    def context(self) -> Any:
        """Context element of the controller that fired the request."""
        return self.controller.context

    @property
    def controller_name(self) -> str:
        return self.controller.controller_name

    def get_invocation(self) -> Optional['Invocation']:
        return self.invocation

    def __repr__(self) -> str:
        return f"Request({self.command_name!r}, controller={self.controller_name!r})"
