"""
Command Interception

Before/after/around advice around the head unit of a command chain. Each
intercept wraps the current dispatcher of the target chain in a new one, so
intercepts on the same command stack in registration order and the units
themselves are never modified.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, TYPE_CHECKING

from ..core.errors import ConfigurationError

if TYPE_CHECKING:
    from ..command.base import ExecutableUnit
    from .request import Request

Dispatcher = Callable[['Request'], Any]


class InterceptType(str, Enum):
    BEFORE = "before"
    AFTER = "after"
    AROUND = "around"

    @classmethod
    def parse(cls, kind: Any) -> 'InterceptType':
        if kind is None or kind == "":
            raise ConfigurationError("Controller.add_intercept - intercept type is not set")
        if isinstance(kind, cls):
            return kind
        if not isinstance(kind, str):
            raise ConfigurationError("Controller.add_intercept - intercept type is not type str")
        try:
            return cls(kind.lower())
        except ValueError:
            raise ConfigurationError(
                'Controller.add_intercept - intercept type is not "before", "after", or "around"'
            ) from None


@dataclass
class Invocation:
    """
    Handle passed to the injected chain of an intercept.

    ``proceed()`` runs the intercepted dispatcher with the original request;
    it is only available to ``around`` advice.
    """
    request: 'Request'
    callee: 'ExecutableUnit'
    kind: InterceptType
    _proceed: Optional[Dispatcher] = None

    @property
    def args(self) -> tuple:
        return (self.request,)

    def proceed(self) -> Any:
        if self._proceed is None:
            raise ConfigurationError(f"Invocation.proceed - not available in {self.kind.value} intercepts")
        return self._proceed(self.request)


def compose(kind: InterceptType, inner: Dispatcher, advice: Callable[[Invocation], Any],
            callee: 'ExecutableUnit') -> Dispatcher:
    """Wrap ``inner`` with ``advice`` according to ``kind``."""
    if kind is InterceptType.BEFORE:
        def before(request: 'Request') -> Any:
            advice(Invocation(request, callee, kind))
            return inner(request)
        return before

    if kind is InterceptType.AFTER:
        def after(request: 'Request') -> Any:
            result = inner(request)
            advice(Invocation(request, callee, kind))
            return result
        return after

    def around(request: 'Request') -> Any:
        return advice(Invocation(request, callee, kind, inner))
    return around
