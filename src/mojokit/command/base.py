"""
Executable Units

Base class shared by Commands, Behaviors and Rules. Every unit is invoked by
its Controller through ``dispatch``, which validates the request, honours
disabled params and applies the development/production error policy.
"""

import logging
from typing import Any, Optional

from ..core.errors import ConfigurationError
from ..core.observable import Observable

logger = logging.getLogger(__name__)


class ExecutableUnit(Observable):
    """Abstract unit of executable logic held in a Controller's command chain."""

    requires_caller: bool = False
    requires_invocation: bool = False

    def __init__(self):
        self._request = None

    @property
    def request(self):
        return self.get_request()

    def get_request(self):
        """Return the Request passed into the unit by its last dispatch."""
        if self._request is None:
            raise ConfigurationError(f"{type(self).__name__}.get_request - request is not set")
        return self._request

    def dispatch(self, request) -> Any:
        """
        Validate ``request`` and run the unit.

        Disabled requests (params resolved to ``False``) return ``None``
        without running. In development configuration, errors raised by the
        unit's logic are logged and swallowed so the rest of the chain still
        runs; in production they propagate.
        """
        self._request = request
        update = getattr(request, "update", None)
        if callable(update):
            update()
        self._validate(request)
        if request.get_params() is False:
            logger.debug(f"{request.command_name} disabled by params; {type(self).__name__} skipped")
            return None
        if request.controller.runtime.is_development:
            try:
                return self._run(request)
            except (ConfigurationError, NotImplementedError):
                raise
            except Exception as e:
                logger.warning(
                    f"EXCEPTION: {e} in {type(self).__name__}.execute() for command: "
                    f"{request.command_name}, controller: {request.controller_name}",
                    exc_info=True,
                )
                return None
        return self._run(request)

    def _run(self, request) -> Any:
        return self.execute(request)

    def _validate(self, request) -> None:
        from ..controller.controller import Controller
        from ..controller.request import Request

        name = type(self).__name__
        if request is None:
            raise ConfigurationError(f"{name}.dispatch - request is not set")
        if not isinstance(request, Request):
            raise ConfigurationError(f"{name}.dispatch - request is not type Request")
        if not isinstance(request.controller, Controller):
            raise ConfigurationError(f"{name}.dispatch - request.controller is not type Controller")
        if self.requires_caller and request.caller is None:
            raise ConfigurationError(f"{name}.dispatch - caller is not set")
        if self.requires_invocation and request.invocation is None:
            raise ConfigurationError(f"{name}.dispatch - invocation is not set")

    def execute(self, request) -> Any:
        raise NotImplementedError(f"{type(self).__name__}.execute() method is not implemented")

    def __repr__(self) -> str:
        return f"<{type(self).__name__}>"
