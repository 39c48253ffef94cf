"""
Service

A named web service call. The URI may contain ``${name}`` placeholders that
are filled from the invocation params. Responses are delivered to the
calling command's ``on_response``/``on_error`` and, for cacheable calls,
stored in the model store under a key serialized from the service name and
params.

Example:
    service = Service("getRSS", "/json/rssFeed/${id}", cache=True, cache_expiry=60)
    service.invoke({"id": "cnn"}, command)
"""

import json
import logging
import string
import time
from typing import Any, Callable, Dict, List, Mapping, Optional, TYPE_CHECKING

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictBool, ValidationError, field_validator
from starlette.datastructures import URL

from ..core.errors import ConfigurationError
from ..core.utils import require_name

if TYPE_CHECKING:
    from ..runtime import Runtime

logger = logging.getLogger(__name__)

VALID_METHODS = ("GET", "POST", "PUT", "DELETE")
VALID_FORMATS = ("json", "text")

# Name prefixes that select the default HTTP method
METHOD_PREFIXES = (("add", "POST"), ("update", "PUT"), ("delete", "DELETE"))


class ServiceConfig(BaseModel):
    """Validated options of a service call."""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    format: str = "json"
    method: str = "GET"
    cache: StrictBool = True
    cache_expiry: float = Field(0, ge=0, validation_alias=AliasChoices("cache_expiry", "cacheExpiry"))
    retry: int = Field(1, ge=0)
    hijax: StrictBool = False
    infer_arrays: StrictBool = Field(True, validation_alias=AliasChoices("infer_arrays", "inferArrays"))

    @field_validator("method")
    @classmethod
    def validate_method(cls, v: str) -> str:
        method = v.upper()
        if method not in VALID_METHODS:
            raise ValueError('method must be one of "GET", "POST", "PUT", or "DELETE"')
        return method

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v not in VALID_FORMATS:
            raise ValueError(f"format must be one of {', '.join(VALID_FORMATS)}")
        return v


def default_method(name: str) -> str:
    lowered = name.lower()
    for prefix, method in METHOD_PREFIXES:
        if lowered.startswith(prefix):
            return method
    return "GET"


def normalize_errors(error: Any, status: Optional[int] = None) -> List[Any]:
    """Normalize a transport error, an exception or an error payload into a list of errors."""
    if isinstance(error, str):
        error = {"message": error}
    elif isinstance(error, Exception):
        error = {"message": str(error), "code": type(error).__name__}
    elif isinstance(error, Mapping):
        error = dict(error)
    else:
        error = {"message": repr(error)}

    errors: List[Any] = []
    if status is not None:
        error["code"] = status
        errors.append(error)
    elif "code" in error:
        errors.append(error)
    if error.get("errors"):
        errors = list(error["errors"])
    if error.get("error"):
        errors.append(error["error"])
    return errors or [error]


class Service:
    """
    A web service definition.

    Args:
        name: Service name, also the prefix of its cache keys.
        uri: URI template; ``${var}`` placeholders are filled from params.
        config: Options, see ``ServiceConfig``; keyword options are merged in.
        runtime: Runtime providing the transport and the model store;
            set by ``Locator.add_service`` when omitted.
    """

    def __init__(self, name: str, uri: str, config: Optional[Mapping[str, Any]] = None,
                 runtime: Optional['Runtime'] = None, **options: Any):
        self.name = require_name(name, "Service", "name")
        self.uri = require_name(uri, "Service", "uri")
        options = {**(config or {}), **options}

        defaults: Dict[str, Any] = {"method": default_method(name)}
        method = str(options.get("method") or defaults["method"]).upper()
        if method != "GET":
            defaults.update(cache=False, retry=0)
        self.config = self._validate({**defaults, **self._translate(options)})

        self._runtime = None
        if runtime is not None:
            self.bind(runtime)

    @staticmethod
    def _translate(options: Dict[str, Any]) -> Dict[str, Any]:
        if "json" not in options:
            return options
        options = dict(options)
        legacy = options.pop("json")
        logger.warning("Service json option is deprecated; use format='json' or format='text'")
        options["format"] = "json" if legacy else "text"
        return options

    @staticmethod
    def _validate(options: Dict[str, Any]) -> ServiceConfig:
        try:
            return ServiceConfig.model_validate(options)
        except ValidationError as e:
            raise ConfigurationError(f"Service - invalid configuration: {e}") from e

    def bind(self, runtime: 'Runtime') -> 'Service':
        """Attach the service to ``runtime`` and expire any stale cache entry under its name."""
        self._runtime = runtime
        self._expire_cache(self.name)
        return self

    @property
    def runtime(self) -> 'Runtime':
        if self._runtime is None:
            from ..runtime import get_runtime
            self.bind(get_runtime())
        return self._runtime

    def configure(self, **options: Any) -> ServiceConfig:
        """Update options; unspecified options keep their value."""
        self.config = self._validate({**self.config.model_dump(), **self._translate(options)})
        return self.config

    def cache_key(self, params: Mapping[str, Any]) -> str:
        pairs = [f"{key}__function" if callable(value) else f"{key}_{value}" for key, value in params.items()]
        return "_".join([self.name, *pairs]) if pairs else self.name

    def build_url(self, params: Mapping[str, Any], caller: Any = None) -> URL:
        """Fill the URI template, honoring hijax links and cache busting."""
        url = string.Template(self.uri).safe_substitute(params)
        if self.config.hijax:
            link = self._hijax_link(caller)
            if link is not None:
                url = link
        url = URL(url)
        if not self.config.cache and self.config.method == "GET":
            url = url.include_query_params(preventCache=int(time.time() * 1000))
        return url

    @staticmethod
    def _hijax_link(caller: Any) -> Optional[str]:
        get_request = getattr(caller, "get_request", None)
        if get_request is None:
            return None
        source = get_request().caller
        if getattr(source, "tag", None) == "a":
            return source.get_attribute("href")
        return None

    def invoke(self, params: Optional[Mapping[str, Any]], caller: Any) -> Any:
        """
        Call the service and deliver the outcome to ``caller``.

        Args:
            params: Params sent with the call and used to fill the URI.
            caller: Object with ``on_response`` and ``on_error`` methods,
                normally the invoking Command.

        Returns:
            Whatever the transport returns, or ``None`` for a cache hit.
        """
        if caller is None:
            raise ConfigurationError("Service.invoke - caller parameter is required")
        for hook in ("on_response", "on_error"):
            if not callable(getattr(caller, hook, None)):
                raise ConfigurationError(f"Service.invoke - caller must have an {hook} method")

        params = dict(params or {})
        config = self.config
        key = self.cache_key(params)

        if config.cache:
            entry = self._get_cache(key)
            if entry is not None:
                logger.debug(f"Service {self.name}: cache hit for {key}")
                return self._deliver(caller, "respond", "on_response", entry["data"])

        transport = self.runtime.transport
        if transport is None:
            raise ConfigurationError(f"Service.invoke - no transport configured for {self.name}")
        url = str(self.build_url(params, caller))
        tried = 0

        def handle_error(error: Any, status: Optional[int] = None) -> Any:
            errors = normalize_errors(error, status)
            if status is not None and config.retry >= tried:
                logger.info(f"Service {self.name}: retrying after HTTP {status} ({tried} tried)")
                return send()
            return self._deliver(caller, "fail", "on_error", errors)

        def on_success(response: Any) -> Any:
            nonlocal tried
            tried += 1
            if config.format == "json":
                if isinstance(response, (str, bytes)):
                    try:
                        response = json.loads(response)
                    except ValueError as e:
                        return handle_error(e)
                if isinstance(response, Mapping) and (response.get("error") or response.get("errors")):
                    return handle_error(response)
            if config.cache:
                self._set_cache(key, response)
            return self._deliver(caller, "respond", "on_response", response)

        def on_error(error: Any, status: Optional[int] = None) -> Any:
            nonlocal tried
            tried += 1
            return handle_error(error, status)

        def send() -> Any:
            return transport(config.method, url, params, on_success, on_error)

        logger.debug(f"Service {self.name}: {config.method} {url}")
        return send()

    @staticmethod
    def _deliver(caller: Any, notify_name: str, hook_name: str, data: Any) -> Any:
        deliver: Callable[[Any], Any] = getattr(caller, notify_name, None) or getattr(caller, hook_name)
        return deliver(data)

    def _set_cache(self, key: str, data: Any) -> None:
        expiry_time = time.time() + self.config.cache_expiry if self.config.cache_expiry > 0 else 0
        self.runtime.model.set(key, {"data": data, "expiry_time": expiry_time})

    def _get_cache(self, key: str) -> Optional[Dict[str, Any]]:
        model = self.runtime.model
        if not model.contains(key):
            return None
        entry = model.get(key)
        if entry["expiry_time"] > 0 and time.time() > entry["expiry_time"]:
            self._expire_cache(key)
            return None
        return entry

    def _expire_cache(self, key: str) -> None:
        self.runtime.model.remove(key)

    def __repr__(self) -> str:
        return f"Service({self.name!r}, {self.uri!r}, method={self.config.method})"
