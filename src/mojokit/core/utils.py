from typing import Any

from .errors import ConfigurationError


def require_name(name: Any, operation: str, label: str = "name") -> str:
    "Return `name` if it is a non-empty string, else raise `ConfigurationError`"
    if name is None:
        raise ConfigurationError(f"{operation} - {label} parameter is required")
    if not isinstance(name, str) or name == "":
        raise ConfigurationError(f"{operation} - {label} parameter must be a non-empty string")
    return name
