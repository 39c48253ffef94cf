"""
mojokit Core Module

Framework-agnostic building blocks: errors, configuration, the event-source
mixin, the messaging bus, the model store and the unit loader.
"""

from .errors import MojoError, ConfigurationError, RuntimeExecutionError
from .config import Environment, LoggingConfig, MojoConfig, configure_logging
from .observable import Observable, ListenerHandle, event_key
from .messaging import MessagingBus, Topic, Subscription
from .model import ModelStore, ModelReference, model_topic
from .loader import UnitLoader, define
from .utils import require_name

__all__ = [
    "MojoError",
    "ConfigurationError",
    "RuntimeExecutionError",
    "Environment",
    "LoggingConfig",
    "MojoConfig",
    "configure_logging",
    "Observable",
    "ListenerHandle",
    "event_key",
    "MessagingBus",
    "Topic",
    "Subscription",
    "ModelStore",
    "ModelReference",
    "model_topic",
    "UnitLoader",
    "define",
    "require_name",
]
