"""
mojokit - Controller-based Dispatch and Interception

Declaratively binds events to named chains of commands, behaviors and rules,
with before/after/around interception, validated controller params, a
publish/subscribe messaging bus and a change-notifying model store.
"""

from .core import (
    MojoError, ConfigurationError, RuntimeExecutionError,
    Environment, LoggingConfig, MojoConfig, configure_logging,
    Observable, ListenerHandle,
    MessagingBus, Topic, Subscription,
    ModelStore, ModelReference, model_topic,
    UnitLoader, define,
)
from .runtime import Runtime, get_runtime, set_runtime
from .command import ExecutableUnit, Command, Behavior, Rule
from .controller import (
    Controller, ControllerState, ControllerRegistry,
    Request, FixedParams, DeferredParams,
    Param, ParamSet, ParamSpec, param,
    InterceptType, Invocation,
)
from .host import Document, Element, HostEvent
from .service import Service, ServiceConfig, Locator

__version__ = "0.1.0"

__all__ = [
    # Errors and configuration
    'MojoError',
    'ConfigurationError',
    'RuntimeExecutionError',
    'Environment',
    'LoggingConfig',
    'MojoConfig',
    'configure_logging',

    # Messaging and model
    'Observable',
    'ListenerHandle',
    'MessagingBus',
    'Topic',
    'Subscription',
    'ModelStore',
    'ModelReference',
    'model_topic',

    # Runtime and loading
    'Runtime',
    'get_runtime',
    'set_runtime',
    'UnitLoader',
    'define',

    # Units
    'ExecutableUnit',
    'Command',
    'Behavior',
    'Rule',

    # Controllers
    'Controller',
    'ControllerState',
    'ControllerRegistry',
    'Request',
    'FixedParams',
    'DeferredParams',
    'Param',
    'ParamSet',
    'ParamSpec',
    'param',
    'InterceptType',
    'Invocation',

    # Host
    'Document',
    'Element',
    'HostEvent',

    # Services
    'Service',
    'ServiceConfig',
    'Locator',
]
