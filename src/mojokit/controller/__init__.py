"""
Controllers: requests, params, intercepts and the site map registry.
"""

from .request import Request, FixedParams, DeferredParams, to_params_source
from .param import Param, ParamSet, ParamSpec, param, UNSET
from .intercept import InterceptType, Invocation, compose
from .controller import Controller, ControllerState, Observation, params_signature
from .registry import ControllerRegistry, ControllerMapping, SiteMapEntry, MAP_CONTROLLERS_TOPIC

__all__ = [
    'Request',
    'FixedParams',
    'DeferredParams',
    'to_params_source',
    'Param',
    'ParamSet',
    'ParamSpec',
    'param',
    'UNSET',
    'InterceptType',
    'Invocation',
    'compose',
    'Controller',
    'ControllerState',
    'Observation',
    'params_signature',
    'ControllerRegistry',
    'ControllerMapping',
    'SiteMapEntry',
    'MAP_CONTROLLERS_TOPIC',
]
