"""
Leaf service boundary: service definitions and the service locator.
"""

from .service import Service, ServiceConfig, VALID_METHODS, VALID_FORMATS, normalize_errors
from .locator import Locator

__all__ = [
    'Service',
    'ServiceConfig',
    'VALID_METHODS',
    'VALID_FORMATS',
    'normalize_errors',
    'Locator',
]
