"""
Executable units: Command, Behavior and Rule.
"""

from .base import ExecutableUnit
from .command import Command
from .behavior import Behavior
from .rule import Rule

UNIT_TYPES = (Command, Behavior, Rule)

__all__ = [
    'ExecutableUnit',
    'Command',
    'Behavior',
    'Rule',
    'UNIT_TYPES',
]
