"""
Behavior

A Behavior controls UI interaction and reaction. It only implements
``execute``; the request must carry the caller that triggered it.
"""

from .base import ExecutableUnit


class Behavior(ExecutableUnit):
    requires_caller = True
