"""
Rule

A Rule encapsulates a conditional statement guarding an intercepted command.
Concrete rules implement ``condition``; when it holds, ``execute`` proceeds
with the wrapped invocation. Rules are meant to be injected with an
``around`` intercept. A dispatched Rule returns a bool, the truthiness of
``execute``; the guarded invocation's own result is not passed on.

Example:
    @define("sample.rule.MinimumAgeRule")
    class MinimumAgeRule(Rule):
        def condition(self, request):
            return request.get_params().get("age", 0) >= 18
"""

from typing import Any

from .base import ExecutableUnit


class Rule(ExecutableUnit):
    requires_caller = True
    requires_invocation = True

    def _run(self, request) -> bool:
        return bool(self.execute(request))

    def execute(self, request) -> Any:
        if self.condition(request):
            return request.invocation.proceed()
        return None

    def condition(self, request) -> bool:
        raise NotImplementedError(f"{type(self).__name__}.condition() method is not implemented")
