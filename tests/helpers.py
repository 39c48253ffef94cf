"""Recording units used across the controller tests."""

from mojokit import Behavior, Command, Rule


def recording(base, log, label, error=None, result=None):
    """Build a ``base`` subclass whose execute appends ``(label, request)`` to ``log``."""

    class Recorded(base):
        def execute(self, request):
            log.append((label, request))
            if error is not None:
                raise error
            return label if result is None else result

    Recorded.__name__ = f"{label.title()}{base.__name__}"
    return Recorded


def proceeding(log, label, times=1):
    """A Behavior that records itself and proceeds with the intercepted invocation ``times`` times."""

    class Proceeding(Behavior):
        def execute(self, request):
            log.append((label, request))
            return [request.invocation.proceed() for _ in range(times)]

    return Proceeding


def rule(log, label, allowed):
    class Guard(Rule):
        def condition(self, request):
            log.append((label, request))
            return allowed

    return Guard


class EchoCommand(Command):
    """Command that records service responses and errors."""

    def __init__(self):
        super().__init__()
        self.responses = []
        self.errors = []

    def execute(self, request):
        return request.get_params()

    def on_response(self, data):
        self.responses.append(data)

    def on_error(self, error):
        self.errors.append(error)


def labels(log):
    return [label for label, _ in log]
