"""
Command

A Command encapsulates data processing or business logic, typically a call
to a service followed by ``on_response``/``on_error`` handling.

Example:
    @define("sample.command.LoadHtmlCommand")
    class LoadHtmlCommand(Command):
        def execute(self, request):
            service = SampleLocator.get_instance().get_service("getHtml")
            service.invoke(request.get_params(), self)

        def on_response(self, data):
            ...

        def on_error(self, errors):
            ...
"""

from typing import Any

from .base import ExecutableUnit


class Command(ExecutableUnit):

    def on_response(self, data: Any) -> Any:
        """Handle the data of a successful response."""
        raise NotImplementedError(f"{type(self).__name__}.on_response() method is not implemented")

    def on_error(self, error: Any) -> Any:
        """Handle the errors of a failed response."""
        raise NotImplementedError(f"{type(self).__name__}.on_error() method is not implemented")

    def respond(self, data: Any) -> Any:
        """Deliver a response to ``on_response``, then notify ``on_response`` observers."""
        result = self.on_response(data)
        self.emit("on_response", data)
        return result

    def fail(self, error: Any) -> Any:
        """Deliver errors to ``on_error``, then notify ``on_error`` observers."""
        result = self.on_error(error)
        self.emit("on_error", error)
        return result
