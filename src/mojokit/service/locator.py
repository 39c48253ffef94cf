"""
Service Locator

Central registry of services. Subclass it, register services in
``add_services`` and share one instance per runtime:

    class SampleLocator(Locator):
        def add_services(self):
            self.add_service(Service("getRSS", "/json/rssFeed", format="json", cache=True))
            self.add_service(Service("updateProfile", "/json/members/${member_id}/profile"))

    service = SampleLocator.get_instance().get_service("getRSS")
"""

import logging
from typing import Optional, TYPE_CHECKING

from ..core.errors import ConfigurationError
from ..core.utils import require_name
from .service import Service

if TYPE_CHECKING:
    from ..runtime import Runtime

logger = logging.getLogger(__name__)


class Locator:

    def __init__(self, runtime: Optional['Runtime'] = None):
        from ..runtime import get_runtime

        self.runtime = runtime or get_runtime()
        if not self.runtime.services:
            self.add_services()

    @classmethod
    def get_instance(cls, runtime: Optional['Runtime'] = None) -> 'Locator':
        """The locator of ``runtime`` (the process-wide runtime by default)."""
        from ..runtime import get_runtime

        return (runtime or get_runtime()).instance_of(cls)

    def add_services(self) -> None:
        """Register the application's services with ``add_service``."""
        if self.runtime.is_development:
            logger.debug(f"{type(self).__name__}.add_services() not implemented")

    def add_service(self, service: Service) -> Service:
        """
        Add ``service`` to the registry.

        Raises:
            ConfigurationError: if ``service`` is not a Service or its name is
                already registered.
        """
        if service is None:
            raise ConfigurationError("Locator.add_service - service parameter is required")
        if not isinstance(service, Service):
            raise ConfigurationError("Locator.add_service - service parameter must be an instance of Service")
        if service.name in self.runtime.services:
            raise ConfigurationError(
                f'Locator.add_service - service with the name "{service.name}" already exists in the registry'
            )
        if service._runtime is None:
            service.bind(self.runtime)
        self.runtime.services[service.name] = service
        return service

    def get_service(self, name: str) -> Optional[Service]:
        require_name(name, "Locator.get_service")
        return self.runtime.services.get(name)
