"""Service Registry — name -> EndPoint lookup backed by an in-process table.

Invariants:
    - get_service() raises ServiceNotFoundError for unknown names (never returns None)
    - register_service() replaces any previous endpoint under the same name

Design Decisions:
    - Static table seeded from settings: discovery backends plug in through the
      ServiceRegistry protocol, this is the single-host default
"""

import logging

from quark_rest.config import Settings
from quark_rest.core.endpoint import EndPoint
from quark_rest.core.errors import ServiceNotFoundError

logger = logging.getLogger(__name__)


class StaticServiceRegistry:
    def __init__(self, endpoints: list[EndPoint] | None = None):
        self._endpoints: dict[str, EndPoint] = {}
        for endpoint in endpoints or []:
            self.register_service(endpoint)

    def get_service(self, name: str) -> EndPoint:
        try:
            return self._endpoints[name]
        except KeyError:
            raise ServiceNotFoundError(name) from None

    def register_service(self, endpoint: EndPoint) -> None:
        self._endpoints[endpoint.name] = endpoint
        logger.info(f"Registered service '{endpoint.name}' at {endpoint.generate_service_url()}")


def endpoint_from_settings(settings: Settings) -> EndPoint:
    return EndPoint(
        name=settings.service_name,
        host=settings.service_host,
        port=settings.service_port,
        path=settings.service_path,
    )
