"""REST Proxy — client side of a Task exchange: encode, send, decode.

Invariants:
    - At most two sends per handle_task: the original and one resend after a reconnect
    - The resend re-encodes the task (a consumed request body is never reused)
    - decode_task_result is only ever called with a response in hand
    - No backoff, no further retries

Design Decisions:
    - TransportError is the "no usable response" signal; anything else the
      transport raises propagates untouched
    - A second TransportError propagates with the first one as its __context__
"""

import logging

from pydantic import BaseModel

from quark_rest.core.commands import Task, TaskResult
from quark_rest.core.endpoint import EndPoint
from quark_rest.core.errors import (
    TaskEncodeError, TaskResultDecodeError, TransportError,
)
from quark_rest.core.repository_protocols import ServiceRegistry, TransportClient
from quark_rest.core.resource import Resource
from quark_rest.infrastructure.rest_client import RestClient
from quark_rest.services.wire_codec import DecodePolicy, RestProtocol

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 60.0


class RestProxy:
    """Sends one Task at a time to a remote service."""

    def __init__(self, protocol: RestProtocol, client: TransportClient):
        self.protocol = protocol
        self.client = client

    async def handle_task(
        self,
        task: Task,
        success: type[BaseModel] | None = None,
        failure: type[BaseModel] | None = None,
    ) -> TaskResult:
        try:
            request = self.protocol.encode_task(task)
        except TaskEncodeError as e:
            raise TaskEncodeError(f"encode task failed: {e.message}", e.context) from e

        await self.client.connect()
        try:
            response = await self.client.send(request)
        except TransportError as first:
            logger.warning(
                f"Send failed, reconnecting: {first.message}",
                extra={"attempt": 1, "method": request.method, "user": task.user},
            )
            await self.client.reconnect()
            request = self.protocol.encode_task(task)
            response = await self.client.send(request)

        try:
            return self.protocol.decode_task_result(response, success, failure)
        except TaskResultDecodeError as e:
            raise TaskResultDecodeError(
                f"decode task result failed: {e.message}", e.context,
            ) from e

    async def close(self) -> None:
        await self.client.close()


def get_proxy_of_service(
    endpoint: EndPoint,
    resources: list[type[Resource]],
    policy: DecodePolicy | None = None,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> RestProxy:
    protocol = RestProtocol(resources, endpoint, policy)
    client = RestClient(endpoint.generate_service_url(), timeout_seconds)
    return RestProxy(protocol, client)


def get_proxy(
    registry: ServiceRegistry,
    name: str,
    resources: list[type[Resource]],
    **kwargs,
) -> RestProxy:
    return get_proxy_of_service(registry.get_service(name), resources, **kwargs)
