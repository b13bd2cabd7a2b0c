"""REST Transport Client — wraps httpx.AsyncClient behind connect/reconnect/send/close.

Invariants:
    - send() either returns a response with a readable body or raises TransportError
    - connect() is idempotent; reconnect() always drops the old client first
    - Timeout is the only deadline (configured once, default 60 s)

Design Decisions:
    - Wrapper over raw client: isolates transport failures from the proxy
      (the proxy owns the single reconnect-and-resend, not this class)
    - All httpx transport failures mapped to TransportError (core/errors.py)
"""

import logging

import httpx

from quark_rest.core.errors import ErrorContext, TransportError

logger = logging.getLogger(__name__)


class RestClient:
    """One pooled httpx.AsyncClient per service base URL."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def connected(self) -> bool:
        return self._client is not None and not self._client.is_closed

    async def connect(self) -> None:
        if self.connected:
            return
        try:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout_seconds,
                transport=self._transport,
            )
        except (httpx.HTTPError, ValueError) as e:
            raise TransportError(str(e), "connect") from e
        logger.debug(f"Connected to {self.base_url}")

    async def reconnect(self) -> None:
        await self.close()
        await self.connect()

    async def send(self, request: httpx.Request) -> httpx.Response:
        if not self.connected:
            raise TransportError("client not connected", "send")
        try:
            return await self._client.send(request)
        except httpx.TransportError as e:
            raise TransportError(
                str(e) or type(e).__name__, "send",
                ErrorContext(method=request.method),
            ) from e

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
