"""Boundary Protocols — contracts between core/services and the collaborators they consume.

Invariants:
    - Services NEVER import a concrete store, transport or registry
    - All IO operations accessed through Protocol types
    - Implementations provided by infrastructure/ (or by tests) via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - ResourceStore.begin() is an async context manager: the precondition
      transaction is a scoped acquisition that commits on exit, whatever the outcome
"""

from contextlib import AbstractAsyncContextManager
from typing import Any, Protocol

import httpx

from quark_rest.core.commands import Task, TaskResult
from quark_rest.core.endpoint import EndPoint
from quark_rest.core.resource import Resource


class StoreTransaction(Protocol):
    """Read side of a store transaction, as seen by precondition checks."""
    async def count(self, resource_type: str, filter: dict[str, Any]) -> int: ...
    async def commit(self) -> None: ...


class ResourceStore(Protocol):
    """Contract for the backing resource store — implemented by infrastructure."""
    def begin(self) -> AbstractAsyncContextManager[StoreTransaction]: ...


class TransportClient(Protocol):
    """Contract for the HTTP transport used by the proxy."""
    async def connect(self) -> None: ...
    async def reconnect(self) -> None: ...
    async def send(self, request: httpx.Request) -> httpx.Response: ...
    async def close(self) -> None: ...


class RestService(Protocol):
    """Business service: five handlers, one per command kind."""
    def supported_resources(self) -> list[type[Resource]]: ...
    async def handle_get(self, store: ResourceStore, task: Task) -> TaskResult: ...
    async def handle_post(self, store: ResourceStore, task: Task) -> TaskResult: ...
    async def handle_put(self, store: ResourceStore, task: Task) -> TaskResult: ...
    async def handle_delete(self, store: ResourceStore, task: Task) -> TaskResult: ...
    async def handle_patch(self, store: ResourceStore, task: Task) -> TaskResult: ...


class ServiceRegistry(Protocol):
    """Resolves logical service names to endpoints."""
    def get_service(self, name: str) -> EndPoint: ...
    def register_service(self, endpoint: EndPoint) -> None: ...
