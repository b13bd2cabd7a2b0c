"""Service Dispatcher — precondition checks, then routing to one of five business handlers.

Invariants:
    - Exactly one handler runs per Task, and only if every precondition passed
    - Commands are checked in order; the first failure short-circuits the rest
    - POST: validation only, no store access
    - PUT: validation, then existence check; DELETE/PATCH: existence check
    - The precondition transaction always commits (it never writes) and is closed
      before the handler runs
    - Unknown/empty task kind raises ContractViolationError (never a TaskResult)

Design Decisions:
    - Explicit match over CommandKind: every route visible in one place,
      same five cases as the codec
    - Validation/precondition failures become Task-level failure results, store
      errors too (they carry the "db get ... failed" context); nothing is retried
    - The mutation the handler performs is NOT atomic with the existence check.
      A resource deleted in between is the handler's problem (known gap)
"""

import logging

from quark_rest.core.commands import CommandKind, PostCmd, PutCmd, Task, TaskResult
from quark_rest.core.errors import (
    ContractViolationError, ErrorContext, QuarkRestError, StoreError,
    UnknownResourceError,
)
from quark_rest.core.repository_protocols import ResourceStore, RestService

logger = logging.getLogger(__name__)


class RestServiceAdaptor:
    """Routes a decoded Task to its handler after checking preconditions."""

    def __init__(self, service: RestService, store: ResourceStore):
        self.service = service
        self.store = store

    def supported_cmds(self) -> list[CommandKind]:
        return list(CommandKind)

    async def handle_task(self, task: Task) -> TaskResult:
        store = self.store
        match task.kind:
            case CommandKind.GET:
                return await self.service.handle_get(store, task)
            case CommandKind.POST:
                error = self._validate_resources(task)
                if error:
                    return self._reject(task, error)
                return await self.service.handle_post(store, task)
            case CommandKind.PUT:
                error = await self._check_existence(task, "update", validate=True)
                if error:
                    return self._reject(task, error)
                return await self.service.handle_put(store, task)
            case CommandKind.DELETE:
                error = await self._check_existence(task, "delete")
                if error:
                    return self._reject(task, error)
                return await self.service.handle_delete(store, task)
            case CommandKind.PATCH:
                error = await self._check_existence(task, "update")
                if error:
                    return self._reject(task, error)
                return await self.service.handle_patch(store, task)
            case _:
                raise ContractViolationError(f"unknown task kind {task.kind!r}")

    def _validate_resources(self, task: Task) -> QuarkRestError | None:
        for cmd in task.cmds:
            error = _validation_error(cmd)
            if error:
                return error
        return None

    async def _check_existence(
        self, task: Task, action: str, validate: bool = False,
    ) -> QuarkRestError | None:
        """Count each target by id inside one read-only transaction."""
        async with self.store.begin() as tx:
            for cmd in task.cmds:
                if validate:
                    error = _validation_error(cmd)
                    if error:
                        return error
                try:
                    count = await tx.count(cmd.resource_type, {"id": cmd.id})
                except StoreError as e:
                    error = StoreError(
                        e.detail, e.operation,
                        ErrorContext(resource_type=cmd.resource_type, resource_id=cmd.id),
                        prefix=f"db get {action} resource failed: ",
                    )
                    error.__cause__ = e
                    return error
                if count == 0:
                    return UnknownResourceError(action, cmd.resource_type, cmd.id)
        return None

    def _reject(self, task: Task, error: QuarkRestError) -> TaskResult:
        logger.info(
            f"{task.kind.value} task rejected: {error.message}",
            extra={
                "error_code": error.code,
                "resource_type": error.context.resource_type,
                "resource_id": error.context.resource_id,
                "user": task.user,
            },
        )
        return task.failed(error)


def _validation_error(cmd: PostCmd | PutCmd) -> QuarkRestError | None:
    error = cmd.new_resource.validate_fields()
    if error:
        error.context.resource_type = cmd.resource_type
        error.context.resource_id = cmd.id
    return error
