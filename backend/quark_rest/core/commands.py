"""Command Model — the five command variants, the Task batch and its result.

Invariants:
    - CommandKind is a closed set: GET, POST, PUT, DELETE, PATCH
    - A Task's kind is fixed by its first command; add_cmd rejects any other kind
    - Commands keep arrival order
    - TaskResult is immutable once built

Design Decisions:
    - Frozen dataclasses per variant + `kind` property: codec and dispatcher
      `match` on Task.kind instead of peeking at the type of cmds[0]
    - Get tasks may hold several commands (the model allows it) but the codec
      refuses to encode them: reads are never batched on the wire
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any

from quark_rest.core.errors import MixedCommandError, QuarkRestError
from quark_rest.core.resource import Resource, get_resource_type, resource_id


class CommandKind(str, Enum):
    """Command variants. Values double as the HTTP method."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"


class StatusCode(IntEnum):
    SUCCEED = 200
    FAILED = 400


@dataclass(frozen=True)
class GetCmd:
    resource_type: str
    conds: dict[str, Any] = field(default_factory=dict)

    kind = CommandKind.GET

    def __str__(self) -> str:
        return f"getcmd to get {self.resource_type} with conds {self.conds}"


@dataclass(frozen=True)
class PostCmd:
    new_resource: Resource

    kind = CommandKind.POST

    @property
    def resource_type(self) -> str:
        return get_resource_type(self.new_resource)

    @property
    def id(self) -> str:
        return resource_id(self.new_resource)

    def __str__(self) -> str:
        return f"postcmd to create {self.new_resource}"


@dataclass(frozen=True)
class PutCmd:
    new_resource: Resource

    kind = CommandKind.PUT

    @property
    def resource_type(self) -> str:
        return get_resource_type(self.new_resource)

    @property
    def id(self) -> str:
        return resource_id(self.new_resource)

    def __str__(self) -> str:
        return f"putcmd to replace {self.new_resource}"


@dataclass(frozen=True)
class DeleteCmd:
    resource_type: str
    id: str

    kind = CommandKind.DELETE

    def __str__(self) -> str:
        return f"deletecmd to delete {self.resource_type} with id {self.id}"


@dataclass(frozen=True)
class PatchCmd:
    resource_type: str
    id: str
    new_attrs: dict[str, Any] = field(default_factory=dict)

    kind = CommandKind.PATCH

    def __str__(self) -> str:
        return (
            f"patchcmd to update {self.resource_type} with id {self.id} "
            f"to new val {self.new_attrs}"
        )


Command = GetCmd | PostCmd | PutCmd | DeleteCmd | PatchCmd


@dataclass(frozen=True)
class TaskResult:
    """Outcome of one Task: status code + optional decoded payload."""
    code: int
    result: Any | None = None

    @property
    def succeeded(self) -> bool:
        return self.code == StatusCode.SUCCEED


@dataclass
class Task:
    """A batch of same-kind commands plus the acting user."""
    user: str = ""
    cmds: list[Command] = field(default_factory=list)

    def __post_init__(self):
        cmds, self.cmds = self.cmds, []
        for cmd in cmds:
            self.add_cmd(cmd)

    @property
    def kind(self) -> CommandKind | None:
        return self.cmds[0].kind if self.cmds else None

    def add_cmd(self, cmd: Command) -> None:
        if self.cmds and cmd.kind is not self.kind:
            raise MixedCommandError(self.kind.value, cmd.kind.value)
        self.cmds.append(cmd)

    def succeed(self, result: Any | None = None) -> TaskResult:
        return TaskResult(code=StatusCode.SUCCEED, result=result)

    def failed(self, error: QuarkRestError) -> TaskResult:
        """Task-level failure: the error envelope becomes the result payload."""
        if error.context.user is None:
            error.context.user = self.user
        return TaskResult(code=StatusCode.FAILED, result=error.to_response())
