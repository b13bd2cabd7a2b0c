"""Wire Codec — translates Tasks to/from HTTP requests and TaskResults to/from responses.

Invariants:
    - decode_task dispatches on HTTP method; encode_task dispatches on Task.kind
    - The same five kinds appear in both directions (GET/POST/PUT/DELETE/PATCH)
    - GET carries the command in the query string; the other verbs carry a TaskEnvelope body
    - A body with no attrs entries fails decode: an empty Task never reaches dispatch
    - Encoding an empty task fails; encoding a Get task with more than one command fails
    - decode_task_result keeps the transport status code verbatim

Design Decisions:
    - httpx.Request is the request type in both directions: the proxy sends what
      encode_task builds, the API layer wraps incoming bodies into one before decode
    - Result shapes are pydantic model classes (caller picks success/failure shape)
    - Leniencies are named in DecodePolicy instead of living as silent behavior:
      malformed DELETE ids decode to "" and empty users pass, both by default
"""

import logging
import re
from dataclasses import dataclass
from typing import Any

import httpx
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from quark_rest.core.commands import (
    CommandKind, DeleteCmd, GetCmd, PatchCmd, PostCmd, PutCmd,
    StatusCode, Task, TaskResult,
)
from quark_rest.core.endpoint import EndPoint
from quark_rest.core.envelope import DeleteEntry, PatchEntry, TaskEnvelope
from quark_rest.core.errors import (
    ErrorContext, TaskDecodeError, TaskEncodeError, TaskResultDecodeError,
)
from quark_rest.core.resource import Resource, get_resource_type
from quark_rest.services.serializer import ResourceSerializer

logger = logging.getLogger(__name__)

REQUEST_HEADERS = {
    "Content-Type": "application/json;charset=utf-8",
    "Accept": "*/*",
}

_INT_PATTERN = re.compile(r"[+-]?\d+")


@dataclass(frozen=True)
class DecodePolicy:
    """Named leniencies of decode_task."""
    lenient_delete_ids: bool = True
    require_user: bool = False


def format_query_value(value: Any) -> str:
    """Uniform stringification of condition values for the query string."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class RestProtocol:
    """Task <-> HTTP codec for one service endpoint."""

    def __init__(
        self,
        resources: list[type[Resource]],
        endpoint: EndPoint,
        policy: DecodePolicy | None = None,
    ):
        self.serializer = ResourceSerializer()
        for resource_cls in resources:
            self.serializer.register(resource_cls)
        self.endpoint = endpoint
        self.policy = policy or DecodePolicy()

    # ─── Decode ─────────────────────────────────────────────────

    def decode_task(self, request: httpx.Request) -> Task:
        method = request.method.upper()
        match method:
            case "GET":
                task = self._decode_get_task(request)
            case "POST" | "PUT":
                task = self._decode_resource_task(request, CommandKind(method))
            case "DELETE":
                task = self._decode_delete_task(request)
            case "PATCH":
                task = self._decode_patch_task(request)
            case _:
                raise TaskDecodeError(
                    f"unknown http method {method}", ErrorContext(method=method),
                )
        if self.policy.require_user and not task.user:
            raise TaskDecodeError("empty user", ErrorContext(method=method))
        return task

    def _decode_get_task(self, request: httpx.Request) -> Task:
        task = Task()
        resource_type = ""
        conds: dict[str, Any] = {}
        offset = limit = 0
        params = request.url.params
        for key in params.keys():
            value = params.get(key)
            if key == "resource_type":
                resource_type = value
                if not resource_type:
                    raise TaskDecodeError("empty resource type", ErrorContext(method="GET"))
            elif key == "zdnsuser":
                task.user = value
            elif key == "offset":
                offset = _parse_int("offset", value)
            elif key == "limit":
                limit = _parse_int("limit", value)
            elif key != "_":
                conds[key] = value

        if not resource_type:
            raise TaskDecodeError("empty resource type", ErrorContext(method="GET"))
        if limit > 0 and offset >= 0:
            conds["offset"] = offset
            conds["limit"] = limit
        task.add_cmd(GetCmd(resource_type=resource_type, conds=conds))
        return task

    def _decode_resource_task(self, request: httpx.Request, kind: CommandKind) -> Task:
        envelope = self._read_envelope(request)
        cmd_cls = PostCmd if kind is CommandKind.POST else PutCmd
        task = Task(user=envelope.user)
        for raw in envelope.attrs:
            resource = self.serializer.decode_type(envelope.resource_type, raw)
            task.add_cmd(cmd_cls(new_resource=resource))
        return task

    def _decode_delete_task(self, request: httpx.Request) -> Task:
        envelope = self._read_envelope(request)
        task = Task(user=envelope.user)
        for raw in envelope.attrs:
            try:
                entry = DeleteEntry.model_validate(raw)
            except ValidationError as e:
                if not self.policy.lenient_delete_ids:
                    raise TaskDecodeError(
                        f"malformed delete entry: {e.error_count()} error(s)",
                        ErrorContext(resource_type=envelope.resource_type, method="DELETE"),
                    ) from e
                logger.warning(
                    "Malformed delete entry decoded to empty id",
                    extra={"resource_type": envelope.resource_type, "method": "DELETE"},
                )
                entry = DeleteEntry()
            task.add_cmd(DeleteCmd(resource_type=envelope.resource_type, id=entry.id))
        return task

    def _decode_patch_task(self, request: httpx.Request) -> Task:
        envelope = self._read_envelope(request)
        task = Task(user=envelope.user)
        for raw in envelope.attrs:
            try:
                entry = PatchEntry.model_validate(raw)
            except ValidationError as e:
                raise TaskDecodeError(
                    f"malformed patch entry: {e.error_count()} error(s)",
                    ErrorContext(resource_type=envelope.resource_type, method="PATCH"),
                ) from e
            task.add_cmd(PatchCmd(
                resource_type=envelope.resource_type,
                id=entry.id,
                new_attrs=entry.new_attrs,
            ))
        return task

    def _read_envelope(self, request: httpx.Request) -> TaskEnvelope:
        method = request.method.upper()
        try:
            body = request.read()
        except (httpx.HTTPError, httpx.StreamError) as e:
            raise TaskDecodeError(
                f"http body reader error {e}", ErrorContext(method=method),
            ) from e
        try:
            envelope = TaskEnvelope.model_validate_json(body)
        except ValidationError as e:
            raise TaskDecodeError(
                f"invalid task body: {e.error_count()} error(s)",
                ErrorContext(method=method),
            ) from e
        if not envelope.attrs:
            raise TaskDecodeError(
                "task has no commands",
                ErrorContext(resource_type=envelope.resource_type or None, method=method),
            )
        return envelope

    # ─── Encode ─────────────────────────────────────────────────

    def encode_task(self, task: Task) -> httpx.Request:
        if not task.cmds:
            raise TaskEncodeError("encode empty task")

        match task.kind:
            case CommandKind.GET:
                return self._encode_get_task(task)
            case CommandKind.POST | CommandKind.PUT:
                attrs = [self.serializer.encode(c.new_resource) for c in task.cmds]
                resource_type = get_resource_type(task.cmds[0].new_resource)
            case CommandKind.DELETE:
                attrs = [DeleteEntry(id=c.id).model_dump() for c in task.cmds]
                resource_type = task.cmds[0].resource_type
            case CommandKind.PATCH:
                attrs = [
                    PatchEntry(id=c.id, new_attrs=c.new_attrs).model_dump(mode="json")
                    for c in task.cmds
                ]
                resource_type = task.cmds[0].resource_type
            case _:
                raise TaskEncodeError(f"unknown command {task.cmds[0]}")

        envelope = TaskEnvelope(resource_type=resource_type, user=task.user, attrs=attrs)
        return httpx.Request(
            task.kind.value,
            self.endpoint.generate_service_url(),
            headers=REQUEST_HEADERS,
            content=envelope.model_dump_json(by_alias=True),
        )

    def _encode_get_task(self, task: Task) -> httpx.Request:
        if len(task.cmds) != 1:
            raise TaskEncodeError("get task doesn't support batch")
        cmd = task.cmds[0]
        params = {"resource_type": cmd.resource_type, "zdnsuser": task.user}
        for key, value in cmd.conds.items():
            params[key] = format_query_value(value)
        return httpx.Request(
            "GET",
            self.endpoint.generate_service_url(),
            headers=REQUEST_HEADERS,
            params=params,
        )

    # ─── Results ────────────────────────────────────────────────

    def encode_task_result(self, result: TaskResult) -> JSONResponse:
        return JSONResponse(
            status_code=int(result.code), content=jsonable_encoder(result.result),
        )

    def decode_task_result(
        self,
        response: httpx.Response,
        success: type[BaseModel] | None = None,
        failure: type[BaseModel] | None = None,
    ) -> TaskResult:
        try:
            body = response.read()
        except (httpx.HTTPError, httpx.StreamError) as e:
            raise TaskResultDecodeError(f"http body reader error {e}") from e

        shape = success if response.status_code == StatusCode.SUCCEED else failure
        result = None
        if shape is not None:
            try:
                result = shape.model_validate_json(body)
            except ValidationError as e:
                raise TaskResultDecodeError(
                    f"response body is not a valid {shape.__name__}: "
                    f"{e.error_count()} error(s)",
                ) from e
        return TaskResult(code=response.status_code, result=result)


def _parse_int(key: str, value: str) -> int:
    if not _INT_PATTERN.fullmatch(value):
        raise TaskDecodeError(
            f"{key} isn't a valid integer", ErrorContext(method="GET"),
        )
    return int(value)
