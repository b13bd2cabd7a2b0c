"""Task Route — the single service URL that carries every Task verb.

Invariants:
    - Mounted at the endpoint's service path for GET/POST/PUT/DELETE/PATCH
    - Decode errors never reach the dispatcher (TaskDecodeError -> 400 via global handler)
    - The response status is the TaskResult code, the body its payload

Design Decisions:
    - The incoming body is read once and wrapped into an httpx.Request, so the
      codec decodes the same request type it encodes
"""

import logging

import httpx
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from starlette.requests import ClientDisconnect

from quark_rest.core.commands import CommandKind
from quark_rest.core.errors import ErrorContext, TaskDecodeError
from quark_rest.services.dispatcher import RestServiceAdaptor
from quark_rest.services.wire_codec import RestProtocol

logger = logging.getLogger(__name__)

TASK_METHODS = [kind.value for kind in CommandKind]


def build_task_router(adaptor: RestServiceAdaptor, protocol: RestProtocol) -> APIRouter:
    router = APIRouter(tags=["tasks"])

    async def handle_task(request: Request) -> JSONResponse:
        try:
            body = await request.body()
        except ClientDisconnect as e:
            raise TaskDecodeError(
                "http body reader error: client disconnected",
                ErrorContext(method=request.method),
            ) from e

        wire_request = httpx.Request(request.method, str(request.url), content=body)
        task = protocol.decode_task(wire_request)
        result = await adaptor.handle_task(task)
        logger.debug(
            f"{request.method} task handled with {len(task.cmds)} command(s)",
            extra={"user": task.user, "status_code": int(result.code)},
        )
        return protocol.encode_task_result(result)

    router.add_api_route(
        protocol.endpoint.service_path, handle_task, methods=TASK_METHODS,
    )
    return router
