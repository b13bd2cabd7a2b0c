"""Health & Readiness Probes — is the process up, can it reach the resource store.

Invariants:
    - GET /health/ answers 200 while the process runs, naming the served resource types
    - GET /health/ready answers 503 until the resource store answers SELECT 1

Design Decisions:
    - Router built per app: the liveness body depends on the served protocol
    - db_manager looked up at call time: run() creates it after this module is imported
"""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from quark_rest.infrastructure import database
from quark_rest.services.wire_codec import RestProtocol

logger = logging.getLogger(__name__)


def build_health_router(protocol: RestProtocol) -> APIRouter:
    router = APIRouter(prefix="/health", tags=["health"])

    @router.get("/")
    async def liveness():
        return {
            "status": "healthy",
            "service": protocol.endpoint.name,
            "resource_types": protocol.serializer.registered_types,
        }

    @router.get("/ready")
    async def readiness():
        manager = database.db_manager
        if manager is None or not await manager.health_check():
            logger.warning("Readiness probe failed: resource store unavailable")
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "not_ready", "reason": "store_unavailable"},
            )
        return {"status": "ready", "checks": {"store": "healthy"}}

    return router
