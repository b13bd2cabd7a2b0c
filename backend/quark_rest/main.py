"""quark-rest server — FastAPI app factory and the run() entry point for a RestService.

Invariants:
    - Routes registered explicitly (task route + health), no auto-discovery
    - Global error handlers map QuarkRestError → structured JSON responses
    - The endpoint is registered with the service registry before serving

Design Decisions:
    - App factory over module-level app: the task route depends on the service's
      resources and endpoint, which are only known at run()
    - Lifespan over @app.on_event: logging set up on startup, engine disposed on shutdown
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from quark_rest.api.error_handlers import register_error_handlers
from quark_rest.api.routes.health import build_health_router
from quark_rest.api.routes.tasks import build_task_router
from quark_rest.config import Settings, get_settings
from quark_rest.core.endpoint import EndPoint
from quark_rest.core.repository_protocols import ServiceRegistry, RestService
from quark_rest.infrastructure import database
from quark_rest.infrastructure.observability import setup_logging
from quark_rest.infrastructure.resource_store import store_for_resources
from quark_rest.services.dispatcher import RestServiceAdaptor
from quark_rest.services.wire_codec import DecodePolicy, RestProtocol

logger = logging.getLogger(__name__)


def create_app(
    adaptor: RestServiceAdaptor,
    protocol: RestProtocol,
    settings: Settings | None = None,
) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup/shutdown lifecycle."""
        setup_logging(settings.log_level, settings.log_format)
        logger.info(
            f"Serving {protocol.serializer.registered_types} "
            f"at {protocol.endpoint.service_path}",
        )
        yield
        if database.db_manager:
            await database.db_manager.dispose()
        logger.info("quark-rest shutting down")

    app = FastAPI(title="quark-rest", version="1.0.0", lifespan=lifespan)
    app.include_router(build_health_router(protocol))
    app.include_router(build_task_router(adaptor, protocol))
    register_error_handlers(app)
    return app


def decode_policy(settings: Settings) -> DecodePolicy:
    return DecodePolicy(
        lenient_delete_ids=settings.lenient_delete_ids,
        require_user=settings.require_user,
    )


def run(
    service: RestService,
    registry: ServiceRegistry,
    endpoint: EndPoint,
    settings: Settings | None = None,
) -> None:
    """Build store, dispatcher and codec for the service, register it, then serve."""
    settings = settings or get_settings()
    resources = service.supported_resources()
    store = store_for_resources(resources, settings)
    adaptor = RestServiceAdaptor(service, store)
    protocol = RestProtocol(resources, endpoint, decode_policy(settings))
    registry.register_service(endpoint)

    app = create_app(adaptor, protocol, settings)
    uvicorn.run(app, host=endpoint.host, port=endpoint.port, log_level=settings.log_level.lower())
