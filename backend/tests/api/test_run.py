"""run() — store, dispatcher and codec wired for a service, endpoint registered, app served."""

from httpx import ASGITransport, AsyncClient

import quark_rest.infrastructure.database as db_module
import quark_rest.main as main_module
from quark_rest.config import Settings
from quark_rest.core.endpoint import EndPoint
from quark_rest.infrastructure.registry import StaticServiceRegistry
from tests.fakes import FakeService


async def test_run_registers_endpoint_and_serves(monkeypatch):
    served = {}

    def fake_uvicorn_run(app, host, port, log_level):
        served.update(app=app, host=host, port=port, log_level=log_level)

    monkeypatch.setattr(main_module.uvicorn, "run", fake_uvicorn_run)
    monkeypatch.setattr(db_module, "db_manager", None)

    registry = StaticServiceRegistry()
    endpoint = EndPoint(name="dns", host="0.0.0.0", port=9100)
    settings = Settings(database_url="sqlite+aiosqlite:///:memory:", log_level="DEBUG")
    main_module.run(FakeService(), registry, endpoint, settings)

    assert registry.get_service("dns") == endpoint
    assert served["host"] == "0.0.0.0"
    assert served["port"] == 9100
    assert served["log_level"] == "debug"
    assert db_module.db_manager is not None

    transport = ASGITransport(app=served["app"])
    async with AsyncClient(transport=transport, base_url="http://dns.test") as client:
        health = await client.get("/health/")
        assert health.status_code == 200
        assert health.json()["resource_types"] == ["Host", "zone"]

        missing_type = await client.get("/dns", params={"zdnsuser": "alice"})
        assert missing_type.status_code == 400
        assert missing_type.json()["error"]["code"] == "TASK_DECODE_ERROR"

    await db_module.db_manager.dispose()
