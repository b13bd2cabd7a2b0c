"""Settings + static registry — env overrides, URL normalisation, endpoint wiring."""

import pytest

from quark_rest.config import Settings
from quark_rest.core.endpoint import EndPoint
from quark_rest.core.errors import ServiceNotFoundError
from quark_rest.infrastructure.registry import StaticServiceRegistry, endpoint_from_settings


def test_postgres_url_gets_asyncpg_driver():
    settings = Settings(database_url="postgresql://u:p@host:5432/db")
    assert settings.database_url == "postgresql+asyncpg://u:p@host:5432/db"


def test_sqlite_url_left_alone():
    assert Settings(database_url="sqlite+aiosqlite:///x.db").database_url == "sqlite+aiosqlite:///x.db"


def test_env_overrides_decode_policy(monkeypatch):
    monkeypatch.setenv("QUARK_LENIENT_DELETE_IDS", "false")
    monkeypatch.setenv("QUARK_REQUIRE_USER", "true")
    settings = Settings()
    assert settings.lenient_delete_ids is False
    assert settings.require_user is True


def test_endpoint_from_settings():
    settings = Settings(service_name="dns", service_host="10.0.0.5", service_port=9100, service_path="api/dns")
    endpoint = endpoint_from_settings(settings)
    assert endpoint.service_path == "/api/dns"
    assert endpoint.generate_service_url() == "http://10.0.0.5:9100/api/dns"


def test_endpoint_path_defaults_to_name():
    assert EndPoint(name="dhcp").generate_service_url() == "http://127.0.0.1:8000/dhcp"


def test_registry_replaces_and_rejects_unknown():
    registry = StaticServiceRegistry([EndPoint(name="dns", port=1)])
    registry.register_service(EndPoint(name="dns", port=2))
    assert registry.get_service("dns").port == 2
    with pytest.raises(ServiceNotFoundError):
        registry.get_service("dhcp")
