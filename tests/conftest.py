from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from clients.wms_backend_sdk.client import create_admin_client, create_backend_client
from clients.wms_backend_sdk.config import SDKConfig
from clients.wms_backend_sdk.http_client import HttpClient
from tests.fakes import BASE_URL, FakeBackend, ManualScheduler
from wms_control.app.local_mirror import LocalMirror


@pytest.fixture()
def sdk_config() -> SDKConfig:
    return SDKConfig(
        base_url=BASE_URL,
        anon_key="anon-key",
        service_role_key="service-key",
        timeout_seconds=5,
        verify_ssl=True,
        retry_max_attempts=1,
        retry_backoff_ms=0,
    )


@pytest.fixture()
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture()
def backend_client(fake_backend, sdk_config):
    backend = create_backend_client(sdk_config, client=fake_backend.client())
    yield backend
    backend.close()


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture()
def mirror(tmp_path: Path) -> LocalMirror:
    return LocalMirror(tmp_path / "mirror", now=lambda: 1_000.0)


@pytest.fixture()
def gateway(fake_backend, sdk_config):
    from app.wms.services.backend import BackendGateway

    gateway = BackendGateway(
        admin=create_admin_client(sdk_config, client=fake_backend.client()),
        public_http=HttpClient(config=sdk_config, client=fake_backend.client(), api_key=sdk_config.anon_key),
    )
    yield gateway
    gateway.close()


@pytest.fixture()
def client(gateway):
    import app.main as main

    with TestClient(main.create_app(gateway=gateway)) as client:
        yield client
