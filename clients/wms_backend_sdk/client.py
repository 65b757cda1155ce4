from __future__ import annotations

from dataclasses import dataclass

import httpx

from clients.wms_backend_sdk.auth_client import AdminAuthClient, AuthClient
from clients.wms_backend_sdk.config import SDKConfig
from clients.wms_backend_sdk.http_client import HttpClient
from clients.wms_backend_sdk.realtime import ChangeFeed
from clients.wms_backend_sdk.table_client import TableClient


@dataclass
class BackendClient:
    """One backend connection: auth, tables and the change feed share a session."""

    http: HttpClient
    auth: AuthClient
    tables: TableClient
    changes: ChangeFeed

    def close(self) -> None:
        self.http.close()


@dataclass
class BackendAdminClient:
    http: HttpClient
    auth_admin: AdminAuthClient
    tables: TableClient

    def close(self) -> None:
        self.http.close()


def create_backend_client(config: SDKConfig | None = None, client: httpx.Client | None = None) -> BackendClient:
    config = config or SDKConfig.from_env()
    http = HttpClient(config=config, client=client, api_key=config.anon_key)
    auth = AuthClient(http_client=http)
    changes = ChangeFeed()
    tables = TableClient(http_client=http, token_provider=auth.access_token, change_feed=changes)
    return BackendClient(http=http, auth=auth, tables=tables, changes=changes)


def create_admin_client(config: SDKConfig | None = None, client: httpx.Client | None = None) -> BackendAdminClient:
    config = config or SDKConfig.from_env()
    service_key = config.service_role_key or config.anon_key
    http = HttpClient(config=config, client=client, api_key=service_key)
    return BackendAdminClient(
        http=http,
        auth_admin=AdminAuthClient(http_client=http),
        tables=TableClient(http_client=http),
    )
