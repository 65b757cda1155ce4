from __future__ import annotations

from dataclasses import dataclass

from clients.wms_backend_sdk.auth_client import AuthClient
from clients.wms_backend_sdk.client import BackendAdminClient, create_admin_client
from clients.wms_backend_sdk.config import SDKConfig
from clients.wms_backend_sdk.http_client import HttpClient


@dataclass
class BackendGateway:
    """Backend connections for the administrative endpoints.

    ``admin`` carries the service role key. ``public_http`` uses the anon key
    and backs throwaway auth clients, so verifying one caller's password never
    touches another request's session.
    """

    admin: BackendAdminClient
    public_http: HttpClient

    def public_auth(self) -> AuthClient:
        return AuthClient(http_client=self.public_http)

    def close(self) -> None:
        self.admin.close()
        self.public_http.close()


def create_gateway(config: SDKConfig) -> BackendGateway:
    return BackendGateway(
        admin=create_admin_client(config),
        public_http=HttpClient(config=config, api_key=config.anon_key),
    )
