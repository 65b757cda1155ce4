from clients.wms_backend_sdk.auth_client import AdminAuthClient, AuthChangeEvent, AuthClient
from clients.wms_backend_sdk.auth_store import AuthSession, AuthStore, AuthUser
from clients.wms_backend_sdk.client import BackendAdminClient, BackendClient, create_admin_client, create_backend_client
from clients.wms_backend_sdk.config import SDKConfig
from clients.wms_backend_sdk.errors import BackendError, ErrorKind
from clients.wms_backend_sdk.http_client import HttpClient
from clients.wms_backend_sdk.realtime import ChangeEvent, ChangeFeed, Subscription
from clients.wms_backend_sdk.table_client import TableClient

__all__ = [
    "SDKConfig",
    "BackendError",
    "ErrorKind",
    "HttpClient",
    "AuthClient",
    "AdminAuthClient",
    "AuthChangeEvent",
    "AuthSession",
    "AuthStore",
    "AuthUser",
    "TableClient",
    "ChangeEvent",
    "ChangeFeed",
    "Subscription",
    "BackendClient",
    "BackendAdminClient",
    "create_backend_client",
    "create_admin_client",
]
