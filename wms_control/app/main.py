from __future__ import annotations

from dataclasses import dataclass

from clients.wms_backend_sdk.client import BackendClient, create_backend_client
from clients.wms_backend_sdk.config import SDKConfig
from clients.wms_backend_sdk.http_client import HttpClient
from wms_control.app.application.auth_controller import AuthController, AuthState
from wms_control.app.application.data_cache_controller import DataCacheController
from wms_control.app.application.use_cases.login_use_case import LoginUseCase
from wms_control.app.application.use_cases.manage_users_use_case import ManageUsersUseCase
from wms_control.app.config import AppConfig
from wms_control.app.domain.policies.permission_policy import apply_template
from wms_control.app.infrastructure.sdk_adapter.admin_api_adapter import AdminApiAdapter
from wms_control.app.infrastructure.sdk_adapter.warehouse_adapter import WarehouseAdapter
from wms_control.app.local_mirror import LocalMirror
from wms_control.app.navigation_shell import render_shell
from wms_control.app.scheduler import Scheduler, ThreadingScheduler


@dataclass
class Application:
    backend: BackendClient
    mirror: LocalMirror
    auth: AuthController
    cache: DataCacheController
    login: LoginUseCase
    users: ManageUsersUseCase
    admin_http: HttpClient

    def start(self) -> None:
        self.auth.start()
        self.cache.start()

    def close(self) -> None:
        self.cache.close()
        self.auth.close()
        self.admin_http.close()
        self.backend.close()


def build_application(
    sdk_config: SDKConfig | None = None,
    app_config: AppConfig | None = None,
    scheduler: Scheduler | None = None,
    backend: BackendClient | None = None,
    admin_http: HttpClient | None = None,
) -> Application:
    sdk_config = sdk_config or SDKConfig.from_env()
    app_config = app_config or AppConfig.from_env()
    scheduler = scheduler or ThreadingScheduler()
    backend = backend or create_backend_client(sdk_config)
    admin_http = admin_http or HttpClient(config=sdk_config.with_base_url(app_config.admin_api_url))

    mirror = LocalMirror(app_config.mirror_dir)
    warehouse = WarehouseAdapter(backend.tables)
    auth = AuthController(
        auth=backend.auth,
        profiles=warehouse,
        mirror=mirror,
        scheduler=scheduler,
        config=app_config,
    )
    cache = DataCacheController(
        adapter=warehouse,
        changes=backend.changes,
        mirror=mirror,
        scheduler=scheduler,
        config=app_config,
    )
    admin_api = AdminApiAdapter(admin_http, auth=backend.auth)
    return Application(
        backend=backend,
        mirror=mirror,
        auth=auth,
        cache=cache,
        login=LoginUseCase(auth, mirror=mirror),
        users=ManageUsersUseCase(auth, cache, admin_api),
        admin_http=admin_http,
    )


def _print_users(app: Application) -> None:
    users = app.cache.snapshot().users
    if not users:
        print("No users cached.")
        return
    for user in users:
        pending = " (pending)" if user.is_pending else ""
        print(f"- {user.name} <{user.email}> role={user.role} status={user.status}{pending}")


def run_cli() -> None:
    app = build_application()
    app.start()
    try:
        while True:
            print()
            print(render_shell(app.auth))
            print("Options: 1 Login | 2 Refresh | 3 Users | 4 Create user | 5 Logout | 6 Exit")
            option = input("Select an option: ").strip()
            if option == "1":
                email = input("email: ").strip()
                password = input("password: ")
                result = app.login.execute(email, password, remember_identifier=True)
                print(result.message if result.success else f"{result.message} {result.field_errors or ''}".strip())
            elif option == "2":
                print("Refreshed." if app.cache.refresh() else "Backend unavailable; showing cached data.")
            elif option == "3":
                _print_users(app)
            elif option == "4":
                if app.auth.state is not AuthState.AUTHENTICATED:
                    print("Sign in first.")
                    continue
                role = input("role (admin/manager/viewer): ").strip() or "viewer"
                try:
                    permissions = apply_template(role)
                except ValueError:
                    print("Unknown role.")
                    continue
                result = app.users.create_user(
                    name=input("name: ").strip(),
                    email=input("email: ").strip(),
                    password=input("password: "),
                    role=role,
                    permissions=permissions,
                )
                print(result.message)
                for field, message in result.field_errors.items():
                    print(f"  {field}: {message}")
            elif option == "5":
                app.auth.logout()
                print("Signed out.")
            elif option == "6":
                return
            else:
                print("Invalid option.")
    finally:
        app.close()


def main() -> None:
    run_cli()


if __name__ == "__main__":
    main()
