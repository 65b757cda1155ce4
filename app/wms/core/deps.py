from fastapi import Depends, Request

from app.wms.services.admin_users import AdminUserService
from app.wms.services.backend import BackendGateway


def get_backend_gateway(request: Request) -> BackendGateway:
    return request.app.state.backend


def get_admin_user_service(gateway: BackendGateway = Depends(get_backend_gateway)) -> AdminUserService:
    return AdminUserService(gateway)
