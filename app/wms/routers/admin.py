from fastapi import APIRouter, Depends

from app.wms.core.deps import get_admin_user_service
from app.wms.schemas.admin import (
    CreateUserRequest,
    CreateUserResponse,
    UpdatePasswordRequest,
    UpdateUserNameRequest,
    UserUpdateResponse,
)
from app.wms.services.admin_users import AdminUserService

router = APIRouter()


@router.post("/create-user", response_model=CreateUserResponse)
def create_user(payload: CreateUserRequest, service: AdminUserService = Depends(get_admin_user_service)):
    user = service.create_user(payload)
    return CreateUserResponse(success=True, user=user)


@router.post("/update-password", response_model=UserUpdateResponse)
def update_password(payload: UpdatePasswordRequest, service: AdminUserService = Depends(get_admin_user_service)):
    user = service.update_password(payload.user_id, payload.new_password)
    return UserUpdateResponse(success=True, user=user)


@router.post("/update-user-name", response_model=UserUpdateResponse)
def update_user_name(payload: UpdateUserNameRequest, service: AdminUserService = Depends(get_admin_user_service)):
    user = service.update_user_name(payload.user_id, payload.name)
    return UserUpdateResponse(success=True, user=user)
