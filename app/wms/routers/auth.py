from fastapi import APIRouter, Depends

from app.wms.core.deps import get_admin_user_service
from app.wms.schemas.auth import VerifyPasswordRequest, VerifyPasswordResponse
from app.wms.services.admin_users import AdminUserService

router = APIRouter()


@router.post("/verify-password", response_model=VerifyPasswordResponse)
def verify_password(payload: VerifyPasswordRequest, service: AdminUserService = Depends(get_admin_user_service)):
    service.verify_password(payload.email, payload.password)
    return VerifyPasswordResponse(success=True, message="Password verified")
