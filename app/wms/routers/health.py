from fastapi import APIRouter, Depends, Request

from clients.wms_backend_sdk.errors import BackendError
from app.wms.core.deps import get_admin_user_service
from app.wms.core.error_catalog import ErrorCatalog
from app.wms.core.errors import error_response
from app.wms.services.admin_users import AdminUserService

router = APIRouter()


@router.get("/health")
async def health(request: Request):
    trace_id = getattr(request.state, "trace_id", "")
    return {"status": "ok", "trace_id": trace_id}


@router.get("/ready")
def ready(request: Request, service: AdminUserService = Depends(get_admin_user_service)):
    trace_id = getattr(request.state, "trace_id", "")
    try:
        service.probe()
    except BackendError as exc:
        return error_response(
            code=ErrorCatalog.BACKEND_UNAVAILABLE.code,
            message=ErrorCatalog.BACKEND_UNAVAILABLE.message,
            details={"backend_code": exc.code, "kind": exc.kind.value},
            trace_id=trace_id,
            status_code=ErrorCatalog.BACKEND_UNAVAILABLE.status_code,
        )
    return {"status": "ready", "trace_id": trace_id}
