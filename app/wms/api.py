from fastapi import APIRouter

from app.wms.routers.admin import router as admin_router
from app.wms.routers.auth import router as auth_router
from app.wms.routers.health import router as health_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(admin_router, prefix="/api/admin", tags=["admin"])
api_router.include_router(auth_router, prefix="/api/auth", tags=["auth"])
