from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from app.wms.api import api_router
from app.wms.core.config import settings
from app.wms.core.errors import setup_exception_handlers
from app.wms.core.logging import configure_logging
from app.wms.middleware.observability import RequestLogMiddleware
from app.wms.middleware.trace import TraceIdMiddleware
from app.wms.services.backend import BackendGateway, create_gateway


def create_app(gateway: BackendGateway | None = None) -> FastAPI:
    configure_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = gateway is None
        app.state.backend = gateway or create_gateway(settings.sdk_config())
        try:
            yield
        finally:
            if owned:
                app.state.backend.close()

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    if gateway is not None:
        app.state.backend = gateway
    app.add_middleware(TraceIdMiddleware)
    app.add_middleware(RequestLogMiddleware)
    setup_exception_handlers(app)
    app.include_router(api_router)
    return app


app = create_app()


def serve() -> None:
    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    serve()
