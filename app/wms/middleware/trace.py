import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.wms.core.logging import bind_trace_id, reset_trace_id

TRACE_HEADER = "X-Trace-ID"


class TraceIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        trace_id = request.headers.get(TRACE_HEADER) or str(uuid.uuid4())
        request.state.trace_id = trace_id
        token = bind_trace_id(trace_id)
        try:
            response: Response = await call_next(request)
        finally:
            reset_trace_id(token)
        response.headers[TRACE_HEADER] = trace_id
        return response
