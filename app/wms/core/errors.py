from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from app.wms.core.error_catalog import AppError, ErrorCatalog

_HTTP_STATUS_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
}


def _set_error_context(request: Request, code: str, exc: Exception | None = None) -> None:
    request.state.error_code = code
    if exc is not None:
        request.state.error_class = exc.__class__.__name__


def _trace_id(request: Request) -> str:
    return getattr(request.state, "trace_id", "")


def _validation_error_details(exc: RequestValidationError) -> dict:
    errors = []
    for error in exc.errors():
        loc = list(error.get("loc", []))
        field = ".".join(str(item) for item in loc if item not in {"body", "query", "path", "header"}) or None
        errors.append(
            {
                "field": field,
                "message": error.get("msg", "Invalid value"),
                "type": error.get("type", "validation_error"),
            }
        )
    return {"errors": errors}


def error_body(code: str, message: str, details: object, trace_id: str) -> dict:
    return {
        "success": False,
        "error": message,
        "code": code,
        "details": details,
        "trace_id": trace_id,
    }


def error_response(code: str, message: str, details: object, trace_id: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=error_body(code, message, details, trace_id))


def setup_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        _set_error_context(request, exc.error.code, exc)
        return error_response(
            exc.error.code, exc.error.message, exc.details, _trace_id(request), exc.error.status_code
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        code = _HTTP_STATUS_CODES.get(exc.status_code, "HTTP_ERROR")
        _set_error_context(request, code, exc)
        message = str(exc.detail) if exc.detail is not None else "HTTP error"
        return error_response(code, message, None, _trace_id(request), exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        definition = ErrorCatalog.MISSING_FIELDS
        _set_error_context(request, definition.code, exc)
        return error_response(
            definition.code,
            definition.message,
            _validation_error_details(exc),
            _trace_id(request),
            definition.status_code,
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        definition = ErrorCatalog.INTERNAL_ERROR
        _set_error_context(request, definition.code, exc)
        return error_response(
            definition.code,
            definition.message,
            {"type": exc.__class__.__name__},
            _trace_id(request),
            definition.status_code,
        )
