import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from financehub.domain.errors import DomainError, Unauthenticated, ValidationFailed

log = structlog.get_logger(__name__)


def _describe_request_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if any(e.get("type") == "json_invalid" for e in errors):
        return "Request body is not valid JSON"
    if errors:
        location = ".".join(str(part) for part in errors[0].get("loc", ()))
        return f"{location}: {errors[0].get('msg')}"
    return "Request could not be parsed"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        headers = None
        if isinstance(exc, Unauthenticated):
            headers = {"WWW-Authenticate": "Bearer"}
        return JSONResponse(
            status_code=exc.status_code, content=exc.to_dict(), headers=headers
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        error = ValidationFailed("Invalid request", _describe_request_error(exc))
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        log.exception(
            "unhandled_error", method=request.method, path=request.url.path
        )
        return JSONResponse(
            status_code=500, content={"error": "Internal server error"}
        )
