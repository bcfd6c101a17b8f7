"""Map checkout errors to HTTP responses."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ValidationError

from checkout.errors import AuthError, ExternalServiceError, RemoteReadError, RemoteWriteError

_STATUS_BY_ERROR = {
    AuthError: 401,
    ExternalServiceError: 502,
    RemoteWriteError: 503,
    RemoteReadError: 503,
}


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"error": "Validation failed", "details": exc.messages})


async def checkout_error_handler(request: Request, exc) -> JSONResponse:
    status = next(code for cls, code in _STATUS_BY_ERROR.items() if isinstance(exc, cls))
    return JSONResponse(status_code=status, content={"error": exc.message})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, validation_error_handler)
    for error_cls in _STATUS_BY_ERROR:
        app.add_exception_handler(error_cls, checkout_error_handler)
