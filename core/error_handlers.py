"""
Manejadores globales de errores.

Todas las respuestas de error comparten el mismo cuerpo JSON:

    {"message": ..., "status": ..., "timestamp": ..., "path": ..., "errors": {...}}

`errors` solo aparece cuando hay errores por campo.
"""

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.exceptions import AppException, ValidationException
from utils.datetime_utils import get_local_now

logger = logging.getLogger(__name__)


def build_error_body(
    message: str,
    status_code: int,
    path: str,
    errors: Optional[dict[str, str]] = None,
) -> dict[str, Any]:
    """Construye el cuerpo de error uniforme."""
    body: dict[str, Any] = {
        "message": message,
        "status": status_code,
        "timestamp": get_local_now().isoformat(),
        "path": path,
    }
    if errors:
        body["errors"] = errors
    return body


def _field_errors(exc: AppException) -> Optional[dict[str, str]]:
    if isinstance(exc.details.get("errors"), dict):
        return {str(k): str(v) for k, v in exc.details["errors"].items()}
    if isinstance(exc, ValidationException) and exc.field:
        return {exc.field: exc.message}
    return None


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{exc.__class__.__name__} en {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.__class__.__name__} en {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=build_error_body(exc.message, exc.status_code, request.url.path, _field_errors(exc)),
        headers={"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors: dict[str, str] = {}
    for error in exc.errors():
        # descartar el prefijo body/query/path
        loc = [str(part) for part in error.get("loc", ())[1:]] or ["request"]
        errors.setdefault(".".join(loc), error.get("msg", "Valor inválido"))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=build_error_body(
            "Error de validación en los datos enviados",
            status.HTTP_400_BAD_REQUEST,
            request.url.path,
            errors,
        ),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Error en la solicitud"
    return JSONResponse(
        status_code=exc.status_code,
        content=build_error_body(message, exc.status_code, request.url.path),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Error no controlado en {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=build_error_body(
            "Error interno del servidor",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            request.url.path,
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Registra los manejadores de error en la aplicación."""
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
