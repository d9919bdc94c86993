"""
Middleware de logging de solicitudes con identificador de correlación.
"""

import logging
import time
from uuid import uuid4

from fastapi import FastAPI, Request

logger = logging.getLogger("http")

REQUEST_ID_HEADER = "X-Request-ID"


def register_request_logging(app: FastAPI) -> None:
    """Agrega un middleware que registra método, ruta, estado y duración."""

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        inicio = time.perf_counter()
        response = await call_next(request)
        duracion_ms = (time.perf_counter() - inicio) * 1000
        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(
            f"[{request_id}] {request.method} {request.url.path} -> "
            f"{response.status_code} ({duracion_ms:.1f} ms)"
        )
        return response
