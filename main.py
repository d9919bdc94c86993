from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
import uvicorn
import logging

from config import settings, configure_logging
from core.error_handlers import register_exception_handlers
from core.middleware import register_request_logging
from routes import (
    auth_router,
    usuarios_router,
    propietarios_router,
    pacientes_router,
    citas_router,
    consultas_router,
    prescripciones_router,
    facturas_router,
    productos_router,
    categorias_router,
    proveedores_router,
    templates_consulta_router,
    templates_prescripcion_router,
    vacunas_router,
    vacunaciones_router,
    notificaciones_router,
    dashboard_router,
    reportes_router,
    public_router,
    portal_router,
    ws_router,
)
from database.db import create_tables, engine, get_database_url
from services.recordatorio_service import iniciar_planificador
from models.common import ErrorResponse, HealthCheckResponse

logger = logging.getLogger(__name__)

# Configurar logging una sola vez al inicio
configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Maneja el ciclo de vida de la aplicación."""
    # Startup
    logger.info(f"Iniciando {settings.app_name} v{settings.app_version} sobre {get_database_url()}")
    try:
        create_tables()
    except SQLAlchemyError as e:
        logger.warning(f"No se pudieron crear tablas en la base de datos: {e}")
    scheduler = iniciar_planificador() if settings.recordatorios_enabled else None
    yield
    # Shutdown
    if scheduler is not None:
        scheduler.shutdown(wait=False)


app = FastAPI(
    title=settings.app_name,
    description="Backend de gestión de una clínica veterinaria: agenda, historia clínica, facturación e inventario.",
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    debug=settings.debug_mode,
    responses={
        codigo: {"model": ErrorResponse} for codigo in (400, 401, 403, 404, 409, 422)
    },
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)

register_exception_handlers(app)
register_request_logging(app)


@app.get("/")
async def root():
    """Endpoint raíz con información de la API."""
    return {
        "message": f"{settings.app_name} - Gestión de Clínica Veterinaria",
        "version": settings.app_version,
        "status": "active",
        "environment": "production" if settings.is_production else "development",
        "docs": "/docs",
        "redoc": "/redoc"
    }


for router in (
    auth_router,
    usuarios_router,
    propietarios_router,
    pacientes_router,
    citas_router,
    consultas_router,
    prescripciones_router,
    facturas_router,
    categorias_router,
    productos_router,
    proveedores_router,
    templates_consulta_router,
    templates_prescripcion_router,
    vacunas_router,
    vacunaciones_router,
    notificaciones_router,
    dashboard_router,
    reportes_router,
    public_router,
    portal_router,
    ws_router,
):
    app.include_router(router)


@app.get("/health", response_model=HealthCheckResponse)
async def health_check():
    """Health check endpoint con verificación de base de datos."""
    db_status = "unknown"
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        db_status = "connected"
    except SQLAlchemyError as e:
        logger.error(f"Health check: Error de conexión a BD: {e}")
        db_status = "disconnected"

    return {
        "status": "healthy" if db_status == "connected" else "unhealthy",
        "service": settings.app_name,
        "version": settings.app_version,
        "database": db_status,
        "environment": "production" if settings.is_production else "development"
    }


if __name__ == "__main__":
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_level="info"
    )
