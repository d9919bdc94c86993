"""
Modelos comunes de respuesta para la API.

Estos modelos proporcionan respuestas consistentes y estandarizadas
para todos los endpoints de la API
"""
from typing import Optional, Any
from pydantic import BaseModel, Field
from datetime import datetime

#patrón simple de email (sin dependencias extra de validación)
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class SuccessResponse(BaseModel):
    """Respuesta estándar exitosa."""
    success: bool = Field(True, description="Indica si la operación fue exitosa")
    message: str = Field(..., description="Mensaje descriptivo de la operación")
    data: Optional[Any] = Field(None, description="Datos de respuesta")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Timestamp de la respuesta")


class ErrorResponse(BaseModel):
    """Cuerpo uniforme de error (ver core/error_handlers.py)."""
    message: str = Field(..., description="Mensaje descriptivo del error")
    status: int = Field(..., description="Código HTTP")
    timestamp: datetime = Field(..., description="Momento del error")
    path: str = Field(..., description="Ruta solicitada")
    errors: Optional[dict[str, str]] = Field(None, description="Errores por campo")


class DeleteResponse(BaseModel):
    """Respuesta estándar para operaciones de eliminación."""
    success: bool = Field(True, description="Indica si la eliminación fue exitosa")
    message: str = Field(..., description="Mensaje descriptivo")
    deleted_id: str = Field(..., description="ID del registro eliminado")
    soft_delete: bool = Field(True, description="True si solo se desactivó el registro")
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class HealthCheckResponse(BaseModel):
    """Respuesta del health check."""
    status: str = Field(..., description="Estado general (healthy/unhealthy)")
    service: str = Field(..., description="Nombre del servicio")
    version: str = Field(..., description="Versión de la API")
    database: str = Field(..., description="Estado de la base de datos")
    environment: str = Field(..., description="Entorno (production/development)")
    timestamp: datetime = Field(default_factory=datetime.utcnow)


def create_success_response(message: str, data: Any = None) -> dict:
    """Helper para crear respuestas exitosas."""
    return SuccessResponse(message=message, data=data).model_dump()


def create_delete_response(message: str, deleted_id: str, soft_delete: bool = True) -> dict:
    """Helper para crear respuestas de eliminación."""
    return DeleteResponse(
        message=message,
        deleted_id=deleted_id,
        soft_delete=soft_delete
    ).model_dump()
