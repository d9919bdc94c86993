"""
Utilidades de seguridad para validación y permisos.
"""

from typing import Optional
from uuid import UUID

from core.context import RequestContext
from core.exceptions import ValidationException, ForbiddenException


def validate_uuid(value: str, field_name: str = "id") -> str:
    """
    Valida que una cadena sea un UUID válido.

    Args:
        value: Cadena a validar
        field_name: Nombre del campo para mensajes de error

    Returns:
        El UUID validado como cadena

    Raises:
        ValidationException: Si el valor no es un UUID válido
    """
    try:
        UUID(str(value))
        return str(value)
    except (ValueError, AttributeError, TypeError):
        raise ValidationException(
            message=f"{field_name} debe ser un UUID válido",
            field=field_name,
            details={"value": str(value)}
        )


def check_propietario_access(
    ctx: RequestContext,
    id_propietario: Optional[str],
    resource_name: str = "recurso"
) -> None:
    """
    Un propietario (cliente) solo accede a sus propios recursos; el staff accede a todos.

    Raises:
        ForbiddenException: Si el cliente intenta acceder a un recurso ajeno
    """
    if ctx.es_propietario and ctx.id != id_propietario:
        raise ForbiddenException(
            message=f"No autorizado para acceder a este {resource_name}",
            details={"resource": resource_name}
        )


def require_role(ctx: RequestContext, *allowed_roles: str) -> None:
    """
    Verifica que el contexto tenga uno de los roles permitidos.

    Raises:
        ForbiddenException: Si el rol no está permitido
    """
    if not ctx.tiene_rol(*allowed_roles):
        raise ForbiddenException(
            message="Permisos insuficientes",
            details={
                "user_role": ctx.rol,
                "required_roles": list(allowed_roles)
            }
        )
