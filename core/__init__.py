""" Utilidades principales y componentes compartidos para la aplicación.

Este paquete contiene:

- Excepciones personalizadas y manejadores globales de error
- Contexto de la solicitud autenticada
- Utilidades de seguridad y auditoría
- Funciones auxiliares de paginación
"""

from .exceptions import (
    AppException,
    BusinessException,
    NotFoundException,
    UnauthorizedException,
    ValidationException,
    DuplicateException,
    ForbiddenException,
    DatabaseException,
)
from .context import RequestContext, TipoCuenta
from .security import (
    validate_uuid,
    check_propietario_access,
    require_role,
)
from .pagination import (
    PaginationMeta,
    calculate_pagination_meta,
    create_paginated_response,
    calculate_skip,
    paginate_query,
)
from .utils import (
    enum_to_value,
    redondear_monto,
    normalizar_email,
)

__all__ = [
    # Excepciones
    "AppException",
    "BusinessException",
    "NotFoundException",
    "UnauthorizedException",
    "ValidationException",
    "DuplicateException",
    "ForbiddenException",
    "DatabaseException",
    # contexto
    "RequestContext",
    "TipoCuenta",
    # seguridad
    "validate_uuid",
    "check_propietario_access",
    "require_role",
    # paginacion
    "PaginationMeta",
    "calculate_pagination_meta",
    "create_paginated_response",
    "calculate_skip",
    "paginate_query",
    # utils
    "enum_to_value",
    "redondear_monto",
    "normalizar_email",
]
