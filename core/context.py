"""
Contexto de la solicitud autenticada.

Las rutas obtienen un RequestContext de auth.get_request_context y lo pasan
explícitamente a los servicios; no hay "usuario actual" global.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class TipoCuenta(str, Enum):
    usuario = "usuario"
    propietario = "propietario"


@dataclass(frozen=True)
class RequestContext:
    """Identidad y rol de quien realiza la solicitud."""
    id: str
    email: Optional[str]
    nombre: str
    rol: str
    tipo: TipoCuenta = TipoCuenta.usuario

    @property
    def es_staff(self) -> bool:
        return self.tipo == TipoCuenta.usuario

    @property
    def es_propietario(self) -> bool:
        return self.tipo == TipoCuenta.propietario

    def tiene_rol(self, *roles: str) -> bool:
        return self.rol in roles

    @property
    def user_id(self) -> Optional[str]:
        """ID para campos de auditoría (solo usuarios del staff)."""
        return self.id if self.es_staff else None
