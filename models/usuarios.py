from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum

from models.common import EMAIL_PATTERN


class Role(str, Enum):
    ADMIN = "ADMIN"
    VET = "VET"
    RECEPCION = "RECEPCION"
    CLIENTE = "CLIENTE"


#roles asignables a usuarios del staff
ROLES_STAFF = (Role.ADMIN.value, Role.VET.value, Role.RECEPCION.value)


class UsuarioCreate(BaseModel):
    """Alta de un usuario del staff (solo ADMIN)."""
    nombre: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=150)
    telefono: Optional[str] = Field(None, min_length=7, max_length=20)
    rol: Role = Field(..., description="ADMIN, VET o RECEPCION")
    password: str = Field(..., min_length=6, max_length=100)


class UsuarioUpdate(BaseModel):
    nombre: Optional[str] = Field(None, min_length=1, max_length=200)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN, max_length=150)
    telefono: Optional[str] = Field(None, min_length=7, max_length=20)
    rol: Optional[Role] = None
    activo: Optional[bool] = None


class PasswordUpdate(BaseModel):
    """Nueva contraseña fijada por un administrador."""
    password: str = Field(..., min_length=6, max_length=100)


class Usuario(BaseModel):
    id_usuario: str
    nombre: str
    email: str
    telefono: Optional[str] = None
    rol: Role
    activo: bool = True
    fecha_creacion: Optional[datetime] = None


class VeterinarioResumen(BaseModel):
    """Datos públicos de un veterinario (reserva de citas)."""
    id_usuario: str
    nombre: str
