from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from models.common import EMAIL_PATTERN


class PropietarioBase(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=200)
    documento: Optional[str] = Field(None, min_length=3, max_length=30)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN, max_length=150)
    telefono: Optional[str] = Field(None, min_length=7, max_length=20)
    direccion: Optional[str] = Field(None, max_length=300)


class PropietarioCreate(PropietarioBase):
    """Crear un nuevo propietario."""
    pass


class PropietarioUpdate(BaseModel):
    """Actualizar un propietario existente (campos opcionales)."""
    nombre: Optional[str] = Field(None, min_length=1, max_length=200)
    documento: Optional[str] = Field(None, min_length=3, max_length=30)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN, max_length=150)
    telefono: Optional[str] = Field(None, min_length=7, max_length=20)
    direccion: Optional[str] = Field(None, max_length=300)


class Propietario(PropietarioBase):
    id_propietario: str
    activo: bool = True
    tiene_cuenta: bool = Field(False, description="Tiene contraseña para el portal de clientes")
    fecha_creacion: Optional[datetime] = None
