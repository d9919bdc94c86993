from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from models.common import EMAIL_PATTERN


class ProveedorBase(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=200)
    ruc: Optional[str] = Field(None, min_length=3, max_length=50, description="RUC / NIT")
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN, max_length=150)
    telefono: Optional[str] = Field(None, min_length=7, max_length=20)
    direccion: Optional[str] = Field(None, max_length=500)
    notas: Optional[str] = Field(None, max_length=1000)


class ProveedorCreate(ProveedorBase):
    pass


class ProveedorUpdate(BaseModel):
    nombre: Optional[str] = Field(None, min_length=1, max_length=200)
    ruc: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN, max_length=150)
    telefono: Optional[str] = Field(None, min_length=7, max_length=20)
    direccion: Optional[str] = Field(None, max_length=500)
    notas: Optional[str] = Field(None, max_length=1000)


class Proveedor(ProveedorBase):
    id_proveedor: str
    activo: bool = True
    productos_activos: int = 0
    fecha_creacion: Optional[datetime] = None
