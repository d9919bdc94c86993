from pydantic import BaseModel, Field
from typing import Optional
from datetime import date


class VacunaBase(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=100)
    especie: Optional[str] = Field(None, max_length=50, description="Vacío = aplica a todas las especies")
    descripcion: Optional[str] = None
    fabricante: Optional[str] = Field(None, max_length=100)
    numero_dosis: int = Field(1, ge=1, le=20)
    intervalo_dias: int = Field(0, ge=0, le=3650)


class VacunaCreate(VacunaBase):
    pass


class VacunaUpdate(BaseModel):
    nombre: Optional[str] = Field(None, min_length=1, max_length=100)
    especie: Optional[str] = Field(None, max_length=50)
    descripcion: Optional[str] = None
    fabricante: Optional[str] = Field(None, max_length=100)
    numero_dosis: Optional[int] = Field(None, ge=1, le=20)
    intervalo_dias: Optional[int] = Field(None, ge=0, le=3650)


class Vacuna(VacunaBase):
    id_vacuna: str
    activo: bool = True


class VacunacionCreate(BaseModel):
    id_paciente: str
    id_vacuna: str
    id_profesional: Optional[str] = Field(None, description="Por defecto, el usuario autenticado")
    fecha_aplicacion: date
    numero_dosis: int = Field(1, ge=1)
    lote: Optional[str] = Field(None, max_length=50)
    observaciones: Optional[str] = None


class Vacunacion(BaseModel):
    id_vacunacion: str
    id_paciente: str
    paciente_nombre: Optional[str] = None
    id_vacuna: str
    vacuna_nombre: Optional[str] = None
    id_profesional: str
    profesional_nombre: Optional[str] = None
    fecha_aplicacion: date
    numero_dosis: int
    proxima_dosis: Optional[date] = None
    lote: Optional[str] = None
    observaciones: Optional[str] = None
