from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum


class SexoPaciente(str, Enum):
    MACHO = "MACHO"
    HEMBRA = "HEMBRA"


class PacienteBase(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=100)
    especie: str = Field(..., min_length=1, max_length=50)
    raza: Optional[str] = Field(None, max_length=100)
    sexo: Optional[SexoPaciente] = None
    edad_meses: Optional[int] = Field(None, ge=0, le=600)
    peso_kg: Optional[float] = Field(None, gt=0, le=2000)
    microchip: Optional[str] = Field(None, min_length=5, max_length=50)
    notas: Optional[str] = None


class PacienteCreate(PacienteBase):
    id_propietario: str


class PacienteUpdate(BaseModel):
    nombre: Optional[str] = Field(None, min_length=1, max_length=100)
    especie: Optional[str] = Field(None, min_length=1, max_length=50)
    raza: Optional[str] = Field(None, max_length=100)
    sexo: Optional[SexoPaciente] = None
    edad_meses: Optional[int] = Field(None, ge=0, le=600)
    peso_kg: Optional[float] = Field(None, gt=0, le=2000)
    microchip: Optional[str] = Field(None, min_length=5, max_length=50)
    notas: Optional[str] = None
    id_propietario: Optional[str] = None


class Paciente(PacienteBase):
    id_paciente: str
    id_propietario: str
    propietario_nombre: Optional[str] = None
    activo: bool = True
    fecha_creacion: Optional[datetime] = None
