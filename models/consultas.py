from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum


class ConsultaBase(BaseModel):
    fecha: Optional[datetime] = Field(None, description="Por defecto, la hora actual")
    frecuencia_cardiaca: Optional[int] = Field(None, ge=0, le=400)
    frecuencia_respiratoria: Optional[int] = Field(None, ge=0, le=200)
    temperatura: Optional[float] = Field(None, ge=25, le=45)
    peso_kg: Optional[float] = Field(None, gt=0, le=2000)
    examen_fisico: Optional[str] = None
    diagnostico: Optional[str] = None
    tratamiento: Optional[str] = None
    observaciones: Optional[str] = None


class ConsultaCreate(ConsultaBase):
    id_paciente: str
    id_profesional: Optional[str] = Field(None, description="Por defecto, el veterinario autenticado")
    id_cita: Optional[str] = None


class ConsultaUpdate(ConsultaBase):
    """El paciente no cambia una vez creada la consulta."""
    id_profesional: Optional[str] = None


class Consulta(ConsultaBase):
    id_consulta: str
    fecha: datetime
    id_paciente: str
    paciente_nombre: Optional[str] = None
    id_profesional: str
    profesional_nombre: Optional[str] = None
    id_cita: Optional[str] = None


class ViaAdministracion(str, Enum):
    ORAL = "ORAL"
    INYECTABLE = "INYECTABLE"
    TOPICA = "TOPICA"
    OFTALMICA = "OFTALMICA"
    OTICA = "OTICA"
    OTRA = "OTRA"


class ItemPrescripcionCreate(BaseModel):
    medicamento: str = Field(..., min_length=1, max_length=200)
    presentacion: Optional[str] = Field(None, max_length=100)
    dosis: str = Field(..., min_length=1, max_length=100)
    frecuencia: str = Field(..., min_length=1, max_length=100)
    duracion_dias: Optional[int] = Field(None, ge=1, le=365)
    via_administracion: Optional[ViaAdministracion] = None
    indicaciones: Optional[str] = None


class ItemPrescripcion(ItemPrescripcionCreate):
    id_item: str


class PrescripcionCreate(BaseModel):
    id_consulta: str
    indicaciones_generales: Optional[str] = None
    items: List[ItemPrescripcionCreate] = Field(..., min_length=1)


class PrescripcionUpdate(BaseModel):
    indicaciones_generales: Optional[str] = None
    items: Optional[List[ItemPrescripcionCreate]] = Field(None, min_length=1)


class Prescripcion(BaseModel):
    id_prescripcion: str
    id_consulta: str
    id_paciente: Optional[str] = None
    fecha_emision: datetime
    indicaciones_generales: Optional[str] = None
    items: List[ItemPrescripcion] = []
