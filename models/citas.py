from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum

from models.common import EMAIL_PATTERN
from models.pacientes import SexoPaciente


class EstadoCita(str, Enum):
    PENDIENTE = "PENDIENTE"
    CONFIRMADA = "CONFIRMADA"
    ATENDIDA = "ATENDIDA"
    CANCELADA = "CANCELADA"


class CitaBase(BaseModel):
    fecha: datetime = Field(..., description="Fecha y hora de inicio")
    motivo: str = Field(..., min_length=1, max_length=300)
    observaciones: Optional[str] = Field(None, max_length=2000)


class CitaCreate(CitaBase):
    """Crear una nueva cita."""
    id_paciente: str
    id_propietario: str
    id_profesional: str


class CitaUpdate(BaseModel):
    """Reprogramar o editar una cita pendiente/confirmada."""
    fecha: Optional[datetime] = None
    motivo: Optional[str] = Field(None, min_length=1, max_length=300)
    observaciones: Optional[str] = Field(None, max_length=2000)
    id_profesional: Optional[str] = None


class CitaEstadoUpdate(BaseModel):
    estado: EstadoCita


class Cita(CitaBase):
    """Modelo de respuesta de Cita."""
    id_cita: str
    estado: EstadoCita
    fecha_fin: datetime
    id_paciente: str
    paciente_nombre: Optional[str] = None
    id_propietario: str
    propietario_nombre: Optional[str] = None
    id_profesional: str
    profesional_nombre: Optional[str] = None
    fecha_creacion: Optional[datetime] = None


class PropietarioNuevo(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=150)
    telefono: Optional[str] = Field(None, min_length=7, max_length=20)
    documento: Optional[str] = Field(None, min_length=3, max_length=30)
    direccion: Optional[str] = Field(None, max_length=300)


class PacienteNuevo(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=100)
    especie: str = Field(..., min_length=1, max_length=50)
    raza: Optional[str] = Field(None, max_length=100)
    sexo: Optional[SexoPaciente] = None
    edad_meses: Optional[int] = Field(None, ge=0, le=600)
    peso_kg: Optional[float] = Field(None, gt=0, le=2000)


class CitaPublicaCreate(CitaBase):
    """
    Reserva pública: propietario y paciente existentes (por ID) o nuevos.
    """
    id_profesional: str
    id_propietario: Optional[str] = None
    id_paciente: Optional[str] = None
    propietario_nuevo: Optional[PropietarioNuevo] = None
    paciente_nuevo: Optional[PacienteNuevo] = None


class CitaClienteCreate(CitaBase):
    """Reserva desde el portal de clientes (propietario = cliente autenticado)."""
    id_paciente: str
    id_profesional: str


class HorarioDisponible(BaseModel):
    inicio: datetime
    fin: datetime


class Disponibilidad(BaseModel):
    id_profesional: str
    fecha: str
    horarios: list[HorarioDisponible]
