from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from enum import Enum


class TipoNotificacion(str, Enum):
    INFO = "INFO"
    CITA = "CITA"
    CONSULTA = "CONSULTA"
    FACTURA = "FACTURA"
    INVENTARIO = "INVENTARIO"
    VACUNA = "VACUNA"


class Notificacion(BaseModel):
    id_notificacion: str
    titulo: str
    mensaje: str
    tipo: TipoNotificacion
    leida: bool
    entidad_tipo: Optional[str] = None
    entidad_id: Optional[str] = None
    fecha_creacion: datetime


class ConteoNoLeidas(BaseModel):
    no_leidas: int
