from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from models.consultas import ItemPrescripcionCreate


class TemplateConsultaBase(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=200)
    descripcion: Optional[str] = Field(None, max_length=500)
    categoria: Optional[str] = Field(None, max_length=100, description="General, Cirugía, Control...")
    examen_fisico: Optional[str] = None
    diagnostico: Optional[str] = None
    tratamiento: Optional[str] = None
    observaciones: Optional[str] = None


class TemplateConsultaCreate(TemplateConsultaBase):
    pass


class TemplateConsultaUpdate(BaseModel):
    nombre: Optional[str] = Field(None, min_length=1, max_length=200)
    descripcion: Optional[str] = Field(None, max_length=500)
    categoria: Optional[str] = Field(None, max_length=100)
    examen_fisico: Optional[str] = None
    diagnostico: Optional[str] = None
    tratamiento: Optional[str] = None
    observaciones: Optional[str] = None


class TemplateConsulta(TemplateConsultaBase):
    id_template: str
    veces_usado: int = 0
    activo: bool = True
    id_usuario_creacion: Optional[str] = None
    fecha_creacion: Optional[datetime] = None


class TemplatePrescripcionCreate(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=200)
    descripcion: Optional[str] = Field(None, max_length=500)
    categoria: Optional[str] = Field(None, max_length=100, description="Antibióticos, Analgésicos...")
    indicaciones_generales: Optional[str] = None
    items: List[ItemPrescripcionCreate] = Field(..., min_length=1)


class TemplatePrescripcionUpdate(BaseModel):
    """Si se envían items, reemplazan a los actuales."""
    nombre: Optional[str] = Field(None, min_length=1, max_length=200)
    descripcion: Optional[str] = Field(None, max_length=500)
    categoria: Optional[str] = Field(None, max_length=100)
    indicaciones_generales: Optional[str] = None
    items: Optional[List[ItemPrescripcionCreate]] = Field(None, min_length=1)


class TemplatePrescripcion(BaseModel):
    id_template: str
    nombre: str
    descripcion: Optional[str] = None
    categoria: Optional[str] = None
    indicaciones_generales: Optional[str] = None
    items: List[ItemPrescripcionCreate]
    veces_usado: int = 0
    activo: bool = True
    id_usuario_creacion: Optional[str] = None
    fecha_creacion: Optional[datetime] = None
