"""
Rutas de consultas clínicas y prescripciones.
"""

from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional
from datetime import datetime
from sqlalchemy.orm import Session

from models.consultas import (
    Consulta,
    ConsultaCreate,
    ConsultaUpdate,
    Prescripcion,
    PrescripcionCreate,
    PrescripcionUpdate,
)
from models.usuarios import Role, ROLES_STAFF
from models.common import create_delete_response
from core.context import RequestContext
from core.pagination import create_paginated_response
from services.consulta_service import ConsultaService, PrescripcionService
from repositories.consulta_repository import ConsultaRepository, PrescripcionRepository
from repositories.paciente_repository import PacienteRepository
from repositories.usuario_repository import UsuarioRepository
from repositories.cita_repository import CitaRepository
from repositories.factura_repository import FacturaRepository
from database.db import get_db
from auth import require_roles
from config import settings

router = APIRouter(prefix="/consultas", tags=["consultas"])
prescripciones_router = APIRouter(prefix="/prescripciones", tags=["prescripciones"])

ROLES_CLINICOS = (Role.ADMIN.value, Role.VET.value)


def get_consulta_service(db: Session = Depends(get_db)) -> ConsultaService:
    return ConsultaService(
        ConsultaRepository(db),
        PacienteRepository(db),
        UsuarioRepository(db),
        CitaRepository(db),
        FacturaRepository(db),
        PrescripcionRepository(db),
    )


def get_prescripcion_service(db: Session = Depends(get_db)) -> PrescripcionService:
    return PrescripcionService(PrescripcionRepository(db), ConsultaRepository(db))


# ==================== Consultas ====================

@router.post("/", response_model=Consulta, status_code=status.HTTP_201_CREATED)
async def registrar_consulta(
    data: ConsultaCreate,
    ctx: RequestContext = Depends(require_roles(*ROLES_CLINICOS)),
    service: ConsultaService = Depends(get_consulta_service),
):
    """
    Registra una consulta; si se indica la cita, ésta pasa a ATENDIDA.
    """
    return service.create_consulta(data, ctx)


@router.get("/")
async def listar_consultas(
    page: int = Query(0, ge=0),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    id_paciente: Optional[str] = Query(None),
    id_profesional: Optional[str] = Query(None),
    desde: Optional[datetime] = Query(None),
    hasta: Optional[datetime] = Query(None),
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: ConsultaService = Depends(get_consulta_service),
):
    consultas, total = service.get_consultas(id_paciente, id_profesional, desde, hasta, page, page_size)
    return create_paginated_response(consultas, page, page_size, total)


@router.get("/{consulta_id}", response_model=Consulta)
async def obtener_consulta(
    consulta_id: str,
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: ConsultaService = Depends(get_consulta_service),
):
    return service.get_consulta(consulta_id)


@router.get("/{consulta_id}/prescripciones", response_model=List[Prescripcion])
async def prescripciones_de_consulta(
    consulta_id: str,
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: PrescripcionService = Depends(get_prescripcion_service),
):
    return service.get_by_consulta(consulta_id)


@router.put("/{consulta_id}", response_model=Consulta)
async def actualizar_consulta(
    consulta_id: str,
    data: ConsultaUpdate,
    ctx: RequestContext = Depends(require_roles(*ROLES_CLINICOS)),
    service: ConsultaService = Depends(get_consulta_service),
):
    return service.update_consulta(consulta_id, data, ctx)


@router.delete("/{consulta_id}")
async def eliminar_consulta(
    consulta_id: str,
    ctx: RequestContext = Depends(require_roles(*ROLES_CLINICOS)),
    service: ConsultaService = Depends(get_consulta_service),
):
    """Elimina la consulta y sus prescripciones; no se permite si ya fue facturada."""
    service.delete_consulta(consulta_id, ctx)
    return create_delete_response("Consulta eliminada", consulta_id, soft_delete=False)


# ==================== Prescripciones ====================

@prescripciones_router.post("/", response_model=Prescripcion, status_code=status.HTTP_201_CREATED)
async def emitir_prescripcion(
    data: PrescripcionCreate,
    ctx: RequestContext = Depends(require_roles(*ROLES_CLINICOS)),
    service: PrescripcionService = Depends(get_prescripcion_service),
):
    return service.create_prescripcion(data, ctx)


@prescripciones_router.get("/")
async def listar_prescripciones(
    page: int = Query(0, ge=0),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: PrescripcionService = Depends(get_prescripcion_service),
):
    prescripciones, total = service.get_prescripciones(page, page_size)
    return create_paginated_response(prescripciones, page, page_size, total)


@prescripciones_router.get("/paciente/{paciente_id}", response_model=List[Prescripcion])
async def prescripciones_de_paciente(
    paciente_id: str,
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: PrescripcionService = Depends(get_prescripcion_service),
):
    return service.get_by_paciente(paciente_id)


@prescripciones_router.get("/{prescripcion_id}", response_model=Prescripcion)
async def obtener_prescripcion(
    prescripcion_id: str,
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: PrescripcionService = Depends(get_prescripcion_service),
):
    return service.get_prescripcion(prescripcion_id)


@prescripciones_router.put("/{prescripcion_id}", response_model=Prescripcion)
async def actualizar_prescripcion(
    prescripcion_id: str,
    data: PrescripcionUpdate,
    ctx: RequestContext = Depends(require_roles(*ROLES_CLINICOS)),
    service: PrescripcionService = Depends(get_prescripcion_service),
):
    return service.update_prescripcion(prescripcion_id, data, ctx)


@prescripciones_router.delete("/{prescripcion_id}")
async def eliminar_prescripcion(
    prescripcion_id: str,
    ctx: RequestContext = Depends(require_roles(*ROLES_CLINICOS)),
    service: PrescripcionService = Depends(get_prescripcion_service),
):
    service.delete_prescripcion(prescripcion_id, ctx)
    return create_delete_response("Prescripción eliminada", prescripcion_id, soft_delete=False)
