"""
Rutas de pacientes y su historial clínico.
"""

from fastapi import APIRouter, Depends, Query, status
from typing import Optional
from sqlalchemy.orm import Session

from models.pacientes import Paciente, PacienteCreate, PacienteUpdate
from models.historial import HistorialClinico
from models.usuarios import ROLES_STAFF
from models.common import create_delete_response
from core.context import RequestContext
from core.pagination import create_paginated_response
from services.paciente_service import PacienteService
from services.historial_service import HistorialService
from repositories.paciente_repository import PacienteRepository
from repositories.propietario_repository import PropietarioRepository
from database.db import get_db
from auth import get_request_context, require_roles
from config import settings

router = APIRouter(prefix="/pacientes", tags=["pacientes"])


def get_paciente_service(db: Session = Depends(get_db)) -> PacienteService:
    return PacienteService(PacienteRepository(db), PropietarioRepository(db))


def get_historial_service(db: Session = Depends(get_db)) -> HistorialService:
    return HistorialService(db)


@router.post("/", response_model=Paciente, status_code=status.HTTP_201_CREATED)
async def crear_paciente(
    data: PacienteCreate,
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: PacienteService = Depends(get_paciente_service),
):
    return service.create_paciente(data, ctx)


@router.get("/")
async def listar_pacientes(
    page: int = Query(0, ge=0),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    nombre: Optional[str] = Query(None),
    especie: Optional[str] = Query(None),
    id_propietario: Optional[str] = Query(None),
    solo_activos: bool = Query(True),
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: PacienteService = Depends(get_paciente_service),
):
    pacientes, total = service.get_pacientes(nombre, especie, id_propietario, solo_activos, page, page_size)
    return create_paginated_response(pacientes, page, page_size, total)


@router.get("/{paciente_id}", response_model=Paciente)
async def obtener_paciente(
    paciente_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: PacienteService = Depends(get_paciente_service),
):
    """Staff o el propietario del paciente."""
    return service.get_paciente(paciente_id, ctx)


@router.get("/{paciente_id}/historial", response_model=HistorialClinico)
async def historial_clinico(
    paciente_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: HistorialService = Depends(get_historial_service),
):
    """
    Historial completo: citas, consultas, prescripciones y vacunaciones.
    """
    return service.get_historial(paciente_id, ctx)


@router.put("/{paciente_id}", response_model=Paciente)
async def actualizar_paciente(
    paciente_id: str,
    data: PacienteUpdate,
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: PacienteService = Depends(get_paciente_service),
):
    return service.update_paciente(paciente_id, data, ctx)


@router.delete("/{paciente_id}")
async def eliminar_paciente(
    paciente_id: str,
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: PacienteService = Depends(get_paciente_service),
):
    service.delete_paciente(paciente_id, ctx)
    return create_delete_response("Paciente desactivado", paciente_id)
