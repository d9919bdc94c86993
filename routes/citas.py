"""
Rutas de citas: agenda, disponibilidad y cambios de estado.

DELETE no borra la cita, la cancela.
"""

from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional
from datetime import datetime, date
from sqlalchemy.orm import Session

from models.citas import Cita, CitaCreate, CitaUpdate, CitaEstadoUpdate, EstadoCita, Disponibilidad
from models.usuarios import Role, ROLES_STAFF
from core.context import RequestContext
from core.pagination import create_paginated_response
from core.security import require_role
from services.cita_service import CitaService
from services.notificacion_service import NotificacionService
from services.email_service import get_email_service
from services.websocket_manager import get_connection_manager
from repositories.cita_repository import CitaRepository
from repositories.paciente_repository import PacienteRepository
from repositories.propietario_repository import PropietarioRepository
from repositories.usuario_repository import UsuarioRepository
from repositories.notificacion_repository import NotificacionRepository
from database.db import get_db
from auth import get_request_context, require_roles
from config import settings

router = APIRouter(prefix="/citas", tags=["citas"])

ROLES_AGENDA = (Role.ADMIN.value, Role.RECEPCION.value, Role.VET.value)
ROLES_CANCELACION = (Role.ADMIN.value, Role.RECEPCION.value)


def get_cita_service(db: Session = Depends(get_db)) -> CitaService:
    """Inject CitaService with its dependencies."""
    return CitaService(
        CitaRepository(db),
        PacienteRepository(db),
        PropietarioRepository(db),
        UsuarioRepository(db),
        NotificacionService(NotificacionRepository(db), get_connection_manager()),
        get_email_service(),
    )


@router.post("/", response_model=Cita, status_code=status.HTTP_201_CREATED)
async def agendar_cita(
    data: CitaCreate,
    ctx: RequestContext = Depends(require_roles(*ROLES_AGENDA)),
    service: CitaService = Depends(get_cita_service),
):
    """
    Agenda una cita en horario de atención sin solaparse con otra del profesional.
    """
    return service.create_cita(data, ctx)


@router.get("/")
async def listar_citas(
    page: int = Query(0, ge=0, description="Número de página (0-indexed)"),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    estado: Optional[EstadoCita] = Query(None),
    id_profesional: Optional[str] = Query(None),
    id_paciente: Optional[str] = Query(None),
    id_propietario: Optional[str] = Query(None),
    desde: Optional[datetime] = Query(None),
    hasta: Optional[datetime] = Query(None),
    ctx: RequestContext = Depends(get_request_context),
    service: CitaService = Depends(get_cita_service),
):
    """Un cliente solo ve las citas de sus pacientes."""
    citas, total = service.get_citas(
        ctx,
        estado=estado,
        id_profesional=id_profesional,
        id_paciente=id_paciente,
        id_propietario=id_propietario,
        desde=desde,
        hasta=hasta,
        page=page,
        page_size=page_size,
    )
    return create_paginated_response(citas, page, page_size, total)


@router.get("/agenda/{id_profesional}", response_model=List[Cita])
async def agenda_profesional(
    id_profesional: str,
    dia: date = Query(..., description="Día a consultar (YYYY-MM-DD)"),
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: CitaService = Depends(get_cita_service),
):
    return service.get_agenda(id_profesional, dia)


@router.get("/disponibilidad/{id_profesional}", response_model=Disponibilidad)
async def disponibilidad(
    id_profesional: str,
    dia: date = Query(...),
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: CitaService = Depends(get_cita_service),
):
    return service.get_disponibilidad(id_profesional, dia)


@router.get("/{cita_id}", response_model=Cita)
async def obtener_cita(
    cita_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: CitaService = Depends(get_cita_service),
):
    return service.get_cita(cita_id, ctx)


@router.put("/{cita_id}", response_model=Cita)
async def actualizar_cita(
    cita_id: str,
    data: CitaUpdate,
    ctx: RequestContext = Depends(require_roles(*ROLES_AGENDA)),
    service: CitaService = Depends(get_cita_service),
):
    """Reprograma o edita una cita pendiente o confirmada."""
    return service.update_cita(cita_id, data, ctx)


@router.patch("/{cita_id}/estado", response_model=Cita)
async def cambiar_estado(
    cita_id: str,
    data: CitaEstadoUpdate,
    ctx: RequestContext = Depends(require_roles(*ROLES_AGENDA)),
    service: CitaService = Depends(get_cita_service),
):
    """
    PENDIENTE → CONFIRMADA | CANCELADA; CONFIRMADA → ATENDIDA | CANCELADA.
    """
    if data.estado == EstadoCita.CANCELADA:
        require_role(ctx, *ROLES_CANCELACION)
    return service.cambiar_estado(cita_id, data.estado, ctx)


@router.delete("/{cita_id}", response_model=Cita)
async def cancelar_cita(
    cita_id: str,
    ctx: RequestContext = Depends(require_roles(*ROLES_CANCELACION)),
    service: CitaService = Depends(get_cita_service),
):
    return service.cancelar_cita(cita_id, ctx)
