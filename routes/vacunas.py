"""
Rutas del catálogo de vacunas y de las vacunaciones aplicadas.
"""

from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional
from sqlalchemy.orm import Session

from models.vacunas import Vacuna, VacunaCreate, VacunaUpdate, Vacunacion, VacunacionCreate
from models.usuarios import Role, ROLES_STAFF
from models.common import create_delete_response
from core.context import RequestContext
from core.pagination import create_paginated_response
from services.vacuna_service import VacunaService, VacunacionService
from repositories.vacuna_repository import VacunaRepository, VacunacionRepository
from repositories.paciente_repository import PacienteRepository
from repositories.usuario_repository import UsuarioRepository
from database.db import get_db
from auth import get_request_context, require_roles
from config import settings

router = APIRouter(prefix="/vacunas", tags=["vacunas"])
vacunaciones_router = APIRouter(prefix="/vacunaciones", tags=["vacunas"])

ROLES_CLINICOS = (Role.ADMIN.value, Role.VET.value)


def get_vacuna_service(db: Session = Depends(get_db)) -> VacunaService:
    return VacunaService(VacunaRepository(db))


def get_vacunacion_service(db: Session = Depends(get_db)) -> VacunacionService:
    return VacunacionService(
        VacunacionRepository(db),
        VacunaRepository(db),
        PacienteRepository(db),
        UsuarioRepository(db),
    )


# ==================== Catálogo ====================

@router.post("/", response_model=Vacuna, status_code=status.HTTP_201_CREATED)
async def crear_vacuna(
    data: VacunaCreate,
    ctx: RequestContext = Depends(require_roles(*ROLES_CLINICOS)),
    service: VacunaService = Depends(get_vacuna_service),
):
    return service.create_vacuna(data, ctx)


@router.get("/")
async def listar_vacunas(
    page: int = Query(0, ge=0),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    nombre: Optional[str] = Query(None),
    especie: Optional[str] = Query(None, description="Incluye las vacunas sin especie"),
    solo_activas: bool = Query(True),
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: VacunaService = Depends(get_vacuna_service),
):
    vacunas, total = service.get_vacunas(nombre, especie, solo_activas, page, page_size)
    return create_paginated_response(vacunas, page, page_size, total)


@router.get("/{vacuna_id}", response_model=Vacuna)
async def obtener_vacuna(
    vacuna_id: str,
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: VacunaService = Depends(get_vacuna_service),
):
    return service.get_vacuna(vacuna_id)


@router.put("/{vacuna_id}", response_model=Vacuna)
async def actualizar_vacuna(
    vacuna_id: str,
    data: VacunaUpdate,
    ctx: RequestContext = Depends(require_roles(*ROLES_CLINICOS)),
    service: VacunaService = Depends(get_vacuna_service),
):
    return service.update_vacuna(vacuna_id, data, ctx)


@router.delete("/{vacuna_id}")
async def eliminar_vacuna(
    vacuna_id: str,
    ctx: RequestContext = Depends(require_roles(*ROLES_CLINICOS)),
    service: VacunaService = Depends(get_vacuna_service),
):
    service.delete_vacuna(vacuna_id, ctx)
    return create_delete_response("Vacuna desactivada", vacuna_id)


# ==================== Vacunaciones ====================

@vacunaciones_router.post("/", response_model=Vacunacion, status_code=status.HTTP_201_CREATED)
async def registrar_vacunacion(
    data: VacunacionCreate,
    ctx: RequestContext = Depends(require_roles(*ROLES_CLINICOS)),
    service: VacunacionService = Depends(get_vacunacion_service),
):
    """
    Registra una dosis aplicada; la próxima dosis se calcula con el intervalo de la vacuna.
    """
    return service.registrar_vacunacion(data, ctx)


@vacunaciones_router.get("/proximas", response_model=List[Vacunacion])
async def vacunaciones_proximas(
    dias: int = Query(30, ge=1, le=365),
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: VacunacionService = Depends(get_vacunacion_service),
):
    return service.get_proximas(dias)


@vacunaciones_router.get("/vencidas", response_model=List[Vacunacion])
async def vacunaciones_vencidas(
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: VacunacionService = Depends(get_vacunacion_service),
):
    return service.get_vencidas()


@vacunaciones_router.get("/paciente/{paciente_id}", response_model=List[Vacunacion])
async def vacunaciones_de_paciente(
    paciente_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: VacunacionService = Depends(get_vacunacion_service),
):
    return service.get_by_paciente(paciente_id, ctx)


@vacunaciones_router.get("/{vacunacion_id}", response_model=Vacunacion)
async def obtener_vacunacion(
    vacunacion_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: VacunacionService = Depends(get_vacunacion_service),
):
    return service.get_vacunacion(vacunacion_id, ctx)


@vacunaciones_router.delete("/{vacunacion_id}")
async def eliminar_vacunacion(
    vacunacion_id: str,
    ctx: RequestContext = Depends(require_roles(*ROLES_CLINICOS)),
    service: VacunacionService = Depends(get_vacunacion_service),
):
    service.delete_vacunacion(vacunacion_id, ctx)
    return create_delete_response("Vacunación eliminada", vacunacion_id, soft_delete=False)
