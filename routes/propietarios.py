"""
Rutas de propietarios (dueños de los pacientes).
"""

from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional
from sqlalchemy.orm import Session

from models.propietarios import Propietario, PropietarioCreate, PropietarioUpdate
from models.pacientes import Paciente
from models.usuarios import Role, ROLES_STAFF
from models.common import create_delete_response
from core.context import RequestContext
from core.pagination import create_paginated_response
from services.propietario_service import PropietarioService
from repositories.propietario_repository import PropietarioRepository
from repositories.paciente_repository import PacienteRepository
from database.db import get_db
from auth import require_roles
from config import settings

router = APIRouter(prefix="/propietarios", tags=["propietarios"])


def get_propietario_service(db: Session = Depends(get_db)) -> PropietarioService:
    return PropietarioService(PropietarioRepository(db), PacienteRepository(db))


@router.post("/", response_model=Propietario, status_code=status.HTTP_201_CREATED)
async def crear_propietario(
    data: PropietarioCreate,
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: PropietarioService = Depends(get_propietario_service),
):
    return service.create_propietario(data, ctx)


@router.get("/")
async def listar_propietarios(
    page: int = Query(0, ge=0),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    texto: Optional[str] = Query(None, description="Busca en nombre, documento y email"),
    solo_activos: bool = Query(True),
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: PropietarioService = Depends(get_propietario_service),
):
    propietarios, total = service.get_propietarios(texto, solo_activos, page, page_size)
    return create_paginated_response(propietarios, page, page_size, total)


@router.get("/{propietario_id}", response_model=Propietario)
async def obtener_propietario(
    propietario_id: str,
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: PropietarioService = Depends(get_propietario_service),
):
    return service.get_propietario(propietario_id, ctx)


@router.get("/{propietario_id}/pacientes", response_model=List[Paciente])
async def pacientes_del_propietario(
    propietario_id: str,
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: PropietarioService = Depends(get_propietario_service),
):
    return service.get_pacientes(propietario_id, ctx)


@router.put("/{propietario_id}", response_model=Propietario)
async def actualizar_propietario(
    propietario_id: str,
    data: PropietarioUpdate,
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: PropietarioService = Depends(get_propietario_service),
):
    return service.update_propietario(propietario_id, data, ctx)


@router.delete("/{propietario_id}")
async def eliminar_propietario(
    propietario_id: str,
    ctx: RequestContext = Depends(require_roles(Role.ADMIN.value, Role.RECEPCION.value)),
    service: PropietarioService = Depends(get_propietario_service),
):
    service.delete_propietario(propietario_id, ctx)
    return create_delete_response("Propietario desactivado", propietario_id)
