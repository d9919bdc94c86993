"""
Portal de clientes: cada propietario ve y gestiona solo lo suyo.
"""

from fastapi import APIRouter, Depends, Query, status
from typing import List
from sqlalchemy.orm import Session

from models.propietarios import Propietario, PropietarioUpdate
from models.pacientes import Paciente
from models.historial import HistorialClinico
from models.citas import Cita, CitaClienteCreate
from core.context import RequestContext
from core.pagination import create_paginated_response
from services.cita_service import CitaService
from services.factura_service import FacturaService
from services.historial_service import HistorialService
from services.propietario_service import PropietarioService
from repositories.propietario_repository import PropietarioRepository
from repositories.paciente_repository import PacienteRepository
from routes.citas import get_cita_service
from routes.facturas import get_factura_service
from database.db import get_db
from auth import require_roles, ROL_CLIENTE
from config import settings

router = APIRouter(prefix="/portal", tags=["portal"])


def get_propietario_service(db: Session = Depends(get_db)) -> PropietarioService:
    return PropietarioService(PropietarioRepository(db), PacienteRepository(db))


@router.get("/perfil", response_model=Propietario)
async def mi_perfil(
    ctx: RequestContext = Depends(require_roles(ROL_CLIENTE)),
    service: PropietarioService = Depends(get_propietario_service),
):
    return service.get_propietario(ctx.id, ctx)


@router.put("/perfil", response_model=Propietario)
async def actualizar_perfil(
    data: PropietarioUpdate,
    ctx: RequestContext = Depends(require_roles(ROL_CLIENTE)),
    service: PropietarioService = Depends(get_propietario_service),
):
    return service.update_propietario(ctx.id, data, ctx)


@router.get("/pacientes", response_model=List[Paciente])
async def mis_pacientes(
    ctx: RequestContext = Depends(require_roles(ROL_CLIENTE)),
    service: PropietarioService = Depends(get_propietario_service),
):
    return service.get_pacientes(ctx.id, ctx)


@router.get("/pacientes/{paciente_id}/historial", response_model=HistorialClinico)
async def historial_de_mi_paciente(
    paciente_id: str,
    ctx: RequestContext = Depends(require_roles(ROL_CLIENTE)),
    db: Session = Depends(get_db),
):
    return HistorialService(db).get_historial(paciente_id, ctx)


@router.get("/citas")
async def mis_citas(
    page: int = Query(0, ge=0),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    ctx: RequestContext = Depends(require_roles(ROL_CLIENTE)),
    service: CitaService = Depends(get_cita_service),
):
    citas, total = service.get_citas(ctx, page=page, page_size=page_size)
    return create_paginated_response(citas, page, page_size, total)


@router.post("/citas", response_model=Cita, status_code=status.HTTP_201_CREATED)
async def reservar_cita(
    data: CitaClienteCreate,
    ctx: RequestContext = Depends(require_roles(ROL_CLIENTE)),
    service: CitaService = Depends(get_cita_service),
):
    return service.reservar_cliente(data, ctx)


@router.get("/facturas")
async def mis_facturas(
    page: int = Query(0, ge=0),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    ctx: RequestContext = Depends(require_roles(ROL_CLIENTE)),
    service: FacturaService = Depends(get_factura_service),
):
    facturas, total = service.get_facturas(ctx, page=page, page_size=page_size)
    return create_paginated_response(facturas, page, page_size, total)
