"""
Rutas de facturación: emisión, pagos y cancelación.
"""

from fastapi import APIRouter, Depends, Query, Body, status
from typing import List, Optional
from datetime import datetime
from sqlalchemy.orm import Session

from models.facturas import (
    Factura,
    FacturaCreate,
    FacturaDesdeConsulta,
    FacturaUpdate,
    FacturaCancelacion,
    PagoCreate,
    Pago,
    EstadoFactura,
    EstadisticasFinancieras,
)
from models.usuarios import Role, ROLES_STAFF
from core.context import RequestContext
from core.pagination import create_paginated_response
from services.factura_service import FacturaService
from repositories.factura_repository import FacturaRepository
from repositories.propietario_repository import PropietarioRepository
from repositories.consulta_repository import ConsultaRepository
from database.db import get_db
from auth import get_request_context, require_roles
from config import settings

router = APIRouter(prefix="/facturas", tags=["facturas"])


def get_factura_service(db: Session = Depends(get_db)) -> FacturaService:
    return FacturaService(FacturaRepository(db), PropietarioRepository(db), ConsultaRepository(db))


@router.post("/", response_model=Factura, status_code=status.HTTP_201_CREATED)
async def emitir_factura(
    data: FacturaCreate,
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: FacturaService = Depends(get_factura_service),
):
    return service.create_factura(data, ctx)


@router.post("/desde-consulta/{consulta_id}", response_model=Factura, status_code=status.HTTP_201_CREATED)
async def facturar_consulta(
    consulta_id: str,
    data: Optional[FacturaDesdeConsulta] = Body(None),
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: FacturaService = Depends(get_factura_service),
):
    """
    Factura una consulta con la tarifa configurada más ítems adicionales.
    Una consulta solo puede facturarse una vez (409).
    """
    return service.create_desde_consulta(consulta_id, data, ctx)


@router.get("/")
async def listar_facturas(
    page: int = Query(0, ge=0),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    estado: Optional[EstadoFactura] = Query(None),
    id_propietario: Optional[str] = Query(None),
    desde: Optional[datetime] = Query(None),
    hasta: Optional[datetime] = Query(None),
    ctx: RequestContext = Depends(get_request_context),
    service: FacturaService = Depends(get_factura_service),
):
    """Un cliente solo ve sus propias facturas."""
    facturas, total = service.get_facturas(
        ctx, estado=estado, id_propietario=id_propietario, desde=desde, hasta=hasta, page=page, page_size=page_size
    )
    return create_paginated_response(facturas, page, page_size, total)


@router.get("/estadisticas", response_model=EstadisticasFinancieras)
async def estadisticas_financieras(
    desde: Optional[datetime] = Query(None),
    hasta: Optional[datetime] = Query(None),
    ctx: RequestContext = Depends(require_roles(Role.ADMIN.value, Role.VET.value)),
    service: FacturaService = Depends(get_factura_service),
):
    return service.get_estadisticas(desde, hasta)


@router.get("/numero/{numero}", response_model=Factura)
async def factura_por_numero(
    numero: str,
    ctx: RequestContext = Depends(get_request_context),
    service: FacturaService = Depends(get_factura_service),
):
    return service.get_by_numero(numero, ctx)


@router.get("/{factura_id}", response_model=Factura)
async def obtener_factura(
    factura_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: FacturaService = Depends(get_factura_service),
):
    return service.get_factura(factura_id, ctx)


@router.put("/{factura_id}", response_model=Factura)
async def actualizar_factura(
    factura_id: str,
    data: FacturaUpdate,
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: FacturaService = Depends(get_factura_service),
):
    return service.update_factura(factura_id, data, ctx)


@router.post("/{factura_id}/pagos", response_model=Factura, status_code=status.HTTP_201_CREATED)
async def registrar_pago(
    factura_id: str,
    data: PagoCreate,
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: FacturaService = Depends(get_factura_service),
):
    """
    Registra un pago. La factura pasa a PARCIAL o PAGADA según el saldo.
    """
    return service.registrar_pago(factura_id, data, ctx)


@router.get("/{factura_id}/pagos", response_model=List[Pago])
async def listar_pagos(
    factura_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: FacturaService = Depends(get_factura_service),
):
    return service.get_pagos(factura_id, ctx)


@router.post("/{factura_id}/cancelar", response_model=Factura)
async def cancelar_factura(
    factura_id: str,
    data: Optional[FacturaCancelacion] = Body(None),
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: FacturaService = Depends(get_factura_service),
):
    """Una factura pagada no puede cancelarse."""
    return service.cancelar_factura(factura_id, data.motivo if data else None, ctx)
