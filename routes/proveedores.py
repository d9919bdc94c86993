"""
Rutas de proveedores del inventario.
"""

from fastapi import APIRouter, Depends, Query, status
from typing import Optional
from sqlalchemy.orm import Session

from models.proveedores import Proveedor, ProveedorCreate, ProveedorUpdate
from models.usuarios import ROLES_STAFF
from models.common import create_delete_response
from core.context import RequestContext
from core.pagination import create_paginated_response
from services.proveedor_service import ProveedorService
from services.inventario_service import ROLES_INVENTARIO
from repositories.proveedor_repository import ProveedorRepository
from database.db import get_db
from auth import require_roles
from config import settings

router = APIRouter(prefix="/proveedores", tags=["inventario"])


def get_proveedor_service(db: Session = Depends(get_db)) -> ProveedorService:
    return ProveedorService(ProveedorRepository(db))


@router.post("/", response_model=Proveedor, status_code=status.HTTP_201_CREATED)
async def crear_proveedor(
    data: ProveedorCreate,
    ctx: RequestContext = Depends(require_roles(*ROLES_INVENTARIO)),
    service: ProveedorService = Depends(get_proveedor_service),
):
    return service.create_proveedor(data, ctx)


@router.get("/")
async def listar_proveedores(
    page: int = Query(0, ge=0),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    texto: Optional[str] = Query(None, description="Busca en nombre, RUC y email"),
    solo_activos: bool = Query(True),
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: ProveedorService = Depends(get_proveedor_service),
):
    proveedores, total = service.get_proveedores(texto, solo_activos, page, page_size)
    return create_paginated_response(proveedores, page, page_size, total)


@router.get("/{proveedor_id}", response_model=Proveedor)
async def obtener_proveedor(
    proveedor_id: str,
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: ProveedorService = Depends(get_proveedor_service),
):
    return service.get_proveedor(proveedor_id)


@router.put("/{proveedor_id}", response_model=Proveedor)
async def actualizar_proveedor(
    proveedor_id: str,
    data: ProveedorUpdate,
    ctx: RequestContext = Depends(require_roles(*ROLES_INVENTARIO)),
    service: ProveedorService = Depends(get_proveedor_service),
):
    return service.update_proveedor(proveedor_id, data, ctx)


@router.delete("/{proveedor_id}")
async def eliminar_proveedor(
    proveedor_id: str,
    ctx: RequestContext = Depends(require_roles(*ROLES_INVENTARIO)),
    service: ProveedorService = Depends(get_proveedor_service),
):
    service.delete_proveedor(proveedor_id, ctx)
    return create_delete_response("Proveedor desactivado", proveedor_id)
