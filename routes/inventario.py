"""
Rutas de inventario: categorías, productos y movimientos de stock.
"""

from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional
from sqlalchemy.orm import Session

from models.inventario import (
    Categoria,
    CategoriaCreate,
    Producto,
    ProductoCreate,
    ProductoUpdate,
    Movimiento,
    MovimientoCreate,
    ValorInventario,
)
from models.usuarios import ROLES_STAFF
from models.common import create_delete_response
from core.context import RequestContext
from core.pagination import create_paginated_response
from services.inventario_service import CategoriaService, InventarioService, ROLES_INVENTARIO
from services.notificacion_service import NotificacionService
from services.websocket_manager import get_connection_manager
from repositories.inventario_repository import (
    CategoriaProductoRepository,
    ProductoRepository,
    MovimientoInventarioRepository,
)
from repositories.usuario_repository import UsuarioRepository
from repositories.proveedor_repository import ProveedorRepository
from repositories.notificacion_repository import NotificacionRepository
from database.db import get_db
from auth import require_roles
from config import settings

categorias_router = APIRouter(prefix="/categorias", tags=["inventario"])
router = APIRouter(prefix="/productos", tags=["inventario"])


def get_categoria_service(db: Session = Depends(get_db)) -> CategoriaService:
    return CategoriaService(CategoriaProductoRepository(db))


def get_inventario_service(db: Session = Depends(get_db)) -> InventarioService:
    return InventarioService(
        ProductoRepository(db),
        CategoriaProductoRepository(db),
        MovimientoInventarioRepository(db),
        UsuarioRepository(db),
        NotificacionService(NotificacionRepository(db), get_connection_manager()),
        ProveedorRepository(db),
    )


# ==================== Categorías ====================

@categorias_router.post("/", response_model=Categoria, status_code=status.HTTP_201_CREATED)
async def crear_categoria(
    data: CategoriaCreate,
    ctx: RequestContext = Depends(require_roles(*ROLES_INVENTARIO)),
    service: CategoriaService = Depends(get_categoria_service),
):
    return service.create_categoria(data, ctx)


@categorias_router.get("/", response_model=List[Categoria])
async def listar_categorias(
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: CategoriaService = Depends(get_categoria_service),
):
    return service.get_categorias()


# ==================== Productos ====================

@router.post("/", response_model=Producto, status_code=status.HTTP_201_CREATED)
async def crear_producto(
    data: ProductoCreate,
    ctx: RequestContext = Depends(require_roles(*ROLES_INVENTARIO)),
    service: InventarioService = Depends(get_inventario_service),
):
    """El stock inicial se registra como movimiento de ENTRADA."""
    return service.create_producto(data, ctx)


@router.get("/")
async def listar_productos(
    page: int = Query(0, ge=0),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    texto: Optional[str] = Query(None, description="Busca en nombre y código"),
    id_categoria: Optional[str] = Query(None),
    id_proveedor: Optional[str] = Query(None),
    solo_activos: bool = Query(True),
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: InventarioService = Depends(get_inventario_service),
):
    productos, total = service.get_productos(texto, id_categoria, solo_activos, page, page_size, id_proveedor)
    return create_paginated_response(productos, page, page_size, total)


@router.get("/stock-bajo", response_model=List[Producto])
async def productos_stock_bajo(
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: InventarioService = Depends(get_inventario_service),
):
    return service.get_stock_bajo()


@router.get("/valor", response_model=ValorInventario)
async def valor_inventario(
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: InventarioService = Depends(get_inventario_service),
):
    return service.get_valor_inventario()


@router.get("/{producto_id}", response_model=Producto)
async def obtener_producto(
    producto_id: str,
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: InventarioService = Depends(get_inventario_service),
):
    return service.get_producto(producto_id)


@router.put("/{producto_id}", response_model=Producto)
async def actualizar_producto(
    producto_id: str,
    data: ProductoUpdate,
    ctx: RequestContext = Depends(require_roles(*ROLES_INVENTARIO)),
    service: InventarioService = Depends(get_inventario_service),
):
    return service.update_producto(producto_id, data, ctx)


@router.delete("/{producto_id}")
async def eliminar_producto(
    producto_id: str,
    ctx: RequestContext = Depends(require_roles(*ROLES_INVENTARIO)),
    service: InventarioService = Depends(get_inventario_service),
):
    service.delete_producto(producto_id, ctx)
    return create_delete_response("Producto desactivado", producto_id)


@router.post("/{producto_id}/movimientos", response_model=Movimiento, status_code=status.HTTP_201_CREATED)
async def registrar_movimiento(
    producto_id: str,
    data: MovimientoCreate,
    ctx: RequestContext = Depends(require_roles(*ROLES_INVENTARIO)),
    service: InventarioService = Depends(get_inventario_service),
):
    """
    ENTRADA suma, SALIDA resta (422 si no hay stock suficiente), AJUSTE fija el stock.
    """
    return service.registrar_movimiento(producto_id, data, ctx)


@router.get("/{producto_id}/movimientos")
async def listar_movimientos(
    producto_id: str,
    page: int = Query(0, ge=0),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: InventarioService = Depends(get_inventario_service),
):
    movimientos, total = service.get_movimientos(producto_id, page, page_size)
    return create_paginated_response(movimientos, page, page_size, total)
