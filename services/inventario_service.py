"""
Servicio de Inventario: categorías, productos y movimientos de stock.

El stock de un producto solo cambia a través de movimientos; cada movimiento
guarda el stock anterior y el resultante.
"""

from typing import List, Optional
import logging

from services.base_service import BaseService
from services.notificacion_service import NotificacionService
from repositories.inventario_repository import (
    CategoriaProductoRepository,
    ProductoRepository,
    MovimientoInventarioRepository,
)
from repositories.proveedor_repository import ProveedorRepository
from repositories.usuario_repository import UsuarioRepository
from database.models import CategoriaProductoORM, ProductoORM, MovimientoInventarioORM
from models.inventario import (
    Categoria,
    CategoriaCreate,
    Producto,
    ProductoCreate,
    ProductoUpdate,
    Movimiento,
    MovimientoCreate,
    TipoMovimiento,
    ValorInventario,
)
from models.notificaciones import TipoNotificacion
from models.usuarios import Role
from core.context import RequestContext
from core.exceptions import BusinessException, ValidationException, DuplicateException
from core.security import validate_uuid
from core.utils import enum_to_value, redondear_monto
from utils.datetime_utils import get_local_naive_now

logger = logging.getLogger(__name__)

ROLES_INVENTARIO = (Role.ADMIN.value, Role.RECEPCION.value)


def categoria_to_response(categoria: CategoriaProductoORM) -> Categoria:
    return Categoria(
        id_categoria=categoria.id,
        nombre=categoria.nombre,
        descripcion=categoria.descripcion,
        activo=categoria.activo,
    )


def to_response(producto: ProductoORM) -> Producto:
    return Producto(
        id_producto=producto.id,
        codigo=producto.codigo,
        nombre=producto.nombre,
        descripcion=producto.descripcion,
        id_categoria=producto.id_categoria,
        categoria_nombre=producto.categoria.nombre if producto.categoria else None,
        id_proveedor=producto.id_proveedor,
        proveedor_nombre=producto.proveedor.nombre if producto.proveedor else None,
        unidad_medida=producto.unidad_medida,
        stock_actual=producto.stock_actual,
        stock_minimo=producto.stock_minimo,
        stock_maximo=producto.stock_maximo,
        stock_bajo=producto.stock_actual <= producto.stock_minimo,
        costo=producto.costo,
        precio_venta=producto.precio_venta,
        activo=producto.activo,
    )


def movimiento_to_response(movimiento: MovimientoInventarioORM) -> Movimiento:
    return Movimiento(
        id_movimiento=movimiento.id,
        id_producto=movimiento.id_producto,
        tipo=movimiento.tipo,
        cantidad=movimiento.cantidad,
        precio_unitario=movimiento.precio_unitario,
        motivo=movimiento.motivo,
        stock_anterior=movimiento.stock_anterior,
        stock_resultante=movimiento.stock_resultante,
        fecha=movimiento.fecha,
        id_usuario=movimiento.id_usuario,
    )


def calcular_stock(stock_actual: int, tipo: str, cantidad: int) -> int:
    """
    Stock resultante de un movimiento.

    Raises:
        ValidationException: ENTRADA o SALIDA con cantidad 0
        BusinessException: SALIDA mayor al stock disponible
    """
    if tipo == TipoMovimiento.AJUSTE.value:
        return cantidad
    if cantidad <= 0:
        raise ValidationException(message="La cantidad debe ser mayor a cero", field="cantidad")
    if tipo == TipoMovimiento.ENTRADA.value:
        return stock_actual + cantidad
    if cantidad > stock_actual:
        raise BusinessException(
            f"Stock insuficiente: disponible {stock_actual}, solicitado {cantidad}",
            details={"stock_actual": stock_actual}
        )
    return stock_actual - cantidad


class CategoriaService(BaseService[CategoriaProductoORM, CategoriaProductoRepository]):

    def create_categoria(self, data: CategoriaCreate, ctx: RequestContext) -> Categoria:
        nombre = data.nombre.strip()
        if self.repository.find_by_nombre(nombre):
            raise DuplicateException(resource="Categoría", field="nombre", value=nombre)
        categoria = CategoriaProductoORM(nombre=nombre, descripcion=data.descripcion, activo=True)
        created = self.repository.create(categoria, user_id=ctx.user_id)
        self.repository.commit()
        return categoria_to_response(created)

    def get_categorias(self) -> List[Categoria]:
        categorias = self.repository.get_all(limit=500, order_by="nombre")
        return [categoria_to_response(c) for c in categorias]


class InventarioService(BaseService[ProductoORM, ProductoRepository]):
    """Productos y movimientos de stock."""

    def __init__(
        self,
        repository: ProductoRepository,
        categoria_repository: CategoriaProductoRepository,
        movimiento_repository: MovimientoInventarioRepository,
        usuario_repository: Optional[UsuarioRepository] = None,
        notificacion_service: Optional[NotificacionService] = None,
        proveedor_repository: Optional[ProveedorRepository] = None,
    ):
        super().__init__(repository)
        self.categoria_repo = categoria_repository
        self.movimiento_repo = movimiento_repository
        self.usuario_repo = usuario_repository
        self.notificaciones = notificacion_service
        self.proveedor_repo = proveedor_repository

    def _validar_codigo(self, codigo: str, excluir_id: Optional[str] = None) -> None:
        existente = self.repository.find_by_codigo(codigo)
        if existente and existente.id != excluir_id:
            raise DuplicateException(resource="Producto", field="codigo", value=codigo)

    def _validar_categoria(self, id_categoria: Optional[str]) -> None:
        if id_categoria:
            validate_uuid(id_categoria, "id_categoria")
            self.categoria_repo.get_by_id_or_fail(id_categoria)

    def _validar_proveedor(self, id_proveedor: Optional[str]) -> None:
        """
        Raises:
            BusinessException: Si el proveedor está desactivado
        """
        if id_proveedor and self.proveedor_repo is not None:
            validate_uuid(id_proveedor, "id_proveedor")
            self.validate_activo(
                self.proveedor_repo.get_by_id_or_fail(id_proveedor),
                "El proveedor está inactivo y no puede asignarse a productos",
            )

    def _aplicar_movimiento(
        self,
        producto: ProductoORM,
        tipo: str,
        cantidad: int,
        precio_unitario: Optional[float],
        motivo: Optional[str],
        user_id: Optional[str],
    ) -> MovimientoInventarioORM:
        anterior = producto.stock_actual
        producto.stock_actual = calcular_stock(anterior, tipo, cantidad)
        movimiento = MovimientoInventarioORM(
            id_producto=producto.id,
            tipo=tipo,
            cantidad=cantidad,
            precio_unitario=redondear_monto(precio_unitario) if precio_unitario is not None else None,
            motivo=motivo,
            stock_anterior=anterior,
            stock_resultante=producto.stock_actual,
            fecha=get_local_naive_now(),
            id_usuario=user_id,
        )
        self.repository.update(producto, user_id=user_id)
        return self.movimiento_repo.create(movimiento)

    def create_producto(self, data: ProductoCreate, ctx: RequestContext) -> Producto:
        codigo = data.codigo.strip()
        self._validar_codigo(codigo)
        self._validar_categoria(data.id_categoria)
        self._validar_proveedor(data.id_proveedor)

        campos = data.model_dump(exclude={"stock_inicial", "codigo"})
        producto = ProductoORM(codigo=codigo, stock_actual=0, activo=True, **campos)
        created = self.repository.create(producto, user_id=ctx.user_id)
        if data.stock_inicial > 0:
            self._aplicar_movimiento(
                created, TipoMovimiento.ENTRADA.value, data.stock_inicial, data.costo, "Stock inicial", ctx.user_id
            )
        self.repository.commit()
        logger.info(f"Producto {created.codigo} creado con stock {created.stock_actual}")
        return to_response(created)

    def get_producto(self, producto_id: str) -> Producto:
        validate_uuid(producto_id, "producto_id")
        return to_response(self.repository.get_by_id_or_fail(producto_id))

    def get_productos(
        self,
        texto: Optional[str] = None,
        id_categoria: Optional[str] = None,
        solo_activos: bool = True,
        page: int = 0,
        page_size: int = 50,
        id_proveedor: Optional[str] = None
    ) -> tuple[List[Producto], int]:
        productos, total = self.repository.search(
            texto=texto, id_categoria=id_categoria, solo_activos=solo_activos, page=page, page_size=page_size,
            id_proveedor=id_proveedor
        )
        return [to_response(p) for p in productos], total

    def update_producto(self, producto_id: str, data: ProductoUpdate, ctx: RequestContext) -> Producto:
        validate_uuid(producto_id, "producto_id")
        producto = self.repository.get_by_id_or_fail(producto_id)
        self.validate_activo(producto)

        update_data = data.model_dump(exclude_unset=True)
        if update_data.get("codigo"):
            update_data["codigo"] = update_data["codigo"].strip()
            self._validar_codigo(update_data["codigo"], excluir_id=producto.id)
        if "id_categoria" in update_data:
            self._validar_categoria(update_data["id_categoria"])
        if "id_proveedor" in update_data:
            self._validar_proveedor(update_data["id_proveedor"])

        for campo, valor in update_data.items():
            if valor is None and campo in ("codigo", "nombre", "stock_minimo", "costo", "precio_venta"):
                continue
            setattr(producto, campo, valor)

        updated = self.repository.update(producto, user_id=ctx.user_id)
        self.repository.commit()
        return to_response(updated)

    def delete_producto(self, producto_id: str, ctx: RequestContext) -> None:
        validate_uuid(producto_id, "producto_id")
        self.delete(producto_id, user_id=ctx.user_id)

    def registrar_movimiento(self, producto_id: str, data: MovimientoCreate, ctx: RequestContext) -> Movimiento:
        """
        ENTRADA suma, SALIDA resta (sin dejar stock negativo) y AJUSTE fija el stock.
        """
        validate_uuid(producto_id, "producto_id")
        producto = self.repository.get_by_id_or_fail(producto_id)
        self.validate_activo(producto)

        tipo = enum_to_value(data.tipo)
        movimiento = self._aplicar_movimiento(
            producto, tipo, data.cantidad, data.precio_unitario, data.motivo, ctx.user_id
        )
        self.repository.commit()

        if movimiento.stock_anterior > producto.stock_minimo >= producto.stock_actual:
            self._avisar_stock_bajo(producto)
        return movimiento_to_response(movimiento)

    def _avisar_stock_bajo(self, producto: ProductoORM) -> None:
        """Notifica a administración y recepción cuando un producto cae al mínimo."""
        logger.warning(f"Producto {producto.codigo} con stock bajo: {producto.stock_actual}")
        if self.notificaciones is None or self.usuario_repo is None:
            return
        for usuario in self.usuario_repo.find_activos_por_roles(list(ROLES_INVENTARIO)):
            self.notificaciones.crear(
                usuario.id,
                "Stock bajo",
                f"{producto.nombre} ({producto.codigo}) tiene {producto.stock_actual} unidades",
                tipo=TipoNotificacion.INVENTARIO,
                entidad_tipo="producto",
                entidad_id=producto.id,
                commit=False,
            )
        self.repository.commit()

    def get_movimientos(self, producto_id: str, page: int = 0, page_size: int = 50) -> tuple[List[Movimiento], int]:
        validate_uuid(producto_id, "producto_id")
        self.repository.get_by_id_or_fail(producto_id)
        movimientos, total = self.movimiento_repo.find_by_producto(producto_id, page=page, page_size=page_size)
        return [movimiento_to_response(m) for m in movimientos], total

    def get_stock_bajo(self) -> List[Producto]:
        return [to_response(p) for p in self.repository.find_stock_bajo()]

    def get_valor_inventario(self) -> ValorInventario:
        return ValorInventario(
            valor_total=redondear_monto(self.repository.valor_total()),
            productos_stock_bajo=self.repository.count_stock_bajo(),
        )
