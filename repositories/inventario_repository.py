"""
Repositorios del inventario: categorías, productos y movimientos de stock.
"""

from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError

from repositories.base_repository import BaseRepository
from database.models import CategoriaProductoORM, ProductoORM, MovimientoInventarioORM
from core.exceptions import DatabaseException
from core.pagination import paginate_query
import logging

logger = logging.getLogger(__name__)


class CategoriaProductoRepository(BaseRepository[CategoriaProductoORM]):
    resource_name = "Categoría"

    def __init__(self, db: Session):
        super().__init__(db, CategoriaProductoORM)

    def find_by_nombre(self, nombre: str) -> Optional[CategoriaProductoORM]:
        return self.db.query(CategoriaProductoORM).filter(
            func.lower(CategoriaProductoORM.nombre) == nombre.strip().lower()
        ).one_or_none()


class ProductoRepository(BaseRepository[ProductoORM]):
    """Repositorio para productos del inventario."""

    resource_name = "Producto"

    def __init__(self, db: Session):
        super().__init__(db, ProductoORM)

    def find_by_codigo(self, codigo: str) -> Optional[ProductoORM]:
        try:
            return self.db.query(ProductoORM).filter(ProductoORM.codigo == codigo.strip()).one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error finding producto by codigo {codigo}: {e}")
            raise DatabaseException("Error al buscar producto por código")

    def search(
        self,
        texto: Optional[str] = None,
        id_categoria: Optional[str] = None,
        solo_activos: bool = True,
        page: int = 0,
        page_size: int = 50,
        id_proveedor: Optional[str] = None
    ) -> Tuple[List[ProductoORM], int]:
        """
        Busca productos por nombre/código, categoría y proveedor.
        """
        try:
            query = self.db.query(ProductoORM)
            if texto:
                patron = f"%{texto.strip()}%"
                query = query.filter(or_(ProductoORM.nombre.ilike(patron), ProductoORM.codigo.ilike(patron)))
            if id_categoria:
                query = query.filter(ProductoORM.id_categoria == id_categoria)
            if id_proveedor:
                query = query.filter(ProductoORM.id_proveedor == id_proveedor)
            if solo_activos:
                query = query.filter(ProductoORM.activo == True)
            query = query.order_by(ProductoORM.nombre)
            return paginate_query(query, page, page_size)
        except SQLAlchemyError as e:
            logger.error(f"Error searching productos: {e}")
            raise DatabaseException("Error al buscar productos")

    def find_stock_bajo(self) -> List[ProductoORM]:
        """Productos activos con stock_actual <= stock_minimo."""
        return (
            self.db.query(ProductoORM)
            .filter(ProductoORM.activo == True, ProductoORM.stock_actual <= ProductoORM.stock_minimo)
            .order_by(ProductoORM.stock_actual.asc())
            .all()
        )

    def count_stock_bajo(self) -> int:
        return self.db.query(ProductoORM).filter(
            ProductoORM.activo == True, ProductoORM.stock_actual <= ProductoORM.stock_minimo
        ).count()

    def valor_total(self) -> float:
        valor = (
            self.db.query(func.coalesce(func.sum(ProductoORM.stock_actual * ProductoORM.costo), 0))
            .filter(ProductoORM.activo == True)
            .scalar()
        )
        return float(valor or 0)


class MovimientoInventarioRepository(BaseRepository[MovimientoInventarioORM]):
    resource_name = "Movimiento de inventario"

    def __init__(self, db: Session):
        super().__init__(db, MovimientoInventarioORM)

    def find_by_producto(
        self,
        id_producto: str,
        page: int = 0,
        page_size: int = 50
    ) -> Tuple[List[MovimientoInventarioORM], int]:
        query = (
            self.db.query(MovimientoInventarioORM)
            .filter(MovimientoInventarioORM.id_producto == id_producto)
            .order_by(MovimientoInventarioORM.fecha.desc())
        )
        return paginate_query(query, page, page_size)
